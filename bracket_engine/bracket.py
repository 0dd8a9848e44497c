from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from math import log2

from .models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    Bracket,
    Competitor,
    Match,
    Round,
)
from .validation import validate_slot_count

log = logging.getLogger(__name__)

_SEEDLESS = 1_000_000


def match_id_for(round_number: int, position: int) -> str:
    return f"r{round_number}-m{position}"


def _round_name(round_index: int, total_rounds: int) -> str:
    remaining = total_rounds - round_index
    if remaining == 1:
        return "Final"
    if remaining == 2:
        return "Semifinals"
    if remaining == 3:
        return "Quarterfinals"
    return f"Round of {2**remaining}"


def _bye_winner(first: Competitor, second: Competitor) -> Competitor | None:
    if first.is_bye and not second.is_bye:
        return second
    if second.is_bye and not first.is_bye:
        return first
    return None


def _with_matches(bracket: Bracket, rounds: list[list[Match]]) -> Bracket:
    return Bracket(
        rounds=tuple(
            Round(name=round_.name, matches=tuple(matches))
            for round_, matches in zip(bracket.rounds, rounds, strict=True)
        )
    )


def build(slots: Sequence[Competitor]) -> Bracket:
    """Create every round of the tree from a padded slot list.

    First-round matches against a bye are decided on the spot. Later rounds
    take the current winners of their two feeding matches, so they stay empty
    until results are applied.
    """
    slot_count = validate_slot_count(len(slots))
    total_rounds = int(log2(slot_count))

    first_round: list[Match] = []
    for index in range(0, slot_count, 2):
        first, second = slots[index], slots[index + 1]
        first_round.append(
            Match(
                match_id=match_id_for(1, index // 2 + 1),
                round_number=1,
                first=first,
                second=second,
                winner=_bye_winner(first, second),
            )
        )
    rounds = [Round(name=_round_name(0, total_rounds), matches=tuple(first_round))]

    previous = first_round
    for round_index in range(1, total_rounds):
        round_number = round_index + 1
        matches = [
            Match(
                match_id=match_id_for(round_number, position + 1),
                round_number=round_number,
                first=previous[2 * position].winner,
                second=previous[2 * position + 1].winner,
            )
            for position in range(len(previous) // 2)
        ]
        rounds.append(
            Round(name=_round_name(round_index, total_rounds), matches=tuple(matches))
        )
        previous = matches

    log.debug("Built bracket with %s slots and %s rounds", slot_count, total_rounds)
    return Bracket(rounds=tuple(rounds))


def stale_matches(bracket: Bracket) -> list[str]:
    """Return ids of matches that no longer agree with the round before them.

    A match is stale when one of its slots differs from the current winner of
    the match feeding it, or when its recorded winner is not in its slots.
    """
    stale: list[str] = []
    for round_index in range(1, len(bracket.rounds)):
        previous = bracket.rounds[round_index - 1].matches
        for position, match in enumerate(bracket.rounds[round_index].matches):
            feeders = (
                previous[2 * position].winner,
                previous[2 * position + 1].winner,
            )
            winner_missing = (
                match.winner is not None
                and match.resolve(match.winner.competitor_id) is None
            )
            if match.competitors != feeders or winner_missing:
                stale.append(match.match_id)
    return stale


def apply_winner(bracket: Bracket, match_id: str, winner_id: str) -> Bracket:
    """Record ``winner_id`` for a match and advance it one round.

    Unknown matches and matches against a bye leave the bracket untouched. An
    id that is in neither slot clears the result. Only the parent match has
    its winner reset; matches further along keep whatever they had.
    """
    position = bracket.find_match(match_id)
    if position is None:
        log.warning("Ignoring result for unknown match %s", match_id)
        return bracket
    round_index, match_index = position
    match = bracket.rounds[round_index].matches[match_index]
    if match.has_bye():
        log.warning("Ignoring result for bye match %s", match_id)
        return bracket

    winner = match.resolve(winner_id)
    if winner is None:
        log.warning(
            "Competitor %s is not in match %s, clearing its winner",
            winner_id,
            match_id,
        )

    rounds = [list(round_.matches) for round_ in bracket.rounds]
    rounds[round_index][match_index] = replace(match, winner=winner)
    if round_index < len(rounds) - 1:
        parent_index = match_index // 2
        parent = rounds[round_index + 1][parent_index]
        if match_index % 2 == 0:
            parent = replace(parent, first=winner, winner=None)
        else:
            parent = replace(parent, second=winner, winner=None)
        rounds[round_index + 1][parent_index] = parent

    updated = _with_matches(bracket, rounds)
    already_stale = set(stale_matches(bracket))
    stale = [
        stale_id
        for stale_id in stale_matches(updated)
        if stale_id not in already_stale
    ]
    if stale:
        log.warning(
            "Result for %s left downstream matches out of date: %s",
            match_id,
            ", ".join(stale),
        )
    log.debug("Applied winner %s to match %s", winner_id, match_id)
    return updated


def set_annotation(bracket: Bracket, match_id: str, annotation: str | None) -> Bracket:
    position = bracket.find_match(match_id)
    if position is None:
        log.warning("Ignoring annotation for unknown match %s", match_id)
        return bracket
    round_index, match_index = position
    text = annotation.strip() if annotation else ""
    rounds = [list(round_.matches) for round_ in bracket.rounds]
    rounds[round_index][match_index] = replace(
        rounds[round_index][match_index], annotation=text or None
    )
    return _with_matches(bracket, rounds)


def completion_percentage(bracket: Bracket | None) -> int:
    if bracket is None:
        return 0
    matches = list(bracket.all_matches())
    if not matches:
        return 0
    decided = sum(1 for match in matches if match.is_decided())
    # Halves round up.
    return int(100 * decided / len(matches) + 0.5)


def tournament_status(bracket: Bracket | None) -> str:
    if bracket is None:
        return STATUS_NOT_STARTED
    if bracket.champion() is not None:
        return STATUS_COMPLETED
    return STATUS_IN_PROGRESS


def _slot_label(slot: Competitor | None) -> str:
    return slot.display() if slot is not None else "TBD"


def render_bracket(bracket: Bracket, *, shrink_completed: bool = False) -> str:
    start_index = 0
    if shrink_completed and bracket.rounds:
        last_index = len(bracket.rounds) - 1
        for idx, round_ in enumerate(bracket.rounds):
            if any(match.winner is None for match in round_.matches):
                start_index = idx
                break
        else:
            start_index = last_index

    lines: list[str] = []
    for round_ in bracket.rounds[start_index:]:
        lines.append(round_.name)
        for match in round_.matches:
            first = _slot_label(match.first)
            second = _slot_label(match.second)
            lines.append(f"  [{match.match_id}] {first} vs {second}")
            if match.winner is not None:
                lines.append(f"    -> Winner: {match.winner.display()}")
            else:
                lines.append("    -> Winner: TBD")
            if match.annotation:
                lines.append(f"    Note: {match.annotation}")
        lines.append("")
    if lines and not lines[-1]:
        lines.pop()
    champion = bracket.champion()
    if champion is not None:
        lines.append(f"Champion: {champion.display()}")
    return "\n".join(line.rstrip() for line in lines)


def _seed_key(slot: Competitor) -> int:
    return slot.seed if slot.seed is not None else _SEEDLESS


def simulate_tournament(
    bracket: Bracket,
) -> tuple[Bracket, list[tuple[str, Bracket]]]:
    """Play out every open match, letting the better seed win."""
    working = bracket
    snapshots: list[tuple[str, Bracket]] = [("Initial Bracket", working)]
    for round_index, round_ in enumerate(bracket.rounds):
        for match_index in range(len(round_.matches)):
            match = working.rounds[round_index].matches[match_index]
            if match.winner is not None or match.has_bye():
                continue
            contenders = [slot for slot in match.competitors if slot is not None]
            if not contenders:
                continue
            winner = min(contenders, key=_seed_key)
            working = apply_winner(working, match.match_id, winner.competitor_id)
        snapshots.append((f"After {round_.name}", working))
    return working, snapshots


__all__ = [
    "apply_winner",
    "build",
    "completion_percentage",
    "match_id_for",
    "render_bracket",
    "set_annotation",
    "simulate_tournament",
    "stale_matches",
    "tournament_status",
]
