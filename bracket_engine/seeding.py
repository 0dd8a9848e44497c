"""Pad a competitor list with byes up to the next power of two."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .models import BYE_ID_PREFIX, BYE_LABEL, Competitor
from .validation import InvalidInputError

log = logging.getLogger(__name__)


def next_power_of_two(value: int) -> int:
    if value <= 0:
        raise ValueError("Value must be positive")
    return 1 << (value - 1).bit_length()


def bye_count(competitor_count: int) -> int:
    return next_power_of_two(competitor_count) - competitor_count


def make_bye(index: int) -> Competitor:
    """Return the bye for a 0-based generation index."""
    return Competitor(
        competitor_id=f"{BYE_ID_PREFIX}{index + 1}", name=BYE_LABEL, is_bye=True
    )


def _half_sizes(count: int) -> tuple[int, int]:
    if count % 2:
        return (count + 1) // 2, (count - 1) // 2
    return count // 2, count // 2


def _byes_per_half(byes: int, count: int) -> tuple[int, int]:
    if byes % 2 == 0:
        return byes // 2, byes // 2
    if count % 2:
        return byes // 2, byes - byes // 2
    return byes - byes // 2, byes // 2


def _place_byes(
    half: Sequence[Competitor], byes: list[Competitor], start: int, limit: int
) -> tuple[list[Competitor], int]:
    placed: list[Competitor] = []
    index = start
    last = len(half) - 1
    for position, competitor in enumerate(half):
        if position in (0, last) and index < limit:
            placed.append(byes[index])
            index += 1
        placed.append(competitor)
    while index < limit:
        placed.append(byes[index])
        index += 1
    return placed, index


def seed(competitors: Sequence[Competitor]) -> list[Competitor]:
    """Return the padded slot order for ``competitors``.

    The list is split into an upper and a lower half and each half gets its
    share of byes next to its first and last entries. Byes left over after the
    boundary positions are appended to the end of the half. The lower half is
    bounded by the total bye count rather than its own share.
    """
    if not competitors:
        raise InvalidInputError("At least one competitor is required to seed")

    count = len(competitors)
    total_byes = bye_count(count)
    upper_size, _ = _half_sizes(count)
    upper_byes, _ = _byes_per_half(total_byes, count)
    byes = [make_bye(index) for index in range(total_byes)]

    upper, used = _place_byes(competitors[:upper_size], byes, 0, upper_byes)
    lower, _ = _place_byes(competitors[upper_size:], byes, used, total_byes)
    slots = upper + lower
    log.debug(
        "Seeded %s competitors into %s slots (%s byes)",
        count,
        len(slots),
        total_byes,
    )
    return slots


__all__ = ["bye_count", "make_bye", "next_power_of_two", "seed"]
