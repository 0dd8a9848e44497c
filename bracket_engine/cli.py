"""Build a single-elimination bracket from a competitor file."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from .bracket import (
    build,
    completion_percentage,
    render_bracket,
    simulate_tournament,
    tournament_status,
)
from .config import EngineConfig, read_engine_config
from .history import BracketHistory
from .models import Bracket, TournamentRecord, utc_now_iso
from .roster import load_competitors
from .seeding import seed
from .storage import TournamentStorage, open_table
from .validation import InvalidInputError, validate_roster

log = logging.getLogger(__name__)


def parse_args(
    argv: Sequence[str] | None = None, *, config: EngineConfig | None = None
) -> argparse.Namespace:
    config = config or read_engine_config()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "players_file",
        type=Path,
        help="Competitor list (.txt one name per line, .csv or .json)",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Decide every open match by seed and print the snapshots",
    )
    parser.add_argument(
        "--undo",
        type=int,
        default=0,
        metavar="STEPS",
        help="Step back through the bracket history before rendering and saving",
    )
    parser.add_argument(
        "--shrink-completed",
        action="store_true",
        default=config.shrink_completed,
        help="Only render rounds from the first undecided one onwards",
    )
    parser.add_argument(
        "--save",
        metavar="TOURNAMENT_ID",
        help="Store the resulting bracket under this id (needs BRACKET_TABLE)",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help=f"Logging level (default: {config.log_level})",
    )
    return parser.parse_args(argv)


def print_snapshots(snapshots: Sequence[tuple[str, Bracket]]) -> None:
    for idx, (label, snapshot) in enumerate(snapshots, start=1):
        print(f"Snapshot {idx}: {label} ({completion_percentage(snapshot)}%)")


def step_back(history: BracketHistory, steps: int) -> Bracket | None:
    for _ in range(steps):
        if not history.can_undo:
            log.info("History holds no older bracket, stopping")
            break
        history.undo()
    return history.current


def save_bracket(
    storage: TournamentStorage, tournament_id: str, bracket: Bracket
) -> TournamentRecord:
    existing = storage.get_record(tournament_id)
    record = TournamentRecord(
        tournament_id=tournament_id,
        created_at=existing.created_at if existing else utc_now_iso(),
        bracket=bracket,
        status=tournament_status(bracket),
        version=existing.version if existing else 0,
    )
    return storage.save_record(record, expected_version=record.version)


def main(argv: Sequence[str] | None = None) -> int:
    config = read_engine_config()
    args = parse_args(argv, config=config)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        competitors = validate_roster(load_competitors(args.players_file))
        bracket = build(seed(competitors))
    except (InvalidInputError, FileNotFoundError) as exc:
        log.error("Cannot build bracket: %s", exc)
        return 1

    history = BracketHistory(limit=config.history_limit)
    history.push(bracket)
    if args.simulate:
        bracket, snapshots = simulate_tournament(bracket)
        print_snapshots(snapshots)
        for _, snapshot in snapshots:
            history.push(snapshot)
    if args.undo > 0:
        bracket = step_back(history, args.undo) or bracket

    print(render_bracket(bracket, shrink_completed=args.shrink_completed))
    print(f"Completion: {completion_percentage(bracket)}%")

    if args.save:
        if not config.table_name:
            log.error("BRACKET_TABLE must be set to save a bracket")
            return 1
        storage = TournamentStorage(
            open_table(config.table_name, region_name=config.aws_region)
        )
        record = save_bracket(storage, args.save, bracket)
        log.info("Saved bracket %s at version %s", record.tournament_id, record.version)
    return 0


__all__ = ["main", "parse_args", "print_snapshots", "save_bracket", "step_back"]
