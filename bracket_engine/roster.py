"""Competitor import, validation and pool splitting."""

from __future__ import annotations

import csv
import io
import json
import logging
import math
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import replace
from pathlib import Path

from .models import Competitor, Pool
from .validation import InvalidCompetitorError, validate_competitor_name

log = logging.getLogger(__name__)

POOL_SIZE_LIMIT = 8

_SUFFIX_FORMATS = {".txt": "txt", ".csv": "csv", ".json": "json"}


def pool_plan(count: int) -> tuple[int, int]:
    """Return ``(pool_count, competitors_per_pool)`` for a roster size."""
    if count <= 8:
        pools = 1
    elif count <= 16:
        pools = 2
    elif count <= 32:
        pools = 4
    else:
        pools = 8
    return pools, math.ceil(count / pools)


def capacity(count: int) -> int:
    pools, _ = pool_plan(count)
    return pools * POOL_SIZE_LIMIT


def _json_names(data: object) -> list[str]:
    if isinstance(data, dict):
        values = list(data.values())
    elif isinstance(data, list):
        values = data
    else:
        raise InvalidCompetitorError("Competitor JSON must be a list or an object")
    names: list[str] = []
    for item in values:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, dict) and item.get("name"):
            names.append(str(item["name"]))
    return names


def parse_names(content: str, fmt: str) -> list[str]:
    if fmt == "txt":
        raw_names: Iterable[str] = content.splitlines()
    elif fmt == "csv":
        raw_names = [cell for row in csv.reader(io.StringIO(content)) for cell in row]
    elif fmt == "json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise InvalidCompetitorError("Competitor file is not valid JSON") from exc
        raw_names = _json_names(data)
    else:
        raise InvalidCompetitorError(f"Unsupported competitor file format: {fmt}")
    return [name.strip() for name in raw_names if name.strip()]


def make_competitors(
    names: Iterable[str], existing: Sequence[Competitor] = ()
) -> list[Competitor]:
    """Turn names into competitors with fresh ids and sequential seeds.

    Names that fail validation are skipped with a warning; the rest are still
    imported.
    """
    roster = list(existing)
    created: list[Competitor] = []
    for name in names:
        try:
            valid_name = validate_competitor_name(
                name, roster, capacity=capacity(len(roster) + 1)
            )
        except InvalidCompetitorError as exc:
            log.warning("Skipping competitor %r: %s", name, exc)
            continue
        competitor = Competitor(
            competitor_id=str(uuid.uuid4()),
            name=valid_name,
            seed=len(roster) + 1,
        )
        roster.append(competitor)
        created.append(competitor)
    return created


def load_competitors(path: Path | str) -> list[Competitor]:
    path = Path(path)
    fmt = _SUFFIX_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise InvalidCompetitorError(f"Unsupported competitor file: {path.name}")
    if not path.exists():
        raise FileNotFoundError(f"Competitor file not found: {path}")
    names = parse_names(path.read_text(encoding="utf-8"), fmt)
    competitors = make_competitors(names)
    log.info("Loaded %s competitors from %s", len(competitors), path)
    return competitors


def distribute_pools(competitors: Sequence[Competitor]) -> list[Pool]:
    pools, per_pool = pool_plan(len(competitors))
    result: list[Pool] = []
    for index in range(pools):
        pool_id = f"pool-{index + 1}"
        members = competitors[index * per_pool : (index + 1) * per_pool]
        result.append(
            Pool(
                pool_id=pool_id,
                name=f"Pool {index + 1}",
                competitors=tuple(replace(entry, pool_id=pool_id) for entry in members),
            )
        )
    return result


__all__ = [
    "POOL_SIZE_LIMIT",
    "capacity",
    "distribute_pools",
    "load_competitors",
    "make_competitors",
    "parse_names",
    "pool_plan",
]
