from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import BYE_ID_PREFIX, Competitor


class InvalidInputError(ValueError):
    """Base exception for inputs the bracket engine cannot work with."""


class InvalidCompetitorError(InvalidInputError):
    """Raised when a roster entry fails validation."""


class StaleBracketError(RuntimeError):
    """Raised when a stored bracket changed since it was read."""


def is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def validate_slot_count(count: int) -> int:
    if not is_power_of_two(count):
        raise InvalidInputError(f"Slot count must be a power of two, got {count}")
    if count < 2:
        raise InvalidInputError(
            f"A bracket needs at least 2 slots to hold a match, got {count}"
        )
    return count


def validate_competitor_name(
    raw: str, existing: Iterable[Competitor] = (), *, capacity: int | None = None
) -> str:
    name = raw.strip()
    if not name:
        raise InvalidCompetitorError("Competitor name cannot be empty")
    existing = list(existing)
    lowered = name.lower()
    if any(entry.name.lower() == lowered for entry in existing):
        raise InvalidCompetitorError(f"Competitor name already exists: {name}")
    if capacity is not None and len(existing) >= capacity:
        raise InvalidCompetitorError(f"Maximum {capacity} competitors allowed")
    return name


def validate_roster(competitors: Sequence[Competitor]) -> list[Competitor]:
    """Check ids before seeding; byes are generated, never supplied."""
    seen: set[str] = set()
    for competitor in competitors:
        if competitor.is_bye or competitor.competitor_id.startswith(BYE_ID_PREFIX):
            raise InvalidCompetitorError(
                f"Competitor id {competitor.competitor_id!r} is reserved for byes"
            )
        if competitor.competitor_id in seen:
            raise InvalidCompetitorError(
                f"Duplicate competitor id: {competitor.competitor_id}"
            )
        seen.add(competitor.competitor_id)
    return list(competitors)


__all__ = [
    "InvalidCompetitorError",
    "InvalidInputError",
    "StaleBracketError",
    "is_power_of_two",
    "validate_competitor_name",
    "validate_roster",
    "validate_slot_count",
]
