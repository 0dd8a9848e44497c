from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import ClassVar

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

BYE_ID_PREFIX = "bye-"
BYE_LABEL = "BYE"

STATUS_NOT_STARTED = "not_started"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_ARCHIVED = "archived"
TOURNAMENT_STATUSES = (
    STATUS_NOT_STARTED,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    STATUS_ARCHIVED,
)


def utc_now_iso() -> str:
    """Return current UTC timestamp in ISO-8601 format (ms precision)."""
    return datetime.now(UTC).strftime(ISO_FORMAT)


def _optional_str(data: dict[str, object], key: str) -> str | None:
    value = data.get(key)
    return str(value) if value is not None else None


@dataclass(frozen=True, slots=True)
class Competitor:
    competitor_id: str
    name: str
    seed: int | None = None
    pool_id: str | None = None
    is_bye: bool = False

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "competitor_id": self.competitor_id,
            "name": self.name,
        }
        if self.seed is not None:
            data["seed"] = self.seed
        if self.pool_id is not None:
            data["pool_id"] = self.pool_id
        if self.is_bye:
            data["is_bye"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Competitor:
        seed = data.get("seed")
        return cls(
            competitor_id=str(data.get("competitor_id", "")),
            name=str(data.get("name", "")),
            seed=int(seed) if seed is not None else None,  # type: ignore[arg-type]
            pool_id=_optional_str(data, "pool_id"),
            is_bye=bool(data.get("is_bye", False)),
        )

    def display(self) -> str:
        if self.is_bye:
            return BYE_LABEL
        if self.seed is not None:
            return f"#{self.seed} {self.name}"
        return self.name


def _slot_from_dict(data: object) -> Competitor | None:
    if isinstance(data, dict):
        return Competitor.from_dict(data)
    return None


@dataclass(frozen=True, slots=True)
class Match:
    match_id: str
    round_number: int
    first: Competitor | None = None
    second: Competitor | None = None
    winner: Competitor | None = None
    annotation: str | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "match_id": self.match_id,
            "round_number": self.round_number,
        }
        if self.first is not None:
            data["first"] = self.first.to_dict()
        if self.second is not None:
            data["second"] = self.second.to_dict()
        if self.winner is not None:
            data["winner"] = self.winner.to_dict()
        if self.annotation is not None:
            data["annotation"] = self.annotation
        return data

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Match:
        return cls(
            match_id=str(data.get("match_id", "")),
            round_number=int(data.get("round_number", 0)),  # type: ignore[arg-type]
            first=_slot_from_dict(data.get("first")),
            second=_slot_from_dict(data.get("second")),
            winner=_slot_from_dict(data.get("winner")),
            annotation=_optional_str(data, "annotation"),
        )

    @property
    def competitors(self) -> tuple[Competitor | None, Competitor | None]:
        return (self.first, self.second)

    def has_bye(self) -> bool:
        return any(slot is not None and slot.is_bye for slot in self.competitors)

    def is_decided(self) -> bool:
        return self.winner is not None

    def resolve(self, competitor_id: str) -> Competitor | None:
        for slot in self.competitors:
            if slot is not None and slot.competitor_id == competitor_id:
                return slot
        return None


@dataclass(frozen=True, slots=True)
class Round:
    name: str
    matches: tuple[Match, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "matches": [match.to_dict() for match in self.matches],
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Round:
        matches_data: Iterable[dict[str, object]] = data.get("matches", [])  # type: ignore[assignment]
        return cls(
            name=str(data.get("name", "")),
            matches=tuple(Match.from_dict(item) for item in matches_data),
        )


@dataclass(frozen=True, slots=True)
class Bracket:
    rounds: tuple[Round, ...]

    def to_dict(self) -> dict[str, object]:
        return {"rounds": [round_.to_dict() for round_ in self.rounds]}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Bracket:
        rounds_data: Iterable[dict[str, object]] = data.get("rounds", [])  # type: ignore[assignment]
        return cls(rounds=tuple(Round.from_dict(item) for item in rounds_data))

    @property
    def slot_count(self) -> int:
        if not self.rounds:
            return 0
        return 2 * len(self.rounds[0].matches)

    def all_matches(self) -> Iterator[Match]:
        for round_ in self.rounds:
            yield from round_.matches

    def find_match(self, match_id: str) -> tuple[int, int] | None:
        """Return ``(round_index, match_index)`` of a match, both 0-based."""
        for round_index, round_ in enumerate(self.rounds):
            for match_index, match in enumerate(round_.matches):
                if match.match_id == match_id:
                    return round_index, match_index
        return None

    def match(self, match_id: str) -> Match | None:
        position = self.find_match(match_id)
        if position is None:
            return None
        round_index, match_index = position
        return self.rounds[round_index].matches[match_index]

    def champion(self) -> Competitor | None:
        if not self.rounds or not self.rounds[-1].matches:
            return None
        return self.rounds[-1].matches[-1].winner


@dataclass(frozen=True, slots=True)
class Pool:
    pool_id: str
    name: str
    competitors: tuple[Competitor, ...] = ()


@dataclass(slots=True)
class TournamentRecord:
    tournament_id: str
    created_at: str
    bracket: Bracket | None = None
    status: str = STATUS_NOT_STARTED
    version: int = 0
    last_saved: str | None = None

    PK_TEMPLATE: ClassVar[str] = "TOURNAMENT#%s"
    SK_VALUE: ClassVar[str] = "BRACKET"

    @classmethod
    def key(cls, tournament_id: str) -> dict[str, str]:
        return {"pk": cls.PK_TEMPLATE % tournament_id, "sk": cls.SK_VALUE}

    def to_item(self) -> dict[str, object]:
        item: dict[str, object] = dict(self.key(self.tournament_id))
        item.update(
            {
                "tournament_id": self.tournament_id,
                "created_at": self.created_at,
                "status": self.status,
                "version": self.version,
            }
        )
        if self.bracket is not None:
            item["bracket"] = self.bracket.to_dict()
        if self.last_saved is not None:
            item["last_saved"] = self.last_saved
        return item

    @classmethod
    def from_item(cls, item: dict[str, object]) -> TournamentRecord:
        tournament_id = str(
            item.get("tournament_id") or str(item["pk"]).split("#", 1)[1]
        )
        bracket_data = item.get("bracket")
        return cls(
            tournament_id=tournament_id,
            created_at=str(item.get("created_at", "")),
            bracket=(
                Bracket.from_dict(bracket_data)  # type: ignore[arg-type]
                if isinstance(bracket_data, dict)
                else None
            ),
            status=str(item.get("status", STATUS_NOT_STARTED)),
            version=int(item.get("version", 0)),  # type: ignore[arg-type]
            last_saved=_optional_str(item, "last_saved"),
        )


@dataclass(slots=True)
class CompetitorEntry:
    """A stored roster entry for one tournament."""

    tournament_id: str
    competitor: Competitor
    added_at: str = field(default_factory=utc_now_iso)

    PK_TEMPLATE: ClassVar[str] = "TOURNAMENT#%s"
    SK_TEMPLATE: ClassVar[str] = "COMPETITOR#%s"

    @classmethod
    def key(cls, tournament_id: str, competitor_id: str) -> dict[str, str]:
        return {
            "pk": cls.PK_TEMPLATE % tournament_id,
            "sk": cls.SK_TEMPLATE % competitor_id,
        }

    def to_item(self) -> dict[str, object]:
        item: dict[str, object] = dict(
            self.key(self.tournament_id, self.competitor.competitor_id)
        )
        item.update(
            {
                "tournament_id": self.tournament_id,
                "competitor": self.competitor.to_dict(),
                "added_at": self.added_at,
            }
        )
        return item

    @classmethod
    def from_item(cls, item: dict[str, object]) -> CompetitorEntry:
        tournament_id = str(
            item.get("tournament_id") or str(item["pk"]).split("#", 1)[1]
        )
        return cls(
            tournament_id=tournament_id,
            competitor=Competitor.from_dict(item.get("competitor", {})),  # type: ignore[arg-type]
            added_at=str(item.get("added_at", "")),
        )


__all__ = [
    "BYE_ID_PREFIX",
    "BYE_LABEL",
    "Bracket",
    "Competitor",
    "CompetitorEntry",
    "ISO_FORMAT",
    "Match",
    "Pool",
    "Round",
    "STATUS_ARCHIVED",
    "STATUS_COMPLETED",
    "STATUS_IN_PROGRESS",
    "STATUS_NOT_STARTED",
    "TOURNAMENT_STATUSES",
    "TournamentRecord",
    "utc_now_iso",
]
