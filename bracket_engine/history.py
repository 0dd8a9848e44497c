from __future__ import annotations

import logging

from .models import Bracket

log = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class BracketHistory:
    """Bounded undo/redo stack of bracket snapshots.

    Each pushed bracket is an independent value, so moving through the stack
    never copies or mutates anything.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._limit = limit
        self._snapshots: list[Bracket] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def current(self) -> Bracket | None:
        if self._index < 0:
            return None
        return self._snapshots[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def push(self, bracket: Bracket) -> None:
        if self.current is bracket:
            return
        del self._snapshots[self._index + 1 :]
        self._snapshots.append(bracket)
        overflow = len(self._snapshots) - self._limit
        if overflow > 0:
            del self._snapshots[:overflow]
        self._index = len(self._snapshots) - 1

    def undo(self) -> Bracket | None:
        if not self.can_undo:
            log.debug("Nothing to undo")
            return self.current
        self._index -= 1
        return self.current

    def redo(self) -> Bracket | None:
        if not self.can_redo:
            log.debug("Nothing to redo")
            return self.current
        self._index += 1
        return self.current

    def clear(self) -> None:
        self._snapshots.clear()
        self._index = -1


__all__ = ["BracketHistory", "DEFAULT_HISTORY_LIMIT"]
