"""Environment configuration for the bracket engine tooling."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .history import DEFAULT_HISTORY_LIMIT

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def env_int(name: str, *, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_str(name: str, *, default: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class EngineConfig:
    table_name: str | None
    aws_region: str | None
    history_limit: int
    log_level: str
    shrink_completed: bool


def read_engine_config() -> EngineConfig:
    history_limit = env_int("BRACKET_HISTORY_LIMIT", default=DEFAULT_HISTORY_LIMIT)
    if history_limit is None or history_limit < 1:
        history_limit = DEFAULT_HISTORY_LIMIT
    return EngineConfig(
        table_name=env_str("BRACKET_TABLE"),
        aws_region=env_str("AWS_REGION"),
        history_limit=history_limit,
        log_level=(env_str("BRACKET_LOG_LEVEL", default="INFO") or "INFO").upper(),
        shrink_completed=env_bool("BRACKET_SHRINK_COMPLETED"),
    )


__all__ = ["EngineConfig", "env_bool", "env_int", "env_str", "read_engine_config"]
