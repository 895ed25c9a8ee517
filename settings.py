from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_TICK_SECONDS_ENV = "ROAST_TICK_SECONDS"
_TICKER_ENV = "ROAST_TICKER"
_DEFAULT_INTERVAL_ENV = "ROAST_DEFAULT_INTERVAL_SECONDS"
_MAX_SESSIONS_ENV = "ROAST_MAX_SESSIONS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TICKER_KINDS = ("asyncio", "thread")


@dataclass(frozen=True)
class Settings:
    tick_seconds: float
    ticker_kind: str
    default_interval_seconds: int
    max_sessions: int
    log_level: str


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_ticker_kind(default: str) -> str:
    value = os.getenv(_TICKER_ENV)
    if value is None:
        return default
    candidate = value.strip().lower()
    return candidate if candidate in _TICKER_KINDS else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        tick_seconds=_read_positive_float(_TICK_SECONDS_ENV, 1.0),
        ticker_kind=_read_ticker_kind("asyncio"),
        default_interval_seconds=_read_positive_int(_DEFAULT_INTERVAL_ENV, 60),
        max_sessions=_read_positive_int(_MAX_SESSIONS_ENV, 32),
        log_level=_read_log_level("INFO"),
    )
