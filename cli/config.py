from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_WATCH_TIMEOUT = 3600.0

_BASE_URL_ENV = "ROASTLOG_API_URL"
_POLL_INTERVAL_ENV = "ROASTLOG_POLL_INTERVAL"
_WATCH_TIMEOUT_ENV = "ROASTLOG_WATCH_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    watch_timeout: float = DEFAULT_WATCH_TIMEOUT


def _read_float(value: Optional[str], default: float) -> float:
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


def load_config(
    base_url: Optional[str] = None,
    poll_interval: Optional[float] = None,
    watch_timeout: Optional[float] = None,
) -> CLIConfig:
    """Resolve options, then environment variables, then defaults."""
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if poll_interval is None:
        poll_interval = _read_float(os.getenv(_POLL_INTERVAL_ENV), DEFAULT_POLL_INTERVAL)
    if watch_timeout is None:
        watch_timeout = _read_float(os.getenv(_WATCH_TIMEOUT_ENV), DEFAULT_WATCH_TIMEOUT)
    return CLIConfig(
        base_url=url.rstrip("/"),
        poll_interval=poll_interval,
        watch_timeout=watch_timeout,
    )
