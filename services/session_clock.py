"""Elapsed-time progression and sampling-boundary detection for a roast."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Optional

from models.records import SessionConfig, config_is_valid
from services.reading_store import ReadingStore
from services.ticker import Ticker, TickerFactory, build_ticker_factory
from settings import get_settings

logger = logging.getLogger(__name__)

BoundaryListener = Callable[[int], None]


@dataclass(frozen=True)
class ClockState:
    """Read-only projection of the clock for timer displays."""

    elapsed_seconds: int
    running: bool
    last_notified_boundary: int


class SessionClock:
    """Advances elapsed time once per tick and announces each new boundary once.

    All mutations of the clock and of its :class:`ReadingStore` happen while
    holding :attr:`lock`, so ticks delivered from a ticker thread never
    interleave with user actions. Each ``start`` opens a new run generation;
    callbacks from a cancelled ticker carry a stale generation and are ignored.
    """

    def __init__(
        self,
        store: ReadingStore,
        ticker_factory: Optional[TickerFactory] = None,
        session_id: Optional[str] = None,
    ) -> None:
        if ticker_factory is None:
            settings = get_settings()
            ticker_factory = build_ticker_factory(settings.ticker_kind, settings.tick_seconds)
        self.store = store
        self.session_id = session_id
        self.lock = RLock()
        self._ticker_factory = ticker_factory
        self._ticker: Optional[Ticker] = None
        self._listener: Optional[BoundaryListener] = None
        self._config: Optional[SessionConfig] = None
        self._elapsed_seconds = 0
        self._running = False
        self._last_notified_boundary = 0
        self._generation = 0

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed_seconds

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_notified_boundary(self) -> int:
        return self._last_notified_boundary

    @property
    def config(self) -> Optional[SessionConfig]:
        return self._config

    @property
    def ticker(self) -> Optional[Ticker]:
        return self._ticker

    def state(self) -> ClockState:
        with self.lock:
            return ClockState(
                elapsed_seconds=self._elapsed_seconds,
                running=self._running,
                last_notified_boundary=self._last_notified_boundary,
            )

    def set_listener(self, listener: Optional[BoundaryListener]) -> None:
        """Install the single boundary-crossed subscriber, replacing any previous one."""
        with self.lock:
            self._listener = listener

    def can_start(
        self,
        target_duration_minutes: Optional[int],
        interval_seconds: Optional[int],
        starting_reading: Optional[float],
    ) -> bool:
        return not self._running and config_is_valid(
            target_duration_minutes, interval_seconds, starting_reading
        )

    def start(
        self,
        target_duration_minutes: Optional[int],
        interval_seconds: Optional[int],
        starting_reading: Optional[float],
    ) -> bool:
        """Start the cadence; returns ``False`` without side effects when refused."""
        with self.lock:
            if self._running:
                logger.debug(
                    "Start ignored", extra={"session_id": self.session_id, "reason": "running"}
                )
                return False
            if not config_is_valid(target_duration_minutes, interval_seconds, starting_reading):
                logger.info(
                    "Start refused",
                    extra={"session_id": self.session_id, "reason": "invalid configuration"},
                )
                return False

            assert target_duration_minutes is not None
            assert interval_seconds is not None
            assert starting_reading is not None

            generation = self._generation + 1
            ticker = self._ticker_factory()
            ticker.start(lambda: self._on_tick(generation))

            self._generation = generation
            self._ticker = ticker
            self._config = SessionConfig(
                target_duration_minutes=target_duration_minutes,
                interval_seconds=interval_seconds,
                starting_reading=float(starting_reading),
            )
            self._running = True
            self._last_notified_boundary = 0
            self.store.record(0, float(starting_reading))

        logger.info(
            "Clock started",
            extra={
                "session_id": self.session_id,
                "elapsed_seconds": self._elapsed_seconds,
                "value": starting_reading,
            },
        )
        return True

    def tick(self) -> Optional[int]:
        """Advance one second; returns the boundary index announced, if any."""
        with self.lock:
            if not self._running:
                return None
            return self._advance()

    def stop(self) -> None:
        with self.lock:
            was_running = self._running
            self._halt()
        if was_running:
            logger.info(
                "Clock stopped",
                extra={"session_id": self.session_id, "elapsed_seconds": self._elapsed_seconds},
            )

    def reset(self) -> None:
        with self.lock:
            self._halt()
            self._elapsed_seconds = 0
            self._last_notified_boundary = 0
            self.store.clear()
        logger.info("Clock reset", extra={"session_id": self.session_id})

    def _halt(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        self._running = False
        self._generation += 1

    def _on_tick(self, generation: int) -> None:
        with self.lock:
            if not self._running or generation != self._generation:
                return
            self._advance()

    def _advance(self) -> Optional[int]:
        assert self._config is not None
        self._elapsed_seconds += 1
        current = self._elapsed_seconds // self._config.interval_seconds
        if current <= self._last_notified_boundary or current > self._config.max_boundary:
            return None

        self._last_notified_boundary = current
        logger.info(
            "Boundary crossed",
            extra={
                "session_id": self.session_id,
                "boundary_index": current,
                "elapsed_seconds": self._elapsed_seconds,
            },
        )
        if self._listener is not None:
            self._listener(current)
        return current
