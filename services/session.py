"""Roast session orchestration: clock, readings, prompts and roast details."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import fields
from datetime import datetime, timezone
from typing import Any, Deque, List, Optional

from models.records import (
    RoastDetails,
    RoastType,
    SeriesPoint,
    max_boundary_index,
)
from services.aggregator import SeriesAggregator, SeriesSummary, WeightLoss
from services.reading_store import ReadingStore
from services.session_clock import ClockState, SessionClock
from services.ticker import TickerFactory
from settings import get_settings

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = frozenset(item.name for item in fields(RoastDetails))


class RoastSession:
    """Owns one clock and one reading store for the lifetime of a roast.

    Boundary crossings open reading prompts. Prompts that are still open when
    the next boundary is crossed stay queued in order; answering or
    dismissing resolves the oldest one unless a boundary is named.

    Restarting after ``stop()`` announces the current boundary again, so a
    prompt can reopen for a boundary that already holds a reading; answering
    it replaces that reading.
    """

    def __init__(
        self,
        session_id: str,
        target_duration_minutes: Optional[int] = None,
        interval_seconds: Optional[int] = None,
        starting_reading: Optional[float] = None,
        details: Optional[RoastDetails] = None,
        ticker_factory: Optional[TickerFactory] = None,
        aggregator: Optional[SeriesAggregator] = None,
    ) -> None:
        self.session_id = session_id
        self.created_at = datetime.now(timezone.utc)
        self.target_duration_minutes = target_duration_minutes
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else get_settings().default_interval_seconds
        )
        self.starting_reading = starting_reading
        self.details = details or RoastDetails()
        self.store = ReadingStore()
        self.aggregator = aggregator or SeriesAggregator()
        self.clock = SessionClock(self.store, ticker_factory=ticker_factory, session_id=session_id)
        self.clock.set_listener(self._open_prompt)
        self._pending: Deque[int] = deque()

    @property
    def lock(self):
        return self.clock.lock

    @property
    def running(self) -> bool:
        return self.clock.running

    @property
    def max_boundary(self) -> int:
        if self.target_duration_minutes is None or self.interval_seconds is None:
            return 0
        return max_boundary_index(self.target_duration_minutes, self.interval_seconds)

    def state(self) -> ClockState:
        return self.clock.state()

    def can_start(self) -> bool:
        return self.clock.can_start(
            self.target_duration_minutes, self.interval_seconds, self.starting_reading
        )

    def configure(
        self,
        target_duration_minutes: Optional[int],
        interval_seconds: Optional[int],
        starting_reading: Optional[float],
    ) -> None:
        with self.lock:
            if self.clock.running:
                raise ValueError("Cannot change the configuration while the clock is running.")
            self.target_duration_minutes = target_duration_minutes
            if interval_seconds is not None:
                self.interval_seconds = interval_seconds
            self.starting_reading = starting_reading

    def update_details(self, **changes: Any) -> RoastDetails:
        unknown = sorted(set(changes) - _DETAIL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown roast detail fields: {', '.join(unknown)}")
        with self.lock:
            for name, value in changes.items():
                if name == "roast_type" and value is not None:
                    value = RoastType(value)
                setattr(self.details, name, value)
            return self.details

    def start(self) -> bool:
        return self.clock.start(
            self.target_duration_minutes, self.interval_seconds, self.starting_reading
        )

    def stop(self) -> None:
        self.clock.stop()

    def reset(self) -> None:
        with self.lock:
            self.clock.reset()
            self._pending.clear()

    def pending_prompts(self) -> List[int]:
        with self.lock:
            return list(self._pending)

    def submit_reading(self, value: float, boundary_index: Optional[int] = None) -> int:
        """Answer a reading prompt, the oldest one unless ``boundary_index`` is given."""
        with self.lock:
            if boundary_index is None:
                if not self._pending:
                    raise ValueError("No reading prompt is open.")
                boundary_index = self._pending.popleft()
            elif boundary_index in self._pending:
                self._pending.remove(boundary_index)
            else:
                raise ValueError(f"No reading prompt is open for boundary {boundary_index}.")
            self.store.record(boundary_index, value)

        logger.info(
            "Reading recorded",
            extra={"session_id": self.session_id, "boundary_index": boundary_index, "value": value},
        )
        return boundary_index

    def dismiss_prompt(self, boundary_index: Optional[int] = None) -> int:
        """Close a prompt without recording, the oldest unless ``boundary_index`` is given."""
        with self.lock:
            if boundary_index is None:
                if not self._pending:
                    raise ValueError("No reading prompt is open.")
                boundary_index = self._pending.popleft()
            elif boundary_index in self._pending:
                self._pending.remove(boundary_index)
            else:
                raise ValueError(f"No reading prompt is open for boundary {boundary_index}.")

        logger.info(
            "Reading prompt dismissed",
            extra={"session_id": self.session_id, "boundary_index": boundary_index},
        )
        return boundary_index

    def correct(self, boundary_index: int, value: float) -> None:
        with self.lock:
            if not 0 <= boundary_index <= self.max_boundary:
                raise ValueError(
                    f"Boundary {boundary_index} is outside 0..{self.max_boundary}."
                )
            self.store.record(boundary_index, value)
            if boundary_index in self._pending:
                self._pending.remove(boundary_index)

        logger.info(
            "Reading corrected",
            extra={"session_id": self.session_id, "boundary_index": boundary_index, "value": value},
        )

    def remove_reading(self, boundary_index: int) -> bool:
        with self.lock:
            return self.store.remove(boundary_index)

    def correctable_boundaries(self) -> List[int]:
        upper = self.max_boundary
        return [index for index in self.store.sorted_boundaries() if 0 <= index <= upper]

    def dense_series(self) -> List[SeriesPoint]:
        if self.target_duration_minutes is None:
            return []
        return self.store.dense_series(
            self.target_duration_minutes, self.interval_seconds, self.starting_reading
        )

    def summary(self, points: Optional[List[SeriesPoint]] = None) -> SeriesSummary:
        return self.aggregator.aggregate(self.dense_series() if points is None else points)

    def weight_loss(self) -> Optional[WeightLoss]:
        return self.aggregator.weight_loss(self.details.weight_in, self.details.weight_out)

    def _open_prompt(self, boundary_index: int) -> None:
        # Runs under the clock lock from inside a tick.
        if boundary_index in self._pending:
            return
        if self._pending:
            logger.warning(
                "Reading prompt still open when next boundary crossed",
                extra={
                    "session_id": self.session_id,
                    "boundary_index": self._pending[0],
                    "reason": "queued",
                },
            )
        self._pending.append(boundary_index)
