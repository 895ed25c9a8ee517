"""Sparse boundary-index to reading map with dense-series reconstruction."""

from __future__ import annotations

from threading import Lock
from typing import Dict, List, Optional

from models.records import ReadingEntry, SeriesPoint, max_boundary_index


class ReadingStore:
    """Holds at most one reading per boundary index; later writes replace earlier ones.

    The store does not validate indices or values. Missing entries surface as
    ``None`` in the dense series so a gap is never mistaken for a reading of zero.
    """

    def __init__(self) -> None:
        self._readings: Dict[int, float] = {}
        self._lock = Lock()

    def record(self, boundary_index: int, value: float) -> None:
        with self._lock:
            self._readings[boundary_index] = float(value)

    def remove(self, boundary_index: int) -> bool:
        with self._lock:
            return self._readings.pop(boundary_index, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._readings.clear()

    def get(self, boundary_index: int) -> Optional[float]:
        with self._lock:
            return self._readings.get(boundary_index)

    def entries(self) -> List[ReadingEntry]:
        """Return stored readings ordered by boundary index."""
        with self._lock:
            return [
                ReadingEntry(boundary_index=index, value=self._readings[index])
                for index in sorted(self._readings)
            ]

    def sorted_boundaries(self) -> List[int]:
        with self._lock:
            return sorted(self._readings)

    def dense_series(
        self,
        target_duration_minutes: int,
        interval_seconds: int,
        starting_reading: Optional[float],
    ) -> List[SeriesPoint]:
        """Project the store onto every boundary from 0 to the session maximum.

        Index 0 falls back to ``starting_reading`` when nothing was recorded
        there. An empty list is returned for a non-positive duration or interval.
        """
        if target_duration_minutes <= 0 or interval_seconds <= 0:
            return []

        with self._lock:
            snapshot = dict(self._readings)

        points: List[SeriesPoint] = []
        for index in range(max_boundary_index(target_duration_minutes, interval_seconds) + 1):
            value = snapshot.get(index)
            if index == 0 and value is None:
                value = starting_reading
            points.append(
                SeriesPoint(
                    boundary_index=index,
                    seconds_at_index=index * interval_seconds,
                    value=value,
                )
            )
        return points

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)

    def __contains__(self, boundary_index: object) -> bool:
        with self._lock:
            return boundary_index in self._readings
