"""Summary statistics for a dense roast series."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from models.records import SeriesPoint


@dataclass
class SeriesSummary:
    """Computed statistics for a dense series."""

    point_count: int = 0
    recorded_count: int = 0
    min_value: float | None = None
    max_value: float | None = None
    mean_value: float | None = None
    missing_boundaries: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class WeightLoss:
    grams: float
    percent: float


class SeriesAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, points: Iterable[SeriesPoint]) -> SeriesSummary:
        summary = SeriesSummary()
        total = 0.0

        for point in points:
            summary.point_count += 1
            value = point.value
            if value is None:
                summary.missing_boundaries.append(point.boundary_index)
                continue

            summary.recorded_count += 1
            total += value

            if summary.min_value is None or value < summary.min_value:
                summary.min_value = value
            if summary.max_value is None or value > summary.max_value:
                summary.max_value = value

        if summary.recorded_count:
            summary.mean_value = total / summary.recorded_count

        return summary

    def weight_loss(
        self, weight_in: Optional[float], weight_out: Optional[float]
    ) -> Optional[WeightLoss]:
        """Green-to-roasted weight loss; percent is 0 when ``weight_in`` is not positive."""
        if weight_in is None or weight_out is None:
            return None
        loss = weight_in - weight_out
        percent = (loss / weight_in) * 100 if weight_in > 0 else 0.0
        return WeightLoss(grams=loss, percent=percent)
