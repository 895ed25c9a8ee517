"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

STARTING_READING_MIN = 70.0
STARTING_READING_MAX = 240.0


def config_is_valid(
    target_duration_minutes: Optional[int],
    interval_seconds: Optional[int],
    starting_reading: Optional[float],
) -> bool:
    """Return whether the three session parameters allow a clock to start."""
    if target_duration_minutes is None or interval_seconds is None or starting_reading is None:
        return False
    return (
        target_duration_minutes > 0
        and interval_seconds > 0
        and STARTING_READING_MIN <= starting_reading <= STARTING_READING_MAX
    )


def max_boundary_index(target_duration_minutes: int, interval_seconds: int) -> int:
    """Highest boundary index a session of this shape can reach."""
    if target_duration_minutes <= 0 or interval_seconds <= 0:
        return 0
    return (target_duration_minutes * 60) // interval_seconds


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Parameters a clock is started with."""

    target_duration_minutes: int
    interval_seconds: int
    starting_reading: float

    @property
    def max_boundary(self) -> int:
        return max_boundary_index(self.target_duration_minutes, self.interval_seconds)

    def is_valid(self) -> bool:
        return config_is_valid(
            self.target_duration_minutes, self.interval_seconds, self.starting_reading
        )


@dataclass(frozen=True, slots=True)
class ReadingEntry:
    """A single stored reading at a boundary index."""

    boundary_index: int
    value: float


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """One point of the dense series; ``value`` is ``None`` when absent."""

    boundary_index: int
    seconds_at_index: int
    value: Optional[float]


class RoastType(str, Enum):
    light = "Light"
    medium = "Medium"
    dark = "Dark"


@dataclass(slots=True)
class RoastDetails:
    """Free-form roast log fields recorded alongside the temperature curve."""

    bean_type: str = ""
    water_content: Optional[float] = None
    density: Optional[float] = None
    weight_in: Optional[float] = None
    weight_out: Optional[float] = None
    roast_type: RoastType = RoastType.medium
    charge_temperature: Optional[float] = None
    end_temperature: Optional[float] = None
    roast_time_minutes: Optional[int] = None
    development_time_minutes: Optional[int] = None
    turning_point: Optional[float] = None
    yellowing: Optional[float] = None
    first_crack: Optional[float] = None
    air_flow_power: Optional[int] = None
    drum_rpm: Optional[int] = None
    burner_power: Optional[int] = None
    rate_of_rise: Optional[float] = None
