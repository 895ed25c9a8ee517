"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.records import RoastDetails, RoastType, SeriesPoint
from services.aggregator import SeriesSummary, WeightLoss
from services.session import RoastSession


class RoastDetailsPayload(BaseModel):
    """Roast log fields; every field is optional."""

    bean_type: str = ""
    water_content: Optional[float] = None
    density: Optional[float] = None
    weight_in: Optional[float] = Field(default=None, description="Green weight in grams.")
    weight_out: Optional[float] = Field(default=None, description="Roasted weight in grams.")
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

    def to_details(self) -> RoastDetails:
        return RoastDetails(**self.model_dump())

    @classmethod
    def from_details(cls, details: RoastDetails) -> "RoastDetailsPayload":
        return cls(
            **{name: getattr(details, name) for name in cls.model_fields}
        )


class RoastDetailsUpdate(BaseModel):
    """Partial update of roast details; only fields that are sent are applied."""

    bean_type: Optional[str] = None
    water_content: Optional[float] = None
    density: Optional[float] = None
    weight_in: Optional[float] = None
    weight_out: Optional[float] = None
    roast_type: Optional[RoastType] = None
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


class SessionConfigRequest(BaseModel):
    """Clock parameters; invalid values are accepted and reported via ``can_start``."""

    target_duration_minutes: Optional[int] = None
    interval_seconds: Optional[int] = None
    starting_reading: Optional[float] = None


class SessionCreateRequest(SessionConfigRequest):
    details: RoastDetailsPayload = Field(default_factory=RoastDetailsPayload)


class SessionState(BaseModel):
    """Timer display projection of a session."""

    session_id: str
    created_at: datetime
    target_duration_minutes: Optional[int] = None
    interval_seconds: Optional[int] = None
    starting_reading: Optional[float] = None
    max_boundary: int = Field(..., ge=0)
    elapsed_seconds: int = Field(..., ge=0)
    running: bool
    last_notified_boundary: int = Field(..., ge=0)
    can_start: bool
    pending_prompts: List[int] = Field(default_factory=list)
    details: RoastDetailsPayload

    @classmethod
    def from_session(cls, session: RoastSession) -> "SessionState":
        with session.lock:
            clock = session.state()
            return cls(
                session_id=session.session_id,
                created_at=session.created_at,
                target_duration_minutes=session.target_duration_minutes,
                interval_seconds=session.interval_seconds,
                starting_reading=session.starting_reading,
                max_boundary=session.max_boundary,
                elapsed_seconds=clock.elapsed_seconds,
                running=clock.running,
                last_notified_boundary=clock.last_notified_boundary,
                can_start=session.can_start(),
                pending_prompts=session.pending_prompts(),
                details=RoastDetailsPayload.from_details(session.details),
            )


class ReadingRequest(BaseModel):
    value: float
    boundary_index: Optional[int] = Field(
        default=None, ge=0, description="Pending prompt to answer; defaults to the oldest."
    )


class CorrectionRequest(BaseModel):
    value: float


class ReadingAccepted(BaseModel):
    boundary_index: int = Field(..., ge=0)
    value: float


class SeriesPointModel(BaseModel):
    boundary_index: int = Field(..., ge=0)
    seconds_at_index: int = Field(..., ge=0)
    value: Optional[float] = Field(default=None, description="Absent when no reading exists.")

    @classmethod
    def from_point(cls, point: SeriesPoint) -> "SeriesPointModel":
        return cls(
            boundary_index=point.boundary_index,
            seconds_at_index=point.seconds_at_index,
            value=point.value,
        )


class SeriesResponse(BaseModel):
    session_id: str
    interval_seconds: Optional[int] = None
    points: List[SeriesPointModel] = Field(default_factory=list)


class BoundariesResponse(BaseModel):
    session_id: str
    boundaries: List[int] = Field(default_factory=list)


class SeriesSummaryModel(BaseModel):
    """Aggregate metrics computed over the dense series."""

    point_count: int = Field(..., ge=0)
    recorded_count: int = Field(..., ge=0)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    mean_value: Optional[float] = None
    missing_boundaries: List[int] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: SeriesSummary) -> "SeriesSummaryModel":
        return cls(
            point_count=summary.point_count,
            recorded_count=summary.recorded_count,
            min_value=summary.min_value,
            max_value=summary.max_value,
            mean_value=summary.mean_value,
            missing_boundaries=list(summary.missing_boundaries),
        )


class WeightLossModel(BaseModel):
    grams: float
    percent: float

    @classmethod
    def from_weight_loss(cls, loss: Optional[WeightLoss]) -> Optional["WeightLossModel"]:
        if loss is None:
            return None
        return cls(grams=loss.grams, percent=loss.percent)


class ReportResponse(BaseModel):
    """Everything a report generator needs for one roast."""

    session: SessionState
    points: List[SeriesPointModel] = Field(default_factory=list)
    summary: SeriesSummaryModel
    weight_loss: Optional[WeightLossModel] = None
