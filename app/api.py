"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.schemas import (
    BoundariesResponse,
    CorrectionRequest,
    ReadingAccepted,
    ReadingRequest,
    ReportResponse,
    RoastDetailsPayload,
    RoastDetailsUpdate,
    SeriesPointModel,
    SeriesResponse,
    SeriesSummaryModel,
    SessionConfigRequest,
    SessionCreateRequest,
    SessionState,
    WeightLossModel,
)
from datastore.session_registry import SessionRegistry, build_default_registry
from services.session import RoastSession

router = APIRouter()


def get_registry() -> SessionRegistry:
    return build_default_registry()


def _get_session(registry: SessionRegistry, session_id: str) -> RoastSession:
    try:
        return registry.get(session_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc.args[0]),
        ) from exc


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post(
    "/sessions",
    status_code=status.HTTP_201_CREATED,
    response_model=SessionState,
    summary="Create a roast session.",
)
async def create_session(
    payload: SessionCreateRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    try:
        session = registry.create(
            target_duration_minutes=payload.target_duration_minutes,
            interval_seconds=payload.interval_seconds,
            starting_reading=payload.starting_reading,
            details=payload.details.to_details(),
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return SessionState.from_session(session)


@router.get(
    "/sessions",
    response_model=list[SessionState],
    summary="List roast sessions in creation order.",
)
async def list_sessions(
    registry: SessionRegistry = Depends(get_registry),
) -> list[SessionState]:
    return [SessionState.from_session(session) for session in registry.scan()]


@router.get(
    "/sessions/{session_id}",
    response_model=SessionState,
    summary="Fetch timer state for a session.",
)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    return SessionState.from_session(_get_session(registry, session_id))


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Stop and discard a session.",
)
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    try:
        registry.delete(session_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc.args[0]),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/sessions/{session_id}/config",
    response_model=SessionState,
    summary="Change clock parameters while the session is stopped.",
)
async def configure_session(
    session_id: str,
    payload: SessionConfigRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = _get_session(registry, session_id)
    try:
        session.configure(
            payload.target_duration_minutes,
            payload.interval_seconds,
            payload.starting_reading,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return SessionState.from_session(session)


@router.patch(
    "/sessions/{session_id}/details",
    response_model=RoastDetailsPayload,
    summary="Update roast log details.",
)
async def update_details(
    session_id: str,
    payload: RoastDetailsUpdate,
    registry: SessionRegistry = Depends(get_registry),
) -> RoastDetailsPayload:
    session = _get_session(registry, session_id)
    try:
        details = session.update_details(**payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return RoastDetailsPayload.from_details(details)


@router.post(
    "/sessions/{session_id}/start",
    response_model=SessionState,
    summary="Start the interval timer.",
)
async def start_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = _get_session(registry, session_id)
    if not session.start():
        reason = "already running" if session.running else "configuration is incomplete or out of range"
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Session cannot start: {reason}.",
        )
    return SessionState.from_session(session)


@router.post(
    "/sessions/{session_id}/stop",
    response_model=SessionState,
    summary="Stop the timer, keeping elapsed time and readings.",
)
async def stop_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = _get_session(registry, session_id)
    session.stop()
    return SessionState.from_session(session)


@router.post(
    "/sessions/{session_id}/reset",
    response_model=SessionState,
    summary="Stop the timer and clear elapsed time, prompts and readings.",
)
async def reset_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = _get_session(registry, session_id)
    session.reset()
    return SessionState.from_session(session)


@router.post(
    "/sessions/{session_id}/readings",
    status_code=status.HTTP_201_CREATED,
    response_model=ReadingAccepted,
    summary="Answer an open reading prompt.",
)
async def submit_reading(
    session_id: str,
    payload: ReadingRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> ReadingAccepted:
    session = _get_session(registry, session_id)
    try:
        boundary_index = session.submit_reading(payload.value, payload.boundary_index)
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return ReadingAccepted(boundary_index=boundary_index, value=payload.value)


@router.post(
    "/sessions/{session_id}/prompts/dismiss",
    response_model=SessionState,
    summary="Close an open prompt without recording a reading.",
)
async def dismiss_prompt(
    session_id: str,
    boundary_index: Optional[int] = Query(
        default=None, ge=0, description="Pending prompt to close; defaults to the oldest."
    ),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = _get_session(registry, session_id)
    try:
        session.dismiss_prompt(boundary_index)
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return SessionState.from_session(session)


@router.put(
    "/sessions/{session_id}/readings/{boundary_index}",
    response_model=ReadingAccepted,
    summary="Correct the reading at a boundary.",
)
async def correct_reading(
    session_id: str,
    boundary_index: int,
    payload: CorrectionRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> ReadingAccepted:
    session = _get_session(registry, session_id)
    try:
        session.correct(boundary_index, payload.value)
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return ReadingAccepted(boundary_index=boundary_index, value=payload.value)


@router.delete(
    "/sessions/{session_id}/readings/{boundary_index}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove the reading at a boundary.",
)
async def remove_reading(
    session_id: str,
    boundary_index: int,
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    session = _get_session(registry, session_id)
    if not session.remove_reading(boundary_index):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No reading recorded at boundary {boundary_index}.",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/sessions/{session_id}/series",
    response_model=SeriesResponse,
    summary="Dense chart-ready series with absent values for gaps.",
)
async def get_series(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SeriesResponse:
    session = _get_session(registry, session_id)
    return SeriesResponse(
        session_id=session.session_id,
        interval_seconds=session.interval_seconds,
        points=[SeriesPointModel.from_point(point) for point in session.dense_series()],
    )


@router.get(
    "/sessions/{session_id}/boundaries",
    response_model=BoundariesResponse,
    summary="Recorded boundaries that may be corrected.",
)
async def get_boundaries(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> BoundariesResponse:
    session = _get_session(registry, session_id)
    return BoundariesResponse(
        session_id=session.session_id,
        boundaries=session.correctable_boundaries(),
    )


@router.get(
    "/sessions/{session_id}/report",
    response_model=ReportResponse,
    summary="Roast details, dense series and summary statistics.",
)
async def get_report(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> ReportResponse:
    session = _get_session(registry, session_id)
    points = session.dense_series()
    return ReportResponse(
        session=SessionState.from_session(session),
        points=[SeriesPointModel.from_point(point) for point in points],
        summary=SeriesSummaryModel.from_summary(session.summary(points)),
        weight_loss=WeightLossModel.from_weight_loss(session.weight_loss()),
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
