from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_elapsed(seconds: int) -> str:
    minutes, remainder = divmod(int(seconds), 60)
    return f"{minutes:02d}:{remainder:02d}"


def format_time_label(seconds: int, interval_seconds: Optional[int]) -> str:
    """Whole minutes for minute-or-longer intervals, otherwise ``m.ss``."""
    minutes, remainder = divmod(int(seconds), 60)
    if interval_seconds is not None and interval_seconds >= 60:
        return f"{minutes}"
    return f"{minutes}.{remainder:02d}"


def _format_value(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.1f}"


def render_state(payload: Dict[str, Any]) -> None:
    echo_heading("Roast Session")
    echo_key_values(
        [
            ("session_id", payload.get("session_id")),
            ("running", payload.get("running")),
            ("elapsed", format_elapsed(payload.get("elapsed_seconds") or 0)),
            ("target_duration_minutes", payload.get("target_duration_minutes")),
            ("interval_seconds", payload.get("interval_seconds")),
            ("starting_reading", payload.get("starting_reading")),
            ("last_notified_boundary", payload.get("last_notified_boundary")),
            ("max_boundary", payload.get("max_boundary")),
            ("can_start", payload.get("can_start")),
        ]
    )
    pending = payload.get("pending_prompts") or []
    if pending:
        typer.secho(
            f"Readings pending for boundaries: {', '.join(str(index) for index in pending)}",
            fg=typer.colors.YELLOW,
        )


def render_series(points: Iterable[Dict[str, Any]], interval_seconds: Optional[int]) -> None:
    echo_heading("Temperature Profile")
    rows = list(points)
    if not rows:
        typer.echo("No series available; configure the session first.")
        return
    typer.echo(f"{'#':>4}  {'time':>6}  {'temp':>6}")
    for point in rows:
        label = format_time_label(point.get("seconds_at_index") or 0, interval_seconds)
        typer.echo(
            f"{point.get('boundary_index'):>4}  {label:>6}  {_format_value(point.get('value')):>6}"
        )


def render_report(payload: Dict[str, Any]) -> None:
    session = payload.get("session") or {}
    render_state(session)

    details = session.get("details") or {}
    typer.echo()
    echo_heading("Bean")
    echo_key_values(
        [
            ("bean_type", details.get("bean_type") or "-"),
            ("roast_type", details.get("roast_type")),
            ("weight_in", details.get("weight_in")),
            ("weight_out", details.get("weight_out")),
        ]
    )
    weight_loss = payload.get("weight_loss")
    if weight_loss:
        typer.echo(
            f"weight_loss: {weight_loss.get('grams'):.1f} gr ({weight_loss.get('percent'):.1f}%)"
        )

    typer.echo()
    render_series(payload.get("points") or [], session.get("interval_seconds"))

    summary = payload.get("summary") or {}
    typer.echo()
    echo_heading("Summary")
    echo_key_values(
        [
            ("recorded", f"{summary.get('recorded_count')}/{summary.get('point_count')}"),
            ("min_value", summary.get("min_value")),
            ("max_value", summary.get("max_value")),
            ("mean_value", summary.get("mean_value")),
        ]
    )
    missing = summary.get("missing_boundaries") or []
    if missing:
        typer.echo(f"missing: {', '.join(str(index) for index in missing)}")
