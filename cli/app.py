from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import format_elapsed, render_report, render_series, render_state


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Log interval temperature readings for a coffee roast.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Roast log API base URL (defaults to ROASTLOG_API_URL env or http://localhost:8000).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between status checks while watching a session.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Maximum seconds to watch a session.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(
        base_url=base_url,
        poll_interval=poll_interval,
        watch_timeout=timeout,
    )
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("create")
def create_command(
    ctx: typer.Context,
    duration: Optional[int] = typer.Option(None, "--duration", "-d", help="Target roast duration in minutes."),
    interval: Optional[int] = typer.Option(None, "--interval", "-i", help="Sampling interval in seconds."),
    start_temp: Optional[float] = typer.Option(
        None, "--start-temp", "-t", help="Starting temperature (70-240 °C)."
    ),
    bean: Optional[str] = typer.Option(None, "--bean", help="Bean type or origin."),
    roast_type: Optional[str] = typer.Option(None, "--roast-type", help="Light, Medium or Dark."),
    weight_in: Optional[float] = typer.Option(None, "--weight-in", help="Green weight in grams."),
) -> None:
    """Create a roast session."""
    state = _get_state(ctx)
    details = {
        key: value
        for key, value in (
            ("bean_type", bean),
            ("roast_type", roast_type),
            ("weight_in", weight_in),
        )
        if value is not None
    }
    payload = state.client.create_session(duration, interval, start_temp, details=details)
    typer.secho(f"Session created. session_id={payload.get('session_id')}", fg=typer.colors.GREEN)
    if not payload.get("can_start"):
        typer.secho(
            "Session cannot start yet: duration, interval and a starting temperature "
            "between 70 and 240 are required.",
            fg=typer.colors.YELLOW,
        )


@app.command("status")
def status_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """Show timer state for a session."""
    state = _get_state(ctx)
    render_state(state.client.get_session(session_id))


@app.command("start")
def start_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """Start the interval timer."""
    state = _get_state(ctx)
    payload = state.client.start(session_id)
    typer.secho(f"Timer started at {format_elapsed(payload.get('elapsed_seconds') or 0)}.", fg=typer.colors.GREEN)


@app.command("stop")
def stop_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """Stop the timer, keeping readings."""
    state = _get_state(ctx)
    payload = state.client.stop(session_id)
    typer.echo(f"Timer stopped at {format_elapsed(payload.get('elapsed_seconds') or 0)}.")


@app.command("reset")
def reset_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """Stop the timer and clear all readings."""
    state = _get_state(ctx)
    state.client.reset(session_id)
    typer.echo("Timer reset; readings cleared.")


@app.command("record")
def record_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
    value: float = typer.Argument(..., help="Temperature reading."),
    boundary: Optional[int] = typer.Option(
        None, "--boundary", help="Pending boundary to answer (defaults to the oldest)."
    ),
) -> None:
    """Answer an open reading prompt."""
    state = _get_state(ctx)
    payload = state.client.submit_reading(session_id, value, boundary)
    typer.secho(
        f"Recorded {payload.get('value')} at boundary {payload.get('boundary_index')}.",
        fg=typer.colors.GREEN,
    )


@app.command("dismiss")
def dismiss_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
    boundary: Optional[int] = typer.Option(
        None, "--boundary", help="Pending boundary to skip (defaults to the oldest)."
    ),
) -> None:
    """Skip an open reading prompt."""
    state = _get_state(ctx)
    payload = state.client.dismiss_prompt(session_id, boundary)
    remaining = payload.get("pending_prompts") or []
    typer.echo(f"Prompt dismissed. {len(remaining)} still open.")


@app.command("correct")
def correct_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
    boundary: int = typer.Argument(..., help="Boundary index to correct."),
    value: float = typer.Argument(..., help="Corrected temperature."),
) -> None:
    """Replace the reading at a boundary."""
    state = _get_state(ctx)
    payload = state.client.correct_reading(session_id, boundary, value)
    typer.secho(
        f"Boundary {payload.get('boundary_index')} now reads {payload.get('value')}.",
        fg=typer.colors.GREEN,
    )


@app.command("boundaries")
def boundaries_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """List boundaries with a recorded reading."""
    state = _get_state(ctx)
    boundaries = state.client.get_boundaries(session_id)
    if not boundaries:
        typer.echo("No readings recorded.")
        return
    typer.echo(", ".join(str(index) for index in boundaries))


@app.command("series")
def series_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """Print the dense temperature series."""
    state = _get_state(ctx)
    payload = state.client.get_series(session_id)
    render_series(payload.get("points") or [], payload.get("interval_seconds"))


@app.command("report")
def report_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """Print the roast report."""
    state = _get_state(ctx)
    render_report(state.client.get_report(session_id))


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session identifier."),
) -> None:
    """Follow a running session and prompt for each reading as boundaries pass.

    Leave a prompt blank to skip that reading.
    """
    state = _get_state(ctx)
    client = state.client
    interval = state.config.poll_interval
    deadline = time.monotonic() + state.config.watch_timeout

    while time.monotonic() <= deadline:
        payload = client.get_session(session_id)
        for boundary in payload.get("pending_prompts") or []:
            _prompt_reading(client, session_id, boundary)
        if not payload.get("running") and not payload.get("pending_prompts"):
            typer.echo(f"Session stopped at {format_elapsed(payload.get('elapsed_seconds') or 0)}.")
            return
        time.sleep(interval)

    typer.secho(f"Stopped watching {session_id} after timeout.", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _prompt_reading(client: ApiClient, session_id: str, boundary: int) -> None:
    while True:
        raw = typer.prompt(
            f"Temperature at boundary {boundary}", default="", show_default=False
        ).strip()
        if not raw:
            client.dismiss_prompt(session_id, boundary)
            typer.echo(f"Skipped boundary {boundary}.")
            return
        try:
            value = float(raw)
        except ValueError:
            typer.secho(f"{raw!r} is not a number.", fg=typer.colors.RED, err=True)
            continue
        client.submit_reading(session_id, value, boundary)
        return
