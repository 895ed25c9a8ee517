from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.config import load_config


def _state(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "session_id": "roast-123",
        "created_at": "2024-01-01T00:00:00Z",
        "target_duration_minutes": 2,
        "interval_seconds": 60,
        "starting_reading": 70.0,
        "max_boundary": 2,
        "elapsed_seconds": 0,
        "running": False,
        "last_notified_boundary": 0,
        "can_start": True,
        "pending_prompts": [],
        "details": {"bean_type": "Gayo", "roast_type": "Medium", "weight_in": 200.0, "weight_out": 170.0},
    }
    payload.update(overrides)
    return payload


_POINTS = [
    {"boundary_index": 0, "seconds_at_index": 0, "value": 70.0},
    {"boundary_index": 1, "seconds_at_index": 60, "value": None},
    {"boundary_index": 2, "seconds_at_index": 120, "value": 188.2},
]


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.created: List[tuple] = []
        self.readings: List[tuple[str, float, Optional[int]]] = []
        self.corrections: List[tuple[str, int, float]] = []
        self.dismissed: List[tuple[str, Optional[int]]] = []
        self.states: List[Dict[str, Any]] = [_state()]
        self.closed = False

    def create_session(self, duration, interval, starting, details=None) -> Dict[str, Any]:
        self.created.append((duration, interval, starting, details))
        return _state(can_start=starting is not None)

    def get_session(self, session_id: str) -> Dict[str, Any]:
        if len(self.states) > 1:
            return self.states.pop(0)
        return self.states[0]

    def start(self, session_id: str) -> Dict[str, Any]:
        return _state(running=True)

    def stop(self, session_id: str) -> Dict[str, Any]:
        return _state(elapsed_seconds=125)

    def reset(self, session_id: str) -> Dict[str, Any]:
        return _state()

    def submit_reading(self, session_id: str, value: float, boundary_index: Optional[int] = None) -> Dict[str, Any]:
        self.readings.append((session_id, value, boundary_index))
        return {"boundary_index": boundary_index or 1, "value": value}

    def dismiss_prompt(self, session_id: str, boundary_index: Optional[int] = None) -> Dict[str, Any]:
        self.dismissed.append((session_id, boundary_index))
        return _state()

    def correct_reading(self, session_id: str, boundary_index: int, value: float) -> Dict[str, Any]:
        self.corrections.append((session_id, boundary_index, value))
        return {"boundary_index": boundary_index, "value": value}

    def get_series(self, session_id: str) -> Dict[str, Any]:
        return {"session_id": session_id, "interval_seconds": 60, "points": _POINTS}

    def get_boundaries(self, session_id: str) -> List[int]:
        return [0, 2]

    def get_report(self, session_id: str) -> Dict[str, Any]:
        return {
            "session": _state(),
            "points": _POINTS,
            "summary": {
                "point_count": 3,
                "recorded_count": 2,
                "min_value": 70.0,
                "max_value": 188.2,
                "mean_value": 129.1,
                "missing_boundaries": [1],
            },
            "weight_loss": {"grams": 30.0, "percent": 15.0},
        }

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    monkeypatch.setattr("cli.app.time.sleep", lambda _seconds: None)
    return client


def test_create_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app, ["create", "-d", "12", "-i", "30", "-t", "200", "--bean", "Gayo", "--weight-in", "250"]
    )

    assert result.exit_code == 0
    assert "session_id=roast-123" in result.stdout
    assert stub.created == [(12, 30, 200.0, {"bean_type": "Gayo", "weight_in": 250.0})]
    assert stub.closed is True


def test_create_without_start_temperature_warns(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["create", "-d", "12"])

    assert result.exit_code == 0
    assert "cannot start yet" in result.stdout


def test_status_command(runner: CliRunner, stub: StubClient) -> None:
    stub.states = [_state(running=True, elapsed_seconds=75, pending_prompts=[1])]

    result = runner.invoke(app, ["status", "roast-123"])

    assert result.exit_code == 0
    assert "elapsed: 01:15" in result.stdout
    assert "Readings pending for boundaries: 1" in result.stdout


def test_lifecycle_commands(runner: CliRunner, stub: StubClient) -> None:
    assert "Timer started" in runner.invoke(app, ["start", "roast-123"]).stdout
    assert "Timer stopped at 02:05" in runner.invoke(app, ["stop", "roast-123"]).stdout
    assert "readings cleared" in runner.invoke(app, ["reset", "roast-123"]).stdout


def test_record_and_correct(runner: CliRunner, stub: StubClient) -> None:
    recorded = runner.invoke(app, ["record", "roast-123", "151.5", "--boundary", "1"])
    corrected = runner.invoke(app, ["correct", "roast-123", "2", "190"])

    assert recorded.exit_code == 0
    assert "Recorded 151.5 at boundary 1" in recorded.stdout
    assert stub.readings == [("roast-123", 151.5, 1)]
    assert corrected.exit_code == 0
    assert stub.corrections == [("roast-123", 2, 190.0)]


def test_dismiss_named_boundary(runner: CliRunner, stub: StubClient) -> None:
    oldest = runner.invoke(app, ["dismiss", "roast-123"])
    named = runner.invoke(app, ["dismiss", "roast-123", "--boundary", "3"])

    assert oldest.exit_code == 0
    assert named.exit_code == 0
    assert "Prompt dismissed." in named.stdout
    assert stub.dismissed == [("roast-123", None), ("roast-123", 3)]


def test_series_marks_gaps(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["series", "roast-123"])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert "Temperature Profile" in lines[0]
    assert lines[3].split() == ["1", "1", "-"]
    assert lines[4].split() == ["2", "2", "188.2"]


def test_boundaries_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["boundaries", "roast-123"])

    assert result.stdout.strip() == "0, 2"


def test_report_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["report", "roast-123"])

    assert result.exit_code == 0
    assert "weight_loss: 30.0 gr (15.0%)" in result.stdout
    assert "recorded: 2/3" in result.stdout
    assert "missing: 1" in result.stdout


def test_watch_prompts_for_pending_readings(runner: CliRunner, stub: StubClient) -> None:
    stub.states = [
        _state(running=True, elapsed_seconds=30),
        _state(running=True, elapsed_seconds=125, pending_prompts=[1, 2]),
        _state(running=False, elapsed_seconds=130),
    ]

    result = runner.invoke(app, ["watch", "roast-123"], input="abc\n150.5\n\n")

    assert result.exit_code == 0
    assert "is not a number" in result.output
    assert stub.readings == [("roast-123", 150.5, 1)]
    assert stub.dismissed == [("roast-123", 2)]
    assert "Session stopped at 02:10" in result.stdout


def test_watch_times_out(runner: CliRunner, stub: StubClient, monkeypatch) -> None:
    stub.states = [_state(running=True)]
    moments = iter([0.0, 0.0, 5.0])
    monkeypatch.setattr("cli.app.time.monotonic", lambda: next(moments, 5.0))

    result = runner.invoke(app, ["--timeout", "1", "watch", "roast-123"])

    assert result.exit_code == 1


def test_load_config_precedence(monkeypatch) -> None:
    monkeypatch.setenv("ROASTLOG_API_URL", "http://roaster:9000/")
    monkeypatch.setenv("ROASTLOG_POLL_INTERVAL", "nope")

    config = load_config(watch_timeout=90.0)

    assert config.base_url == "http://roaster:9000"
    assert config.poll_interval == 1.0
    assert config.watch_timeout == 90.0
    assert load_config(base_url="http://other").base_url == "http://other"
