"""Behavioral tests for the interval-sampling clock."""

from __future__ import annotations

import threading

import pytest

from services.reading_store import ReadingStore
from services.session_clock import ClockState, SessionClock
from services.ticker import ManualTicker


@pytest.fixture()
def store() -> ReadingStore:
    return ReadingStore()


@pytest.fixture()
def clock(store: ReadingStore) -> SessionClock:
    return SessionClock(store, ticker_factory=ManualTicker)


def _collect(clock: SessionClock) -> list[int]:
    events: list[int] = []
    clock.set_listener(events.append)
    return events


def test_new_clock_is_stopped_at_zero(clock: SessionClock) -> None:
    assert clock.state() == ClockState(elapsed_seconds=0, running=False, last_notified_boundary=0)
    assert clock.config is None


def test_start_anchors_starting_reading(clock: SessionClock, store: ReadingStore) -> None:
    assert clock.start(2, 60, 70.0) is True

    assert clock.running is True
    assert store.get(0) == 70.0
    assert clock.config is not None
    assert clock.config.max_boundary == 2


def test_boundaries_fire_once_each(clock: SessionClock) -> None:
    events = _collect(clock)
    clock.start(2, 60, 70.0)

    for _ in range(60):
        clock.tick()
    assert clock.elapsed_seconds == 60
    assert events == [1]

    for _ in range(60):
        clock.tick()
    assert clock.elapsed_seconds == 120
    assert events == [1, 2]

    assert clock.tick() is None
    assert events == [1, 2]
    assert clock.last_notified_boundary == 2


def test_tick_returns_announced_boundary(clock: SessionClock) -> None:
    clock.start(1, 30, 100.0)

    results = [clock.tick() for _ in range(60)]

    assert [result for result in results if result is not None] == [1, 2]
    assert results[29] == 1
    assert results[59] == 2


def test_clock_keeps_ticking_past_target(clock: SessionClock) -> None:
    events = _collect(clock)
    clock.start(1, 60, 100.0)

    for _ in range(300):
        clock.tick()

    assert clock.elapsed_seconds == 300
    assert clock.running is True
    assert events == [1]


def test_interval_longer_than_duration_never_fires(clock: SessionClock, store: ReadingStore) -> None:
    events = _collect(clock)
    clock.start(1, 120, 100.0)

    for _ in range(240):
        clock.tick()

    assert events == []
    assert store.dense_series(1, 120, 100.0)[0].value == 100.0


def test_manual_ticker_drives_clock(clock: SessionClock) -> None:
    events = _collect(clock)
    clock.start(2, 60, 70.0)
    ticker = clock.ticker
    assert isinstance(ticker, ManualTicker)

    ticker.advance(121)

    assert clock.elapsed_seconds == 121
    assert events == [1, 2]


def test_start_while_running_is_ignored(clock: SessionClock, store: ReadingStore) -> None:
    clock.start(5, 60, 100.0)
    clock.tick()
    store.record(0, 110.0)

    assert clock.start(10, 30, 150.0) is False
    assert clock.config is not None
    assert clock.config.interval_seconds == 60
    assert clock.elapsed_seconds == 1
    assert store.get(0) == 110.0


@pytest.mark.parametrize(
    ("duration", "interval", "starting"),
    [
        (0, 60, 150.0),
        (10, 0, 150.0),
        (10, 60, 69.9),
        (10, 60, 240.1),
        (None, 60, 150.0),
        (10, None, 150.0),
        (10, 60, None),
        (-3, 60, 150.0),
    ],
)
def test_invalid_configuration_is_refused(
    clock: SessionClock, store: ReadingStore, duration, interval, starting
) -> None:
    assert clock.can_start(duration, interval, starting) is False
    assert clock.start(duration, interval, starting) is False
    assert clock.running is False
    assert clock.ticker is None
    assert len(store) == 0


@pytest.mark.parametrize("starting", [70.0, 240.0, 155.5])
def test_can_start_boundaries_are_inclusive(clock: SessionClock, starting: float) -> None:
    assert clock.can_start(10, 60, starting) is True


def test_can_start_false_while_running(clock: SessionClock) -> None:
    clock.start(10, 60, 150.0)

    assert clock.can_start(10, 60, 150.0) is False


def test_stop_preserves_elapsed_and_boundary(clock: SessionClock) -> None:
    clock.start(2, 60, 70.0)
    for _ in range(75):
        clock.tick()

    clock.stop()

    assert clock.running is False
    assert clock.elapsed_seconds == 75
    assert clock.last_notified_boundary == 1
    assert clock.tick() is None
    assert clock.elapsed_seconds == 75


def test_stale_ticker_callback_is_suppressed_after_stop(clock: SessionClock) -> None:
    clock.start(2, 60, 70.0)
    ticker = clock.ticker
    assert isinstance(ticker, ManualTicker)
    callback = ticker._callback
    assert callback is not None

    clock.stop()
    callback()

    assert clock.elapsed_seconds == 0


def test_stale_callback_does_not_drive_a_new_run(clock: SessionClock) -> None:
    clock.start(2, 60, 70.0)
    first = clock.ticker
    assert isinstance(first, ManualTicker)
    stale = first._callback
    assert stale is not None
    clock.stop()

    clock.start(2, 60, 70.0)
    stale()

    assert clock.elapsed_seconds == 0
    assert clock.ticker is not first


def test_restart_after_stop_reannounces_current_boundary(clock: SessionClock) -> None:
    events = _collect(clock)
    clock.start(3, 60, 70.0)
    for _ in range(90):
        clock.tick()
    clock.stop()

    assert clock.start(3, 60, 80.0) is True
    clock.tick()

    assert clock.elapsed_seconds == 91
    assert events == [1, 1]


def test_reset_clears_clock_and_store(clock: SessionClock, store: ReadingStore) -> None:
    clock.start(2, 60, 70.0)
    for _ in range(61):
        clock.tick()
    store.record(1, 120.0)

    clock.reset()

    assert clock.state() == ClockState(elapsed_seconds=0, running=False, last_notified_boundary=0)
    assert len(store) == 0
    assert clock.ticker is None


def test_fresh_start_after_reset_uses_starting_fallback(
    clock: SessionClock, store: ReadingStore
) -> None:
    clock.start(2, 60, 70.0)
    for _ in range(61):
        clock.tick()
    store.record(1, 120.0)
    clock.reset()

    clock.start(2, 60, 90.0)

    assert [point.value for point in store.dense_series(2, 60, 90.0)] == [90.0, None, None]


def test_listener_is_replaced_not_added(clock: SessionClock) -> None:
    first: list[int] = []
    second: list[int] = []
    clock.set_listener(first.append)
    clock.set_listener(second.append)
    clock.start(1, 60, 100.0)

    for _ in range(60):
        clock.tick()

    assert first == []
    assert second == [1]


def test_concurrent_ticks_and_actions_do_not_interleave(
    clock: SessionClock, store: ReadingStore
) -> None:
    events = _collect(clock)
    clock.start(10, 1, 100.0)

    def tick_many() -> None:
        for _ in range(300):
            clock.tick()

    def record_many() -> None:
        for index in range(300):
            with clock.lock:
                store.record(index % 600, float(index))

    threads = [threading.Thread(target=tick_many) for _ in range(2)]
    threads.append(threading.Thread(target=record_many))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert clock.elapsed_seconds == 600
    assert events == list(range(1, 601))
