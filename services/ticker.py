"""Tick sources that drive a :class:`~services.session_clock.SessionClock`.

Each ticker calls its callback once per period until cancelled. The clock
re-checks its own state under its lock on every callback, so a callback that
races with ``cancel()`` is harmless.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Ticker(Protocol):
    def start(self, callback: TickCallback) -> None: ...

    def cancel(self) -> None: ...

    @property
    def active(self) -> bool: ...


TickerFactory = Callable[[], Ticker]


class AsyncioTicker:
    """Periodic task on the running event loop: sleep one period, then tick."""

    def __init__(self, period: float = 1.0) -> None:
        self.period = period
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: TickCallback) -> None:
        if self.active:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(callback))

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, callback: TickCallback) -> None:
        while True:
            await asyncio.sleep(self.period)
            logger.debug("Tick")
            callback()


class ThreadTicker:
    """Daemon thread variant for hosts without an event loop."""

    def __init__(self, period: float = 1.0) -> None:
        self.period = period
        self._thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, callback: TickCallback) -> None:
        if self.active:
            return
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(callback, self._stopped),
            name="roast-ticker",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        self._stopped.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.period)

    def _run(self, callback: TickCallback, stopped: threading.Event) -> None:
        while not stopped.wait(self.period):
            logger.debug("Tick")
            callback()


class ManualTicker:
    """Test-controlled stepper; ticks are delivered only through :meth:`advance`."""

    def __init__(self) -> None:
        self._callback: Optional[TickCallback] = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self._callback = callback

    def cancel(self) -> None:
        self._callback = None

    def advance(self, ticks: int = 1) -> None:
        for _ in range(ticks):
            if self._callback is None:
                return
            self._callback()


def _loop_aware_ticker(period: float) -> Ticker:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return ThreadTicker(period)
    return AsyncioTicker(period)


def build_ticker_factory(kind: str, period: float) -> TickerFactory:
    """Factory for ``kind``; ``asyncio`` falls back to a thread outside an event loop."""
    if kind == "thread":
        return lambda: ThreadTicker(period)
    if kind == "asyncio":
        return lambda: _loop_aware_ticker(period)
    raise ValueError(f"Unknown ticker kind: {kind!r}")
