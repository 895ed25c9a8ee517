from __future__ import annotations

import logging
from functools import lru_cache
from threading import Lock
from typing import Dict, Optional
from uuid import uuid4

from models.records import RoastDetails
from services.session import RoastSession
from services.ticker import TickerFactory, build_ticker_factory
from settings import get_settings

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-memory collection of roast sessions for the lifetime of the process."""

    def __init__(self, max_sessions: int = 32, ticker_factory: Optional[TickerFactory] = None) -> None:
        self.max_sessions = max_sessions
        self.ticker_factory = ticker_factory
        self._sessions: Dict[str, RoastSession] = {}
        self._lock = Lock()

    def create(
        self,
        target_duration_minutes: Optional[int] = None,
        interval_seconds: Optional[int] = None,
        starting_reading: Optional[float] = None,
        details: Optional[RoastDetails] = None,
    ) -> RoastSession:
        session_id = str(uuid4())
        session = RoastSession(
            session_id=session_id,
            target_duration_minutes=target_duration_minutes,
            interval_seconds=interval_seconds,
            starting_reading=starting_reading,
            details=details,
            ticker_factory=self.ticker_factory,
        )
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(f"Session limit of {self.max_sessions} reached.")
            self._sessions[session_id] = session

        logger.info("Session created", extra={"session_id": session_id})
        return session

    def get(self, session_id: str) -> RoastSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Roast session {session_id!r} not found.")
        return session

    def scan(self) -> list[RoastSession]:
        with self._lock:
            sessions = list(self._sessions.values())
        return sorted(sessions, key=lambda session: session.created_at)

    def delete(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise KeyError(f"Roast session {session_id!r} not found.")
        session.stop()
        logger.info("Session deleted", extra={"session_id": session_id})

    def shutdown(self) -> None:
        """Stop every running clock; called on application shutdown."""
        for session in self.scan():
            session.stop()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache
def build_default_registry(max_sessions: Optional[int] = None) -> SessionRegistry:
    settings = get_settings()
    limit = settings.max_sessions if max_sessions is None else max_sessions
    factory = build_ticker_factory(settings.ticker_kind, settings.tick_seconds)
    return SessionRegistry(max_sessions=limit, ticker_factory=factory)
