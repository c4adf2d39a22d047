"""
Session Store.

Holds one `InterviewSession` per session id. Pure data access: no
interview logic lives here. Each key has its own `asyncio.Lock` so one
session's interactions run one at a time while different sessions
proceed independently.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from interview_engine.core.exceptions import DuplicateSessionError, SessionNotFoundError
from interview_engine.models.interview import InterviewSession, SessionStatus

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Keyed storage for interview sessions."""

    @abstractmethod
    def create(self, session: InterviewSession) -> None:
        """Store a new session; raises DuplicateSessionError if the id exists."""

    @abstractmethod
    def get(self, session_id: str) -> InterviewSession:
        """Return a copy of the session; raises SessionNotFoundError."""

    @abstractmethod
    def save(self, session: InterviewSession) -> None:
        """Replace the stored record for an existing session."""

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Remove a session. Returns False if it did not exist."""

    @abstractmethod
    def list_sessions(
        self,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
    ) -> List[InterviewSession]:
        """List sessions, most recently active first."""

    @abstractmethod
    def lock(self, session_id: str) -> asyncio.Lock:
        """Lock serialising interactions for one session."""

    def exists(self, session_id: str) -> bool:
        try:
            self.get(session_id)
        except SessionNotFoundError:
            return False
        return True


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    Records are deep-copied on the way in and out so callers cannot mutate
    stored state without going through `save`.
    """

    def __init__(self):
        self._sessions: Dict[str, InterviewSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def create(self, session: InterviewSession) -> None:
        if session.id in self._sessions:
            raise DuplicateSessionError(session.id)
        self._sessions[session.id] = session.model_copy(deep=True)
        logger.info(f"Session {session.id} created")

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> InterviewSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session.model_copy(deep=True)

    def save(self, session: InterviewSession) -> None:
        if session.id not in self._sessions:
            raise SessionNotFoundError(session.id)
        self._sessions[session.id] = session.model_copy(deep=True)

    def delete(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            return False
        del self._sessions[session_id]
        self._locks.pop(session_id, None)
        logger.info(f"Session {session_id} deleted")
        return True

    def list_sessions(
        self,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
    ) -> List[InterviewSession]:
        sessions = list(self._sessions.values())
        if status:
            sessions = [s for s in sessions if s.status == status]
        sessions.sort(key=lambda s: s.last_activity_at, reverse=True)
        return [s.model_copy(deep=True) for s in sessions[:limit]]

    def lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock
