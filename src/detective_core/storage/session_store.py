"""Session store abstraction.

The session engine only talks to this interface, so the default in-process
store can be replaced by a database-backed one (see RedisSessionStore)
without touching engine logic. Stores hold values, not live objects: a session
returned by get() is the caller's copy, and changes take effect only after put().
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from detective_core.models.session import Session

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Key-value storage for sessions, keyed by session_id."""

    @abstractmethod
    async def get(self, session_id: str) -> Optional[Session]:
        """Return the stored session, or None if absent."""

    @abstractmethod
    async def put(self, session: Session) -> None:
        """Insert or replace a session."""

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Remove a session. Returns True if something was deleted."""

    async def close(self) -> None:
        """Release connections. Override for stores that hold any."""
        pass


class InMemorySessionStore(SessionStore):
    """Process-local store. Keeps deep copies so callers never share state."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    async def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session is not None else None

    async def put(self, session: Session) -> None:
        self._sessions[session.session_id] = session.model_copy(deep=True)

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
