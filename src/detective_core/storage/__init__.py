"""Session persistence behind a swappable get/put/delete interface."""

from detective_core.storage.session_store import InMemorySessionStore, SessionStore
from detective_core.storage.redis_store import RedisSessionStore

__all__ = [
    "SessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
]
