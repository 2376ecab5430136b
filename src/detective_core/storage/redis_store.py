"""Redis-backed session store.

Sessions are stored as JSON strings under `{key_prefix}{session_id}`. An
optional TTL gives idle sessions an expiry; it is refreshed on every put.
"""

import logging
from typing import Optional

from pydantic import ValidationError
from redis.asyncio import Redis

from detective_core.exceptions import InvalidSessionStateError
from detective_core.models.session import Session
from detective_core.storage.session_store import SessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """SessionStore over an async Redis client.

    Usage:
        client = await get_redis_client()
        store = RedisSessionStore(client, ttl_seconds=86400)
    """

    def __init__(
        self,
        client: Redis,
        key_prefix: str = "detective:session:",
        ttl_seconds: Optional[int] = None,
    ):
        """Initialize store.

        Args:
            client: Async Redis client (decode_responses may be on or off)
            key_prefix: Prefix for session keys
            ttl_seconds: Expiry applied on each write (None = keep forever)
        """
        self.client = client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

        logger.info(
            f"Initialized RedisSessionStore with prefix={key_prefix!r}, ttl={ttl_seconds}"
        )

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    async def get(self, session_id: str) -> Optional[Session]:
        """Load and validate a stored session.

        Raises:
            InvalidSessionStateError: If the stored payload is not a valid session
        """
        raw = await self.client.get(self._key(session_id))
        if raw is None:
            return None

        try:
            return Session.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Corrupt session payload for {session_id}: {e}")
            raise InvalidSessionStateError(f"Stored session {session_id} is corrupt") from e

    async def put(self, session: Session) -> None:
        payload = session.model_dump_json()
        if self.ttl_seconds:
            await self.client.set(self._key(session.session_id), payload, ex=self.ttl_seconds)
        else:
            await self.client.set(self._key(session.session_id), payload)

    async def delete(self, session_id: str) -> bool:
        deleted = await self.client.delete(self._key(session_id))
        return bool(deleted)

    async def close(self) -> None:
        await self.client.aclose()
