"""Player context extraction from API Gateway headers.

The gateway validates user JWTs and forwards the player identity as X-User-*
headers. The detective API also serves anonymous play, so unlike service
endpoints a missing X-User-ID is not an error here.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass
class PlayerContext:
    """Caller identity for session endpoints.

    Attributes:
        player_id: Player ID from X-User-ID header (None for anonymous play)
        correlation_id: Optional correlation ID for request tracing
    """

    player_id: Optional[str] = None
    correlation_id: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.player_id is None

    def may_access(self, owner_id: Optional[str]) -> bool:
        """Sessions started by a player are visible to that player only."""
        return owner_id is None or owner_id == self.player_id


def get_player_context(request: Request) -> PlayerContext:
    """Extract player context from gateway headers.

    Args:
        request: FastAPI request object

    Returns:
        PlayerContext (anonymous when X-User-ID is absent)
    """
    player_id = (request.headers.get("X-User-ID") or "").strip() or None
    correlation_id = request.headers.get("X-Correlation-ID")

    if player_id is None:
        logger.debug("No X-User-ID header, treating request as anonymous play")

    return PlayerContext(player_id=player_id, correlation_id=correlation_id)
