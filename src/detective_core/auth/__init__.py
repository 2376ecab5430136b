"""Caller identity for the session API."""

from detective_core.auth.request_context import PlayerContext, get_player_context

__all__ = ["PlayerContext", "get_player_context"]
