"""Infrastructure connections (Redis)."""

from detective_core.infrastructure.redis_setup import get_redis_client, parse_sentinel_hosts

__all__ = ["get_redis_client", "parse_sentinel_hosts"]
