"""Redis connection factory for the session store.

Supports standalone Redis (development/self-hosted) and Redis Sentinel
(HA deployments). Configuration comes from arguments or REDIS_* environment
variables, so the same code runs in both setups.

Environment Variables:
    REDIS_MODE: "standalone" (default) or "sentinel"
    REDIS_HOST / REDIS_PORT: Standalone address (default: localhost:6379)
    REDIS_DB: Database index (default: 0)
    REDIS_PASSWORD: Password (optional)
    REDIS_SENTINEL_HOSTS: Comma-separated "host:port" pairs (sentinel mode)
    REDIS_MASTER_SET: Sentinel master name (default: "mymaster")
"""

import logging
import os
from typing import List, Optional, Tuple

from redis.asyncio import Redis
from redis.asyncio.sentinel import Sentinel

from detective_core.utils import service_startup_retry

logger = logging.getLogger(__name__)

DEFAULT_SENTINEL_PORT = 26379


def parse_sentinel_hosts(hosts_str: str) -> List[Tuple[str, int]]:
    """Parse comma-separated sentinel host:port string.

    Example:
        >>> parse_sentinel_hosts("sentinel1:26379, sentinel2")
        [('sentinel1', 26379), ('sentinel2', 26379)]
    """
    sentinels = []

    for host_port in hosts_str.split(","):
        host_port = host_port.strip()
        if not host_port:
            continue

        if ":" in host_port:
            host, port_str = host_port.rsplit(":", 1)
            sentinels.append((host, int(port_str)))
        else:
            sentinels.append((host_port, DEFAULT_SENTINEL_PORT))

    return sentinels


@service_startup_retry
async def _verify_redis_connection(client: Redis) -> None:
    """Ping Redis, retrying while the server comes up."""
    await client.ping()
    logger.info("Redis connection verified")


async def get_redis_client(
    mode: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None,
    sentinel_hosts: Optional[str] = None,
    master_set: Optional[str] = None,
    verify: bool = True,
) -> Redis:
    """Create an async Redis client for session storage.

    Args:
        mode: "standalone" or "sentinel" (default from REDIS_MODE)
        host: Standalone host (default from REDIS_HOST)
        port: Standalone port (default from REDIS_PORT)
        db: Database index (default from REDIS_DB)
        password: Password (default from REDIS_PASSWORD)
        sentinel_hosts: Sentinel addresses (default from REDIS_SENTINEL_HOSTS)
        master_set: Sentinel master name (default from REDIS_MASTER_SET)
        verify: Ping the server (with startup retries) before returning

    Returns:
        Async Redis client with decoded string responses

    Raises:
        ValueError: If sentinel mode is selected without sentinel hosts
    """
    mode = (mode or os.getenv("REDIS_MODE", "standalone")).lower()
    db_index = db if db is not None else int(os.getenv("REDIS_DB", "0"))
    password = password or os.getenv("REDIS_PASSWORD")

    if mode == "sentinel":
        sentinel_hosts_str = sentinel_hosts or os.getenv("REDIS_SENTINEL_HOSTS", "")
        master_name = master_set or os.getenv("REDIS_MASTER_SET", "mymaster")

        sentinels = parse_sentinel_hosts(sentinel_hosts_str)
        if not sentinels:
            raise ValueError(
                "REDIS_SENTINEL_HOSTS must list at least one host for sentinel mode"
            )

        logger.info(f"Connecting to Redis Sentinel: master={master_name}, sentinels={sentinels}")

        sentinel_client = Sentinel(
            sentinels,
            sentinel_kwargs={"password": password} if password else {},
            socket_keepalive=True,
        )
        client = sentinel_client.master_for(
            master_name,
            db=db_index,
            password=password,
            decode_responses=True,
        )
    else:
        redis_host = host or os.getenv("REDIS_HOST", "localhost")
        redis_port = port if port is not None else int(os.getenv("REDIS_PORT", "6379"))

        logger.info(f"Connecting to standalone Redis: {redis_host}:{redis_port}/{db_index}")

        client = Redis(
            host=redis_host,
            port=redis_port,
            db=db_index,
            password=password,
            decode_responses=True,
            socket_keepalive=True,
            socket_connect_timeout=5,
        )

    if verify:
        await _verify_redis_connection(client)

    return client
