"""Build a SessionEngine from EngineSettings.

Case source:
- DETECTIVE_CASE_SERVICE_URL set → HttpCaseRepository against the case library
- otherwise DETECTIVE_CASES_DIR → InMemoryCaseRepository loaded from JSON files

Session store:
- "redis" → RedisSessionStore over get_redis_client() (REDIS_* variables)
- "memory" → InMemorySessionStore
"""

import logging
from typing import Optional

from detective_core.clients.case_library_client import HttpCaseRepository
from detective_core.config import EngineSettings, SessionStoreBackend
from detective_core.engine.session_engine import SessionEngine
from detective_core.infrastructure.redis_setup import get_redis_client
from detective_core.repository.base import CaseRepository
from detective_core.repository.memory import InMemoryCaseRepository
from detective_core.storage.redis_store import RedisSessionStore
from detective_core.storage.session_store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)


def build_repository(settings: EngineSettings) -> CaseRepository:
    """Pick the case repository for the configured case source.

    Raises:
        ValueError: If neither a case service URL nor a cases directory is configured
    """
    if settings.case_service_url:
        return HttpCaseRepository(
            base_url=settings.case_service_url,
            timeout=settings.case_service_timeout,
            max_attempts=settings.case_fetch_attempts,
        )
    if settings.cases_dir:
        return InMemoryCaseRepository.from_directory(settings.cases_dir)
    raise ValueError(
        "No case source configured: set DETECTIVE_CASE_SERVICE_URL or DETECTIVE_CASES_DIR"
    )


async def build_session_store(settings: EngineSettings) -> SessionStore:
    if settings.session_store == SessionStoreBackend.REDIS:
        client = await get_redis_client()
        return RedisSessionStore(
            client,
            key_prefix=settings.session_key_prefix,
            ttl_seconds=settings.session_ttl_seconds,
        )
    return InMemorySessionStore()


async def create_engine(settings: Optional[EngineSettings] = None) -> SessionEngine:
    """Create a fully wired engine.

    Args:
        settings: Engine settings (default: EngineSettings.from_env())

    Returns:
        SessionEngine bound to the configured repository and store

    Usage:
        engine = await create_engine()
        app = create_app(engine)
    """
    settings = settings or EngineSettings.from_env()

    repository = build_repository(settings)
    store = await build_session_store(settings)

    logger.info(
        f"Engine wired: cases from {settings.case_service_url or settings.cases_dir}, "
        f"sessions in {settings.session_store.value}"
    )
    return SessionEngine(repository=repository, store=store, settings=settings)
