"""Engine configuration.

Settings are plain pydantic models with defaults that match the documented
grading and scoring rules. `EngineSettings.from_env()` layers DETECTIVE_*
environment variables on top, the same way the Redis factory reads REDIS_*.

Environment Variables:
    DETECTIVE_HINT_POLICY: "idempotent" (default) or "reject"
    DETECTIVE_SIMILARITY_METRIC: "jaccard" (default) or "cosine"
    DETECTIVE_KEYWORD_MAX_GAP: Extra tokens allowed between keyword words (default: 2)
    DETECTIVE_SESSION_STORE: "memory" (default) or "redis"
    DETECTIVE_SESSION_TTL_SECONDS: Idle expiry for stored sessions (default: none)
    DETECTIVE_SESSION_KEY_PREFIX: Redis key prefix (default: "detective:session:")
    DETECTIVE_CASES_DIR: Directory of case JSON documents
    DETECTIVE_CASE_SERVICE_URL: Base URL of the case library service
    DETECTIVE_CASE_SERVICE_TIMEOUT: Request timeout in seconds (default: 10.0)
    DETECTIVE_CASE_FETCH_ATTEMPTS: Attempts for transient fetch failures (default: 3)
    DETECTIVE_CASE_CACHE_SIZE: Case definitions cached per engine (default: 256)
"""

import logging
import os
from enum import Enum
from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HintReusePolicy(str, Enum):
    """What happens when a player asks for a hint they already consumed"""
    IDEMPOTENT = "idempotent"  # Return the hint again, no extra charge
    REJECT = "reject"          # Raise HintAlreadyUsedError


class SimilarityMetric(str, Enum):
    """How the submission is compared with the rubric diagnosis"""
    JACCARD = "jaccard"  # Content-token set overlap
    COSINE = "cosine"    # Term-frequency vectors


class SessionStoreBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"


class GradingPolicy(BaseModel):
    """Thresholds for turning coverage/similarity into a verdict."""

    correct_coverage: float = Field(default=0.6, ge=0.0, le=1.0)
    correct_similarity: float = Field(default=0.75, ge=0.0, le=1.0)
    partial_coverage: float = Field(default=0.3, ge=0.0, le=1.0)
    partial_similarity: float = Field(default=0.4, ge=0.0, le=1.0)

    keyword_max_gap: int = Field(
        default=2, ge=0,
        description="Extra tokens allowed between consecutive words of a keyword"
    )

    similarity_metric: SimilarityMetric = SimilarityMetric.JACCARD

    @model_validator(mode='after')
    def partial_below_correct(self):
        """PARTIAL thresholds cannot exceed CORRECT thresholds"""
        if self.partial_coverage > self.correct_coverage:
            raise ValueError("partial_coverage must not exceed correct_coverage")
        if self.partial_similarity > self.correct_similarity:
            raise ValueError("partial_similarity must not exceed correct_similarity")
        return self

    class Config:
        frozen = True


class ScoringPolicy(BaseModel):
    """Disclosure penalties and score floor."""

    clue_penalty: float = Field(default=5.0, ge=0.0, description="Points per clue revealed beyond par")
    hint_penalty: float = Field(default=8.0, ge=0.0, description="Points per hint consumed")
    max_penalty: float = Field(default=40.0, ge=0.0, description="Cap on combined disclosure penalty")
    correct_floor: float = Field(default=60.0, ge=0.0, le=100.0, description="Minimum score for a CORRECT verdict")
    par_offset: int = Field(default=1, ge=0, description="par = total clues minus this offset")

    class Config:
        frozen = True


class EngineSettings(BaseModel):
    """Complete engine configuration."""

    grading: GradingPolicy = Field(default_factory=GradingPolicy)
    scoring: ScoringPolicy = Field(default_factory=ScoringPolicy)

    hint_policy: HintReusePolicy = HintReusePolicy.IDEMPOTENT

    session_store: SessionStoreBackend = SessionStoreBackend.MEMORY
    session_ttl_seconds: Optional[int] = Field(default=None, gt=0)
    session_key_prefix: str = "detective:session:"

    cases_dir: Optional[str] = None
    case_service_url: Optional[str] = None
    case_service_timeout: float = Field(default=10.0, gt=0)
    case_fetch_attempts: int = Field(default=3, ge=1)
    case_cache_size: int = Field(default=256, ge=1, description="Case definitions kept in memory per engine")

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Build settings from DETECTIVE_* environment variables.

        Unparseable or out-of-range values are logged and replaced by the
        default.
        """
        grading = GradingPolicy(
            keyword_max_gap=_env("DETECTIVE_KEYWORD_MAX_GAP", _non_negative_int, 2),
            similarity_metric=_env("DETECTIVE_SIMILARITY_METRIC", SimilarityMetric, SimilarityMetric.JACCARD),
        )

        settings = cls(
            grading=grading,
            hint_policy=_env("DETECTIVE_HINT_POLICY", HintReusePolicy, HintReusePolicy.IDEMPOTENT),
            session_store=_env("DETECTIVE_SESSION_STORE", SessionStoreBackend, SessionStoreBackend.MEMORY),
            session_ttl_seconds=_env("DETECTIVE_SESSION_TTL_SECONDS", _positive_int, None),
            session_key_prefix=os.getenv("DETECTIVE_SESSION_KEY_PREFIX", "detective:session:"),
            cases_dir=os.getenv("DETECTIVE_CASES_DIR") or None,
            case_service_url=os.getenv("DETECTIVE_CASE_SERVICE_URL") or None,
            case_service_timeout=_env("DETECTIVE_CASE_SERVICE_TIMEOUT", _positive_float, 10.0),
            case_fetch_attempts=_env("DETECTIVE_CASE_FETCH_ATTEMPTS", _positive_int, 3),
            case_cache_size=_env("DETECTIVE_CASE_CACHE_SIZE", _positive_int, 256),
        )

        logger.info(
            f"EngineSettings loaded: hint_policy={settings.hint_policy.value}, "
            f"similarity={settings.grading.similarity_metric.value}, "
            f"session_store={settings.session_store.value}"
        )
        return settings


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed <= 0:
        raise ValueError(f"expected a positive integer, got {parsed}")
    return parsed


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise ValueError(f"expected a non-negative integer, got {parsed}")
    return parsed


def _positive_float(value: str) -> float:
    parsed = float(value)
    if not parsed > 0:
        raise ValueError(f"expected a positive number, got {parsed}")
    return parsed


def _env(name: str, parse: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = raw.strip()
        return parse(value.lower() if isinstance(default, Enum) else value)
    except ValueError:
        logger.warning(f"Invalid {name} '{raw}', using default {default!r}")
        return default
