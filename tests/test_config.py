"""Tests for EngineSettings and environment loading."""

import pytest
from pydantic import ValidationError

from detective_core.config import (
    EngineSettings,
    HintReusePolicy,
    ScoringPolicy,
    SessionStoreBackend,
    SimilarityMetric,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "DETECTIVE_HINT_POLICY",
        "DETECTIVE_SIMILARITY_METRIC",
        "DETECTIVE_KEYWORD_MAX_GAP",
        "DETECTIVE_SESSION_STORE",
        "DETECTIVE_SESSION_TTL_SECONDS",
        "DETECTIVE_SESSION_KEY_PREFIX",
        "DETECTIVE_CASES_DIR",
        "DETECTIVE_CASE_SERVICE_URL",
        "DETECTIVE_CASE_SERVICE_TIMEOUT",
        "DETECTIVE_CASE_FETCH_ATTEMPTS",
        "DETECTIVE_CASE_CACHE_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    """Documented default policy"""

    def test_defaults(self):
        settings = EngineSettings()
        assert settings.hint_policy == HintReusePolicy.IDEMPOTENT
        assert settings.grading.correct_coverage == 0.6
        assert settings.grading.correct_similarity == 0.75
        assert settings.grading.partial_coverage == 0.3
        assert settings.grading.partial_similarity == 0.4
        assert settings.grading.keyword_max_gap == 2
        assert settings.scoring == ScoringPolicy()
        assert settings.scoring.max_penalty == 40.0
        assert settings.scoring.correct_floor == 60.0
        assert settings.session_store == SessionStoreBackend.MEMORY

    def test_policies_frozen(self):
        with pytest.raises(ValidationError):
            EngineSettings().scoring.clue_penalty = 1.0


class TestFromEnv:
    """DETECTIVE_* environment variables"""

    def test_empty_env_gives_defaults(self, clean_env):
        assert EngineSettings.from_env() == EngineSettings()

    def test_reads_values(self, clean_env):
        clean_env.setenv("DETECTIVE_HINT_POLICY", "REJECT")
        clean_env.setenv("DETECTIVE_SIMILARITY_METRIC", "cosine")
        clean_env.setenv("DETECTIVE_KEYWORD_MAX_GAP", "3")
        clean_env.setenv("DETECTIVE_SESSION_STORE", "redis")
        clean_env.setenv("DETECTIVE_SESSION_TTL_SECONDS", "3600")
        clean_env.setenv("DETECTIVE_CASES_DIR", "/srv/cases")
        clean_env.setenv("DETECTIVE_CASE_SERVICE_URL", "http://case-library:8000")
        clean_env.setenv("DETECTIVE_CASE_FETCH_ATTEMPTS", "5")

        settings = EngineSettings.from_env()

        assert settings.hint_policy == HintReusePolicy.REJECT
        assert settings.grading.similarity_metric == SimilarityMetric.COSINE
        assert settings.grading.keyword_max_gap == 3
        assert settings.session_store == SessionStoreBackend.REDIS
        assert settings.session_ttl_seconds == 3600
        assert settings.cases_dir == "/srv/cases"
        assert settings.case_service_url == "http://case-library:8000"
        assert settings.case_fetch_attempts == 5

    @pytest.mark.parametrize("name,value", [
        ("DETECTIVE_HINT_POLICY", "sometimes"),
        ("DETECTIVE_KEYWORD_MAX_GAP", "two"),
        ("DETECTIVE_SESSION_TTL_SECONDS", "-5"),
        ("DETECTIVE_CASE_FETCH_ATTEMPTS", "0"),
        ("DETECTIVE_KEYWORD_MAX_GAP", "-1"),
        ("DETECTIVE_CASE_SERVICE_TIMEOUT", "0"),
        ("DETECTIVE_CASE_SERVICE_TIMEOUT", "nan"),
        ("DETECTIVE_CASE_CACHE_SIZE", "0"),
    ])
    def test_invalid_values_fall_back(self, clean_env, name, value):
        clean_env.setenv(name, value)
        assert EngineSettings.from_env() == EngineSettings()
