"""Shared fixtures: case documents under tests/fixtures/cases and small hand-built cases."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from detective_core.config import EngineSettings, HintReusePolicy
from detective_core.engine.session_engine import SessionEngine
from detective_core.models.case import CaseDefinition, SolutionRubric
from detective_core.repository.memory import InMemoryCaseRepository, parse_case
from detective_core.storage.session_store import InMemorySessionStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CASES_DIR = FIXTURES_DIR / "cases"

WEEKEND_CASE_ID = "weekend-warriors-crisis"
DATABASE_CASE_ID = "database-disappearing-act"


def load_case_document(case_id: str) -> Dict[str, Any]:
    """Raw JSON document of a fixture case."""
    return json.loads((CASES_DIR / f"{case_id}.json").read_text(encoding="utf-8"))


def build_case(
    case_id: str = "test-case",
    clue_count: int = 5,
    hinted: Optional[List[int]] = None,
    keywords: Optional[List[str]] = None,
    diagnosis: str = "Cache TTL mismatch with warming schedule",
) -> CaseDefinition:
    """Minimal valid case with clue ids 1..clue_count.

    Args:
        hinted: Clue ids that carry a hint (default: all)
    """
    hinted = list(range(1, clue_count + 1)) if hinted is None else hinted
    return CaseDefinition(
        id=case_id,
        title=f"Case {case_id}",
        difficulty="mid",
        category="caching",
        crisis={"description": "Something is slow"},
        clues=[
            {
                "id": i,
                "title": f"Clue {i}",
                "type": "logs",
                "content": f"log line {i}",
                "hint": f"hint {i}" if i in hinted else None,
            }
            for i in range(1, clue_count + 1)
        ],
        solution=SolutionRubric(
            diagnosis=diagnosis,
            keywords=keywords if keywords is not None else ["cache warming", "ttl mismatch", "cold cache"],
        ),
    )


@pytest.fixture
def case_repository() -> InMemoryCaseRepository:
    return InMemoryCaseRepository.from_directory(CASES_DIR)


@pytest.fixture
def weekend_case() -> CaseDefinition:
    return parse_case(load_case_document(WEEKEND_CASE_ID))


@pytest.fixture
def database_case() -> CaseDefinition:
    return parse_case(load_case_document(DATABASE_CASE_ID))


@pytest.fixture
def small_case() -> CaseDefinition:
    """Five clues, hints on 1, 2 and 4."""
    return build_case(hinted=[1, 2, 4])


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def engine(case_repository, session_store) -> SessionEngine:
    return SessionEngine(repository=case_repository, store=session_store)


@pytest.fixture
def reject_engine(case_repository) -> SessionEngine:
    """Engine that refuses re-requested hints."""
    return SessionEngine(
        repository=case_repository,
        store=InMemorySessionStore(),
        settings=EngineSettings(hint_policy=HintReusePolicy.REJECT),
    )
