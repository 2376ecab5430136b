"""Tests for the session engine.

Covers:
- Session lifecycle through the caller-facing API
- Documented scoring scenarios end to end
- Single-use submission and abandon
- Failed operations leave the stored session untouched
- Serialized concurrent operations on one session
"""

import asyncio
from typing import Optional

import pytest

from detective_core.config import EngineSettings
from detective_core.engine import SessionEngine
from detective_core.exceptions import (
    AllCluesRevealedError,
    AlreadySubmittedError,
    CaseNotFoundError,
    HintAlreadyUsedError,
    HintUnavailableError,
    SessionNotFoundError,
)
from detective_core.models.case import CaseDefinition
from detective_core.models.session import SessionStatus, Verdict
from detective_core.repository.base import CaseRepository
from detective_core.repository.memory import InMemoryCaseRepository
from tests.conftest import DATABASE_CASE_ID, WEEKEND_CASE_ID


class CountingRepository(CaseRepository):
    """Wraps a repository and records fetches."""

    def __init__(self, inner: CaseRepository):
        self.inner = inner
        self.calls = 0
        self.correlation_ids = []

    async def get_case(self, case_id: str, correlation_id: Optional[str] = None) -> CaseDefinition:
        self.calls += 1
        self.correlation_ids.append(correlation_id)
        return await self.inner.get_case(case_id)


# ============================================================
# Lifecycle
# ============================================================

class TestStartSession:
    """Session creation"""

    @pytest.mark.asyncio
    async def test_starts_in_progress(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID, player_id="player-1")

        assert session.status == SessionStatus.IN_PROGRESS
        assert session.case_id == WEEKEND_CASE_ID
        assert session.player_id == "player-1"
        assert session.clues_revealed == 0

        stored = await engine.get_session(session.session_id)
        assert stored == session

    @pytest.mark.asyncio
    async def test_unknown_case(self, engine, session_store):
        with pytest.raises(CaseNotFoundError):
            await engine.start_session("no-such-case")
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_unknown_session(self, engine):
        with pytest.raises(SessionNotFoundError):
            await engine.request_clue("sess_000000000000")
        with pytest.raises(SessionNotFoundError):
            await engine.get_view("sess_000000000000")

    @pytest.mark.asyncio
    async def test_case_fetched_once(self, case_repository):
        repository = CountingRepository(case_repository)
        engine = SessionEngine(repository=repository)

        first = await engine.start_session(WEEKEND_CASE_ID)
        await engine.start_session(WEEKEND_CASE_ID)
        await engine.request_clue(first.session_id)

        assert repository.calls == 1

    @pytest.mark.asyncio
    async def test_correlation_id_forwarded_to_repository(self, case_repository):
        repository = CountingRepository(case_repository)
        engine = SessionEngine(repository=repository)

        await engine.start_session(WEEKEND_CASE_ID, correlation_id="corr-42")

        assert repository.correlation_ids == ["corr-42"]

    @pytest.mark.asyncio
    async def test_case_cache_is_bounded(self, case_repository):
        repository = CountingRepository(case_repository)
        engine = SessionEngine(repository=repository, settings=EngineSettings(case_cache_size=1))

        await engine.start_session(WEEKEND_CASE_ID)
        await engine.start_session(DATABASE_CASE_ID)
        await engine.start_session(WEEKEND_CASE_ID)

        assert repository.calls == 3


class TestDisclosureThroughEngine:
    """Clue and hint requests"""

    @pytest.mark.asyncio
    async def test_clues_in_order(self, engine, weekend_case):
        session = await engine.start_session(WEEKEND_CASE_ID)

        ids = [(await engine.request_clue(session.session_id)).id for _ in range(weekend_case.total_clues)]
        assert ids == list(weekend_case.clue_ids)

        with pytest.raises(AllCluesRevealedError):
            await engine.request_clue(session.session_id)

    @pytest.mark.asyncio
    async def test_hint_charged_once(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        await engine.request_clue(session.session_id)

        hint = await engine.request_hint(session.session_id, 1)
        again = await engine.request_hint(session.session_id, 1)

        assert hint == again == "What happens to cache hit ratio on weekends?"
        assert (await engine.get_session(session.session_id)).hints_used == 1

    @pytest.mark.asyncio
    async def test_reject_policy(self, reject_engine):
        session = await reject_engine.start_session(WEEKEND_CASE_ID)
        await reject_engine.request_clue(session.session_id)
        await reject_engine.request_hint(session.session_id, 1)

        with pytest.raises(HintAlreadyUsedError):
            await reject_engine.request_hint(session.session_id, 1)

    @pytest.mark.asyncio
    async def test_failed_hint_leaves_session_unchanged(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        await engine.request_clue(session.session_id)
        before = await engine.get_session(session.session_id)

        with pytest.raises(HintUnavailableError):
            await engine.request_hint(session.session_id, 3)

        assert await engine.get_session(session.session_id) == before

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, engine):
        first = await engine.start_session(WEEKEND_CASE_ID)
        second = await engine.start_session(WEEKEND_CASE_ID)

        await engine.request_clue(first.session_id)
        await engine.request_clue(first.session_id)

        assert (await engine.get_session(first.session_id)).clues_revealed == 2
        assert (await engine.get_session(second.session_id)).clues_revealed == 0

    @pytest.mark.asyncio
    async def test_concurrent_clue_requests_serialized(self, engine, weekend_case):
        session = await engine.start_session(WEEKEND_CASE_ID)

        results = await asyncio.gather(
            *(engine.request_clue(session.session_id) for _ in range(10)),
            return_exceptions=True,
        )

        clues = [r for r in results if not isinstance(r, Exception)]
        errors = [r for r in results if isinstance(r, Exception)]
        assert sorted(clue.id for clue in clues) == list(weekend_case.clue_ids)
        assert len(errors) == 10 - weekend_case.total_clues
        assert all(isinstance(e, AllCluesRevealedError) for e in errors)

        stored = await engine.get_session(session.session_id)
        assert stored.disclosure.revealed_clue_ids == list(weekend_case.clue_ids)


# ============================================================
# Submission
# ============================================================

class TestSubmit:
    """Grading and scoring through the engine"""

    @pytest.mark.asyncio
    async def test_two_clues_one_hint_correct_guess(self, engine):
        session = await engine.start_session(DATABASE_CASE_ID)
        await engine.request_clue(session.session_id)
        await engine.request_clue(session.session_id)
        await engine.request_hint(session.session_id, 1)

        outcome = await engine.submit(
            session.session_id,
            "connection pool exhaustion because unreleased connections leak and nobody calls release",
        )

        assert outcome.verdict == Verdict.CORRECT
        assert outcome.grading.coverage_ratio == 1.0
        assert outcome.disclosure_penalty == 8.0
        assert outcome.final_score == 92.0

    @pytest.mark.asyncio
    async def test_full_disclosure_borderline_guess_floored(self, engine, database_case):
        session = await engine.start_session(DATABASE_CASE_ID)
        for _ in database_case.clue_ids:
            await engine.request_clue(session.session_id)
        for clue_id in database_case.clue_ids[:4]:
            await engine.request_hint(session.session_id, clue_id)

        outcome = await engine.submit(session.session_id, "too many connections, the pool is exhausted")

        assert outcome.grading.coverage_ratio == pytest.approx(0.6)
        assert outcome.verdict == Verdict.CORRECT
        assert outcome.disclosure_penalty == 37.0
        assert outcome.final_score == 60.0
        assert outcome.floor_applied

    @pytest.mark.asyncio
    async def test_wrong_guess_scores_zero(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        outcome = await engine.submit(session.session_id, "the database is slow")

        assert outcome.verdict == Verdict.INCORRECT
        assert outcome.final_score == 0.0
        assert outcome.solution.diagnosis.startswith("Cache TTL")

    @pytest.mark.asyncio
    async def test_submit_is_single_use(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        first = await engine.submit(session.session_id, "the database is slow")

        with pytest.raises(AlreadySubmittedError):
            await engine.submit(session.session_id, "cold cache because cache warming skips the weekend")

        stored = await engine.get_session(session.session_id)
        assert stored.status == SessionStatus.SUBMITTED
        assert stored.outcome == first

    @pytest.mark.asyncio
    async def test_concurrent_submissions_grade_once(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)

        results = await asyncio.gather(
            engine.submit(session.session_id, "cold cache on the weekend"),
            engine.submit(session.session_id, "the database is slow"),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, AlreadySubmittedError)) == 1

    @pytest.mark.asyncio
    async def test_no_disclosure_after_submit(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        await engine.request_clue(session.session_id)
        await engine.submit(session.session_id, "no idea")

        with pytest.raises(AlreadySubmittedError):
            await engine.request_clue(session.session_id)
        with pytest.raises(AlreadySubmittedError):
            await engine.request_hint(session.session_id, 1)

    @pytest.mark.asyncio
    async def test_empty_guess_is_graded_not_rejected(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        outcome = await engine.submit(session.session_id, "   ")
        assert outcome.verdict == Verdict.INCORRECT
        assert outcome.final_score == 0.0


# ============================================================
# View & abandon
# ============================================================

class TestViewAndAbandon:
    """Presentation view and giving up"""

    @pytest.mark.asyncio
    async def test_view_hides_unpaid_hints(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        for _ in range(3):
            await engine.request_clue(session.session_id)
        await engine.request_hint(session.session_id, 1)

        view = await engine.get_view(session.session_id)

        assert view.title == "The Weekend Warriors Crisis"
        assert [clue.id for clue in view.clues] == [1, 2, 3]
        assert view.clues[0].hint == "What happens to cache hit ratio on weekends?"
        assert view.clues[2].has_hint and view.clues[2].hint is None
        assert view.available_hint_clue_ids == (3,)
        assert view.clues_revealed == 3
        assert view.total_clues == 6
        assert view.next_step.startswith("There are 3 more clues")
        assert view.outcome is None

    @pytest.mark.asyncio
    async def test_view_after_submit(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        await engine.submit(session.session_id, "cold cache")

        view = await engine.get_view(session.session_id)
        assert view.status == SessionStatus.SUBMITTED
        assert view.outcome is not None
        assert view.next_step is None

    @pytest.mark.asyncio
    async def test_abandon_reveals_solution_and_deletes(self, engine, weekend_case):
        session = await engine.start_session(WEEKEND_CASE_ID)
        await engine.request_clue(session.session_id)

        solution = await engine.abandon(session.session_id)

        assert solution == weekend_case.solution
        with pytest.raises(SessionNotFoundError):
            await engine.get_session(session.session_id)

    @pytest.mark.asyncio
    async def test_abandon_after_submit_rejected(self, engine):
        session = await engine.start_session(WEEKEND_CASE_ID)
        await engine.submit(session.session_id, "cold cache")

        with pytest.raises(AlreadySubmittedError):
            await engine.abandon(session.session_id)
        assert (await engine.get_session(session.session_id)).outcome is not None

    @pytest.mark.asyncio
    async def test_works_with_hand_built_cases(self, small_case):
        engine = SessionEngine(repository=InMemoryCaseRepository([small_case]))
        session = await engine.start_session(small_case.id)
        await engine.request_clue(session.session_id)

        outcome = await engine.submit(
            session.session_id, "cache TTL mismatch with warming schedule leaves a cold cache"
        )
        assert outcome.verdict == Verdict.CORRECT
        assert outcome.final_score == 100.0
