"""Session engine - orchestrates one player's attempt at one case.

Flow:
    start_session → (request_clue | request_hint)* → submit
                                                   ↘ abandon

Concurrency model:
- Every read-modify-write of a session runs under that session's asyncio.Lock,
  so operations on one session are serialized even when requests interleave.
- Sessions never share mutable state. Case definitions are immutable and
  cached by id after the first fetch, so the repository fetch is the only
  suspension point besides the session store.
- A session is loaded from the store as a private copy and written back only
  after the operation succeeds; a failing operation leaves the stored session
  exactly as it was.
"""

import asyncio
import logging
import weakref
from collections import OrderedDict
from typing import Optional

from detective_core.config import EngineSettings
from detective_core.disclosure import DisclosureTracker
from detective_core.engine.scoring import compute_outcome
from detective_core.exceptions import AlreadySubmittedError, SessionNotFoundError
from detective_core.grading import grade, investigation_nudge
from detective_core.models.api_models import ClueView, SessionView
from detective_core.models.case import CaseDefinition, Clue, SolutionRubric
from detective_core.models.session import Outcome, Session, SessionStatus
from detective_core.repository.base import CaseRepository
from detective_core.storage.session_store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)


class SessionEngine:
    """Caller-facing API of the detective engine.

    Usage:
        engine = SessionEngine(repository=InMemoryCaseRepository.from_directory("cases/"))
        session = await engine.start_session("weekend-warriors-crisis")
        clue = await engine.request_clue(session.session_id)
        hint = await engine.request_hint(session.session_id, clue.id)
        outcome = await engine.submit(session.session_id, "cache warming skips weekends")
    """

    def __init__(
        self,
        repository: CaseRepository,
        store: Optional[SessionStore] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.repository = repository
        self.store = store or InMemorySessionStore()
        self.settings = settings or EngineSettings()

        # Least recently used cases are evicted past settings.case_cache_size
        self._case_cache: "OrderedDict[str, CaseDefinition]" = OrderedDict()
        # Locks live as long as some operation holds or awaits them
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

        logger.info(
            f"SessionEngine initialized: repository={type(repository).__name__}, "
            f"store={type(self.store).__name__}, hint_policy={self.settings.hint_policy.value}"
        )

    # ============================================================
    # Internals
    # ============================================================
    def _lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def _get_case(self, case_id: str, correlation_id: Optional[str] = None) -> CaseDefinition:
        case = self._case_cache.get(case_id)
        if case is not None:
            self._case_cache.move_to_end(case_id)
            return case

        case = await self.repository.get_case(case_id, correlation_id=correlation_id)
        self._case_cache[case_id] = case
        while len(self._case_cache) > self.settings.case_cache_size:
            self._case_cache.popitem(last=False)
        return case

    async def _load(self, session_id: str) -> Session:
        session = await self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _tracker(self, case: CaseDefinition, session: Session) -> DisclosureTracker:
        return DisclosureTracker(case, session, hint_policy=self.settings.hint_policy)

    # ============================================================
    # Operations
    # ============================================================
    async def start_session(
        self,
        case_id: str,
        player_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Session:
        """Create a session for a case and move it to IN_PROGRESS.

        `correlation_id` is forwarded to the case repository on a cache miss.

        Raises:
            CaseNotFoundError: Unknown case id (propagated from the repository)
        """
        case = await self._get_case(case_id, correlation_id=correlation_id)

        session = Session(case_id=case.id, player_id=player_id)
        self._tracker(case, session).start()
        await self.store.put(session)

        logger.info(
            f"Session {session.session_id} started for case {case.id} "
            f"({case.total_clues} clues, player={player_id or 'anonymous'})"
        )
        return session

    async def request_clue(self, session_id: str) -> Clue:
        """Reveal the next clue in authored order.

        Raises:
            SessionNotFoundError: Unknown session
            AlreadySubmittedError: Session already graded
            AllCluesRevealedError: Every clue is already revealed
        """
        async with self._lock(session_id):
            session = await self._load(session_id)
            case = await self._get_case(session.case_id)

            clue = self._tracker(case, session).reveal_next()
            await self.store.put(session)

        logger.debug(f"Session {session_id}: clue {clue.id} revealed")
        return clue

    async def request_hint(self, session_id: str, clue_id: int) -> str:
        """Return the hint for a revealed clue, charging it on first use.

        Raises:
            SessionNotFoundError: Unknown session
            AlreadySubmittedError: Session already graded
            HintUnavailableError: Clue not revealed or without hint
            HintAlreadyUsedError: Hint re-requested under the reject policy
        """
        async with self._lock(session_id):
            session = await self._load(session_id)
            case = await self._get_case(session.case_id)

            hints_before = session.hints_used
            hint = self._tracker(case, session).reveal_hint(clue_id)
            if session.hints_used != hints_before:
                await self.store.put(session)

        return hint

    async def submit(self, session_id: str, guess_text: str) -> Outcome:
        """Grade the player's single diagnosis and close the session.

        Submission is single-use: later calls raise AlreadySubmittedError and
        the stored outcome stays unchanged.

        Raises:
            SessionNotFoundError: Unknown session
            AlreadySubmittedError: Session already graded
        """
        async with self._lock(session_id):
            session = await self._load(session_id)
            if session.status == SessionStatus.SUBMITTED:
                logger.warning(f"Rejected re-submission for session {session_id}")
                raise AlreadySubmittedError(session_id)

            case = await self._get_case(session.case_id)
            tracker = self._tracker(case, session)
            tracker.ensure_active()

            grading = grade(guess_text, case.solution, self.settings.grading)
            outcome = compute_outcome(
                case,
                session,
                grading,
                guess_text=guess_text if isinstance(guess_text, str) else "",
                policy=self.settings.scoring,
            )

            tracker.mark_submitted(outcome)
            await self.store.put(session)

        logger.info(
            f"Session {session_id} submitted: verdict={outcome.verdict.value}, "
            f"coverage={grading.coverage_ratio:.2f}, penalty={outcome.disclosure_penalty:.0f}, "
            f"score={outcome.final_score:.2f}"
        )
        return outcome

    async def get_session(self, session_id: str) -> Session:
        """Return a copy of the stored session.

        Raises:
            SessionNotFoundError: Unknown session
        """
        return await self._load(session_id)

    async def get_view(self, session_id: str) -> SessionView:
        """Presentation view: case header, revealed clues, paid-for hints.

        Raises:
            SessionNotFoundError: Unknown session
        """
        session = await self._load(session_id)
        case = await self._get_case(session.case_id)
        tracker = self._tracker(case, session)

        available_hints = tracker.available_hints
        next_step = None
        if session.status == SessionStatus.IN_PROGRESS:
            next_step = investigation_nudge(session.clues_revealed, case.total_clues, len(available_hints))

        return SessionView(
            session_id=session.session_id,
            case_id=case.id,
            status=session.status,
            title=case.title,
            subtitle=case.subtitle,
            difficulty=case.difficulty,
            category=case.category,
            crisis=case.crisis,
            symptoms=case.symptoms,
            clues=[
                ClueView.from_clue(clue, hint_used=session.disclosure.hint_used(clue.id))
                for clue in tracker.revealed_clues
            ],
            total_clues=case.total_clues,
            clues_revealed=session.clues_revealed,
            hints_used=session.hints_used,
            available_hint_clue_ids=available_hints,
            next_step=next_step,
            started_at=session.started_at,
            outcome=session.outcome,
        )

    async def abandon(self, session_id: str) -> SolutionRubric:
        """Give up on a case: delete the session and reveal the solution.

        Raises:
            SessionNotFoundError: Unknown session
            AlreadySubmittedError: Session already graded (its outcome holds the solution)
        """
        async with self._lock(session_id):
            session = await self._load(session_id)
            if session.status == SessionStatus.SUBMITTED:
                raise AlreadySubmittedError(session_id)

            case = await self._get_case(session.case_id)
            await self.store.delete(session_id)

        logger.info(
            f"Session {session_id} abandoned after {session.clues_revealed}/{case.total_clues} clues"
        )
        return case.solution
