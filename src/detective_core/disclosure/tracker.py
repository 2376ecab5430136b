"""Disclosure tracker - per-session clue/hint state machine.

State machine:
  NOT_STARTED → IN_PROGRESS → SUBMITTED (terminal)

Rules:
- Clues are revealed strictly in authored order (sequential gating), so the
  revealed ids are always a prefix of the case's clue order.
- A hint can be taken only for a clue that is already revealed and has one.
- Disclosure is append-only; nothing is ever hidden again.
- A failing operation leaves the session untouched.

The tracker mutates the Session it wraps; persisting it is the caller's job.
"""

import logging
from typing import Optional, Tuple

from detective_core.config import HintReusePolicy
from detective_core.exceptions import (
    AllCluesRevealedError,
    AlreadySubmittedError,
    HintAlreadyUsedError,
    HintUnavailableError,
    InvalidSessionStateError,
)
from detective_core.models.case import CaseDefinition, Clue
from detective_core.models.session import (
    Outcome,
    Session,
    SessionStatus,
    SessionStatusTransition,
    is_valid_transition,
)

logger = logging.getLogger(__name__)


class DisclosureTracker:
    """Governs which clues and hints a session may see.

    Usage:
        tracker = DisclosureTracker(case, session)
        tracker.start()
        clue = tracker.reveal_next()
        hint = tracker.reveal_hint(clue.id)
    """

    def __init__(
        self,
        case: CaseDefinition,
        session: Session,
        hint_policy: HintReusePolicy = HintReusePolicy.IDEMPOTENT,
    ):
        """Bind a session to its case.

        Raises:
            InvalidSessionStateError: If the session belongs to another case or
                its revealed clues are not a prefix of the authored order
        """
        if session.case_id != case.id:
            raise InvalidSessionStateError(
                f"Session {session.session_id} is for case {session.case_id}, not {case.id}"
            )

        revealed = tuple(session.disclosure.revealed_clue_ids)
        if revealed != case.clue_ids[:len(revealed)]:
            raise InvalidSessionStateError(
                f"Session {session.session_id} revealed clues {list(revealed)} out of authored order"
            )

        self.case = case
        self.session = session
        self.hint_policy = hint_policy

    # ============================================================
    # Lifecycle
    # ============================================================
    def start(self) -> None:
        """NOT_STARTED → IN_PROGRESS"""
        self._transition(SessionStatus.IN_PROGRESS, reason="session started")

    def mark_submitted(self, outcome: Outcome) -> None:
        """IN_PROGRESS → SUBMITTED, storing the terminal outcome."""
        self.ensure_active()
        self._transition(SessionStatus.SUBMITTED, reason="diagnosis submitted")
        self.session.outcome = outcome
        self.session.submitted_at = outcome.submitted_at

    def _transition(self, to_status: SessionStatus, reason: str) -> None:
        from_status = self.session.status
        if from_status == SessionStatus.SUBMITTED:
            raise AlreadySubmittedError(self.session.session_id)
        if not is_valid_transition(from_status, to_status):
            raise InvalidSessionStateError(
                f"Invalid transition for session {self.session.session_id}: "
                f"{from_status.value} → {to_status.value}"
            )

        self.session.status_history.append(
            SessionStatusTransition(from_status=from_status, to_status=to_status, reason=reason)
        )
        self.session.status = to_status
        self.session.touch()

        logger.debug(f"[Disclosure] {self.session.session_id}: {from_status.value} → {to_status.value}")

    def ensure_active(self) -> None:
        """Raise unless the session is IN_PROGRESS."""
        status = self.session.status
        if status == SessionStatus.SUBMITTED:
            raise AlreadySubmittedError(self.session.session_id)
        if status != SessionStatus.IN_PROGRESS:
            raise InvalidSessionStateError(
                f"Session {self.session.session_id} is {status.value}, expected in_progress"
            )

    # ============================================================
    # Clues
    # ============================================================
    def reveal_next(self) -> Clue:
        """Reveal the next unrevealed clue in authored order.

        Raises:
            AlreadySubmittedError: Session already graded
            InvalidSessionStateError: Session not started
            AllCluesRevealedError: Nothing left to reveal
        """
        self.ensure_active()

        clue = self.next_clue
        if clue is None:
            raise AllCluesRevealedError(self.case.id, self.case.total_clues)

        self.session.disclosure.revealed_clue_ids.append(clue.id)
        self.session.touch()

        logger.debug(
            f"[Disclosure] {self.session.session_id}: revealed clue {clue.id} "
            f"({self.session.clues_revealed}/{self.case.total_clues})"
        )
        return clue

    @property
    def next_clue(self) -> Optional[Clue]:
        """Next clue in authored order, None once everything is revealed"""
        position = self.session.clues_revealed
        if position >= self.case.total_clues:
            return None
        return self.case.clues[position]

    @property
    def revealed_clues(self) -> Tuple[Clue, ...]:
        return self.case.clues[:self.session.clues_revealed]

    @property
    def remaining_clues(self) -> int:
        return self.case.total_clues - self.session.clues_revealed

    # ============================================================
    # Hints
    # ============================================================
    def reveal_hint(self, clue_id: int) -> str:
        """Return the hint for a revealed clue, charging it on first use.

        Re-requesting a consumed hint follows the hint policy: IDEMPOTENT returns
        it again without charging, REJECT raises HintAlreadyUsedError.

        Raises:
            AlreadySubmittedError: Session already graded
            InvalidSessionStateError: Session not started
            HintUnavailableError: Clue unknown, not revealed yet, or without hint
            HintAlreadyUsedError: Hint consumed and policy is REJECT
        """
        self.ensure_active()

        clue = self.case.get_clue(clue_id)
        if clue is None:
            raise HintUnavailableError(clue_id, f"case {self.case.id} has no such clue")
        if not self.session.disclosure.is_revealed(clue_id):
            raise HintUnavailableError(clue_id, "clue has not been revealed yet")
        if not clue.has_hint:
            raise HintUnavailableError(clue_id, "clue has no hint")

        if self.session.disclosure.hint_used(clue_id):
            if self.hint_policy == HintReusePolicy.REJECT:
                raise HintAlreadyUsedError(clue_id)
            return clue.hint

        self.session.disclosure.used_hint_clue_ids.append(clue_id)
        self.session.hints_used += 1
        self.session.touch()

        logger.debug(
            f"[Disclosure] {self.session.session_id}: hint for clue {clue_id} used "
            f"(total hints: {self.session.hints_used})"
        )
        return clue.hint

    @property
    def available_hints(self) -> Tuple[int, ...]:
        """Ids of revealed clues whose hint has not been used yet"""
        disclosure = self.session.disclosure
        return tuple(
            clue.id for clue in self.revealed_clues
            if clue.has_hint and not disclosure.hint_used(clue.id)
        )
