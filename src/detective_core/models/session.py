"""Session models - one player's attempt at one case.

Key Models:
- SessionStatus: Lifecycle (NOT_STARTED → IN_PROGRESS → SUBMITTED)
- DisclosureState: Which clues and hints have been revealed so far
- GradingResult: Keyword coverage, diagnosis similarity and verdict for a guess
- Outcome: Final score after disclosure penalties (terminal, at most one)
- Session: Plain serializable record owned by the session engine

Disclosure is append-only: revealed clues and consumed hints are never
removed, which keeps penalty scoring monotonic.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from detective_core.models.case import SolutionRubric


# ============================================================
# Status & Lifecycle
# ============================================================

class SessionStatus(str, Enum):
    """
    Session lifecycle status.

    Lifecycle Flow:
      NOT_STARTED → IN_PROGRESS → SUBMITTED (terminal)

    Abandoned sessions are deleted from the store rather than given a status.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"

    @property
    def is_terminal(self) -> bool:
        """Check if this status is terminal"""
        return self == SessionStatus.SUBMITTED

    @property
    def is_active(self) -> bool:
        """Check if clues and hints can be requested"""
        return self == SessionStatus.IN_PROGRESS


def is_valid_transition(from_status: SessionStatus, to_status: SessionStatus) -> bool:
    """
    Validate status transition.

    Valid Transitions:
    - NOT_STARTED → IN_PROGRESS
    - IN_PROGRESS → SUBMITTED

    Invalid:
    - SUBMITTED → * (terminal)
    - Any backward or skipping transition
    """
    valid_transitions = {
        SessionStatus.NOT_STARTED: [SessionStatus.IN_PROGRESS],
        SessionStatus.IN_PROGRESS: [SessionStatus.SUBMITTED],
        SessionStatus.SUBMITTED: [],  # Terminal
    }

    return to_status in valid_transitions.get(from_status, [])


class SessionStatusTransition(BaseModel):
    """Record of one status change (audit trail)."""

    from_status: SessionStatus
    to_status: SessionStatus

    triggered_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When transition occurred"
    )

    reason: str = Field(default="", max_length=200)

    @model_validator(mode='after')
    def validate_transition(self):
        """Ensure transition is valid"""
        if not is_valid_transition(self.from_status, self.to_status):
            raise ValueError(f"Invalid transition: {self.from_status.value} → {self.to_status.value}")
        return self

    class Config:
        frozen = True


# ============================================================
# Disclosure
# ============================================================

class DisclosureState(BaseModel):
    """
    Clues and hints revealed in a session.

    revealed_clue_ids is insertion ordered and, because of sequential gating,
    always a prefix of the case's authored clue order. A hint is identified by
    the id of the clue it belongs to.
    """

    revealed_clue_ids: List[int] = Field(default_factory=list)
    used_hint_clue_ids: List[int] = Field(default_factory=list)

    @property
    def revealed_count(self) -> int:
        return len(self.revealed_clue_ids)

    def is_revealed(self, clue_id: int) -> bool:
        return clue_id in self.revealed_clue_ids

    def hint_used(self, clue_id: int) -> bool:
        return clue_id in self.used_hint_clue_ids

    @model_validator(mode='after')
    def no_duplicates(self):
        """A clue or hint is revealed at most once"""
        if len(set(self.revealed_clue_ids)) != len(self.revealed_clue_ids):
            raise ValueError("revealed_clue_ids must not contain duplicates")
        if len(set(self.used_hint_clue_ids)) != len(self.used_hint_clue_ids):
            raise ValueError("used_hint_clue_ids must not contain duplicates")
        if not set(self.used_hint_clue_ids) <= set(self.revealed_clue_ids):
            raise ValueError("hints can only be used for revealed clues")
        return self


# ============================================================
# Grading
# ============================================================

class Verdict(str, Enum):
    """Categorical grading outcome before penalties"""
    CORRECT = "correct"
    PARTIAL = "partial"
    INCORRECT = "incorrect"


class GradingResult(BaseModel):
    """Result of grading one free-text diagnosis against a rubric."""

    matched_keywords: Tuple[str, ...] = Field(
        default=(),
        description="Rubric keywords found in the submission, in rubric order"
    )

    total_keywords: int = Field(ge=0)

    coverage_ratio: float = Field(
        ge=0.0, le=1.0,
        description="matched / total keywords (0.0 when the rubric has none)"
    )

    diagnosis_similarity: float = Field(
        ge=0.0, le=1.0,
        description="Token similarity between submission and rubric diagnosis"
    )

    verdict: Verdict

    feedback: str = Field(default="", description="Player-facing explanation of the verdict")

    @property
    def is_correct(self) -> bool:
        return self.verdict == Verdict.CORRECT

    @property
    def is_partial(self) -> bool:
        return self.verdict == Verdict.PARTIAL

    class Config:
        frozen = True


class Outcome(BaseModel):
    """
    Terminal result of a session.

    final_score = clamp(coverage * 100 - disclosure_penalty, 0, 100), with
    CORRECT verdicts floored at the configured minimum.
    """

    final_score: float = Field(ge=0.0, le=100.0)
    verdict: Verdict
    grading: GradingResult

    guess_text: str = Field(default="", description="Submitted diagnosis as typed")

    # Penalty breakdown
    par_clues: int = Field(ge=0, description="Clues that can be revealed without penalty")
    clues_revealed: int = Field(ge=0)
    hints_used: int = Field(ge=0)
    clue_penalty: float = Field(ge=0.0)
    hint_penalty: float = Field(ge=0.0)
    disclosure_penalty: float = Field(ge=0.0, description="Combined penalty after the cap")
    floor_applied: bool = Field(default=False, description="CORRECT floor raised the score")

    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    time_taken_seconds: float = Field(default=0.0, ge=0.0)

    solution: SolutionRubric = Field(description="Full solution, revealed once the session is graded")

    @property
    def solved(self) -> bool:
        return self.verdict == Verdict.CORRECT

    class Config:
        frozen = True


# ============================================================
# Session
# ============================================================

class Session(BaseModel):
    """
    One player's attempt at one case.

    Owned exclusively by the session engine. Held in a SessionStore as plain
    JSON (model_dump(mode="json") / model_validate_json).
    """

    session_id: str = Field(
        default_factory=lambda: f"sess_{uuid4().hex[:12]}",
        description="Unique session identifier",
        pattern=r"^sess_[a-f0-9]{12}$"
    )

    case_id: str = Field(min_length=1, description="Case being investigated")

    player_id: Optional[str] = Field(default=None, max_length=255)

    status: SessionStatus = Field(default=SessionStatus.NOT_STARTED)

    status_history: List[SessionStatusTransition] = Field(default_factory=list)

    disclosure: DisclosureState = Field(default_factory=DisclosureState)

    hints_used: int = Field(default=0, ge=0)

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    submitted_at: Optional[datetime] = None

    outcome: Optional[Outcome] = None

    # ============================================================
    # Computed Properties
    # ============================================================
    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def clues_revealed(self) -> int:
        return self.disclosure.revealed_count

    def touch(self) -> None:
        """Bump updated_at after a mutation"""
        self.updated_at = datetime.now(timezone.utc)

    # ============================================================
    # Validation
    # ============================================================
    @model_validator(mode='after')
    def validate_consistency(self) -> 'Session':
        """Hint count matches consumed hints; outcome exists iff submitted"""
        if self.hints_used != len(self.disclosure.used_hint_clue_ids):
            raise ValueError(
                f"hints_used ({self.hints_used}) does not match consumed hints "
                f"({len(self.disclosure.used_hint_clue_ids)})"
            )

        if self.status == SessionStatus.SUBMITTED:
            if self.outcome is None:
                raise ValueError("SUBMITTED status requires an outcome")
            if self.submitted_at is None:
                raise ValueError("SUBMITTED status requires submitted_at timestamp")
        elif self.outcome is not None:
            raise ValueError(f"outcome can only be set when status is SUBMITTED (current: {self.status.value})")

        return self
