"""API Request/Response Models for the session endpoints.

These keep the HTTP layer separate from the domain models:
- Clue hints are never sent until the player pays for them (ClueView)
- SessionView bundles the case header with the revealed evidence
"""

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from detective_core.models.case import (
    CaseCategory,
    CaseDifficulty,
    Clue,
    ClueType,
    Crisis,
    Symptoms,
)
from detective_core.models.session import Outcome, SessionStatus


# ============================================================
# Requests
# ============================================================

class StartSessionRequest(BaseModel):
    """Request to start investigating a case."""

    case_id: str = Field(min_length=1, max_length=200, description="Case to investigate")


class SubmitDiagnosisRequest(BaseModel):
    """The player's single root-cause guess."""

    diagnosis: str = Field(
        description="Free-text root-cause diagnosis",
        max_length=4000
    )


# ============================================================
# Responses
# ============================================================

class ClueView(BaseModel):
    """A revealed clue as shown to the player (hint text only once used)."""

    id: int
    title: str
    type: ClueType
    content: str
    has_hint: bool = False
    hint: Optional[str] = None

    @classmethod
    def from_clue(cls, clue: Clue, hint_used: bool = False) -> "ClueView":
        return cls(
            id=clue.id,
            title=clue.title,
            type=clue.type,
            content=clue.content,
            has_hint=clue.has_hint,
            hint=clue.hint if hint_used else None,
        )


class HintResponse(BaseModel):
    """Hint text plus the running hint count."""

    clue_id: int
    hint: str
    hints_used: int


class SessionView(BaseModel):
    """Everything the presentation layer needs to render a session."""

    session_id: str
    case_id: str
    status: SessionStatus

    # Case header
    title: str
    subtitle: str = ""
    difficulty: CaseDifficulty
    category: CaseCategory
    crisis: Crisis
    symptoms: Symptoms

    # Disclosure
    clues: List[ClueView] = Field(default_factory=list)
    total_clues: int
    clues_revealed: int
    hints_used: int
    available_hint_clue_ids: Tuple[int, ...] = ()
    next_step: Optional[str] = Field(default=None, description="Suggested next move while in progress")

    started_at: datetime
    outcome: Optional[Outcome] = None


class ErrorResponse(BaseModel):
    """Error body for failed requests."""

    error: str
    code: str
