"""
Data models for the detective engine.

Case content models are frozen and shared between sessions; session models
are plain serializable records owned by the session engine.
"""

from detective_core.models.case import (
    # Case content
    CaseDefinition,
    CaseDifficulty,
    CaseCategory,
    Clue,
    ClueType,
    CodeExample,
    Crisis,
    SolutionRubric,
    Symptoms,
    TimelineEvent,
    TimelineEventType,
)

from detective_core.models.session import (
    # Session lifecycle
    Session,
    SessionStatus,
    SessionStatusTransition,
    is_valid_transition,

    # Disclosure
    DisclosureState,

    # Grading
    GradingResult,
    Outcome,
    Verdict,
)

from detective_core.models.api_models import (
    ClueView,
    ErrorResponse,
    HintResponse,
    SessionView,
    StartSessionRequest,
    SubmitDiagnosisRequest,
)

__all__ = [
    # Case content
    "CaseDefinition", "CaseDifficulty", "CaseCategory", "Clue", "ClueType",
    "CodeExample", "Crisis", "SolutionRubric", "Symptoms", "TimelineEvent",
    "TimelineEventType",
    # Session
    "Session", "SessionStatus", "SessionStatusTransition", "is_valid_transition",
    "DisclosureState",
    # Grading
    "GradingResult", "Outcome", "Verdict",
    # API
    "ClueView", "ErrorResponse", "HintResponse", "SessionView",
    "StartSessionRequest", "SubmitDiagnosisRequest",
]
