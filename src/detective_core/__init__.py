"""Detective Core

Case delivery, clue disclosure and diagnosis grading for incident detective cases.
"""

__version__ = "0.1.0"

# Export models and errors first (no engine dependencies)
from detective_core.models import (
    CaseDefinition, Clue, SolutionRubric,
    Session, SessionStatus, GradingResult, Outcome, Verdict,
)
from detective_core.exceptions import (
    DetectiveError,
    NotFoundError,
    CaseNotFoundError,
    SessionNotFoundError,
    DisclosureError,
    AllCluesRevealedError,
    HintUnavailableError,
    HintAlreadyUsedError,
    InvalidSessionStateError,
    AlreadySubmittedError,
    CaseDefinitionError,
    CaseServiceError,
)
from detective_core.config import EngineSettings, GradingPolicy, ScoringPolicy, HintReusePolicy
from detective_core.grading import grade


# Engine pulls in redis/httpx adapters, so load it on first use
def __getattr__(name):
    """Lazy import for engine entry points."""
    if name in ("SessionEngine", "create_engine"):
        from detective_core import engine
        return getattr(engine, name)
    if name == "create_router":
        from detective_core.api import create_router
        return create_router
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    # Models
    "CaseDefinition", "Clue", "SolutionRubric",
    "Session", "SessionStatus", "GradingResult", "Outcome", "Verdict",
    # Errors
    "DetectiveError", "NotFoundError", "CaseNotFoundError", "SessionNotFoundError",
    "DisclosureError", "AllCluesRevealedError", "HintUnavailableError", "HintAlreadyUsedError",
    "InvalidSessionStateError", "AlreadySubmittedError", "CaseDefinitionError", "CaseServiceError",
    # Config
    "EngineSettings", "GradingPolicy", "ScoringPolicy", "HintReusePolicy",
    # Grading
    "grade",
    # Engine (lazy loaded)
    "SessionEngine", "create_engine", "create_router",
]
