"""Error taxonomy for the detective engine.

Every failure path in the engine surfaces as one of these typed errors:
- NotFoundError: unknown case or session id (fatal to the request)
- DisclosureError: clue/hint requests the player cannot make right now
  (recoverable, the caller shows a message and does not retry)
- InvalidSessionStateError: operation not allowed in the session's current
  status (AlreadySubmittedError being the important case)
- CaseDefinitionError / CaseServiceError: problems with the external case content

The grader never raises for malformed or empty submissions.
"""

from typing import Optional


class DetectiveError(Exception):
    """Base class for all engine errors."""

    code: str = "detective_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ============================================================
# Lookup failures
# ============================================================

class NotFoundError(DetectiveError):
    """Requested entity does not exist."""

    code = "not_found"


class CaseNotFoundError(NotFoundError):
    """No case with the given id in the case library."""

    code = "case_not_found"

    def __init__(self, case_id: str):
        super().__init__(f"Case not found: {case_id}")
        self.case_id = case_id


class SessionNotFoundError(NotFoundError):
    """No session with the given id in the session store."""

    code = "session_not_found"

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


# ============================================================
# Disclosure (user-facing, recoverable)
# ============================================================

class DisclosureError(DetectiveError):
    """Clue or hint request that cannot be honoured."""

    code = "disclosure_error"


class AllCluesRevealedError(DisclosureError):
    """Every clue of the case has already been revealed."""

    code = "all_clues_revealed"

    def __init__(self, case_id: str, total_clues: int):
        super().__init__(f"All {total_clues} clues of case {case_id} are already revealed")
        self.case_id = case_id
        self.total_clues = total_clues


class HintUnavailableError(DisclosureError):
    """Clue is not revealed yet, does not exist, or has no hint."""

    code = "hint_unavailable"

    def __init__(self, clue_id: int, reason: str):
        super().__init__(f"No hint available for clue {clue_id}: {reason}")
        self.clue_id = clue_id
        self.reason = reason


class HintAlreadyUsedError(DisclosureError):
    """Hint was already consumed (only raised under the reject policy)."""

    code = "hint_already_used"

    def __init__(self, clue_id: int):
        super().__init__(f"Hint for clue {clue_id} was already used")
        self.clue_id = clue_id


# ============================================================
# Session lifecycle
# ============================================================

class InvalidSessionStateError(DetectiveError):
    """Operation is not valid for the session's current status."""

    code = "invalid_session_state"


class AlreadySubmittedError(InvalidSessionStateError):
    """Session already has a graded outcome; it cannot be changed or re-rolled."""

    code = "already_submitted"

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} has already been submitted")
        self.session_id = session_id


# ============================================================
# Case content
# ============================================================

class CaseDefinitionError(DetectiveError):
    """Case payload from the content store failed validation."""

    code = "invalid_case_definition"

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message if source is None else f"{source}: {message}")
        self.source = source


class CaseServiceError(DetectiveError):
    """Case library service could not be reached or returned an error."""

    code = "case_service_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
