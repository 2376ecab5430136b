"""Session endpoints over a SessionEngine.

Endpoints (prefix /api/v1/sessions):
- POST   ""                      start a session      → SessionView (201)
- GET    /{session_id}           session view         → SessionView
- POST   /{session_id}/clues     reveal next clue     → ClueView
- POST   /{session_id}/hints/{clue_id}  use a hint    → HintResponse
- POST   /{session_id}/submit    grade the diagnosis  → Outcome
- DELETE /{session_id}           abandon              → SolutionRubric

Engine errors map to status codes by kind: not found 404, disclosure and
session-state conflicts 409, case service failures 502, bad case content 500.
"""

import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, status

from detective_core.auth.request_context import PlayerContext, get_player_context
from detective_core.engine.session_engine import SessionEngine
from detective_core.exceptions import (
    CaseServiceError,
    DetectiveError,
    DisclosureError,
    InvalidSessionStateError,
    NotFoundError,
    SessionNotFoundError,
)
from detective_core.models.api_models import (
    ClueView,
    ErrorResponse,
    HintResponse,
    SessionView,
    StartSessionRequest,
    SubmitDiagnosisRequest,
)
from detective_core.models.case import SolutionRubric
from detective_core.models.session import Outcome

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def error_status(error: DetectiveError) -> int:
    """HTTP status code for an engine error."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, (DisclosureError, InvalidSessionStateError)):
        return status.HTTP_409_CONFLICT
    if isinstance(error, CaseServiceError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _http_error(error: DetectiveError) -> HTTPException:
    status_code = error_status(error)
    if status_code >= 500:
        logger.error(f"[SessionAPI] {error.code}: {error.message}")
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error.message, code=error.code).model_dump(),
    )


def create_router(engine: SessionEngine) -> APIRouter:
    """Build the session router bound to an engine.

    Usage:
        app = FastAPI()
        app.include_router(create_router(engine))
    """
    router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"], responses=_ERROR_RESPONSES)

    async def authorize(session_id: str, ctx: PlayerContext) -> None:
        # Foreign sessions look exactly like missing ones
        session = await engine.get_session(session_id)
        if not ctx.may_access(session.player_id):
            logger.warning(
                f"[SessionAPI] Player {ctx.player_id or 'anonymous'} denied access to {session_id}"
            )
            raise SessionNotFoundError(session_id)

    @router.post("", response_model=SessionView, status_code=status.HTTP_201_CREATED)
    async def start_session(
        request: StartSessionRequest,
        ctx: PlayerContext = Depends(get_player_context),
    ) -> SessionView:
        """Start investigating a case."""
        try:
            session = await engine.start_session(
                request.case_id,
                player_id=ctx.player_id,
                correlation_id=ctx.correlation_id,
            )
            return await engine.get_view(session.session_id)
        except DetectiveError as e:
            raise _http_error(e) from e

    @router.get("/{session_id}", response_model=SessionView)
    async def get_session(
        session_id: str,
        ctx: PlayerContext = Depends(get_player_context),
    ) -> SessionView:
        """Current state of a session with its revealed evidence."""
        try:
            await authorize(session_id, ctx)
            return await engine.get_view(session_id)
        except DetectiveError as e:
            raise _http_error(e) from e

    @router.post("/{session_id}/clues", response_model=ClueView)
    async def request_clue(
        session_id: str,
        ctx: PlayerContext = Depends(get_player_context),
    ) -> ClueView:
        """Reveal the next clue in order."""
        try:
            await authorize(session_id, ctx)
            clue = await engine.request_clue(session_id)
            return ClueView.from_clue(clue)
        except DetectiveError as e:
            raise _http_error(e) from e

    @router.post("/{session_id}/hints/{clue_id}", response_model=HintResponse)
    async def request_hint(
        session_id: str,
        clue_id: int,
        ctx: PlayerContext = Depends(get_player_context),
    ) -> HintResponse:
        """Use the hint of a revealed clue."""
        try:
            await authorize(session_id, ctx)
            hint = await engine.request_hint(session_id, clue_id)
            session = await engine.get_session(session_id)
            return HintResponse(clue_id=clue_id, hint=hint, hints_used=session.hints_used)
        except DetectiveError as e:
            raise _http_error(e) from e

    @router.post("/{session_id}/submit", response_model=Outcome)
    async def submit(
        session_id: str,
        request: SubmitDiagnosisRequest,
        ctx: PlayerContext = Depends(get_player_context),
    ) -> Outcome:
        """Submit the single diagnosis and receive the graded outcome."""
        try:
            await authorize(session_id, ctx)
            return await engine.submit(session_id, request.diagnosis)
        except DetectiveError as e:
            raise _http_error(e) from e

    @router.delete("/{session_id}", response_model=SolutionRubric)
    async def abandon(
        session_id: str,
        ctx: PlayerContext = Depends(get_player_context),
    ) -> SolutionRubric:
        """Give up and reveal the solution."""
        try:
            await authorize(session_id, ctx)
            return await engine.abandon(session_id)
        except DetectiveError as e:
            raise _http_error(e) from e

    return router


def create_app(engine: SessionEngine) -> FastAPI:
    """Standalone app serving only the session router."""
    app = FastAPI(title="Detective Sessions API")
    app.include_router(create_router(engine))
    return app
