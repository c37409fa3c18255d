"""Agent session endpoints: open a session for an application, close it."""

from fastapi import APIRouter, Depends, Request

from backend.agent import CloseOutcome, SessionCoordinator, SessionTerminator
from backend.api.dependencies import get_session_coordinator, get_session_terminator
from backend.api.limiter import limiter
from backend.api.schemas import SessionCloseResponse, SessionCreateRequest, SessionCreateResponse
from backend.config import settings

router = APIRouter()


@router.post("/create", response_model=SessionCreateResponse)
@limiter.limit(settings.rate_limit_session)
async def create_session(
    request: Request,
    data: SessionCreateRequest,
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
):
    """Open an agent session for a job application and set the session cookie."""
    handle = await coordinator.create_session(
        data.application_ref.strip(),
        data.terms_agreed,
        request.session,
    )
    return SessionCreateResponse(
        status=handle.status,
        messages=handle.messages,
        session_id=handle.session_id,
    )


@router.delete("", response_model=SessionCloseResponse, response_model_exclude_none=True)
async def close_session(
    request: Request,
    terminator: SessionTerminator = Depends(get_session_terminator),
):
    """End the current agent session and clear the session cookie."""
    outcome = await terminator.close_session(request.session)
    if outcome is CloseOutcome.INVALID_SESSION:
        return SessionCloseResponse(status=outcome.value, message="Invalid Session ID")
    return SessionCloseResponse(status=outcome.value)
