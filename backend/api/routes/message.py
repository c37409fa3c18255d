"""Message endpoint relaying chat turns to the agent."""

from fastapi import APIRouter, Depends, Request

from backend.agent import MessageRelay
from backend.agent.relay import NO_SESSION_MESSAGE
from backend.api.dependencies import get_message_relay
from backend.api.limiter import limiter
from backend.api.schemas import MessageRequest, MessageResponse
from backend.config import settings

router = APIRouter()


@router.post("", response_model=MessageResponse, response_model_exclude_none=True)
@limiter.limit(settings.rate_limit_message)
async def send_message(
    request: Request,
    data: MessageRequest,
    relay: MessageRelay = Depends(get_message_relay),
):
    """Send one user message and return the agent's reply turns."""
    reply = await relay.send_message(
        data.text,
        request.session,
        variables=[v.model_dump() for v in data.variables],
    )
    if not reply.has_session:
        return MessageResponse(status=reply.status, message=NO_SESSION_MESSAGE)
    return MessageResponse(status=reply.status, sequence_id=reply.sequence_id, turns=reply.turns)
