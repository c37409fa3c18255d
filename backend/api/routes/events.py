"""Server-sent events passthrough from the agent event router."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from backend.agent import EventStreamBridge
from backend.agent.events import SSE_HEADERS
from backend.api.dependencies import get_event_bridge

router = APIRouter()


@router.get("")
async def stream_events(bridge: EventStreamBridge = Depends(get_event_bridge)):
    """Stream agent events to the browser as they arrive."""
    stream = await bridge.open_stream()
    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(stream.aclose),
    )
