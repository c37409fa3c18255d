"""
Einstein agent integration.

- session: open a session with applicant context, close it
- relay: forward user messages and return agent turns
- events: pass the event router SSE stream through to the browser
"""

from backend.agent.events import EventStream, EventStreamBridge
from backend.agent.relay import MessageRelay, MessageReply
from backend.agent.session import CloseOutcome, SessionCoordinator, SessionTerminator

__all__ = [
    "CloseOutcome",
    "EventStream",
    "EventStreamBridge",
    "MessageRelay",
    "MessageReply",
    "SessionCoordinator",
    "SessionTerminator",
]
