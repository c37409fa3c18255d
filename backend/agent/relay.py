"""Relay of a single user utterance into an open agent session."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from backend.agent.handle import SessionStore, load_handle
from backend.config import Settings
from backend.crm.client import CRMClient
from backend.errors import MessageTooLong, RelayFailure

logger = logging.getLogger(__name__)

NO_SESSION_MESSAGE = "Invalid Session ID. Start a new session."
DEFAULT_TEXT = "hi"


@dataclass
class MessageReply:
    status: str
    sequence_id: str = ""
    turns: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_session(self) -> bool:
        return self.status != "no_session"


class SequenceClock:
    """Millisecond timestamps that never repeat or go backwards."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def next(self) -> str:
        value = max(int(self._clock() * 1000), self._last + 1)
        self._last = value
        return str(value)


class MessageRelay:
    def __init__(self, crm: CRMClient, settings: Settings, sequence: SequenceClock | None = None):
        self._crm = crm
        self._settings = settings
        self._sequence = sequence or SequenceClock()

    async def send_message(
        self,
        text: str | None,
        session: SessionStore,
        variables: list[dict[str, Any]] | None = None,
    ) -> MessageReply:
        """Forward the text to the agent and return its reply turns verbatim."""
        if text and len(text) > self._settings.max_message_length:
            raise MessageTooLong()

        handle = load_handle(session)
        if handle is None:
            return MessageReply(status="no_session")

        sequence_id = self._sequence.next()
        payload = {
            "message": {
                "sequenceId": sequence_id,
                "type": "Text",
                "text": text or DEFAULT_TEXT,
            },
            "variables": variables or [],
        }
        try:
            reply = await self._crm.send_message(handle.session_id, payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to send message to session {handle.session_id}: {type(e).__name__}: {e}")
            raise RelayFailure("Failed to send message") from e

        turns = [m.raw() for m in reply.messages or []]
        logger.debug(f"Session {handle.session_id} seq {sequence_id}: {len(turns)} agent turn(s)")
        return MessageReply(status="success", sequence_id=sequence_id, turns=turns)
