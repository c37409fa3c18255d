"""
Bridge from the Salesforce event router SSE stream to the browser.

Upstream chunks are passed through byte for byte as they arrive. The stream
is not reconnected here; when it ends the browser's EventSource reconnects.
An upstream failure mid-stream aborts the downstream response instead of
ending it cleanly.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx

from backend.crm.client import CRMClient
from backend.errors import RelayFailure

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class EventStream:
    """An open upstream event stream, iterable once over its raw chunks."""

    def __init__(self, upstream: httpx.Response):
        self._upstream = upstream

    @property
    def closed(self) -> bool:
        return self._upstream.is_closed

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._forward()

    async def aclose(self) -> None:
        if not self._upstream.is_closed:
            await self._upstream.aclose()
            logger.info("Event stream closed")

    async def _forward(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._upstream.aiter_raw():
                if chunk:
                    yield chunk
        except httpx.HTTPError as e:
            logger.error(f"Event stream interrupted: {type(e).__name__}: {e}")
            raise RelayFailure("Event stream interrupted") from e
        finally:
            await self.aclose()


class EventStreamBridge:
    def __init__(self, crm: CRMClient):
        self._crm = crm

    async def open_stream(self) -> EventStream:
        """Open the upstream stream.

        Failures to open (token, transport, non-2xx) raise before any byte is
        sent, so the caller can still answer with a JSON error. The caller
        must ``aclose()`` the stream if it never iterates it.
        """
        try:
            upstream = await self._crm.open_event_stream()
        except httpx.HTTPError as e:
            logger.error(f"Error setting up event listener: {type(e).__name__}: {e}")
            raise RelayFailure("Failed to open event stream") from e

        logger.info("Event stream opened")
        return EventStream(upstream)
