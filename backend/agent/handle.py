"""Session handle kept in the signed ``chatSession`` cookie."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any

# The cookie-backed mapping (request.session in the web app)
SessionStore = MutableMapping[str, Any]


@dataclass
class SessionHandle:
    session_id: str
    messages: list[dict[str, Any]] = field(default_factory=list)
    status: str = "success"

    def to_cookie(self) -> dict[str, Any]:
        return {"status": self.status, "messages": self.messages, "sessionId": self.session_id}

    @classmethod
    def from_cookie(cls, data: Mapping[str, Any] | None) -> SessionHandle | None:
        """Rebuild the handle, or None when there is no usable session id."""
        if not data:
            return None
        session_id = data.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            return None
        return cls(
            session_id=session_id,
            messages=list(data.get("messages") or []),
            status=data.get("status", "success"),
        )


def load_handle(store: SessionStore) -> SessionHandle | None:
    return SessionHandle.from_cookie(store)


def save_handle(store: SessionStore, handle: SessionHandle) -> None:
    store.clear()
    store.update(handle.to_cookie())


def clear_handle(store: SessionStore) -> None:
    store.clear()
