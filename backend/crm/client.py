"""
Salesforce HTTP client.

Thin async wrapper with one method per endpoint the relay uses. Methods raise
``httpx.HTTPError`` for transport and status failures and ``ValueError``
(including pydantic validation errors) for bodies that do not match the
expected shape; callers convert these into the relay's error taxonomy.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend.config import Settings
from backend.crm.models import FlowResult, MessageResponse, SessionOpenResponse
from backend.crm.token_provider import TokenProvider

EVENT_CHANNEL_TYPE = "embedded_messaging"
SESSION_END_REASON = "UserRequest"


class CRMClient:
    """Authenticated calls against the Salesforce data, agent and event APIs."""

    def __init__(self, http: httpx.AsyncClient, tokens: TokenProvider, settings: Settings):
        self._http = http
        self._tokens = tokens
        self._settings = settings

    
    def tokens(self) -> TokenProvider:
        return self._tokens

    def _check(self, response: httpx.Response) -> None:
        if response.status_code == httpx.codes.UNAUTHORIZED:
            # Revoked or timed-out token; the next call exchanges a new one
            self._tokens.invalidate()
        response.raise_for_status()

    async def _auth_headers(self) -> dict[str, str]:
        credential = await self._tokens.get_token()
        return {"Authorization": f"Bearer {credential.token}"}

    def flow_endpoint(self, flow_name: str) -> str:
        s = self._settings
        return f"{s.sf_domain}/services/data/{s.sf_api_version}/actions/custom/flow/{flow_name}"

    async def invoke_flow(self, flow_name: str, inputs: dict[str, Any]) -> FlowResult:
        """Run an autolaunched flow with a single input record."""
        headers = await self._auth_headers()
        response = await self._http.post(
            self.flow_endpoint(flow_name),
            json={"inputs": [inputs]},
            headers=headers,
        )
        self._check(response)
        results = response.json()
        if not isinstance(results, list) or not results:
            raise ValueError(f"Flow {flow_name} returned no results")
        return FlowResult.model_validate(results[0])

    async def open_session(self, payload: dict[str, Any]) -> SessionOpenResponse:
        headers = await self._auth_headers()
        endpoint = f"{self._settings.sf_api_host}/einstein/ai-agent/v1/agents/{self._settings.sf_agent_id}/sessions"
        response = await self._http.post(endpoint, json=payload, headers=headers)
        self._check(response)
        return SessionOpenResponse.model_validate(response.json())

    async def send_message(self, session_id: str, payload: dict[str, Any]) -> MessageResponse:
        headers = await self._auth_headers()
        headers["Accept"] = "application/json"
        endpoint = f"{self._settings.sf_api_host}/einstein/ai-agent/v1/sessions/{session_id}/messages"
        response = await self._http.post(endpoint, json=payload, headers=headers)
        self._check(response)
        return MessageResponse.model_validate(response.json())

    async def delete_session(self, session_id: str) -> None:
        headers = await self._auth_headers()
        headers["x-session-end-reason"] = SESSION_END_REASON
        endpoint = f"{self._settings.sf_api_host}/einstein/ai-agent/v1/sessions/{session_id}"
        response = await self._http.delete(endpoint, headers=headers)
        self._check(response)

    async def open_event_stream(self) -> httpx.Response:
        """Open the event router SSE stream. The caller must close the response."""
        headers = await self._auth_headers()
        headers["Accept"] = "text/event-stream"
        # Raw bytes are forwarded, so ask for them uncompressed
        headers["Accept-Encoding"] = "identity"
        if self._settings.sf_org_id:
            headers["X-Org-Id"] = self._settings.sf_org_id

        request = self._http.build_request(
            "GET",
            f"{self._settings.sf_chat_domain}/eventrouter/v1/sse",
            params={"channelType": EVENT_CHANNEL_TYPE},
            headers=headers,
            timeout=httpx.Timeout(self._settings.crm_timeout, read=None),
        )
        response = await self._http.send(request, stream=True)
        if response.is_error:
            await response.aread()
            await response.aclose()
            self._check(response)
        return response


# Process-wide HTTP client and token cache, created lazily
_http_client: httpx.AsyncClient | None = None
_token_provider: TokenProvider | None = None


def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared HTTP client."""
    global _http_client
    if _http_client is None:
        from backend.config import settings

        _http_client = httpx.AsyncClient(
            timeout=settings.crm_timeout,
            verify=settings.ca_bundle_path or True,
        )
    return _http_client


def get_token_provider() -> TokenProvider:
    """Get or create the shared token provider."""
    global _token_provider
    if _token_provider is None:
        from backend.config import settings

        _token_provider = TokenProvider(get_http_client(), settings)
    return _token_provider


def get_crm_client() -> CRMClient:
    from backend.config import settings

    return CRMClient(get_http_client(), get_token_provider(), settings)


async def close_http_client() -> None:
    """Close the shared HTTP client. Call at app shutdown."""
    global _http_client, _token_provider
    if _http_client is not None:
        await _http_client.aclose()
    _http_client = None
    _token_provider = None
