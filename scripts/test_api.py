"""
API tests: session cookie lifecycle, message relay, error bodies and SSE.

Runs the FastAPI app in-process with the Salesforce fake behind the CRM
client dependency.

Usage:
    pytest scripts/test_api.py
"""

import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import (
    DETAILS_FLOW_URL,
    EVENTS_URL,
    SESSION_OPEN_URL,
    TOKEN_URL,
    flow_result,
    make_settings,
    session_url,
)
from backend.api.app import app, create_app
from backend.api.dependencies import get_settings
from backend.api.limiter import limiter
from backend.crm import get_crm_client

COOKIE = "chatSession"


@pytest.fixture
def client(crm, settings):
    app.dependency_overrides[get_crm_client] = lambda: crm
    app.dependency_overrides[get_settings] = lambda: settings
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


def _cookie_payload(client: TestClient) -> dict:
    # Starlette session cookies are base64 JSON followed by an itsdangerous signature
    value = client.cookies.get(COOKIE)
    data = value.split(".", 1)[0]
    return json.loads(base64.b64decode(data + "=" * (-len(data) % 4)))


def _create(client: TestClient, ref: str = "JA-00042", agreed: bool = True):
    return client.post("/session/create", json={"applicationRef": ref, "termsAgreed": agreed})


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_session_sets_signed_cookie(client, salesforce):
    response = _create(client)

    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "messages": [{"type": "Inform", "id": "m1", "message": "Hi Ada! Ready to start?"}],
        "sessionId": "sess-123",
    }
    set_cookie = response.headers["set-cookie"].lower()
    assert set_cookie.startswith(f"{COOKIE.lower()}=")
    assert "httponly" in set_cookie
    assert "path=/" in set_cookie
    assert "secure" not in set_cookie
    assert _cookie_payload(client)["sessionId"] == "sess-123"

    [request] = salesforce.calls("POST", SESSION_OPEN_URL)
    variables = {v["name"]: v["value"] for v in salesforce.body(request)["variables"]}
    assert variables["Job_Application_Number"] == "JA-00042"
    assert variables["allowUser"] == "true"


def test_invalid_reference_returns_400_without_cookie(client, salesforce):
    salesforce.respond("POST", DETAILS_FLOW_URL, json=flow_result({"CandidateId": None, "JobId": None}))

    response = _create(client, ref="JA-404")

    assert response.status_code == 400
    assert response.json() == {
        "status": "error",
        "error": "invalid_reference",
        "message": "Invalid Job Application number",
    }
    assert "set-cookie" not in response.headers
    assert salesforce.calls("POST", SESSION_OPEN_URL) == []


def test_flow_failure_returns_500_without_cookie(client, salesforce):
    salesforce.respond("POST", DETAILS_FLOW_URL, json=flow_result(None, success=False))

    response = _create(client)

    assert response.status_code == 500
    assert response.json()["error"] == "flow_execution_failed"
    assert "set-cookie" not in response.headers


def test_auth_failure_returns_500(client, salesforce):
    salesforce.respond("POST", TOKEN_URL, status_code=400, json={"error": "invalid_client"})

    response = _create(client)

    assert response.status_code == 500
    assert response.json()["error"] == "auth_failure"
    assert "set-cookie" not in response.headers


def test_message_round_trip(client, salesforce):
    _create(client)

    response = client.post("/message", json={"text": "I'm ready"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["sequenceId"].isdigit()
    assert body["turns"] == [
        {"type": "Inform", "id": "m2", "message": "Great, let's begin.", "isContentSafe": True}
    ]
    [request] = salesforce.calls("POST", session_url("sess-123") + "/messages")
    assert salesforce.body(request)["message"]["text"] == "I'm ready"


def test_message_without_session_is_soft(client, salesforce):
    response = client.post("/message", json={"text": "hello"})

    assert response.status_code == 200
    assert response.json() == {
        "status": "no_session",
        "turns": [],
        "message": "Invalid Session ID. Start a new session.",
    }
    assert salesforce.requests == []


def test_message_too_long(client, salesforce):
    response = client.post("/message", json={"text": "x" * 2001})

    assert response.status_code == 400
    assert response.json()["error"] == "message_too_long"
    assert salesforce.requests == []


def test_message_relay_failure(client, salesforce):
    _create(client)
    salesforce.respond("POST", session_url("sess-123") + "/messages", status_code=500)

    response = client.post("/message", json={"text": "hello"})

    assert response.status_code == 500
    assert response.json() == {"status": "error", "error": "relay_failure", "message": "Failed to send message"}


def test_close_session_clears_cookie(client, salesforce):
    _create(client)

    response = client.delete("/session")

    assert response.status_code == 200
    assert response.json() == {"status": "success"}
    assert "expires=thu, 01 jan 1970" in response.headers["set-cookie"].lower()
    assert len(salesforce.calls("DELETE", session_url("sess-123"))) == 1

    again = client.delete("/session")
    assert again.status_code == 200
    assert again.json() == {"status": "invalid_session", "message": "Invalid Session ID"}
    assert len(salesforce.calls("DELETE", session_url("sess-123"))) == 1


def test_failed_close_keeps_cookie(client, salesforce):
    _create(client)
    salesforce.respond("DELETE", session_url("sess-123"), status_code=503)

    response = client.delete("/session")

    assert response.status_code == 500
    assert response.json()["error"] == "relay_failure"
    assert _cookie_payload(client)["sessionId"] == "sess-123"


def test_event_stream_passthrough(client, salesforce):
    async def chunks():
        yield b"data: a\n\n"
        yield b"data: b\n\n"

    salesforce.respond(
        "GET",
        EVENTS_URL,
        handler=lambda request: httpx.Response(200, headers={"Content-Type": "text/event-stream"}, content=chunks()),
    )

    response = client.get("/events")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache, no-transform"
    assert response.content == b"data: a\n\ndata: b\n\n"


def test_event_stream_open_failure_is_json(client, salesforce):
    salesforce.respond("GET", EVENTS_URL, status_code=401)

    response = client.get("/events")

    assert response.status_code == 500
    assert response.json()["error"] == "relay_failure"


def test_production_cookie_is_secure(crm):
    production = make_settings(environment="production", session_secret_key="prod-secret")
    prod_app = create_app(production)
    prod_app.dependency_overrides[get_crm_client] = lambda: crm
    prod_app.dependency_overrides[get_settings] = lambda: production
    limiter.enabled = False
    try:
        response = _create(TestClient(prod_app, base_url="https://testserver"))
    finally:
        limiter.enabled = True

    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"].lower()
    assert "secure" in set_cookie
    assert "httponly" in set_cookie
    assert "path=/" in set_cookie


def test_terms_agreed_must_be_a_real_boolean(client, salesforce):
    response = client.post("/session/create", json={"applicationRef": "JA-00042", "termsAgreed": "yes"})

    assert response.status_code == 422
    assert salesforce.requests == []
