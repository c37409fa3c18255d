"""
Shared fixtures: an in-process fake of the Salesforce endpoints.

The fake is served through httpx.MockTransport, records every request and
answers the token, flow, agent session and event router endpoints with
canned responses that individual tests can replace.
"""

import json
from collections.abc import Callable

import httpx
import pytest

from backend.config import Settings
from backend.crm.client import CRMClient
from backend.crm.token_provider import TokenProvider

SF_DOMAIN = "https://jobs.my.salesforce.com"
API_HOST = "https://api.salesforce.com"
CHAT_DOMAIN = "https://jobs.my.salesforce-scrt.com"
DETAILS_FLOW = "Get_Candidate_And_Job_Details"
RESPONSE_FLOW = "Check_Candidate_Response"
AGENT_ID = "0XxAGENT0001"

TOKEN_URL = f"{SF_DOMAIN}/services/oauth2/token"
DETAILS_FLOW_URL = f"{SF_DOMAIN}/services/data/v64.0/actions/custom/flow/{DETAILS_FLOW}"
RESPONSE_FLOW_URL = f"{SF_DOMAIN}/services/data/v64.0/actions/custom/flow/{RESPONSE_FLOW}"
SESSION_OPEN_URL = f"{API_HOST}/einstein/ai-agent/v1/agents/{AGENT_ID}/sessions"
EVENTS_URL = f"{CHAT_DOMAIN}/eventrouter/v1/sse"


def session_url(session_id: str) -> str:
    return f"{API_HOST}/einstein/ai-agent/v1/sessions/{session_id}"


CANDIDATE_OUTPUTS = {
    "CandidateId": "c1",
    "JobId": "j1",
    "JobLocation": "Remote",
    "JobTravelRequired": False,
    "FirstName": "Ada",
    "LastName": "Lovelace",
    "JobName": "Analytical Engineer",
    "CandidateEmail": "ada@example.com",
    "CompanyName": "Engines Ltd",
    "JobType": "Full-time",
}


def flow_result(outputs: dict | None, success: bool = True, errors: list | None = None) -> list:
    return [
        {
            "actionName": "flow",
            "errors": errors,
            "isSuccess": success,
            "outcome": None,
            "outputValues": outputs,
            "sortOrder": -1,
            "version": 1,
        }
    ]


def make_settings(**overrides) -> Settings:
    values = {
        "sf_domain": SF_DOMAIN,
        "sf_client_id": "client-id",
        "sf_client_secret": "client-secret",
        "sf_api_host": API_HOST,
        "sf_agent_id": AGENT_ID,
        "candidate_details_flow_name": DETAILS_FLOW,
        "candidate_response_flow_name": RESPONSE_FLOW,
        "sf_chat_domain": CHAT_DOMAIN,
        "sf_org_id": "00Dorg",
        "environment": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


Handler = Callable[[httpx.Request], httpx.Response]


class FakeSalesforce:
    """Canned Salesforce endpoints keyed by (method, url without query)."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Handler] = {}
        self.respond("POST", TOKEN_URL, json={"access_token": "tok-1", "expires_in": 3600})
        self.respond("POST", DETAILS_FLOW_URL, json=flow_result(CANDIDATE_OUTPUTS))
        self.respond("POST", RESPONSE_FLOW_URL, json=flow_result({"AllowUser": "true"}))
        self.respond(
            "POST",
            SESSION_OPEN_URL,
            json={
                "sessionId": "sess-123",
                "messages": [{"type": "Inform", "id": "m1", "message": "Hi Ada! Ready to start?"}],
                "_links": {"self": None},
            },
        )
        self.respond(
            "POST",
            session_url("sess-123") + "/messages",
            json={"messages": [{"type": "Inform", "id": "m2", "message": "Great, let's begin.", "isContentSafe": True}]},
        )
        self.respond("DELETE", session_url("sess-123"), status_code=204)

    def respond(self, method: str, url: str, status_code: int = 200, json=None, handler: Handler | None = None):
        if handler is None:
            def handler(request: httpx.Request, _json=json, _status=status_code) -> httpx.Response:
                if _json is None:
                    return httpx.Response(_status)
                return httpx.Response(_status, json=_json)
        self.routes[(method, url)] = handler

    def fail(self, method: str, url: str, error: Exception):
        def handler(request: httpx.Request) -> httpx.Response:
            raise error
        self.routes[(method, url)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url.copy_with(query=None)))
        handler = self.routes.get(key)
        if handler is None:
            return httpx.Response(404, json=[{"errorCode": "NOT_FOUND", "message": str(request.url)}])
        return handler(request)

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and str(r.url.copy_with(query=None)) == url]

    def body(self, request: httpx.Request) -> dict | list:
        return json.loads(request.content)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def salesforce() -> FakeSalesforce:
    return FakeSalesforce()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def crm(salesforce, settings, clock) -> CRMClient:
    http = salesforce.http_client()
    return CRMClient(http, TokenProvider(http, settings, clock=clock), settings)
