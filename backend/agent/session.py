"""
Agent session lifecycle: open a session for a job application and close it.

Opening runs three dependent CRM calls strictly in order:

1. candidate and job details flow (application number -> ids and job fields)
2. candidate response flow (candidate id -> allowUser flag)
3. Einstein agent session open with the resolved context as variables

The cookie session is written only after all three succeed.
"""

from __future__ import annotations

import enum
import logging
import uuid
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from backend.agent.context import DomainContext
from backend.agent.handle import SessionHandle, SessionStore, clear_handle, load_handle, save_handle
from backend.config import Settings
from backend.crm.client import CRMClient
from backend.crm.models import CandidateJobDetails, CandidateResponseCheck, FlowResult
from backend.errors import AuthFailure, FlowExecutionError, InvalidReferenceError, RelayFailure

logger = logging.getLogger(__name__)

OutputsT = TypeVar("OutputsT", bound=BaseModel)


class SessionCoordinator:
    def __init__(self, crm: CRMClient, settings: Settings):
        self._crm = crm
        self._settings = settings

    async def create_session(
        self,
        application_ref: str,
        terms_agreed: bool,
        session: SessionStore,
    ) -> SessionHandle:
        """Resolve the applicant context and open an agent session for it."""
        context = await self.resolve_context(application_ref)

        payload = self.build_session_payload(application_ref, terms_agreed, context)
        try:
            opened = await self._crm.open_session(payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[{application_ref}] Agent session open failed: {_describe(e)}")
            raise RelayFailure("Session creation failed") from e

        handle = SessionHandle(
            session_id=opened.session_id,
            messages=[m.raw() for m in opened.messages or []],
        )
        save_handle(session, handle)
        logger.info(f"[{application_ref}] Opened agent session {handle.session_id}")
        return handle

    async def resolve_context(self, application_ref: str) -> DomainContext:
        details_label = "Get Candidate and Job Details"
        details_result = await self._run_flow(
            self._settings.candidate_details_flow_name,
            {"ApplicationNumber": application_ref},
            label=details_label,
        )
        details = _parse_outputs(CandidateJobDetails, details_result, details_label)
        if not details.candidate_id or not details.job_id:
            logger.warning(f"[{application_ref}] Application number did not resolve to a candidate and job")
            raise InvalidReferenceError()

        check_label = "Check Candidate Response"
        check_result = await self._run_flow(
            self._settings.candidate_response_flow_name,
            {"Candidate_Id": details.candidate_id},
            label=check_label,
        )
        eligibility = _parse_outputs(CandidateResponseCheck, check_result, check_label)
        return DomainContext(details=details, eligibility=eligibility)

    def build_session_payload(self, application_ref: str, terms_agreed: bool, context: DomainContext) -> dict:
        return {
            "externalSessionKey": str(uuid.uuid4()),
            "instanceConfig": {"endpoint": self._settings.sf_domain},
            "tz": self._settings.agent_timezone,
            "variables": context.to_variables(application_ref, terms_agreed, self._settings.agent_language),
            "featureSupport": "Streaming",
            "streamingCapabilities": {"chunkTypes": ["Text"]},
            "bypassUser": True,
        }

    async def _run_flow(self, flow_name: str, inputs: dict, label: str) -> FlowResult:
        try:
            result = await self._crm.invoke_flow(flow_name, inputs)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"{label} flow ({flow_name}) call failed: {_describe(e)}")
            raise FlowExecutionError(f"{label} Flow execution failed") from e

        if not result.is_success:
            logger.error(f"{label} flow ({flow_name}) reported failure: {result.error_summary()}")
            raise FlowExecutionError(f"{label} Flow execution failed")
        return result


class CloseOutcome(str, enum.Enum):
    SUCCESS = "success"
    INVALID_SESSION = "invalid_session"


class SessionTerminator:
    """Ends the agent session named by the cookie and drops the cookie.

    On a failed delete the cookie is kept unless
    ``clear_cookie_on_close_failure`` is set.
    """

    def __init__(self, crm: CRMClient, settings: Settings):
        self._crm = crm
        self._settings = settings

    async def close_session(self, session: SessionStore) -> CloseOutcome:
        handle = load_handle(session)
        if handle is None:
            return CloseOutcome.INVALID_SESSION

        try:
            await self._crm.delete_session(handle.session_id)
        except (AuthFailure, httpx.HTTPError) as e:
            logger.error(f"Failed to delete agent session {handle.session_id}: {_describe(e)}")
            if self._settings.clear_cookie_on_close_failure:
                clear_handle(session)
            if isinstance(e, AuthFailure):
                raise
            raise RelayFailure("Failed to delete session") from e

        clear_handle(session)
        logger.info(f"Closed agent session {handle.session_id}")
        return CloseOutcome.SUCCESS


def _parse_outputs(model: type[OutputsT], result: FlowResult, label: str) -> OutputsT:
    try:
        return model.model_validate(result.outputs)
    except ValidationError as e:
        logger.error(f"{label} flow returned unexpected output values: {e.error_count()} error(s)")
        raise FlowExecutionError(f"{label} Flow execution failed") from e


def _describe(error: Exception) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    return f"{type(error).__name__}: {error}"
