"""Typed views of the Salesforce responses the relay depends on."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    access_token: str
    expires_in: float | None = None
    instance_url: str | None = None


class FlowError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status_code: str | None = Field(default=None, alias="statusCode")
    message: str | None = None
    fields: list[str] | None = None


class FlowResult(BaseModel):
    """One element of the array returned by a custom flow action."""

    model_config = ConfigDict(populate_by_name=True)

    action_name: str | None = Field(default=None, alias="actionName")
    is_success: bool = Field(alias="isSuccess")
    outcome: str | None = None
    output_values: dict[str, Any] | None = Field(default=None, alias="outputValues")
    errors: list[FlowError] | None = None

    @property
    def outputs(self) -> dict[str, Any]:
        return self.output_values or {}

    def error_summary(self) -> str:
        if not self.errors:
            return "no error details"
        return "; ".join(f"{e.status_code}: {e.message}" for e in self.errors)


class CandidateJobDetails(BaseModel):
    """Output values of the candidate and job details flow."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    candidate_id: str | None = Field(default=None, alias="CandidateId")
    job_id: str | None = Field(default=None, alias="JobId")
    first_name: str | None = Field(default=None, alias="FirstName")
    last_name: str | None = Field(default=None, alias="LastName")
    candidate_country: str | None = Field(default=None, alias="CandidateCountry")
    candidate_email: str | None = Field(default=None, alias="CandidateEmail")
    job_name: str | None = Field(default=None, alias="JobName")
    job_location: str | None = Field(default=None, alias="JobLocation")
    job_travel_required: bool | None = Field(default=None, alias="JobTravelRequired")
    job_responsibilities: str | None = Field(default=None, alias="JobResponsibilities")
    job_skill_required: str | None = Field(default=None, alias="JobSkillRequired")
    job_description: str | None = Field(default=None, alias="JobDescription")
    job_type: str | None = Field(default=None, alias="JobType")
    company_name: str | None = Field(default=None, alias="CompanyName")


class CandidateResponseCheck(BaseModel):
    """Output values of the candidate response (eligibility) flow."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    allow_user: str | bool | None = Field(default=None, alias="AllowUser")


class AgentMessage(BaseModel):
    """A message produced by the agent. Unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    id: str | None = None
    message: str | None = None

    def raw(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class SessionOpenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    session_id: str = Field(alias="sessionId", min_length=1)
    messages: list[AgentMessage] | None = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    messages: list[AgentMessage] | None = None
