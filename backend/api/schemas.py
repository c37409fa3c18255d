"""API request/response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool


# Session schemas
class SessionCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    application_ref: str = Field(default="", alias="applicationRef")
    terms_agreed: StrictBool = Field(default=False, alias="termsAgreed")


class SessionCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    messages: list[dict[str, Any]]
    session_id: str = Field(alias="sessionId")


class SessionCloseResponse(BaseModel):
    status: str
    message: str | None = None


# Message schemas
class AgentVariable(BaseModel):
    name: str
    type: str = "Text"
    value: Any = None


class MessageRequest(BaseModel):
    text: str = ""
    variables: list[AgentVariable] = []


class MessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    sequence_id: str | None = Field(default=None, alias="sequenceId")
    turns: list[dict[str, Any]] = []
    message: str | None = None
