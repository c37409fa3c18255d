"""
Applicant context injected into a new agent session.

The context is resolved from two flows (candidate/job details, then the
candidate response check) and rendered as the ordered variable list the
agent expects. Missing text fields are sent as empty strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend.crm.models import CandidateJobDetails, CandidateResponseCheck

# (variable name, variable type, CandidateJobDetails attribute)
JOB_VARIABLES: tuple[tuple[str, str, str], ...] = (
    ("JobLocation", "Text", "job_location"),
    ("JobTravelRequired", "Boolean", "job_travel_required"),
    ("JobResponsibilities", "Text", "job_responsibilities"),
    ("CandidateFirstName", "Text", "first_name"),
    ("CandidateLastName", "Text", "last_name"),
    ("PositionName", "Text", "job_name"),
    ("CandidateCountry", "Text", "candidate_country"),
    ("CandidateEmail", "Text", "candidate_email"),
    ("JobSkills", "Text", "job_skill_required"),
    ("CompanyName", "Text", "company_name"),
    ("JobDescription", "Text", "job_description"),
    ("JobType", "Text", "job_type"),
    ("Customer_Id", "Text", "candidate_id"),
    ("Job_Id", "Text", "job_id"),
)


def _variable(name: str, value: Any, type_: str = "Text") -> dict[str, Any]:
    return {"name": name, "type": type_, "value": value}


def _flag(value: str | bool | None, default: str = "false") -> str:
    if value is None:
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


@dataclass
class DomainContext:
    details: CandidateJobDetails
    eligibility: CandidateResponseCheck

    @property
    def candidate_id(self) -> str:
        return self.details.candidate_id or ""

    @property
    def job_id(self) -> str:
        return self.details.job_id or ""

    @property
    def allow_user(self) -> str:
        return _flag(self.eligibility.allow_user)

    def to_variables(self, application_ref: str, terms_agreed: bool, language: str) -> list[dict[str, Any]]:
        """Render the session variables in the order the agent defines them."""
        variables = [
            _variable("$Context.EndUserLanguage", language),
            _variable("Job_Application_Number", application_ref),
        ]
        for name, type_, attr in JOB_VARIABLES:
            value = getattr(self.details, attr)
            variables.append(_variable(name, "" if value is None else value, type_))
        variables.append(_variable("T_C_Agreed", "true" if terms_agreed else "false"))
        variables.append(_variable("allowUser", self.allow_user))
        return variables
