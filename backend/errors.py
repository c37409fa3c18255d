"""
Error taxonomy for the agent relay.

Each error carries the HTTP status and a short machine-readable kind so the
API layer can render one consistent JSON body. Nothing here is retried.
"""


class RelayError(Exception):
    """Base class for failures surfaced to the browser."""

    status_code = 500
    kind = "relay_failure"
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"status": "error", "error": self.kind, "message": self.message}


class AuthFailure(RelayError):
    """Token exchange with the CRM failed."""

    kind = "auth_failure"
    default_message = "Failed to get access token"


class FlowExecutionError(RelayError):
    """A CRM flow reported failure or could not be invoked."""

    kind = "flow_execution_failed"
    default_message = "Flow execution failed"


class InvalidReferenceError(RelayError):
    """The application reference did not resolve to a candidate and job."""

    status_code = 400
    kind = "invalid_reference"
    default_message = "Invalid Job Application number"


class MessageTooLong(RelayError):
    status_code = 400
    kind = "message_too_long"
    default_message = "Message too long"


class RelayFailure(RelayError):
    """Generic upstream fault on session open, message, delete or stream."""
