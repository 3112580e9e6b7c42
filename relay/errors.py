"""
Error taxonomy for the relay.

Every error carries the HTTP status code and JSON body the client receives.
"""

from typing import Any, Dict, List, Sequence


REQUIRED_FIELDS = ("slope", "rainfall", "temperature")
UNAVAILABLE_MESSAGE = "ML scoring service unavailable"
DEFAULT_PREDICTION_ERROR = "Prediction failed"


class RelayError(Exception):
    """Base class for errors that map onto a client-facing JSON response."""

    status_code = 500

    def to_body(self) -> Dict[str, Any]:
        return {"error": str(self)}


class InputValidationError(RelayError):
    """Client input was rejected before any upstream call."""

    status_code = 400


class MissingFieldsError(InputValidationError):
    def __init__(self, missing: Sequence[str]):
        self.missing: List[str] = list(missing)
        # The message always names all required fields, not just the missing ones
        super().__init__(f"Missing required fields: {', '.join(REQUIRED_FIELDS)}")


class InvalidFieldsError(InputValidationError):
    def __init__(self, invalid: Sequence[str]):
        self.invalid: List[str] = list(invalid)
        super().__init__(f"Invalid numeric values for fields: {', '.join(self.invalid)}")


class UpstreamApplicationError(RelayError):
    """The scoring service answered with a non-2xx status."""

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body
        message = None
        if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
            message = body["error"]
        super().__init__(message or DEFAULT_PREDICTION_ERROR)

    def to_body(self) -> Dict[str, Any]:
        return {"error": str(self), "details": self.body}


class UpstreamUnavailableError(RelayError):
    """The scoring service could not be reached at all."""

    status_code = 503

    def __init__(self, upstream_url: str, reason: str = ""):
        self.upstream_url = upstream_url
        self.reason = reason
        super().__init__(UNAVAILABLE_MESSAGE)

    def to_body(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "message": f"Please ensure the ML scoring service is running at {self.upstream_url}",
        }
