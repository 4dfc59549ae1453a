"""
Onboarding error types.

Oracle failures are absorbed by the session; the rest are caller errors.
"""

from enum import Enum


class OracleErrorKind(str, Enum):
    """Why an oracle round trip failed."""
    AUTH_FAILURE = "auth_failure"
    RATE_LIMITED = "rate_limited"
    BAD_REQUEST = "bad_request"
    TIMEOUT = "timeout"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN_TRANSPORT_ERROR = "unknown_transport_error"


class OnboardingError(Exception):
    """Base class for onboarding errors."""


class OracleError(OnboardingError):
    """The question oracle could not be reached or returned nothing."""

    def __init__(self, kind: OracleErrorKind, message: str = "", status_code: int | None = None):
        self.kind = kind
        self.status_code = status_code
        super().__init__(message or kind.value)


class OracleRequestError(OnboardingError, ValueError):
    """Session state handed to the oracle gateway is malformed."""


class SessionBusyError(OnboardingError):
    """An action arrived while a question round trip was still in flight."""
