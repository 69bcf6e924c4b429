"""Typed exceptions for auth failures.

Four kinds reach the login/registration form and are handled there:
LocalValidationError, FieldValidationError, AuthenticationError and
TransportError. The rest signal misuse of the session or the flow.
"""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class LocalValidationError(AuthError):
    """
    Input rejected before any request was made.

    Terms not accepted, password confirmation mismatch, empty fields.
    """

    def __init__(self, message: str, field_errors: dict[str, list[str]] | None = None):
        self.field_errors = field_errors or {}
        super().__init__(message)


class FieldValidationError(AuthError):
    """Backend returned per-field messages (HTTP 422)."""

    def __init__(self, field_errors: dict[str, list[str]]):
        self.field_errors = field_errors
        fields = ", ".join(sorted(field_errors)) or "unknown"
        super().__init__(f"Validation failed for: {fields}")


class AuthenticationError(AuthError):
    """
    Backend rejected the request without field detail.

    Covers wrong credentials, wrong OTP code and any other non-2xx
    status. Message never reveals which field was wrong.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SessionInvalidError(AuthenticationError):
    """Backend no longer accepts the access token (HTTP 401)."""


class TransportError(AuthError):
    """No usable response reached the client."""


class NoActiveSessionError(AuthError):
    """Operation requires a session and none is present."""


class InvalidSessionError(AuthError):
    """Session or user record is incomplete or invalid. Never stored."""


class SessionPersistenceError(AuthError):
    """Session storage could not be written or removed."""


class SubmissionInProgressError(AuthError):
    """A request for the same step is already in flight on this form."""


class InvalidTransitionError(AuthError):
    """Flow step attempted from a state that does not allow it."""
