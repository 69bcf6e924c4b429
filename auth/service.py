"""Authentication service - backend calls of the two-step OTP flow.

Blocking; the async flow components run these calls in a worker thread.
"""

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from auth.config import AuthConfig, EndpointSet
from auth.exceptions import AuthenticationError
from auth.types import Credentials, OtpAttempt, Session, UserRecord, VerifyOutcome

if TYPE_CHECKING:
    from clients.backend_client import BackendClient

logger = logging.getLogger(__name__)


def parse_session(body: dict[str, Any]) -> Session | None:
    """
    Extract a session from a verify-otp response body.

    The access token is tokens.access, falling back to token. Returns None
    when the body carries neither a token nor a user; raises
    AuthenticationError when it carries only one of them or an invalid
    user record.
    """
    tokens = body.get("tokens") if isinstance(body.get("tokens"), dict) else {}
    token = tokens.get("access") or body.get("token")
    user = body.get("user")

    if not token and not user:
        return None
    if not token or not isinstance(user, dict):
        logger.error("verify-otp response carried a partial session")
        raise AuthenticationError("Incomplete session in server response")

    try:
        return Session(token=token, user=UserRecord.model_validate(user))
    except ValidationError as e:
        logger.error(f"verify-otp response carried an invalid user: {e.error_count()} errors")
        raise AuthenticationError("Invalid user in server response") from e


class AuthService:
    """Backend operations for one endpoint set (login or registration).

    Handles:
    - Credential / registration submission
    - OTP verification (code -> session)
    - OTP resend
    """

    def __init__(
        self,
        config: AuthConfig,
        backend: "BackendClient",
        endpoints: EndpointSet,
        failure_message: str,
        requires_session: bool = True,
    ):
        self._config = config
        self._backend = backend
        self._endpoints = endpoints
        self._failure_message = failure_message
        self._requires_session = requires_session

    @classmethod
    def for_login(cls, config: AuthConfig, backend: "BackendClient") -> "AuthService":
        return cls(config, backend, config.login_endpoints, config.login_failed_message)

    @classmethod
    def for_registration(cls, config: AuthConfig, backend: "BackendClient") -> "AuthService":
        return cls(
            config,
            backend,
            config.register_endpoints,
            config.register_failed_message,
            requires_session=False,
        )

    @property
    def endpoints(self) -> EndpointSet:
        return self._endpoints

    def submit_credentials(self, credentials: Credentials) -> None:
        """
        Send step 1. Success carries no body contract.

        Raises:
            FieldValidationError, AuthenticationError, TransportError
        """
        self._backend.post(
            self._endpoints.submit,
            credentials.to_payload(),
            failure_message=self._failure_message,
        )

    def verify_otp(self, attempt: OtpAttempt) -> VerifyOutcome:
        """
        Exchange email + code for a session.

        Raises:
            FieldValidationError, AuthenticationError, TransportError
        """
        body = self._backend.post(
            self._endpoints.verify,
            attempt.to_payload(),
            failure_message=self._config.otp_failed_message,
        )
        session = parse_session(body)
        if session is None and self._requires_session:
            logger.error("verify-otp succeeded without a session payload")
            raise AuthenticationError(self._config.otp_failed_message)
        return VerifyOutcome(email=attempt.email, session=session)

    def resend_otp(self, email: str) -> None:
        """
        Ask the backend to issue a fresh code. Any earlier code for this
        email must be treated as invalid afterwards.
        """
        self._backend.post(
            self._endpoints.resend,
            {"email": email},
            failure_message=self._config.resend_failed_message,
        )
