"""Two-step login/registration state machine.

AWAITING_CREDENTIALS -> AWAITING_OTP -> AUTHENTICATED, with "back" from
AWAITING_OTP to AWAITING_CREDENTIALS. One AuthFlow belongs to one
login/registration screen; it is not persisted and not shared.

Every network call runs under the flow's current CancelScope. back() and
close() cancel that scope, so a response arriving afterwards is dropped
without touching state or the session store.
"""

import logging
from typing import Any, Callable

from auth.config import AuthConfig
from auth.exceptions import AuthError, InvalidTransitionError, SubmissionInProgressError
from auth.form_errors import FormErrors
from auth.otp import OtpChallenge
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.service import AuthService
from auth.session import SessionStore
from auth.submitter import CredentialSubmitter
from auth.types import AuthState, Credentials
from utils.cancellation import CancelScope

logger = logging.getLogger(__name__)


class AuthFlow:
    """Orders credential submission and OTP exchange, then hands off the session."""

    def __init__(
        self,
        config: AuthConfig,
        service: AuthService,
        session_store: SessionStore,
        security_logger: SecurityLogger | None = None,
        failure_message: str | None = None,
        navigate: Callable[[str], Any] | None = None,
    ):
        self._config = config
        self._store = session_store
        self._security_logger = security_logger or SecurityLogger()
        self._failure_message = failure_message or config.login_failed_message
        self._navigate = navigate

        self._submitter = CredentialSubmitter(service, self._security_logger)
        self._otp = OtpChallenge(service, self._security_logger, config.otp_length)

        self._state = AuthState.AWAITING_CREDENTIALS
        self._email: str | None = None
        self._otp_code = ""
        self._scope = CancelScope("step-1")
        self._closed = False

        self.errors = FormErrors(config.transport_failed_message)
        self.success_message: str | None = None

    @classmethod
    def for_login(cls, config, backend, session_store, **kwargs) -> "AuthFlow":
        return cls(
            config,
            AuthService.for_login(config, backend),
            session_store,
            failure_message=config.login_failed_message,
            **kwargs,
        )

    @classmethod
    def for_registration(cls, config, backend, session_store, **kwargs) -> "AuthFlow":
        return cls(
            config,
            AuthService.for_registration(config, backend),
            session_store,
            failure_message=config.register_failed_message,
            **kwargs,
        )

    # -- observable state ----------------------------------------------------

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def email(self) -> str | None:
        """Email accepted in step 1; None outside AWAITING_OTP."""
        return self._email

    @property
    def otp_code(self) -> str:
        return self._otp_code

    @property
    def busy(self) -> bool:
        return self._submitter.busy or self._otp.verifying

    @property
    def resending(self) -> bool:
        return self._otp.resending

    @property
    def closed(self) -> bool:
        return self._closed

    # -- input ---------------------------------------------------------------

    def edit_field(self, name: str) -> None:
        """User typed into `name`."""
        self.errors.clear_field(name)

    def set_otp_code(self, value: str) -> None:
        """OTP input changed. Input is capped at otp_length like the form field."""
        self._otp_code = value[: self._config.otp_length]
        self.errors.clear_field("otp_code")

    # -- transitions ---------------------------------------------------------

    async def submit_credentials(self, credentials: Credentials) -> bool:
        """
        Step 1. Returns True if the flow advanced to AWAITING_OTP.

        Raises:
            InvalidTransitionError: Not in AWAITING_CREDENTIALS, or closed.
        """
        self._require(AuthState.AWAITING_CREDENTIALS)
        scope = self._scope
        self.errors.clear()
        self.success_message = None

        try:
            advance = await self._submitter.submit(credentials)
        except SubmissionInProgressError:
            logger.debug("Ignoring credentials submit while one is in flight")
            return False
        except AuthError as e:
            if not self._drop_if_stale(scope, "submit_credentials"):
                self.errors.apply(e, self._failure_message)
            return False

        if self._drop_if_stale(scope, "submit_credentials"):
            return False

        self._email = advance.email
        self._otp_code = ""
        self._state = AuthState.AWAITING_OTP
        self._scope = CancelScope("step-2")
        return True

    async def verify(self, code: str | None = None) -> str | None:
        """
        Step 2. Returns the route to navigate to on success, else None.

        Login: writes the session and returns the role's landing route.
        Registration without a session payload: sets success_message and
        returns the login route. If the session cannot be stored the flow
        stays in AWAITING_OTP with a banner.

        Raises:
            InvalidTransitionError: No accepted credentials in this flow.
        """
        self._require(AuthState.AWAITING_OTP)
        if code is not None:
            self.set_otp_code(code)
        scope = self._scope
        email = self._email
        self.errors.clear()

        try:
            outcome = await self._otp.verify(email, self._otp_code)
        except SubmissionInProgressError:
            logger.debug("Ignoring verify while one is in flight")
            return None
        except AuthError as e:
            if not self._drop_if_stale(scope, "verify"):
                self.errors.apply(e, self._config.otp_failed_message)
            return None

        if self._drop_if_stale(scope, "verify"):
            return None

        if outcome.session is not None:
            try:
                session = self._store.write(outcome.session.user, outcome.session.token)
            except AuthError as e:
                logger.error(f"Verified session could not be stored: {e}")
                self.errors.set_message(self._config.session_save_failed_message)
                return None
            self._state = AuthState.AUTHENTICATED
            route = self._config.landing_route(session.role)
        else:
            self.success_message = self._config.registration_success_message
            self._state = AuthState.ANONYMOUS
            route = self._config.login_route

        self._email = None
        self._otp_code = ""
        self.close()
        if self._navigate is not None:
            self._navigate(route)
        return route

    async def resend(self) -> bool:
        """
        Ask for a new code. Never changes state or the typed OTP input.

        Raises:
            InvalidTransitionError: Not in AWAITING_OTP.
        """
        self._require(AuthState.AWAITING_OTP)
        scope = self._scope

        try:
            await self._otp.resend(self._email)
        except SubmissionInProgressError:
            logger.debug("Ignoring resend while one is in flight")
            return False
        except AuthError:
            if not self._drop_if_stale(scope, "resend"):
                self.errors.set_message(self._config.resend_failed_message)
            return False

        if self._drop_if_stale(scope, "resend"):
            return False

        self.errors.message = None
        return True

    def back(self) -> bool:
        """
        Return from AWAITING_OTP to AWAITING_CREDENTIALS.

        Drops the OTP input and the retained email; the user re-enters
        credentials. Outstanding step 2 requests are cancelled.
        """
        if self._closed or self._state is not AuthState.AWAITING_OTP:
            return False

        self._scope.cancel()
        self._scope = CancelScope("step-1")
        self._state = AuthState.AWAITING_CREDENTIALS
        self._email = None
        self._otp_code = ""
        self.errors.clear()
        return True

    def close(self) -> None:
        """Screen unmounted. Any late response is ignored from now on."""
        self._scope.cancel()
        self._closed = True

    # -- internals -----------------------------------------------------------

    def _require(self, state: AuthState) -> None:
        if self._closed:
            raise InvalidTransitionError("Auth flow is closed")
        if self._state is not state:
            raise InvalidTransitionError(
                f"Cannot do this from {self._state.value}; expected {state.value}"
            )

    def _drop_if_stale(self, scope: CancelScope, operation: str) -> bool:
        if not scope.cancelled:
            return False
        logger.debug(f"Dropping late {operation} response for {scope!r}")
        self._security_logger.log(
            SecurityEvent.STALE_RESPONSE_DROPPED,
            details={"operation": operation, "scope": scope.id},
        )
        return True
