"""Step 2 of the auth flow: one-time code verification and resend."""

import asyncio

from auth.exceptions import AuthError, SubmissionInProgressError
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.service import AuthService
from auth.types import OtpAttempt, VerifyOutcome
from auth.validation import validate_otp_code


class OtpChallenge:
    """
    Verifies and resends codes for one form instance.

    verify and resend are guarded separately: a resend never waits for,
    cancels or blocks an outstanding verify.
    """

    def __init__(self, service: AuthService, security_logger: SecurityLogger, max_length: int):
        self._service = service
        self._security_logger = security_logger
        self._max_length = max_length
        self._verifying = False
        self._resending = False

    @property
    def verifying(self) -> bool:
        return self._verifying

    @property
    def resending(self) -> bool:
        return self._resending

    async def verify(self, email: str, code: str) -> VerifyOutcome:
        """
        Exchange the code for a session.

        Raises:
            SubmissionInProgressError: Previous verify still running.
            LocalValidationError: Empty or over-long code.
            FieldValidationError, AuthenticationError, TransportError
        """
        if self._verifying:
            raise SubmissionInProgressError("Code is already being verified")

        code = validate_otp_code(code, self._max_length)

        self._verifying = True
        try:
            outcome = await asyncio.to_thread(
                self._service.verify_otp, OtpAttempt(email=email, code=code)
            )
        except AuthError as e:
            self._security_logger.log(
                SecurityEvent.OTP_FAILED,
                email=email,
                details={"error": type(e).__name__},
            )
            raise
        finally:
            self._verifying = False

        user_id = outcome.session.user.id if outcome.session else None
        self._security_logger.log(SecurityEvent.OTP_VERIFIED, email=email, user_id=user_id)
        return outcome

    async def resend(self, email: str) -> None:
        """
        Request a fresh code. Earlier codes for this email stop being valid.

        Raises:
            SubmissionInProgressError: Previous resend still running.
            FieldValidationError, AuthenticationError, TransportError
        """
        if self._resending:
            raise SubmissionInProgressError("A new code is already being requested")

        self._resending = True
        try:
            await asyncio.to_thread(self._service.resend_otp, email)
        except AuthError as e:
            self._security_logger.log(
                SecurityEvent.OTP_RESEND_FAILED,
                email=email,
                details={"error": type(e).__name__},
            )
            raise
        finally:
            self._resending = False

        self._security_logger.log(SecurityEvent.OTP_RESENT, email=email)
