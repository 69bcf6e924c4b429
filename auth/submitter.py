"""Step 1 of the auth flow: credentials (login) or account details (registration)."""

import asyncio

from auth.exceptions import AuthError, SubmissionInProgressError
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.service import AuthService
from auth.types import Advance, Credentials
from auth.validation import validate_credentials


class CredentialSubmitter:
    """
    Validates and submits step 1 for one form instance.

    At most one submission is in flight at a time; a second call while
    busy raises SubmissionInProgressError without touching the network.
    """

    def __init__(self, service: AuthService, security_logger: SecurityLogger):
        self._service = service
        self._security_logger = security_logger
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def submit(self, credentials: Credentials) -> Advance:
        """
        Submit step 1.

        Returns:
            Advance carrying the email for step 2.

        Raises:
            SubmissionInProgressError: Previous submit still running.
            LocalValidationError: Rejected before any request.
            FieldValidationError, AuthenticationError, TransportError:
                Rejected by (or never reached) the backend.
        """
        if self._busy:
            raise SubmissionInProgressError("Credentials are already being submitted")

        validate_credentials(credentials)

        self._busy = True
        self._security_logger.log(SecurityEvent.CREDENTIALS_SUBMITTED, email=credentials.email)
        try:
            await asyncio.to_thread(self._service.submit_credentials, credentials)
        except AuthError as e:
            self._security_logger.log(
                SecurityEvent.CREDENTIALS_REJECTED,
                email=credentials.email,
                details={"error": type(e).__name__},
            )
            raise
        finally:
            self._busy = False

        self._security_logger.log(SecurityEvent.CREDENTIALS_ACCEPTED, email=credentials.email)
        return Advance(email=credentials.email)
