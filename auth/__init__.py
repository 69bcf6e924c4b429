"""Authentication and session modules."""

from auth.exceptions import (
    AuthError,
    LocalValidationError,
    FieldValidationError,
    AuthenticationError,
    SessionInvalidError,
    TransportError,
    NoActiveSessionError,
    InvalidSessionError,
    SessionPersistenceError,
    SubmissionInProgressError,
    InvalidTransitionError,
)
from auth.types import (
    Role,
    AuthState,
    UserRecord,
    Session,
    Credentials,
    Registration,
    OtpAttempt,
    Advance,
    VerifyOutcome,
)
from auth.config import AuthConfig, EndpointSet
from auth.events import SessionEvent, SessionStarted, SessionUserUpdated, SessionEnded
from auth.event_bus import EventBus
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.storage import SessionStorage, FileSessionStorage, ValkeySessionStorage
from auth.session import SessionStore
from auth.form_errors import FormErrors
from auth.service import AuthService
from auth.submitter import CredentialSubmitter
from auth.otp import OtpChallenge
from auth.flow import AuthFlow
from auth.profile import ProfileService
