"""Pydantic models for auth domain."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.timezone import now_utc


class Role(str, Enum):
    """Closed set of roles. Derived from UserRecord.is_admin."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AuthState(str, Enum):
    """Steps of the login/registration flow."""

    ANONYMOUS = "anonymous"
    AWAITING_CREDENTIALS = "awaiting_credentials"
    AWAITING_OTP = "awaiting_otp"
    AUTHENTICATED = "authenticated"


class UserRecord(BaseModel):
    """A user as returned by the backend.

    Extra fields (first_name, profile_picture, ...) are kept so that
    profile screens can read them back from the session.
    """

    id: int | str
    username: str = ""
    email: str = Field(..., min_length=1, description="Login email as stored by the backend")
    is_admin: bool = False
    is_verified: bool = False

    model_config = ConfigDict(extra="allow")

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: int | str) -> int | str:
        if isinstance(value, str) and not value.strip():
            raise ValueError("user id must not be empty")
        return value

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.EMPLOYEE


class Session(BaseModel):
    """An access token paired with the authenticated user."""

    token: str = Field(..., min_length=1, description="Access token (opaque string)")
    user: UserRecord
    created_at: datetime = Field(default_factory=now_utc)

    model_config = ConfigDict(frozen=True)

    @property
    def role(self) -> Role:
        return self.user.role


class Credentials(BaseModel):
    """Step 1 input for login."""

    email: str
    password: str

    def to_payload(self) -> dict[str, Any]:
        return {"email": self.email, "password": self.password}


class Registration(Credentials):
    """Step 1 input for registration.

    accept_terms is checked locally and never sent.
    """

    username: str
    password_confirmation: str
    accept_terms: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "email": self.email,
            "password": self.password,
            "password_confirmation": self.password_confirmation,
        }


class OtpAttempt(BaseModel):
    """Step 2 input: the code tied to the email from step 1."""

    email: str
    code: str

    def to_payload(self) -> dict[str, Any]:
        return {"email": self.email, "otp_code": self.code}


class Advance(BaseModel):
    """Step 1 accepted; carries the email into step 2."""

    email: str


class VerifyOutcome(BaseModel):
    """Result of a successful OTP exchange.

    session is None when the backend verified the code without opening
    a session (registration endpoint set).
    """

    email: str
    session: Session | None = None
