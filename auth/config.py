"""Authentication configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from auth.types import Role

ENV_PREFIX = "TASKDESK_"


class EndpointSet(BaseModel):
    """Paths (relative to api_base_url) for one two-step flow."""

    submit: str = Field(..., min_length=1, description="Step 1: credentials/registration")
    verify: str = Field(..., min_length=1, description="Step 2: exchange OTP code")
    resend: str = Field(..., min_length=1, description="Issue a fresh OTP code")


LOGIN_ENDPOINTS = EndpointSet(
    submit="auth/login",
    verify="auth/verify-otp",
    resend="auth/resend-otp",
)

# Registration lives under a different prefix on the backend.
REGISTER_ENDPOINTS = EndpointSet(
    submit="register",
    verify="verify-otp",
    resend="resend-otp",
)


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Routes are client-side paths; endpoints are backend paths relative
    to api_base_url.
    """

    # Backend
    api_base_url: str = Field(
        default="http://localhost:8000/api",
        description="Base URL of the REST backend",
    )
    request_timeout_seconds: float = Field(
        default=10,
        description="Per-request timeout",
        ge=1,
        le=120,
    )
    login_endpoints: EndpointSet = Field(default_factory=lambda: LOGIN_ENDPOINTS.model_copy())
    register_endpoints: EndpointSet = Field(default_factory=lambda: REGISTER_ENDPOINTS.model_copy())
    profile_endpoint: str = Field(default="auth/profile")
    profile_update_endpoint: str = Field(default="auth/profile/update")

    # OTP
    otp_length: int = Field(
        default=6,
        description="Maximum accepted OTP code length",
        ge=4,
        le=10,
    )

    # Routes
    login_route: str = Field(default="/login")
    admin_landing_route: str = Field(default="/admin/dashboard")
    employee_landing_route: str = Field(default="/employe/dashboard")

    # Session persistence
    session_storage_path: Path | None = Field(
        default=None,
        description="JSON file holding the persisted session (None: memory only)",
    )
    session_storage_key: str = Field(
        default="taskdesk:session",
        description="Key used by key-value session storage",
    )

    # Banner messages
    login_failed_message: str = Field(default="Login failed")
    register_failed_message: str = Field(default="Registration failed")
    otp_failed_message: str = Field(default="Invalid OTP code")
    resend_failed_message: str = Field(default="Could not send a new code")
    session_save_failed_message: str = Field(
        default="Your code was accepted but the session could not be saved. Request a new code and try again.",
    )
    transport_failed_message: str = Field(
        default="Server unreachable. Check your connection and try again.",
    )
    registration_success_message: str = Field(
        default="Registration complete. You can now log in.",
    )

    def landing_route(self, role: Role) -> str:
        """Landing page for a role."""
        if role is Role.ADMIN:
            return self.admin_landing_route
        if role is Role.EMPLOYEE:
            return self.employee_landing_route
        raise ValueError(f"Unknown role: {role!r}")

    def url(self, path: str) -> str:
        """Join a backend path onto api_base_url."""
        return f"{self.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    @classmethod
    def from_env(cls, dotenv_path: Path | None = None) -> "AuthConfig":
        """
        Build config from TASKDESK_* environment variables.

        A .env file is loaded first (without overriding real env vars).
        Unset variables fall back to field defaults.
        """
        load_dotenv(dotenv_path)

        values: dict[str, object] = {}
        for name in (
            "api_base_url",
            "request_timeout_seconds",
            "otp_length",
            "login_route",
            "admin_landing_route",
            "employee_landing_route",
            "session_storage_path",
            "session_storage_key",
        ):
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                values[name] = raw
        return cls.model_validate(values)
