"""Pre-network validation for the login and registration forms.

Nothing here talks to the backend. Real validation stays server-side;
these checks only stop requests that cannot succeed.
"""

import re

from auth.exceptions import LocalValidationError
from auth.types import Credentials, Registration

TERMS_NOT_ACCEPTED = "You must accept the terms of use to continue"
PASSWORD_MISMATCH = "Passwords do not match"
REQUIRED = "This field is required"

STRENGTH_LABELS = (
    (25, "very weak"),
    (50, "weak"),
    (75, "medium"),
)


def validate_credentials(credentials: Credentials) -> None:
    """
    Check step 1 input before submitting.

    Raises:
        LocalValidationError: On the first failing rule; field_errors
            lists every empty required field.
    """
    if isinstance(credentials, Registration) and not credentials.accept_terms:
        raise LocalValidationError(TERMS_NOT_ACCEPTED)

    required = ["email", "password"]
    if isinstance(credentials, Registration):
        required = ["username", "email", "password", "password_confirmation"]

    missing = {
        name: [REQUIRED]
        for name in required
        if not str(getattr(credentials, name)).strip()
    }
    if missing:
        raise LocalValidationError("Please fill in the required fields", field_errors=missing)

    if isinstance(credentials, Registration):
        if credentials.password_confirmation != credentials.password:
            raise LocalValidationError(
                PASSWORD_MISMATCH,
                field_errors={"password_confirmation": [PASSWORD_MISMATCH]},
            )


def validate_otp_code(code: str, max_length: int) -> str:
    """
    Check an OTP code's shape. Returns the stripped code.

    Only length is enforced; digits and checksum are the backend's job.
    """
    code = code.strip()
    if not code:
        raise LocalValidationError(REQUIRED, field_errors={"otp_code": [REQUIRED]})
    if len(code) > max_length:
        message = f"Code must be at most {max_length} characters"
        raise LocalValidationError(message, field_errors={"otp_code": [message]})
    return code


def password_strength(password: str) -> int:
    """Score 0-100: 25 points each for length >= 8, lowercase, uppercase, digit."""
    score = 0
    if len(password) >= 8:
        score += 25
    if re.search(r"[a-z]", password):
        score += 25
    if re.search(r"[A-Z]", password):
        score += 25
    if re.search(r"[0-9]", password):
        score += 25
    return score


def password_strength_label(score: int) -> str:
    for threshold, label in STRENGTH_LABELS:
        if score < threshold:
            return label
    return "strong"
