"""Security event logging for the client-side auth trail.

Events go to the standard logging system under the "security" logger
name and are kept in a bounded in-memory buffer for inspection.
Passwords and OTP codes are never recorded.
"""

import logging
from collections import deque
from enum import Enum
from typing import Any

from utils.timezone import now_utc

logger = logging.getLogger("security")


class SecurityEvent(Enum):
    """Auth security event types."""

    CREDENTIALS_SUBMITTED = "credentials_submitted"
    CREDENTIALS_ACCEPTED = "credentials_accepted"
    CREDENTIALS_REJECTED = "credentials_rejected"
    OTP_VERIFIED = "otp_verified"
    OTP_FAILED = "otp_failed"
    OTP_RESENT = "otp_resent"
    OTP_RESEND_FAILED = "otp_resend_failed"
    STALE_RESPONSE_DROPPED = "stale_response_dropped"
    SESSION_CREATED = "session_created"
    SESSION_RESTORED = "session_restored"
    SESSION_UPDATED = "session_updated"
    SESSION_REVOKED = "session_revoked"
    ROUTE_DENIED = "route_denied"


_WARNING_EVENTS = {
    SecurityEvent.CREDENTIALS_REJECTED,
    SecurityEvent.OTP_FAILED,
    SecurityEvent.OTP_RESEND_FAILED,
}


class SecurityLogger:
    """Append-only security event logger with a bounded history."""

    def __init__(self, max_events: int = 500):
        self._events: deque[dict[str, Any]] = deque(maxlen=max_events)

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        user_id: int | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record a security event."""
        record = {
            "event_type": event.value,
            "email": email,
            "user_id": str(user_id) if user_id is not None else None,
            "details": details or {},
            "created_at": now_utc(),
        }
        self._events.append(record)

        level = logging.WARNING if event in _WARNING_EVENTS else logging.INFO
        logger.log(
            level,
            "%s email=%s user_id=%s details=%s",
            event.value,
            email,
            record["user_id"],
            record["details"],
            extra={"security_event": event.value},
        )

    def get_recent_events(
        self,
        email: str | None = None,
        event_type: SecurityEvent | None = None,
        limit: int = 100,
    ) -> list[dict]:
        """Recent events, newest first, with optional filters."""
        matches = []
        for record in reversed(self._events):
            if email and record["email"] != email:
                continue
            if event_type and record["event_type"] != event_type.value:
                continue
            matches.append(record)
            if len(matches) >= limit:
                break
        return matches
