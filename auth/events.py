"""
Session events.

Published by SessionStore whenever the current identity changes so that
the shell layer (navigation, theme, sidebars) can react without polling.
Events carry the session so handlers don't need to read the store back.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from auth.types import Session
from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class SessionEvent:
    """Base class for all session events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True, kw_only=True)
class SessionStarted(SessionEvent):
    """A session was written (OTP exchange or restore from storage)."""
    session: Session
    restored: bool = False


@dataclass(frozen=True, kw_only=True)
class SessionUserUpdated(SessionEvent):
    """User fields were merged into the current session."""
    session: Session
    changed_fields: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class SessionEnded(SessionEvent):
    """The session was cleared (logout or token rejected)."""
    reason: str = "logout"
