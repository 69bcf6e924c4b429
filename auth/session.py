"""Current-session container.

One SessionStore instance is created at application start and injected
into every component that needs the identity. It holds either a complete
session (token and user with an id) or nothing; partial states are never
built, stored or restored.

No expiry or refresh is performed. The session ends only through clear(),
called on logout or when the backend rejects the token.
"""

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from auth.config import AuthConfig
from auth.event_bus import EventBus
from auth.events import SessionEnded, SessionStarted, SessionUserUpdated
from auth.exceptions import InvalidSessionError, NoActiveSessionError
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.storage import FileSessionStorage, SessionStorage, ValkeySessionStorage
from auth.types import Role, Session, UserRecord

if TYPE_CHECKING:
    from clients.valkey_client import ValkeyClient

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the current identity and keeps storage and subscribers in sync."""

    def __init__(
        self,
        storage: SessionStorage | None = None,
        event_bus: EventBus | None = None,
        security_logger: SecurityLogger | None = None,
    ):
        self._storage = storage
        self._event_bus = event_bus
        self._security_logger = security_logger or SecurityLogger()
        self._session: Session | None = None

    @classmethod
    def from_config(
        cls,
        config: AuthConfig,
        valkey: "ValkeyClient | None" = None,
        event_bus: EventBus | None = None,
        security_logger: SecurityLogger | None = None,
    ) -> "SessionStore":
        """
        Build the application's store and restore any persisted session.

        A Valkey client takes precedence over session_storage_path; with
        neither, the session lives in memory only.
        """
        storage: SessionStorage | None = None
        if valkey is not None:
            storage = ValkeySessionStorage(valkey, config.session_storage_key)
        elif config.session_storage_path is not None:
            storage = FileSessionStorage(config.session_storage_path)

        store = cls(storage=storage, event_bus=event_bus, security_logger=security_logger)
        store.restore()
        return store

    # -- read side -----------------------------------------------------------

    def read(self) -> Session | None:
        return self._session

    @property
    def current_user(self) -> UserRecord | None:
        return self._session.user if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def role(self) -> Role | None:
        return self._session.role if self._session else None

    # -- lifecycle -----------------------------------------------------------

    def write(self, user: UserRecord | dict[str, Any], token: str) -> Session:
        """
        Replace the current session with (user, token).

        Both parts are validated before anything changes. Storage is written
        before memory so that a storage failure leaves the store untouched.

        Raises:
            InvalidSessionError: Token empty or user missing/invalid.
            SessionPersistenceError: Storage write failed; nothing changed.
        """
        session = self._build(user, token)

        if self._storage is not None:
            self._storage.save(session.model_dump(mode="json"))
        self._session = session

        self._security_logger.log(
            SecurityEvent.SESSION_CREATED,
            email=session.user.email,
            user_id=session.user.id,
            details={"role": session.role.value},
        )
        self._publish(SessionStarted(session=session))
        return session

    def merge_user(self, partial: dict[str, Any]) -> Session:
        """
        Shallow-merge fields into the current user (after a profile edit).

        The user id cannot change through a merge.

        Raises:
            NoActiveSessionError: No session present.
            InvalidSessionError: partial carries a different id, or the
                merged record is invalid. The session is left unchanged.
            SessionPersistenceError: Storage write failed; nothing changed.
        """
        if self._session is None:
            raise NoActiveSessionError("Cannot update user: no active session")

        current = self._session.user
        changes = dict(partial)
        if "id" in changes:
            if str(changes.pop("id")) != str(current.id):
                raise InvalidSessionError("Cannot change user id through merge_user")

        try:
            merged = UserRecord.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            logger.warning(f"Rejected user merge: {e.error_count()} invalid fields")
            raise InvalidSessionError(f"Invalid user record: {e.error_count()} errors") from e
        session = self._session.model_copy(update={"user": merged})

        if self._storage is not None:
            self._storage.save(session.model_dump(mode="json"))
        self._session = session

        self._security_logger.log(
            SecurityEvent.SESSION_UPDATED,
            email=merged.email,
            user_id=merged.id,
            details={"fields": sorted(changes)},
        )
        self._publish(SessionUserUpdated(session=session, changed_fields=tuple(sorted(changes))))
        return session

    def clear(self, reason: str = "logout") -> None:
        """
        Remove token and user. Idempotent.

        Storage is always cleared, even when memory was already empty, so a
        stale persisted record cannot survive a logout.
        """
        previous = self._session
        self._session = None

        if self._storage is not None:
            self._storage.delete()

        if previous is None:
            return

        self._security_logger.log(
            SecurityEvent.SESSION_REVOKED,
            email=previous.user.email,
            user_id=previous.user.id,
            details={"reason": reason},
        )
        self._publish(SessionEnded(reason=reason))

    def restore(self) -> Session | None:
        """
        Load a previously persisted session. Called once at start-up.

        Corrupt or partial records are deleted and ignored.
        """
        if self._storage is None:
            return None

        try:
            data = self._storage.load()
        except ValueError as e:
            logger.warning(f"Discarding unreadable persisted session: {e}")
            self._storage.delete()
            return None

        if data is None:
            return None

        try:
            session = Session.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding partial persisted session ({e.error_count()} errors)")
            self._storage.delete()
            return None

        self._session = session
        self._security_logger.log(
            SecurityEvent.SESSION_RESTORED,
            email=session.user.email,
            user_id=session.user.id,
        )
        self._publish(SessionStarted(session=session, restored=True))
        return session

    # -- internals -----------------------------------------------------------

    def _build(self, user: UserRecord | dict[str, Any], token: str) -> Session:
        if not token:
            raise InvalidSessionError("Session requires an access token")
        if user is None:
            raise InvalidSessionError("Session requires a user")
        try:
            record = user if isinstance(user, UserRecord) else UserRecord.model_validate(user)
            return Session(token=token, user=record)
        except ValidationError as e:
            raise InvalidSessionError(f"Invalid user record: {e.error_count()} errors") from e

    def _publish(self, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
