"""Authenticated profile calls and logout.

Both profile calls merge the returned user into the current session. A
401 from the backend means the token is no longer valid: the session is
cleared before the error propagates, so the next navigation lands on the
login page.
"""

import asyncio
from typing import TYPE_CHECKING, Any

from auth.config import AuthConfig
from auth.exceptions import NoActiveSessionError, SessionInvalidError
from auth.session import SessionStore
from auth.types import Session

if TYPE_CHECKING:
    from clients.backend_client import BackendClient


class ProfileService:
    """Profile fetch/update for the signed-in user."""

    def __init__(self, config: AuthConfig, backend: "BackendClient", session_store: SessionStore):
        self._config = config
        self._backend = backend
        self._store = session_store

    async def fetch_profile(self) -> Session:
        """GET the profile and merge it into the session."""
        token = self._token()
        body = await self._call(self._backend.get, self._config.profile_endpoint, token=token)
        return self._store.merge_user(_user_fields(body))

    async def update_profile(self, fields: dict[str, Any]) -> Session:
        """
        PUT profile changes and merge the backend's answer into the session.

        Raises:
            NoActiveSessionError: Not signed in.
            FieldValidationError: Backend rejected some fields (422).
            SessionInvalidError: Token rejected; session already cleared.
            AuthenticationError, TransportError
        """
        token = self._token()
        body = await self._call(
            self._backend.put,
            self._config.profile_update_endpoint,
            fields,
            token=token,
        )
        return self._store.merge_user(_user_fields(body) or fields)

    def logout(self) -> str:
        """Clear the session. Returns the login route."""
        self._store.clear(reason="logout")
        return self._config.login_route

    def _token(self) -> str:
        session = self._store.read()
        if session is None:
            raise NoActiveSessionError("Profile requires an active session")
        return session.token

    async def _call(self, method, *args, **kwargs) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(method, *args, **kwargs)
        except SessionInvalidError:
            self._store.clear(reason="token_rejected")
            raise


def _user_fields(body: dict[str, Any]) -> dict[str, Any]:
    """Profile endpoints answer either {user: {...}} or the user itself."""
    user = body.get("user")
    return user if isinstance(user, dict) else body
