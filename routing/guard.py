"""Route guards.

A guard is a pure decision over (session, accepted roles): same inputs,
same answer. It never reads global state; the navigator passes in the
session it read at navigation time.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Collection, Union

from auth.config import AuthConfig
from auth.types import Role, Session


@dataclass(frozen=True)
class Allow:
    """Render the requested page."""


@dataclass(frozen=True)
class RedirectTo:
    """Render nothing; go to `path` instead."""

    path: str


Decision = Union[Allow, RedirectTo]

ALLOW = Allow()


class RouteGuard(ABC):
    """Base guard. Subclasses implement evaluate()."""

    def __init__(self, config: AuthConfig):
        self._config = config

    @abstractmethod
    def evaluate(self, session: Session | None, required_roles: Collection[Role] = ()) -> Decision:
        """Decide whether `session` may open a route accepting `required_roles`."""

    def landing_for(self, session: Session) -> RedirectTo:
        return RedirectTo(self._config.landing_route(session.role))


class AnonymousOnlyGuard(RouteGuard):
    """Login/registration pages: signed-in users go to their landing page."""

    def evaluate(self, session: Session | None, required_roles: Collection[Role] = ()) -> Decision:
        if session is None:
            return ALLOW
        return self.landing_for(session)


class AuthenticatedOnlyGuard(RouteGuard):
    """
    Protected pages.

    No session: redirect to login. Session with a role the route does not
    accept: redirect to that user's own landing page, never an error page.
    An empty role set accepts every signed-in user.
    """

    def evaluate(self, session: Session | None, required_roles: Collection[Role] = ()) -> Decision:
        if session is None:
            return RedirectTo(self._config.login_route)
        if required_roles and session.role not in required_roles:
            return self.landing_for(session)
        return ALLOW
