"""Client-side navigation with a guard check on every attempt.

The session is read from the store at each navigation, never cached, so a
logout elsewhere in the UI takes effect on the very next navigation. When
attached to an EventBus the navigator also re-checks the current page as
soon as the session starts or ends.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from auth.config import AuthConfig
from auth.event_bus import EventBus
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.session import SessionStore
from routing.guard import (
    Allow,
    AnonymousOnlyGuard,
    AuthenticatedOnlyGuard,
    RedirectTo,
    RouteGuard,
)
from routing.routes import Access, Route, RouteTable, normalize_path

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5


class NavigationStatus(str, Enum):
    ALLOWED = "allowed"
    REDIRECTED = "redirected"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class NavigationResult:
    """Where a navigation attempt ended up."""

    requested: str
    path: str
    status: NavigationStatus
    route: Route | None = None
    params: dict[str, str] = field(default_factory=dict)


class Navigator:
    """Resolves paths, applies the route's guard, follows redirects."""

    def __init__(
        self,
        routes: RouteTable,
        session_store: SessionStore,
        config: AuthConfig,
        security_logger: SecurityLogger | None = None,
        on_change: Callable[[NavigationResult], None] | None = None,
    ):
        self._routes = routes
        self._store = session_store
        self._security_logger = security_logger or SecurityLogger()
        self._on_change = on_change
        self._guards: dict[Access, RouteGuard] = {
            Access.ANONYMOUS_ONLY: AnonymousOnlyGuard(config),
            Access.AUTHENTICATED: AuthenticatedOnlyGuard(config),
        }
        self.current: NavigationResult | None = None
        self.history: list[NavigationResult] = []

    def attach(self, event_bus: EventBus) -> None:
        """Re-check the current page whenever the session starts or ends."""
        event_bus.subscribe("SessionStarted", lambda event: self.refresh())
        event_bus.subscribe("SessionEnded", lambda event: self.refresh())

    def navigate(self, path: str) -> NavigationResult:
        """Attempt to open `path`; returns the page actually shown."""
        requested = normalize_path(path)
        target = requested
        redirected = False

        for _ in range(MAX_REDIRECTS + 1):
            match = self._routes.resolve(target)
            if match is None:
                result = NavigationResult(requested, target, NavigationStatus.NOT_FOUND)
                return self._commit(result)

            decision = self._evaluate(match.route)
            if isinstance(decision, Allow):
                status = NavigationStatus.REDIRECTED if redirected else NavigationStatus.ALLOWED
                result = NavigationResult(requested, target, status, match.route, match.params)
                return self._commit(result)

            self._log_denied(target, decision)
            target = normalize_path(decision.path)
            redirected = True

        raise RuntimeError(f"Redirect loop while navigating to {requested}")

    def refresh(self) -> NavigationResult | None:
        """Re-run the guard for the current page."""
        if self.current is None:
            return None
        return self.navigate(self.current.path)

    def _evaluate(self, route: Route) -> Allow | RedirectTo:
        guard = self._guards.get(route.access)
        if guard is None:
            return Allow()
        return guard.evaluate(self._store.read(), route.roles)

    def _log_denied(self, path: str, decision: RedirectTo) -> None:
        user = self._store.current_user
        self._security_logger.log(
            SecurityEvent.ROUTE_DENIED,
            email=user.email if user else None,
            user_id=user.id if user else None,
            details={"path": path, "redirect": decision.path},
        )

    def _commit(self, result: NavigationResult) -> NavigationResult:
        changed = self.current is None or self.current.path != result.path
        self.current = result
        self.history.append(result)
        logger.debug(f"Navigation {result.requested} -> {result.path} ({result.status.value})")
        if changed and self._on_change is not None:
            self._on_change(result)
        return result
