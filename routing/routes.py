"""Declared client routes and path matching."""

from dataclasses import dataclass, field
from enum import Enum

from auth.types import Role


class Access(str, Enum):
    """Which guard wraps a route."""

    PUBLIC = "public"
    ANONYMOUS_ONLY = "anonymous_only"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Route:
    """A page path such as /admin/tasks/:id and who may open it."""

    pattern: str
    name: str
    access: Access = Access.AUTHENTICATED
    roles: frozenset[Role] = field(default_factory=frozenset)

    @property
    def segments(self) -> tuple[str, ...]:
        return _split(self.pattern)

    def match(self, path: str) -> dict[str, str] | None:
        """Return path params if `path` matches, else None."""
        parts = _split(path)
        if len(parts) != len(self.segments):
            return None
        params = {}
        for expected, actual in zip(self.segments, parts):
            if expected.startswith(":"):
                params[expected[1:]] = actual
            elif expected != actual:
                return None
        return params

    @property
    def static_weight(self) -> int:
        return sum(1 for s in self.segments if not s.startswith(":"))


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    params: dict[str, str]


def _split(path: str) -> tuple[str, ...]:
    path = path.split("?", 1)[0].split("#", 1)[0]
    return tuple(part for part in path.split("/") if part)


def normalize_path(path: str) -> str:
    return "/" + "/".join(_split(path))


class RouteTable:
    """Ordered set of routes. Static segments win over parameters."""

    def __init__(self, routes: list[Route] | None = None):
        self._routes: list[Route] = []
        for route in routes or []:
            self.add(route)

    def add(self, route: Route) -> None:
        if any(r.pattern == route.pattern for r in self._routes):
            raise ValueError(f"Route {route.pattern} already declared")
        if route.access is not Access.AUTHENTICATED and route.roles:
            raise ValueError(f"Route {route.pattern}: roles only apply to authenticated routes")
        self._routes.append(route)

    def __iter__(self):
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def resolve(self, path: str) -> RouteMatch | None:
        """Best match for `path`, or None (not found)."""
        best: RouteMatch | None = None
        for route in self._routes:
            params = route.match(path)
            if params is None:
                continue
            if best is None or route.static_weight > best.route.static_weight:
                best = RouteMatch(route=route, params=params)
        return best


ADMIN = frozenset({Role.ADMIN})
EMPLOYEE = frozenset({Role.EMPLOYEE})


def default_routes() -> RouteTable:
    """Routes of the task manager client."""
    anonymous = [
        Route("/", "home", Access.ANONYMOUS_ONLY),
        Route("/login", "login", Access.ANONYMOUS_ONLY),
        Route("/register", "register", Access.ANONYMOUS_ONLY),
        Route("/forgot-password", "forgot_password", Access.ANONYMOUS_ONLY),
        Route("/reset-password", "reset_password", Access.ANONYMOUS_ONLY),
    ]
    employee = [
        Route("/employe/dashboard", "employee_dashboard", roles=EMPLOYEE),
        Route("/employee/profile", "employee_profile", roles=EMPLOYEE),
        Route("/employee/projects", "employee_projects", roles=EMPLOYEE),
        Route("/employee/projects/:id", "employee_project", roles=EMPLOYEE),
        Route("/employee/projects/:id/tasks", "employee_project_tasks", roles=EMPLOYEE),
        Route("/employee/tasks", "employee_tasks", roles=EMPLOYEE),
        Route("/employee/tasks/create", "employee_task_create", roles=EMPLOYEE),
        Route("/employee/tasks/:id", "employee_task", roles=EMPLOYEE),
        Route("/employee/tasks/:id/edit", "employee_task_edit", roles=EMPLOYEE),
    ]
    admin = [
        Route("/admin/dashboard", "admin_dashboard", roles=ADMIN),
        Route("/profile", "admin_profile", roles=ADMIN),
        Route("/admin/users", "admin_users", roles=ADMIN),
        Route("/admin/users/:id", "admin_user", roles=ADMIN),
        Route("/admin/users/:id/edit", "admin_user_edit", roles=ADMIN),
        Route("/admin/projects", "admin_projects", roles=ADMIN),
        Route("/admin/projects/create", "admin_project_create", roles=ADMIN),
        Route("/admin/projects/:id", "admin_project", roles=ADMIN),
        Route("/admin/projects/:id/edit", "admin_project_edit", roles=ADMIN),
        Route("/admin/projects/:id/tasks", "admin_project_tasks", roles=ADMIN),
        Route("/admin/tasks", "admin_tasks", roles=ADMIN),
        Route("/admin/tasks/create", "admin_task_create", roles=ADMIN),
        Route("/admin/tasks/:id", "admin_task", roles=ADMIN),
        Route("/admin/tasks/:id/edit", "admin_task_edit", roles=ADMIN),
    ]
    return RouteTable(anonymous + employee + admin)
