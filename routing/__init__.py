"""Client routes and the guards that gate them."""

from routing.guard import Allow, RedirectTo, RouteGuard, AnonymousOnlyGuard, AuthenticatedOnlyGuard
from routing.routes import Access, Route, RouteMatch, RouteTable, default_routes
from routing.navigator import Navigator, NavigationResult, NavigationStatus
