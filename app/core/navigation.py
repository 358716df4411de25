"""
Console views and the guard that decides who may open them.

Every view transition goes through ``Router.push``, which asks
``NavigationGuard.decide`` whether to proceed or redirect. The guard only
looks at route metadata and the in-memory session; it never calls the API.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional

import structlog

from app.core.exceptions import ConfigurationError
from app.core.session import Session

logger = structlog.get_logger(__name__)

APP_TITLE = "Distributed Task Scheduler"
MAX_REDIRECTS = 5


@dataclass(frozen=True)
class RouteDescriptor:
    """A view the console can show."""

    path: str
    name: str
    title: str
    requires_auth: bool = True
    icon: Optional[str] = None


LOGIN_ROUTE = RouteDescriptor("/login", "Login", "Login", requires_auth=False)

# Views behind the login
VIEWS: List[RouteDescriptor] = [
    RouteDescriptor("/dashboard", "Dashboard", "Dashboard", icon="Odometer"),
    RouteDescriptor("/group", "Group", "Task Groups", icon="Folder"),
    RouteDescriptor("/task", "Task", "Tasks", icon="List"),
    RouteDescriptor("/instance", "Instance", "Run History", icon="Document"),
    RouteDescriptor("/executor", "Executor", "Executors", icon="Monitor"),
]


def build_routes(login_path: str = LOGIN_ROUTE.path) -> List[RouteDescriptor]:
    """All console views, with the login view mounted at ``login_path``."""
    return [replace(LOGIN_ROUTE, path=login_path), *VIEWS]


ROUTES: List[RouteDescriptor] = build_routes()


@dataclass(frozen=True)
class NavigationDecision:
    allowed: bool
    redirect: Optional[str] = None

    @classmethod
    def proceed(cls) -> "NavigationDecision":
        return cls(allowed=True)

    @classmethod
    def redirect_to(cls, path: str) -> "NavigationDecision":
        return cls(allowed=False, redirect=path)


class NavigationGuard:
    """Decides whether a view transition may proceed given the current session."""

    def __init__(
        self,
        session_accessor: Callable[[], Session],
        login_path: str = "/login",
        landing_path: str = "/dashboard",
    ):
        self._session = session_accessor
        self.login_path = login_path
        self.landing_path = landing_path

    def decide(self, target: RouteDescriptor) -> NavigationDecision:
        token = self._session().token

        if not target.requires_auth:
            # A signed-in operator has no business on the login view
            if token and target.path == self.login_path:
                return NavigationDecision.redirect_to(self.landing_path)
            return NavigationDecision.proceed()

        if token:
            return NavigationDecision.proceed()
        return NavigationDecision.redirect_to(self.login_path)


class Router:
    """Resolves paths to views and applies the guard on every transition."""

    def __init__(
        self,
        routes: Iterable[RouteDescriptor],
        guard: NavigationGuard,
        fallback_path: Optional[str] = None,
    ):
        self.routes: Dict[str, RouteDescriptor] = {route.path: route for route in routes}
        self.guard = guard
        self.fallback_path = fallback_path or guard.landing_path

        unknown = [
            path
            for path in (guard.login_path, guard.landing_path, self.fallback_path)
            if path not in self.routes
        ]
        if unknown:
            raise ConfigurationError(
                f"No console view at {', '.join(unknown)}",
                details={"views": sorted(self.routes)},
            )
        if self.routes[guard.login_path].requires_auth:
            raise ConfigurationError(f"Login view {guard.login_path} must not require login")

        self.current: Optional[RouteDescriptor] = None
        self.history: List[str] = []
        self.title = APP_TITLE

    def resolve(self, path: str) -> RouteDescriptor:
        """Map a path to its view; ``/`` and unknown paths land on the fallback view."""
        normalized = "/" + path.strip().strip("/")
        route = self.routes.get(normalized)
        if route is None:
            route = self.routes[self.fallback_path]
        return route

    def push(self, path: str) -> RouteDescriptor:
        """Navigate to ``path``, following guard redirects."""
        target = self.resolve(path)

        for _ in range(MAX_REDIRECTS):
            decision = self.guard.decide(target)
            if decision.allowed:
                break
            logger.debug("Navigation redirected", source=target.path, target=decision.redirect)
            target = self.resolve(decision.redirect)
        else:
            raise RuntimeError(f"Too many redirects while navigating to {path}")

        self.current = target
        self.history.append(target.path)
        self.title = f"{target.title or APP_TITLE} - Scheduler"

        logger.debug("Navigated", path=target.path, requested=path)
        return target
