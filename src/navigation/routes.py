"""
The route table. Every command group is reached through a path here, and
`resolve` decides whether the current identity may open it or where it is
sent instead.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union

from identity.context import Identity

LOGIN = "/login"
DASHBOARD = "/dashboard"
PARTNER = "/partner"
PARTNER_PROJECT = "/partner/project/"
UNAUTHORIZED = "/unauthorized"


@dataclass(frozen=True)
class Route:
    path: str
    title: str
    roles: FrozenSet[str] = frozenset()
    public: bool = False


@dataclass(frozen=True)
class Match:
    route: Route
    project_id: Optional[str] = None


@dataclass(frozen=True)
class Redirect:
    path: str


@dataclass(frozen=True)
class Notice:
    message: str


Resolution = Union[Match, Redirect, Notice]

ROUTES: Dict[str, Route] = {
    route.path: route
    for route in (
        Route(LOGIN, "Login", public=True),
        Route("/signup", "Sign up", public=True),
        Route("/partner-signup", "Partner sign up", public=True),
        Route(DASHBOARD, "Dashboard"),
        Route("/kanban", "Kanban Board", frozenset({"admin", "client"})),
        Route("/notes", "Notes", frozenset({"admin", "client"})),
        Route("/targets", "Targets", frozenset({"admin", "client"})),
        Route("/admin", "Admin Panel", frozenset({"admin"})),
        Route(PARTNER, "Partner", frozenset({"partner"})),
        Route(PARTNER_PROJECT, "Partner Dashboard", frozenset({"partner"})),
        Route(UNAUTHORIZED, "Unauthorized"),
    )
}

NO_PROJECT = "You are registered as a Partner, but no project has been assigned yet. Please contact your Admin."


def home(identity: Optional[Identity]) -> str:
    if identity is None:
        return LOGIN
    return PARTNER if identity.role == "partner" else DASHBOARD


def resolve(path: str, identity: Optional[Identity]) -> Resolution:
    path = "/" + path.strip().strip("/")
    project_id = None
    if path.startswith(PARTNER_PROJECT) and len(path) > len(PARTNER_PROJECT):
        project_id = path[len(PARTNER_PROJECT):]
        path = PARTNER_PROJECT

    route = ROUTES.get(path)
    if route is None:
        return Redirect(home(identity))
    if route.path == UNAUTHORIZED:
        return Match(route)

    if route.public:
        if identity is None:
            return Match(route)
        return Redirect(home(identity) if route.path == LOGIN else DASHBOARD)

    if identity is None:
        return Redirect(LOGIN)
    if identity.role is None:
        # Identity without a role (fail-closed resolution) opens nothing.
        return Redirect(UNAUTHORIZED)
    if route.roles and identity.role not in route.roles:
        return Redirect(DASHBOARD)

    if route.path == PARTNER:
        if identity.assigned_project_id:
            return Redirect(PARTNER_PROJECT + identity.assigned_project_id)
        return Notice(NO_PROJECT)
    return Match(route, project_id)
