# Routes package init
"""
Marathon Event API — Route Table
==================================

What:  The single declarative table binding (method, path) to endpoints.
How:   build_router() turns ROUTES into an APIRouter. A route gets the auth
       gate (require_token) when its entry says `protected=True` or when
       its name is listed in the PROTECTED_ROUTES setting, so the
       protection of every endpoint can be read off this table plus one
       config value.

Handlers stay thin: they parse the request, call a service and return
its result. Business logic lives in services/.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Set

from fastapi import APIRouter, Depends

from marathon_api.middleware.auth import require_token
from marathon_api.routes import auth, health, marathons, registrations, tips
from marathon_api.schemas.common import DeleteResult, ErrorResponse, InsertResult, UpdateResult
from marathon_api.schemas.marathon import MarathonDocument
from marathon_api.schemas.registration import RegistrationDocument, TipDocument


@dataclass(frozen=True)
class RouteSpec:
    """One row of the route table."""
    name: str
    method: str
    path: str
    endpoint: Callable[..., Any]
    tag: str
    response_model: Optional[Any] = None
    status_code: int = 200
    protected: bool = False
    summary: str = ""
    error_codes: tuple = (400, 500)


ROUTES: List[RouteSpec] = [
    # ── Liveness ──────────────────────────────────────────────────────────
    RouteSpec("root", "GET", "/", health.root, "Health",
              summary="Liveness text", error_codes=()),
    RouteSpec("health", "GET", "/health", health.health_check, "Health",
              summary="Store connectivity check", error_codes=()),

    # ── Marathons ─────────────────────────────────────────────────────────
    RouteSpec("list_marathons", "GET", "/marathons", marathons.list_marathons, "Marathons",
              response_model=List[MarathonDocument], summary="List marathons"),
    RouteSpec("list_upcoming_marathons", "GET", "/upcoming-marathons",
              marathons.list_upcoming_marathons, "Marathons",
              response_model=List[MarathonDocument], summary="Random upcoming marathons"),
    RouteSpec("get_marathon", "GET", "/marathons/{id}", marathons.get_marathon, "Marathons",
              response_model=MarathonDocument, summary="Get a marathon",
              error_codes=(400, 404, 500)),
    RouteSpec("create_marathon", "POST", "/marathons", marathons.create_marathon, "Marathons",
              response_model=InsertResult, status_code=201, summary="Create a marathon"),
    RouteSpec("update_marathon", "PATCH", "/marathons/{id}", marathons.update_marathon,
              "Marathons", response_model=UpdateResult, summary="Merge-patch a marathon"),
    RouteSpec("delete_marathon", "DELETE", "/marathons/{id}", marathons.delete_marathon,
              "Marathons", response_model=DeleteResult, summary="Delete a marathon"),

    # ── Registrations ─────────────────────────────────────────────────────
    RouteSpec("list_registrations", "GET", "/registrations", registrations.list_registrations,
              "Registrations", response_model=List[RegistrationDocument],
              summary="List registrations"),
    RouteSpec("list_marathon_registrations", "GET", "/registrations/marathons/{marathon_id}",
              registrations.list_marathon_registrations, "Registrations",
              response_model=List[RegistrationDocument],
              summary="List registrations of one marathon"),
    RouteSpec("get_registration", "GET", "/registrations/{id}",
              registrations.get_registration, "Registrations",
              response_model=RegistrationDocument, summary="Get a registration",
              error_codes=(400, 404, 500)),
    RouteSpec("create_registration", "POST", "/registrations",
              registrations.create_registration, "Registrations",
              response_model=InsertResult, status_code=201,
              summary="Register and increment the marathon counter"),
    RouteSpec("update_registration", "PATCH", "/registrations/{id}",
              registrations.update_registration, "Registrations",
              response_model=UpdateResult, summary="Merge-patch a registration"),
    RouteSpec("delete_registration", "DELETE", "/registrations/{id}",
              registrations.delete_registration, "Registrations",
              response_model=DeleteResult, summary="Delete a registration"),

    # ── Tips ──────────────────────────────────────────────────────────────
    RouteSpec("list_tips", "GET", "/marathonTips", tips.list_tips, "Tips",
              response_model=List[TipDocument], summary="List marathon tips"),

    # ── Session ───────────────────────────────────────────────────────────
    RouteSpec("issue_token", "POST", "/jwt", auth.issue_token, "Auth",
              summary="Issue the session cookie", error_codes=()),
    RouteSpec("logout", "POST", "/logout", auth.logout, "Auth",
              summary="Clear the session cookie", error_codes=()),
]


def build_router(
    routes: Iterable[RouteSpec] = ROUTES,
    protected_names: Optional[Set[str]] = None,
) -> APIRouter:
    """
    Register every route of the table on a fresh APIRouter.

    Args:
        routes:           Route table (defaults to ROUTES)
        protected_names:  Extra route names that require a session cookie
    """
    protected_names = protected_names or set()
    router = APIRouter()
    for entry in routes:
        dependencies = []
        responses = {code: {"model": ErrorResponse} for code in entry.error_codes}
        if entry.protected or entry.name in protected_names:
            dependencies.append(Depends(require_token))
            responses[401] = {"model": ErrorResponse, "description": "Missing or invalid session"}
        router.add_api_route(
            entry.path,
            entry.endpoint,
            methods=[entry.method],
            name=entry.name,
            response_model=entry.response_model,
            status_code=entry.status_code,
            dependencies=dependencies,
            tags=[entry.tag],
            summary=entry.summary or None,
            responses=responses,
        )
    return router


def route_names(routes: Iterable[RouteSpec] = ROUTES) -> Set[str]:
    return {entry.name for entry in routes}
