"""
SnapShare Backend — FastAPI Dependencies for the Access Gate
===============================================================

What:  Exposes the access-control stages as FastAPI dependencies.
Why:   Protected routes declare their checks in the signature; the route body
       only runs once every stage has passed.
How:   Each dependency builds a RequestContext from the Starlette request and
       runs an AccessGate whose first stage is always Authenticate. Services
       come from `request.app.state`, populated by the application factory.

Usage:
    @router.get("/me")
    async def me(principal: AuthenticatedPrincipal = Depends(get_current_principal)):
        ...

    @router.post("/photos")
    async def create_photo(principal=Depends(require_role(Role.CREATOR))):
        ...

    @router.get("/users/{user_id}")
    async def profile(
        user_id: str,
        principal=Depends(require_owner_or_role("user_id", Role.CREATOR)),
    ):
        ...

Rejections raise UnauthorizedError / ForbiddenError; the global handlers in
main.py turn them into 401 / 403 responses.
"""

from fastapi import Request

from app.schemas.auth import AuthenticatedPrincipal, Role
from app.services.access_control import (
    AccessGate,
    Authenticate,
    RequestContext,
    RequireOwnerOrRole,
    RequireRole,
    Stage,
)
from app.services.auth_service import AuthService
from app.services.photo_service import PhotoService
from app.services.token_service import TokenService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_photo_service(request: Request) -> PhotoService:
    return request.app.state.photo_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.auth_service.token_service


def build_request_context(request: Request) -> RequestContext:
    return RequestContext(
        headers=request.headers,
        path_params=dict(request.path_params),
    )


def _run_gate(request: Request, *stages: Stage) -> AuthenticatedPrincipal:
    gate = AccessGate(Authenticate(get_token_service(request)), *stages)
    principal = gate.evaluate(build_request_context(request))
    request.state.principal = principal
    return principal


async def get_current_principal(request: Request) -> AuthenticatedPrincipal:
    """Authenticate only. Returns the principal carried by the bearer token."""
    return _run_gate(request)


def require_role(role: Role):
    """Dependency factory: Authenticate, then RequireRole(role)."""

    async def dependency(request: Request) -> AuthenticatedPrincipal:
        return _run_gate(request, RequireRole(role))

    return dependency


def require_owner_or_role(owner_id_param: str, role: Role):
    """
    Dependency factory: Authenticate, then RequireOwnerOrRole.

    `owner_id_param` names the path parameter holding the owning user's id.
    """

    async def dependency(request: Request) -> AuthenticatedPrincipal:
        return _run_gate(request, RequireOwnerOrRole(owner_id_param, role))

    return dependency
