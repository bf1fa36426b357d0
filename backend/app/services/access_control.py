"""
SnapShare Backend — Access Control Gate
==========================================

What:  Request-level decision chain placed in front of protected operations.
Why:   Mutating operations are gated on identity, role and ownership. Each
       rule is a small, side-effect-free stage so routes compose exactly
       the checks they need.
How:   Stages run in order against a RequestContext. A stage either returns
       (allow, continue) or raises (reject, stop). The protected operation
       runs only if every stage returned.

Per-request state machine:
    Unauthenticated ──(Bearer token verifies)──▶ TokenVerified
    TokenVerified ──(role / ownership holds)──▶ Authorized
    any state ──(stage raises)──▶ Rejected (operation never runs)

Stages:
    Authenticate(token_service)
        Missing/malformed Authorization header → UnauthorizedError(no-token)
        Token fails verification             → UnauthorizedError(invalid-token)
        Success attaches the principal to the context.
    RequireRole(role)
        principal.role == role, else ForbiddenError(role-mismatch)
    RequireOwnerOrRole(owner_id_param, role)
        principal.id == path_params[owner_id_param] or principal.role == role,
        else ForbiddenError(ownership-mismatch)

Roles are compared with == only. There is no hierarchy between creator
and consumer.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

from app.exceptions import (
    ForbiddenError,
    ForbiddenReason,
    InvalidTokenError,
    UnauthorizedError,
    UnauthorizedReason,
)
from app.schemas.auth import AuthenticatedPrincipal, Role, TokenClaims
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "authorization"
BEARER_SCHEME = "bearer"


@dataclass
class RequestContext:
    """
    Explicit per-request state passed through the gate.

    headers:     request headers (looked up case-insensitively)
    path_params: route parameters, e.g. {"user_id": "42"}
    principal:   set by Authenticate; None until then
    """

    headers: Mapping[str, str]
    path_params: Dict[str, str] = field(default_factory=dict)
    principal: Optional[AuthenticatedPrincipal] = None


Stage = Callable[[RequestContext], None]


def extract_bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    """
    Return the token from an `Authorization: Bearer <token>` header.

    Everything after the first space is the credential, unmodified. None
    when the header is absent, uses another scheme, or carries nothing after
    the scheme. Extra whitespace stays in the credential and fails
    verification later (invalid-token, not no-token).
    """
    value = None
    for name, header_value in headers.items():
        if name.lower() == AUTHORIZATION_HEADER:
            value = header_value
            break
    if not value:
        return None

    scheme, _, token = value.partition(" ")
    if scheme.lower() != BEARER_SCHEME or not token:
        return None
    return token


def authenticate_headers(headers: Mapping[str, str], token_service: TokenService) -> TokenClaims:
    """Verify the bearer token carried by `headers` and return its claims."""
    token = extract_bearer_token(headers)
    if token is None:
        logger.warning("Authentication rejected: %s", UnauthorizedReason.NO_TOKEN.value)
        raise UnauthorizedError(UnauthorizedReason.NO_TOKEN)

    try:
        return token_service.verify(token)
    except InvalidTokenError as e:
        logger.warning(
            "Authentication rejected: %s (%s)",
            UnauthorizedReason.INVALID_TOKEN.value,
            e.message,
        )
        raise UnauthorizedError(UnauthorizedReason.INVALID_TOKEN) from e


def require_role(principal: AuthenticatedPrincipal, role: Role) -> None:
    if principal.role != role:
        logger.warning(
            "Access rejected for user %s: role %s, required %s",
            principal.id,
            principal.role.value,
            role.value,
        )
        raise ForbiddenError(
            ForbiddenReason.ROLE_MISMATCH,
            context={"required_role": role.value},
        )


def require_owner_or_role(
    principal: AuthenticatedPrincipal,
    owner_id: Optional[str],
    role: Role,
) -> None:
    if owner_id is not None and principal.id == owner_id:
        return
    if principal.role == role:
        return
    logger.warning("Access rejected for user %s: not owner, role %s", principal.id, principal.role.value)
    raise ForbiddenError(ForbiddenReason.OWNERSHIP_MISMATCH)


def _principal_of(ctx: RequestContext) -> AuthenticatedPrincipal:
    # An authorization stage placed before Authenticate sees no principal.
    if ctx.principal is None:
        raise UnauthorizedError(UnauthorizedReason.NO_TOKEN)
    return ctx.principal


class Authenticate:
    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    def __call__(self, ctx: RequestContext) -> None:
        claims = authenticate_headers(ctx.headers, self.token_service)
        ctx.principal = AuthenticatedPrincipal.from_claims(claims)


class RequireRole:
    def __init__(self, role: Role):
        self.role = role

    def __call__(self, ctx: RequestContext) -> None:
        require_role(_principal_of(ctx), self.role)


class RequireOwnerOrRole:
    def __init__(self, owner_id_param: str, role: Role):
        self.owner_id_param = owner_id_param
        self.role = role

    def __call__(self, ctx: RequestContext) -> None:
        owner_id = ctx.path_params.get(self.owner_id_param)
        require_owner_or_role(_principal_of(ctx), owner_id, self.role)


class AccessGate:
    """
    Ordered chain of stages.

    Example:
        gate = AccessGate(Authenticate(tokens), RequireRole(Role.CREATOR))
        principal = gate.evaluate(RequestContext(headers=request.headers))
    """

    def __init__(self, *stages: Stage):
        self.stages = stages

    def evaluate(self, ctx: RequestContext) -> AuthenticatedPrincipal:
        """
        Run every stage in order and return the authorized principal.

        Raises:
            UnauthorizedError / ForbiddenError from the first rejecting stage.
        """
        for stage in self.stages:
            stage(ctx)
        return _principal_of(ctx)
