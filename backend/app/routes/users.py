"""
SnapShare Backend — User Route Handlers
=========================================

What:  GET /api/users/{user_id}, the public profile of one account.
Access: the account owner, or any creator.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_auth_service, require_owner_or_role
from app.schemas.auth import AuthenticatedPrincipal, ErrorResponse, PublicUser, Role
from app.services.auth_service import AuthService

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/{user_id}",
    response_model=PublicUser,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Neither owner nor creator", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Get a user's public profile",
)
async def get_user(
    user_id: str,
    principal: AuthenticatedPrincipal = Depends(require_owner_or_role("user_id", Role.CREATOR)),
    auth_service: AuthService = Depends(get_auth_service),
) -> PublicUser:
    return await auth_service.get_user(user_id)
