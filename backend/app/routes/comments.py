"""
SnapShare Backend — Comment Route Handlers
============================================

What:  GET /api/comments/photo/{photo_id} (public) and POST /api/comments
       (any signed-in user).
"""

from typing import List

from fastapi import APIRouter, Depends, status

from app.dependencies import get_current_principal, get_photo_service
from app.schemas.auth import AuthenticatedPrincipal, ErrorResponse
from app.schemas.photo import Comment, CommentCreateRequest
from app.services.photo_service import PhotoService

router = APIRouter(prefix="/api/comments", tags=["Comments"])


@router.get("/photo/{photo_id}", response_model=List[Comment], summary="Comments on a photo")
async def list_comments(
    photo_id: str,
    photo_service: PhotoService = Depends(get_photo_service),
) -> List[Comment]:
    return await photo_service.list_comments(photo_id)


@router.post(
    "",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing photoId or text", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Comment on a photo",
)
async def add_comment(
    body: CommentCreateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    photo_service: PhotoService = Depends(get_photo_service),
) -> Comment:
    return await photo_service.add_comment(principal, body.photo_id, body.text)
