"""
SnapShare Backend — Photo Route Handlers
==========================================

What:  The photo feed under /api/photos.
Access:
    GET  /, /{photo_id}       public
    POST /                    creators only
    PUT / DELETE /{photo_id}  creators only, and only the photo's poster
    POST /{photo_id}/like     any signed-in user
"""

from typing import List

from fastapi import APIRouter, Depends, status

from app.dependencies import get_current_principal, get_photo_service, require_role
from app.schemas.auth import AuthenticatedPrincipal, ErrorResponse, Role
from app.schemas.photo import MessageResponse, Photo, PhotoCreateRequest, PhotoUpdateRequest
from app.services.photo_service import PhotoService

router = APIRouter(prefix="/api/photos", tags=["Photos"])

_GATED = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not a creator, or not the photo's poster", "model": ErrorResponse},
}


@router.get("", response_model=List[Photo], summary="List all photos")
async def list_photos(photo_service: PhotoService = Depends(get_photo_service)) -> List[Photo]:
    return await photo_service.list_photos()


@router.get(
    "/{photo_id}",
    response_model=Photo,
    responses={404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Get one photo",
)
async def get_photo(
    photo_id: str,
    photo_service: PhotoService = Depends(get_photo_service),
) -> Photo:
    return await photo_service.get_photo(photo_id)


@router.post(
    "",
    response_model=Photo,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_GATED,
        400: {"description": "No image URL", "model": ErrorResponse},
    },
    summary="Post a photo",
)
async def create_photo(
    body: PhotoCreateRequest,
    principal: AuthenticatedPrincipal = Depends(require_role(Role.CREATOR)),
    photo_service: PhotoService = Depends(get_photo_service),
) -> Photo:
    return await photo_service.create_photo(
        principal,
        image_url=body.image_url,
        title=body.title,
        description=body.description,
        tags=body.tags,
    )


@router.put(
    "/{photo_id}",
    response_model=Photo,
    responses={**_GATED, 404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Edit a photo's title, description or tags",
)
async def update_photo(
    photo_id: str,
    body: PhotoUpdateRequest,
    principal: AuthenticatedPrincipal = Depends(require_role(Role.CREATOR)),
    photo_service: PhotoService = Depends(get_photo_service),
) -> Photo:
    return await photo_service.update_photo(
        principal,
        photo_id,
        title=body.title,
        description=body.description,
        tags=body.tags,
    )


@router.delete(
    "/{photo_id}",
    response_model=MessageResponse,
    responses={**_GATED, 404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Delete a photo and its comments",
)
async def delete_photo(
    photo_id: str,
    principal: AuthenticatedPrincipal = Depends(require_role(Role.CREATOR)),
    photo_service: PhotoService = Depends(get_photo_service),
) -> MessageResponse:
    await photo_service.delete_photo(principal, photo_id)
    return MessageResponse(message="Photo deleted successfully")


@router.post(
    "/{photo_id}/like",
    response_model=Photo,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Like a photo",
)
async def like_photo(
    photo_id: str,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    photo_service: PhotoService = Depends(get_photo_service),
) -> Photo:
    return await photo_service.like_photo(photo_id)
