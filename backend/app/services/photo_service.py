"""
SnapShare Backend — Photo Service (Feed, Likes, Comments)
============================================================

What:  The photo operations behind /api/photos and /api/comments.
Why:   The routes decide *who* may call (via the access gate dependencies);
       this service applies the rules that need the stored record, such as
       existence and ownership of the photo being changed.
How:   Wraps InMemoryPhotoRepository; poster and commenter names are looked
       up through the CredentialStore the auth core already owns.

Rules:
    - create needs an image URL
    - update / delete: only the photo's own poster, even among creators
    - update keeps the current value for every empty field
    - like and comment need an existing photo
"""

import logging
from typing import List, Optional

from app.exceptions import ForbiddenError, ForbiddenReason, NotFoundError, ValidationError
from app.repositories.photo_repository import InMemoryPhotoRepository
from app.schemas.auth import AuthenticatedPrincipal
from app.schemas.photo import Comment, Photo
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

UNKNOWN_USERNAME = "unknown"


class PhotoService:
    def __init__(self, repository: InMemoryPhotoRepository, credential_store: CredentialStore):
        self.repository = repository
        self.credential_store = credential_store

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_photos(self) -> List[Photo]:
        return await self.repository.list_photos()

    async def get_photo(self, photo_id: str) -> Photo:
        photo = await self.repository.get_photo(photo_id)
        if photo is None:
            raise NotFoundError(resource="photo", resource_id=photo_id)
        return photo

    async def list_comments(self, photo_id: str) -> List[Comment]:
        return await self.repository.list_comments(photo_id)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_photo(
        self,
        principal: AuthenticatedPrincipal,
        image_url: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Photo:
        if not image_url:
            raise ValidationError(message="Please provide an image", field="imageUrl")

        photo = await self.repository.create_photo(
            title=title,
            description=description,
            image_url=image_url,
            user_id=principal.id,
            username=await self._username_of(principal),
            tags=tags or [],
        )
        logger.info("Photo %s posted by user %s", photo.id, principal.id)
        return photo

    async def update_photo(
        self,
        principal: AuthenticatedPrincipal,
        photo_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Photo:
        photo = await self._owned_photo(principal, photo_id)
        return await self.repository.update_photo(
            photo_id,
            title=title or photo.title,
            description=description or photo.description,
            tags=tags or photo.tags,
        )

    async def delete_photo(self, principal: AuthenticatedPrincipal, photo_id: str) -> None:
        await self._owned_photo(principal, photo_id)
        await self.repository.delete_photo(photo_id)
        logger.info("Photo %s deleted by user %s", photo_id, principal.id)

    async def like_photo(self, photo_id: str) -> Photo:
        photo = await self.get_photo(photo_id)
        return await self.repository.update_photo(photo_id, likes=photo.likes + 1)

    async def add_comment(
        self,
        principal: AuthenticatedPrincipal,
        photo_id: Optional[str],
        text: Optional[str],
    ) -> Comment:
        if not photo_id or not text:
            raise ValidationError(
                message="Please provide photoId and text",
                field="photoId" if not photo_id else "text",
            )
        await self.get_photo(photo_id)
        return await self.repository.create_comment(
            photo_id=photo_id,
            user_id=principal.id,
            username=await self._username_of(principal),
            text=text,
        )

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _owned_photo(self, principal: AuthenticatedPrincipal, photo_id: str) -> Photo:
        photo = await self.get_photo(photo_id)
        if photo.user_id != principal.id:
            raise ForbiddenError(
                ForbiddenReason.OWNERSHIP_MISMATCH,
                context={"resource": "photo"},
            )
        return photo

    async def _username_of(self, principal: AuthenticatedPrincipal) -> str:
        # Tokens carry no username; a deleted account shows as "unknown"
        user = await self.credential_store.find_by_id(principal.id)
        return user.username if user is not None else UNKNOWN_USERNAME
