"""
SnapShare Backend — Photo & Comment Repository
=================================================

What:  Process-owned tables for photos and their comments.
How:   Plain dicts keyed by id. Records are immutable pydantic models;
       update() stores a copy with the changed fields.

Photos live only as long as the process. Image bytes are never stored
here, only the URL the client supplied.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.schemas.photo import Comment, Photo

logger = logging.getLogger(__name__)


class InMemoryPhotoRepository:
    backend_name = "memory"

    def __init__(self) -> None:
        self._photos: Dict[str, Photo] = {}
        self._comments: Dict[str, Comment] = {}

    # ── Photos ────────────────────────────────────────────────────────────

    async def list_photos(self) -> List[Photo]:
        """Newest first."""
        return sorted(self._photos.values(), key=lambda p: p.created_at, reverse=True)

    async def get_photo(self, photo_id: str) -> Optional[Photo]:
        return self._photos.get(photo_id)

    async def create_photo(self, **fields: Any) -> Photo:
        photo = Photo(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self._photos[photo.id] = photo
        logger.debug("Photo %s created by user %s", photo.id, photo.user_id)
        return photo

    async def update_photo(self, photo_id: str, **changes: Any) -> Optional[Photo]:
        photo = self._photos.get(photo_id)
        if photo is None:
            return None
        updated = photo.model_copy(update=changes)
        self._photos[photo_id] = updated
        return updated

    async def delete_photo(self, photo_id: str) -> bool:
        if self._photos.pop(photo_id, None) is None:
            return False
        # Comments go with their photo
        for comment_id in [c.id for c in self._comments.values() if c.photo_id == photo_id]:
            del self._comments[comment_id]
        return True

    # ── Comments ──────────────────────────────────────────────────────────

    async def list_comments(self, photo_id: str) -> List[Comment]:
        """Oldest first."""
        comments = [c for c in self._comments.values() if c.photo_id == photo_id]
        return sorted(comments, key=lambda c: c.created_at)

    async def create_comment(self, **fields: Any) -> Comment:
        comment = Comment(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self._comments[comment.id] = comment
        return comment

    async def close(self) -> None:
        self._photos.clear()
        self._comments.clear()
