"""
SnapShare Backend — Photo & Comment Schemas
==============================================

What:  Pydantic models for the photo feed and its comments.
Why:   Separates the API contract from storage; field names serialize as
       camelCase (imageUrl, userId, createdAt) to match the web client.
How:   Response models use `alias` plus `populate_by_name`, so services build
       them with snake_case names and FastAPI dumps them by alias.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

_CAMEL = {"populate_by_name": True}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class Photo(BaseModel):
    """
    What:  One shared photo with its counters.
    Who:   Returned by every /api/photos endpoint except delete.
    """

    id: str = Field(description="Opaque photo identifier")
    title: Optional[str] = Field(default=None, description="Photo title")
    description: Optional[str] = Field(default=None, description="Free-text caption")
    image_url: str = Field(alias="imageUrl", description="Where the image is served from")
    user_id: str = Field(alias="userId", description="Id of the creator who posted it")
    username: str = Field(description="Poster's display name at upload time")
    likes: int = Field(default=0, ge=0)
    views: int = Field(default=0, ge=0)
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt", description="Upload timestamp (UTC)")

    model_config = _CAMEL


class Comment(BaseModel):
    id: str
    photo_id: str = Field(alias="photoId")
    user_id: str = Field(alias="userId")
    username: str
    text: str
    created_at: datetime = Field(alias="createdAt")

    model_config = _CAMEL


class MessageResponse(BaseModel):
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════
# Presence rules live in PhotoService and raise ValidationError (400).


class PhotoCreateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl", description="External image URL")
    tags: Optional[List[str]] = None

    model_config = _CAMEL


class PhotoUpdateRequest(BaseModel):
    """Empty or missing fields keep their current value."""

    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class CommentCreateRequest(BaseModel):
    photo_id: Optional[str] = Field(default=None, alias="photoId")
    text: Optional[str] = None

    model_config = _CAMEL
