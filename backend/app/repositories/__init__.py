# Repositories package init
"""
SnapShare Backend — User Repositories
=======================================

What:  Persistence boundary for user records, photos and comments.
Why:   The auth core consumes a user repository; it never owns one. Each
       backend implements the same UserRepository interface and is injected
       into the CredentialStore by the application factory.

Repository Inventory:
    - UserRepository (abstract): get_by_email / get_by_id / create + lifecycle
    - InMemoryUserRepository: process-owned tables (development, tests)
    - SqlUserRepository: async SQLAlchemy over the `users` table
    - InMemoryPhotoRepository: photos and comments (process-owned)
"""

from app.repositories.photo_repository import InMemoryPhotoRepository
from app.repositories.user_repository import (
    InMemoryUserRepository,
    SqlUserRepository,
    UserRepository,
    build_user_repository,
)

__all__ = [
    "InMemoryPhotoRepository",
    "InMemoryUserRepository",
    "SqlUserRepository",
    "UserRepository",
    "build_user_repository",
]
