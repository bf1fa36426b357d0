"""
SnapShare Backend — Credential Store
=======================================

What:  The auth core's adapter over an injected UserRepository.
Why:   Keeps the duplicate-email rule and the repository call shape in one
       place; AuthService never talks to a repository directly.
Who:   Constructed once by the application factory around the process-wide
       repository.

Duplicate email handling (check-then-create):
    create() first looks the email up and raises DuplicateEmailError if it
    exists. Two concurrent registrations can both pass that check; the
    repository's own uniqueness enforcement (unique constraint / atomic
    in-memory insert) then rejects the second one with the same error.
"""

import logging
from typing import Optional

from app.exceptions import DuplicateEmailError
from app.repositories.user_repository import UserRepository
from app.schemas.auth import NewUserFields, Role, UserRecord

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Exact, case-sensitive match. None when not found."""
        return await self.repository.get_by_email(email)

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return await self.repository.get_by_id(user_id)

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: Role,
    ) -> UserRecord:
        """
        Create a user record.

        Raises:
            DuplicateEmailError: the email already belongs to a record.
        """
        if await self.find_by_email(email) is not None:
            raise DuplicateEmailError()

        record = await self.repository.create(
            NewUserFields(
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
            )
        )
        logger.info("User %s registered (role=%s)", record.id, record.role.value)
        return record
