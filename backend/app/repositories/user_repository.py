"""
SnapShare Backend — User Repository Implementations
======================================================

What:  Lookup-by-email, lookup-by-id and create operations over user records.
Why:   Replaces module-level mock tables with an explicit object the process
       constructs once at startup and closes at shutdown.
How:   UserRepository defines the async interface. Two backends implement it:
       InMemoryUserRepository (dict tables) and SqlUserRepository (async
       SQLAlchemy). build_user_repository() picks one from settings.
Who:   Constructed by the application factory; used only by CredentialStore.

Email uniqueness:
    Both backends enforce it themselves, so a duplicate registration that
    slips past the CredentialStore pre-check still fails with
    DuplicateEmailError instead of creating a second record:
    - In memory: check and insert run with no await in between, so no other
      coroutine can interleave.
    - SQL: the uq_users_email constraint; IntegrityError is translated.

Email matching is exact and case-sensitive in both backends.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import Settings
from app.database import Base, create_engine_for_url, create_session_factory
from app.exceptions import DatabaseError, DuplicateEmailError
from app.models.user import User
from app.schemas.auth import NewUserFields, UserRecord

logger = logging.getLogger(__name__)


def _to_record(user: User) -> UserRecord:
    record = UserRecord.model_validate(user)
    # SQLite drops the offset on DateTime(timezone=True); values are stored as UTC
    if record.created_at.tzinfo is None:
        record = record.model_copy(
            update={"created_at": record.created_at.replace(tzinfo=timezone.utc)}
        )
    return record


class UserRepository(ABC):
    """
    Abstract user repository.

    Implementations assign `id` and `created_at` in create(), and must
    raise DuplicateEmailError when the email is already taken.
    Calls may block on I/O; callers await them and inherit whatever
    timeout/cancellation semantics the backend has.
    """

    backend_name: str = "abstract"

    async def initialize(self) -> None:
        """Prepare the backend (create tables, open pools). Called once at startup."""

    async def close(self) -> None:
        """Release backend resources. Called once at shutdown."""

    async def ping(self) -> bool:
        """Lightweight reachability check used by /health."""
        return True

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def create(self, fields: NewUserFields) -> UserRecord:
        ...


class InMemoryUserRepository(UserRepository):
    """
    Process-owned user tables.

    Two dicts: records by id, and an email → id index. Data lives as long as
    the instance; tests create a fresh one per test.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}
        self._ids_by_email: Dict[str, str] = {}

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        user_id = self._ids_by_email.get(email)
        if user_id is None:
            return None
        return self._users.get(user_id)

    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    async def create(self, fields: NewUserFields) -> UserRecord:
        if fields.email in self._ids_by_email:
            raise DuplicateEmailError(context={"user_store": self.backend_name})

        record = UserRecord(
            id=str(uuid.uuid4()),
            username=fields.username,
            email=fields.email,
            password_hash=fields.password_hash,
            role=fields.role,
            created_at=datetime.now(timezone.utc),
        )
        self._users[record.id] = record
        self._ids_by_email[record.email] = record.id
        logger.debug("User %s created in memory store", record.id)
        return record

    async def close(self) -> None:
        self._users.clear()
        self._ids_by_email.clear()


class SqlUserRepository(UserRepository):
    """
    User repository over the `users` table using async SQLAlchemy.

    Each call opens its own short-lived session: lookups are single
    SELECTs, create is a single INSERT inside its own transaction.

    Error Handling Strategy:
        IntegrityError on insert → DuplicateEmailError (the only unique
        constraint besides the primary key is uq_users_email).
        Any other SQLAlchemyError → DatabaseError with a generic message;
        the driver error is logged server-side.
    """

    backend_name = "database"

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    async def initialize(self) -> None:
        """
        Create the users table if it is missing.

        Production schemas are managed by Alembic; this keeps local SQLite
        runs and tests working without a migration step.
        """
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error("Could not initialize users table: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__}) from e
        logger.info("SQL user repository ready")

    async def close(self) -> None:
        await self._engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("User store unreachable: %s", str(e))
            return False
        return True

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        return await self._fetch_one(User.email == email, lookup="email")

    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        return await self._fetch_one(User.id == user_id, lookup="id")

    async def create(self, fields: NewUserFields) -> UserRecord:
        user = User(
            id=str(uuid.uuid4()),
            username=fields.username,
            email=fields.email,
            password_hash=fields.password_hash,
            role=fields.role.value,
            created_at=datetime.now(timezone.utc),
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(user)
        except IntegrityError as e:
            raise DuplicateEmailError(context={"user_store": self.backend_name}) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e))
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.debug("User %s created in database store", user.id)
        return _to_record(user)

    async def _fetch_one(self, condition, lookup: str) -> Optional[UserRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(User).where(condition))
                user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user by %s: %s", lookup, str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"lookup": lookup, "error_type": type(e).__name__},
            ) from e

        if user is None:
            return None
        return _to_record(user)


def build_user_repository(config: Settings) -> UserRepository:
    """Construct the repository selected by USER_STORE."""
    if config.user_store == "database":
        return SqlUserRepository(create_engine_for_url(config.database_url))
    return InMemoryUserRepository()
