"""
SnapShare Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory and declarative base.
Why:   Centralizes all database connection logic in one place.
How:   Builds an async engine with connection pooling on demand; the SQL
       user repository owns the engine from then on and disposes it at shutdown.
Who:   Used by the SQL user repository and by Alembic.
When:  Only when USER_STORE=database; the in-memory store never touches it.

Why no module-level engine:
    The engine is created by build_user_repository() rather than at import.
    With the default in-memory user store, importing the app must not require a
    database driver or a reachable database.

Connection Pooling Strategy:
    pool_size=20:     Persistent connections for normal load
    max_overflow=10:  Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:    Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour
    SQLite URLs (tests, local runs) skip the pool sizing arguments.

hide_parameters:
    Always on. Driver errors are logged with str(e), and SQLAlchemy would
    otherwise append the bound INSERT/SELECT values to that string.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations and
    SqlUserRepository.initialize() uses to create missing tables.
    """
    pass


def create_engine_for_url(database_url: str) -> AsyncEngine:
    """Create an async engine, applying pool settings where the dialect supports them."""
    # Bound parameters carry password hashes and emails; keep them out of
    # exception messages and echo output.
    kwargs = {"echo": settings.log_level == "DEBUG", "hide_parameters": True}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Build a session factory bound to `engine`.

    expire_on_commit=False: attributes stay readable after commit, so a
    freshly created User row can be converted to a UserRecord after the
    transaction closes.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
