"""
SnapShare Backend — User Repository and Credential Store Tests
=================================================================

What:  Both repository backends plus the CredentialStore adapter.
How:   The SQL backend runs against a throwaway SQLite file via aiosqlite,
       so the uq_users_email constraint is exercised for real. The
       credential store is tested against an AsyncMock repository.

What we test:
    ✅ create assigns id and created_at, lookups return the same record
    ✅ Email lookup is exact and case-sensitive
    ✅ Both backends reject a duplicate email on their own
    ✅ created_at comes back timezone-aware and unchanged from every backend
    ✅ SQL driver failures never put hashes or emails into the logs
    ✅ CredentialStore pre-checks before calling the repository
    ✅ build_user_repository honours USER_STORE
"""

import logging
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from pydantic import ValidationError as SettingsValidationError
from sqlalchemy import text

from app.config import Settings
from app.database import create_engine_for_url
from app.exceptions import DatabaseError, DuplicateEmailError
from app.repositories import (
    InMemoryUserRepository,
    SqlUserRepository,
    build_user_repository,
)
from app.schemas.auth import NewUserFields, Role
from app.services.credential_store import CredentialStore


def _fields(email: str = "alice@example.com", role: Role = Role.CONSUMER) -> NewUserFields:
    return NewUserFields(
        username="alice",
        email=email,
        password_hash="$2b$04$abcdefghijklmnopqrstuuabcdefghijklmnopqrstuvwxyz01234",
        role=role,
    )


@pytest_asyncio.fixture(params=["memory", "database"])
async def repository(request, tmp_path):
    """Runs a test once per backend; the SQL one on a fresh SQLite file."""
    if request.param == "memory":
        yield InMemoryUserRepository()
        return

    sql_repository = SqlUserRepository(
        create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    )
    await sql_repository.initialize()
    yield sql_repository
    await sql_repository.close()


class TestRepositoryContract:
    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamp(self, repository):
        record = await repository.create(_fields(role=Role.CREATOR))
        assert record.id
        assert record.created_at is not None
        assert record.role == Role.CREATOR
        assert record.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_lookups_find_created_record(self, repository):
        record = await repository.create(_fields())
        by_email = await repository.get_by_email("alice@example.com")
        by_id = await repository.get_by_id(record.id)
        assert by_email.id == record.id
        assert by_id.email == "alice@example.com"
        assert by_id.password_hash == record.password_hash

    @pytest.mark.asyncio
    async def test_missing_records(self, repository):
        assert await repository.get_by_email("nobody@example.com") is None
        assert await repository.get_by_id("no-such-id") is None

    @pytest.mark.asyncio
    async def test_email_lookup_is_case_sensitive(self, repository):
        await repository.create(_fields())
        assert await repository.get_by_email("ALICE@example.com") is None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self, repository):
        await repository.create(_fields())
        with pytest.raises(DuplicateEmailError):
            await repository.create(_fields())

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, repository):
        first = await repository.create(_fields(email="one@example.com"))
        second = await repository.create(_fields(email="two@example.com"))
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_created_at_is_utc_aware_on_read_back(self, repository):
        record = await repository.create(_fields())
        by_id = await repository.get_by_id(record.id)
        assert by_id.created_at.tzinfo is not None
        assert by_id.created_at == record.created_at

    @pytest.mark.asyncio
    async def test_ping(self, repository):
        assert await repository.ping() is True


class TestInMemoryLifecycle:
    @pytest.mark.asyncio
    async def test_close_discards_records(self):
        repository = InMemoryUserRepository()
        await repository.create(_fields())
        await repository.close()
        assert await repository.get_by_email("alice@example.com") is None


class TestCredentialStore:
    def setup_method(self):
        self.repository = AsyncMock()
        self.store = CredentialStore(self.repository)

    @pytest.mark.asyncio
    async def test_existing_email_short_circuits(self, make_user_record):
        self.repository.get_by_email.return_value = make_user_record(email="alice@example.com")
        with pytest.raises(DuplicateEmailError):
            await self.store.create("alice", "alice@example.com", "hash", Role.CONSUMER)
        self.repository.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_passes_fields_through(self, make_user_record):
        self.repository.get_by_email.return_value = None
        self.repository.create.return_value = make_user_record(email="alice@example.com")

        record = await self.store.create("alice", "alice@example.com", "hash", Role.CREATOR)

        assert record.email == "alice@example.com"
        fields = self.repository.create.await_args.args[0]
        assert fields == NewUserFields(
            username="alice", email="alice@example.com", password_hash="hash", role=Role.CREATOR
        )

    @pytest.mark.asyncio
    async def test_find_by_id_delegates(self):
        self.repository.get_by_id.return_value = None
        assert await self.store.find_by_id("42") is None
        self.repository.get_by_id.assert_awaited_once_with("42")


class TestBuildUserRepository:
    def test_memory_backend(self):
        repository = build_user_repository(Settings(user_store="memory"))
        assert isinstance(repository, InMemoryUserRepository)
        assert repository.backend_name == "memory"

    @pytest.mark.asyncio
    async def test_database_backend(self, tmp_path):
        config = Settings(
            user_store="database",
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'built.db'}",
        )
        repository = build_user_repository(config)
        assert isinstance(repository, SqlUserRepository)
        await repository.close()

    def test_unknown_backend_is_a_config_error(self):
        with pytest.raises(SettingsValidationError):
            Settings(user_store="redis")


class TestSqlFailureLogging:
    HASH = "$2b$04$secrethashsecrethashsecrethashsecrethashsecrethashsec"

    @pytest_asyncio.fixture
    async def broken_repository(self, tmp_path):
        engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'broken.db'}")
        repository = SqlUserRepository(engine)
        await repository.initialize()
        async with engine.begin() as conn:
            await conn.execute(text("DROP TABLE users"))
        yield repository
        await repository.close()

    def _assert_not_logged(self, caplog, *values):
        for record in caplog.records:
            message = record.getMessage()
            for value in values:
                assert value not in message

    @pytest.mark.asyncio
    async def test_failed_insert_hides_hash_and_email(self, broken_repository, caplog):
        fields = NewUserFields(
            username="alice",
            email="hidden@example.com",
            password_hash=self.HASH,
            role=Role.CREATOR,
        )
        with caplog.at_level(logging.INFO):
            with pytest.raises(DatabaseError):
                await broken_repository.create(fields)

        assert any("Database error creating user" in r.getMessage() for r in caplog.records)
        self._assert_not_logged(caplog, self.HASH, "hidden@example.com")

    @pytest.mark.asyncio
    async def test_failed_lookup_hides_email(self, broken_repository, caplog):
        with caplog.at_level(logging.INFO):
            with pytest.raises(DatabaseError):
                await broken_repository.get_by_email("hidden@example.com")

        self._assert_not_logged(caplog, "hidden@example.com")
