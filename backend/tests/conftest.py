"""
SnapShare Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── fake_clock:        controllable epoch clock for TokenService
    ├── password_hasher:   bcrypt at the minimum cost (4 rounds)
    ├── token_service:     TokenService bound to TEST_SECRET_KEY and fake_clock
    ├── user_repository:   empty InMemoryUserRepository
    ├── auth_service:      AuthService wired from the three above
    ├── make_user_record:  factory for UserRecord instances
    ├── app:               FastAPI app around auth_service
    └── test_client:       HTTPX AsyncClient for endpoint testing
"""

import os
from datetime import datetime, timezone

# Override settings for testing BEFORE any app imports
os.environ["JWT_SECRET_KEY"] = "test-signing-key-0123456789abcdef0123456789"
os.environ["USER_STORE"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_DEMO_USERS"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import create_app
from app.repositories import InMemoryPhotoRepository, InMemoryUserRepository
from app.schemas.auth import Role, UserRecord
from app.services.auth_service import AuthService
from app.services.credential_store import CredentialStore
from app.services.password_hasher import PasswordHasher
from app.services.photo_service import PhotoService
from app.services.token_service import TokenService

TEST_SECRET_KEY = os.environ["JWT_SECRET_KEY"]
TEST_TTL_SECONDS = 3600


class FakeClock:
    """Callable returning a fixed epoch time until advanced."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def password_hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service(fake_clock):
    return TokenService(
        secret_key=TEST_SECRET_KEY,
        ttl_seconds=TEST_TTL_SECONDS,
        clock=fake_clock,
    )


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def auth_service(user_repository, password_hasher, token_service):
    return AuthService(
        credential_store=CredentialStore(user_repository),
        password_hasher=password_hasher,
        token_service=token_service,
    )


@pytest.fixture
def make_user_record():
    """
    Factory for UserRecord instances that never touch a repository.

    Usage:
        creator = make_user_record(role=Role.CREATOR)
    """

    def _make(
        user_id: str = "user-1",
        email: str = "someone@example.com",
        role: Role = Role.CONSUMER,
    ) -> UserRecord:
        return UserRecord(
            id=user_id,
            username=email.split("@")[0],
            email=email,
            password_hash="$2b$04$notarealhashnotarealhashnotarealhashnotarealhashnotr",
            role=role,
            created_at=datetime.now(timezone.utc),
        )

    return _make


@pytest.fixture
def photo_service(auth_service):
    return PhotoService(InMemoryPhotoRepository(), auth_service.credential_store)


@pytest.fixture
def app(auth_service, photo_service):
    return create_app(auth_service=auth_service, photo_service=photo_service)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
