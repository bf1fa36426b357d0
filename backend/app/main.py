"""
SnapShare Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes service wiring, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│ GZip / CORS  │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌───────────────┐ ┌────────────┐  │
    │  │ /api/auth/*  │ │ /api/users/id │ │ /health    │  │
    │  └──────────────┘ └───────────────┘ └────────────┘  │
    │  ┌──────────────┐ ┌───────────────┐                 │
    │  │ /api/photos  │ │ /api/comments │                 │
    │  └──────────────┘ └───────────────┘                 │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ Forbidden→403 ... │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Service wiring:
    build_auth_service() assembles PasswordHasher, TokenService and
    CredentialStore around one UserRepository. PhotoService shares that
    CredentialStore for poster names. The results are stored on
    app.state, where the dependencies in app/dependencies.py find them.
    Tests pass their own AuthService / repository into create_app().

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (signing key)
    3. Initialize the user repository (create tables for the SQL store)
    4. Seed demo accounts when SEED_DEMO_USERS is set

    Shutdown:
    1. Close the user repository (dispose the engine / clear memory tables)
    2. Clear the in-memory photo and comment tables
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings
from app.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    ForbiddenError,
    HashingError,
    InvalidCredentialsError,
    NotFoundError,
    SnapShareError,
    UnauthorizedError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.repositories import InMemoryPhotoRepository, UserRepository, build_user_repository
from app.routes import auth, comments, health, photos, users
from app.schemas.auth import Role
from app.services.auth_service import AuthService
from app.services.credential_store import CredentialStore
from app.services.password_hasher import PasswordHasher
from app.services.photo_service import PhotoService
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"username": "admin", "email": "admin@example.com", "role": Role.CREATOR.value},
    {"username": "user", "email": "user@example.com", "role": Role.CONSUMER.value},
]
DEMO_PASSWORD = "password123"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup, before anything else logs.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Secrets policy:
        No module logs plaintext passwords, password hashes, tokens or the
        signing key. Auth rejections log the reason code only.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Service Wiring
# ══════════════════════════════════════════════════════════════════════════

def build_auth_service(config: Settings, repository: UserRepository) -> AuthService:
    """Assemble the auth core around `repository` using `config`."""
    return AuthService(
        credential_store=CredentialStore(repository),
        password_hasher=PasswordHasher(rounds=config.bcrypt_rounds),
        token_service=TokenService(
            secret_key=config.jwt_secret_key,
            ttl_seconds=config.access_token_ttl_seconds,
            algorithm=config.jwt_algorithm,
        ),
        password_min_length=config.password_min_length,
    )


async def seed_demo_users(auth_service: AuthService) -> None:
    """Register the demo accounts through the normal registration path."""
    for demo in DEMO_USERS:
        try:
            await auth_service.register(password=DEMO_PASSWORD, **demo)
        except DuplicateEmailError:
            logger.info("Demo account %s already present", demo["email"])
        else:
            logger.info("Seeded demo account %s (role=%s)", demo["email"], demo["role"])


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: validate config, initialize the user store, optionally seed.
    Shutdown: close the user store.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SnapShare Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; tokens are still signed, just with a weak key
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    repository: UserRepository = app.state.user_repository
    await repository.initialize()
    logger.info("User store: %s", repository.backend_name)

    if settings.seed_demo_users:
        await seed_demo_users(app.state.auth_service)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SnapShare Backend shutting down...")
    await repository.close()
    await app.state.photo_service.repository.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Handler hierarchy:
        ValidationError          → 400 Bad Request
        RequestValidationError   → 400 Bad Request (body shape)
        InvalidCredentialsError  → 401 Unauthorized
        UnauthorizedError        → 401 Unauthorized + WWW-Authenticate: Bearer
        ForbiddenError           → 403 Forbidden
        NotFoundError            → 404 Not Found
        DuplicateEmailError      → 409 Conflict
        HashingError             → 500 Internal Server Error
        DatabaseError            → 500 Internal Server Error
        SnapShareError (base)    → 500 Internal Server Error
        Exception (fallback)     → 500 Internal Server Error

    Security: 500 responses carry a generic message; details are logged
    server-side only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON or wrongly typed fields get the same 400 shape."""
        fields = [".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()]
        return _error_response(
            400,
            "validation_error",
            "Request body is invalid",
            {"fields": [f for f in fields if f]},
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return _error_response(401, "invalid_credentials", exc.message)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error_response(
            401,
            "unauthorized",
            exc.message,
            {"reason": exc.reason.value},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return _error_response(403, "forbidden", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(DuplicateEmailError)
    async def handle_duplicate_email(request: Request, exc: DuplicateEmailError):
        return _error_response(409, "duplicate_email", exc.message)

    @app.exception_handler(HashingError)
    async def handle_hashing_error(request: Request, exc: HashingError):
        logger.error("[%s] Hashing error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(SnapShareError)
    async def handle_app_error(request: Request, exc: SnapShareError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace is logged server-side only."""
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    auth_service: Optional[AuthService] = None,
    user_repository: Optional[UserRepository] = None,
    photo_service: Optional[PhotoService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        auth_service:    pre-built service (tests); built from settings otherwise
        user_repository: repository the service uses; must match auth_service
                         when both are given
        photo_service:   pre-built photo service; a fresh in-memory one otherwise

    Services are built here rather than in the lifespan so that the app
    serves requests even when driven without lifespan events.
    """
    if user_repository is None:
        if auth_service is not None:
            user_repository = auth_service.credential_store.repository
        else:
            user_repository = build_user_repository(settings)
    if auth_service is None:
        auth_service = build_auth_service(settings, user_repository)
    if photo_service is None:
        photo_service = PhotoService(InMemoryPhotoRepository(), auth_service.credential_store)

    app = FastAPI(
        title="SnapShare API",
        description="Accounts, access control and the photo feed for the SnapShare photo-sharing app.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.user_repository = user_repository
    app.state.auth_service = auth_service
    app.state.photo_service = photo_service

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "WWW-Authenticate"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(photos.router)
    app.include_router(comments.router)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
