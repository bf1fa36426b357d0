"""
SnapShare Backend — Auth Route Handlers
=========================================

What:  Handles POST /api/auth/register and POST /api/auth/login.
Who:   Called by the web client's sign-up and sign-in forms.

Both endpoints return `{user, token}`. The client stores the token and sends
it back as `Authorization: Bearer <token>` on protected calls.
"""

import logging

from fastapi import APIRouter, Depends, status

from app.dependencies import get_auth_service
from app.schemas.auth import AuthResult, ErrorResponse, LoginRequest, RegisterRequest
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResult,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Account created", "model": AuthResult},
        400: {"description": "Missing field, bad role or bad password", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new account",
)
async def register(
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResult:
    """Role defaults to consumer when omitted."""
    return await auth_service.register(
        username=body.username,
        email=body.email,
        password=body.password,
        role=body.role,
    )


@router.post(
    "/login",
    response_model=AuthResult,
    responses={
        200: {"description": "Signed in", "model": AuthResult},
        400: {"description": "Missing email or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Sign in with email and password",
)
async def login(
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResult:
    return await auth_service.login(email=body.email, password=body.password)
