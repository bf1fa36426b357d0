"""
SnapShare Backend — Auth Service (Registration / Login Orchestrator)
======================================================================

What:  The operations the HTTP layer calls: register, login, authenticate,
       and profile lookup.
Why:   Keeps credential rules out of route handlers. Routes translate HTTP
       to arguments; this service applies the rules and returns records
       without password hashes.
How:   Composes CredentialStore, PasswordHasher and TokenService, all
       injected at construction.

Flows:
    register:  validate input → duplicate-email check → hash → create → issue token
    login:     validate input → find by email → verify hash → issue token
    authenticate: Authorization header → verified TokenClaims

Account enumeration:
    login raises the same InvalidCredentialsError, with the same message,
    for an unknown email and for a wrong password. An unknown email still
    pays for one bcrypt verify against a placeholder hash, so both failures
    take about the same time.

Blocking work:
    bcrypt is CPU-bound; hash and verify run in the threadpool so they do
    not stall other requests on the event loop.
"""

import logging
import secrets
from typing import Mapping, Optional

from fastapi.concurrency import run_in_threadpool

from app.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from app.schemas.auth import (
    EMAIL_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    AuthResult,
    PublicUser,
    Role,
    TokenClaims,
    UserRecord,
)
from app.services.access_control import authenticate_headers
from app.services.credential_store import CredentialStore
from app.services.password_hasher import BCRYPT_MAX_PASSWORD_BYTES, PasswordHasher
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)


def _required(value: Optional[str], field: str, message: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message=message, field=field)
    return value


def _check_max_length(value: str, field: str, limit: int) -> None:
    if len(value) > limit:
        raise ValidationError(
            message=f"{field.capitalize()} must be at most {limit} characters",
            field=field,
        )


class AuthService:
    """
    Business logic for credential issuance and verification.

    Error Handling Strategy:
        Input problems → ValidationError. Business-rule violations →
        DuplicateEmailError / InvalidCredentialsError. Repository and hashing
        failures propagate with their own types (DatabaseError, HashingError).
        Nothing is retried.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        password_hasher: PasswordHasher,
        token_service: TokenService,
        password_min_length: int = 6,
    ):
        self.credential_store = credential_store
        self.password_hasher = password_hasher
        self.token_service = token_service
        self.password_min_length = password_min_length
        self._placeholder_hash: Optional[str] = None

    async def register(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Optional[str] = None,
    ) -> AuthResult:
        """
        Create an account and sign the caller in.

        Args:
            username, email, password: required, non-blank
            role: "creator" or "consumer"; defaults to consumer when omitted

        Returns:
            AuthResult with the public user and a fresh token

        Raises:
            ValidationError: missing field, unknown role, bad password length
            DuplicateEmailError: email already registered
            HashingError: bcrypt failure
        """
        message = "Please provide username, email and password"
        username = _required(username, "username", message)
        email = _required(email, "email", message)
        password = _required(password, "password", message)
        _check_max_length(username, "username", USERNAME_MAX_LENGTH)
        _check_max_length(email, "email", EMAIL_MAX_LENGTH)
        user_role = self._parse_role(role)
        self._validate_password(password)

        # Early duplicate check avoids paying for a bcrypt hash; CredentialStore
        # and the repository check again at create time.
        if await self.credential_store.find_by_email(email) is not None:
            raise DuplicateEmailError()

        password_hash = await run_in_threadpool(self.password_hasher.hash, password)
        user = await self.credential_store.create(
            username=username,
            email=email,
            password_hash=password_hash,
            role=user_role,
        )
        return self._issue_result(user)

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Exchange email + password for a token.

        Raises:
            ValidationError: email or password missing
            InvalidCredentialsError: unknown email or wrong password
        """
        message = "Please provide email and password"
        email = _required(email, "email", message)
        password = _required(password, "password", message)

        user = await self.credential_store.find_by_email(email)
        if user is None:
            # Unknown email pays one bcrypt verify, like a wrong password
            await run_in_threadpool(
                self.password_hasher.verify, password, await self._get_placeholder_hash()
            )
            logger.info("Login failed: unknown account")
            raise InvalidCredentialsError()

        matches = await run_in_threadpool(
            self.password_hasher.verify, password, user.password_hash
        )
        if not matches:
            logger.info("Login failed for user %s: password mismatch", user.id)
            raise InvalidCredentialsError()

        logger.info("User %s logged in", user.id)
        return self._issue_result(user)

    def authenticate(self, headers: Mapping[str, str]) -> TokenClaims:
        """
        Verify the bearer token in `headers`.

        Raises:
            UnauthorizedError: no-token or invalid-token
        """
        return authenticate_headers(headers, self.token_service)

    async def get_user(self, user_id: str) -> PublicUser:
        """
        Public profile of a user.

        Raises:
            NotFoundError: no record with this id
        """
        user = await self.credential_store.find_by_id(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return PublicUser.from_record(user)

    async def _get_placeholder_hash(self) -> str:
        """Hash of a random value at this hasher's cost; built on first use."""
        if self._placeholder_hash is None:
            self._placeholder_hash = await run_in_threadpool(
                self.password_hasher.hash, secrets.token_urlsafe(32)
            )
        return self._placeholder_hash

    def _issue_result(self, user: UserRecord) -> AuthResult:
        return AuthResult(
            user=PublicUser.from_record(user),
            token=self.token_service.issue(user),
        )

    @staticmethod
    def _parse_role(role: Optional[str]) -> Role:
        if role is None or role == "":
            return Role.CONSUMER
        try:
            return Role(role)
        except ValueError:
            allowed = ", ".join(r.value for r in Role)
            raise ValidationError(
                message=f"Invalid role '{role}'. Allowed roles: {allowed}",
                field="role",
            )

    def _validate_password(self, password: str) -> None:
        if len(password) < self.password_min_length:
            raise ValidationError(
                message=f"Password must be at least {self.password_min_length} characters",
                field="password",
            )
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes",
                field="password",
            )
