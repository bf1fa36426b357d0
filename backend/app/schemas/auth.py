"""
SnapShare Backend — Pydantic Records and API Schemas
=======================================================

What:  Pydantic models for the identity data the auth core passes around,
       plus the request/response contracts of the HTTP layer.
Why:   Strict validation at every boundary: request bodies, decoded token
       claims, and records coming back from a repository.
Who:   Services exchange UserRecord / TokenClaims / AuthenticatedPrincipal;
       routes return PublicUser / AuthResult.

Record vs projection:
    UserRecord is the identity at rest and carries password_hash.
    PublicUser is the only shape that ever leaves the service; it is built
    exclusively through PublicUser.from_record(), which drops the hash.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr


# Column widths of the users table; AuthService rejects longer input up front
USERNAME_MAX_LENGTH = 150
EMAIL_MAX_LENGTH = 320


class Role(str, Enum):
    """
    Flat two-value role model.

    There is no ordering between the members: creator does not imply
    consumer and vice versa. Compare with == only.
    """

    CREATOR = "creator"
    CONSUMER = "consumer"


# ══════════════════════════════════════════════════════════════════════════
# Core Records — used inside the service, never serialized to clients
# ══════════════════════════════════════════════════════════════════════════


class UserRecord(BaseModel):
    """
    What:  A registered account as stored by a UserRepository.
    Lifecycle: created once at registration, immutable afterwards.
    Invariant: email is unique across all records.
    """

    id: str
    username: str
    email: str
    password_hash: str
    role: Role
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}


class NewUserFields(BaseModel):
    """
    What:  The caller-supplied part of a UserRecord.
    The repository assigns `id` and `created_at` on create.
    """

    username: str
    email: str
    password_hash: str
    role: Role

    model_config = {"frozen": True}


class TokenClaims(BaseModel):
    """
    What:  The signed content of an access token.
    iat/exp are integer epoch seconds, as in any JWT.
    Unknown claims are ignored; missing or mistyped ones fail validation.
    """

    id: StrictStr
    email: StrictStr
    role: Role
    iat: StrictInt
    exp: StrictInt

    model_config = {"frozen": True}


class AuthenticatedPrincipal(BaseModel):
    """
    What:  Identity attached to a single request after its token verified.
    Not persisted; discarded when the request ends.
    """

    id: str
    email: str
    role: Role

    model_config = {"frozen": True}

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "AuthenticatedPrincipal":
        return cls(id=claims.id, email=claims.email, role=claims.role)


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class PublicUser(BaseModel):
    """
    What:  External-facing user representation (no password_hash).
    Who:   Returned by register, login and GET /api/users/{id}.
    Serialized as camelCase `createdAt` to match the web client.
    """

    id: str = Field(description="Opaque user identifier")
    username: str = Field(description="Display name")
    email: str = Field(description="Login email (unique)")
    role: Role = Field(description="creator or consumer")
    created_at: datetime = Field(
        alias="createdAt",
        description="Registration timestamp (UTC ISO 8601)",
    )

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, record: UserRecord) -> "PublicUser":
        return cls(
            id=record.id,
            username=record.username,
            email=record.email,
            role=record.role,
            created_at=record.created_at,
        )


class AuthResult(BaseModel):
    """
    What:  Response of a successful register or login.
    The token is a bearer credential for the Authorization header.
    """

    user: PublicUser
    token: str = Field(description="Signed access token (send as 'Bearer <token>')")


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════
# Fields are optional at the schema level. Presence and format rules live in
# AuthService and raise ValidationError (400) in the API's error shape.


class RegisterRequest(BaseModel):
    username: Optional[str] = Field(default=None, description="Display name")
    email: Optional[str] = Field(default=None, description="Login email")
    password: Optional[str] = Field(default=None, description="Plaintext password (min 6 chars)")
    role: Optional[str] = Field(default=None, description="creator or consumer (default consumer)")


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Login email")
    password: Optional[str] = Field(default=None, description="Plaintext password")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Forbidden - Insufficient permissions",
            "details": {"reason": "ownership-mismatch"},
            "request_id": "1f0c9a2b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    user_store: str = Field(description="User store backend: memory, database")
    user_store_status: str = Field(description="connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
