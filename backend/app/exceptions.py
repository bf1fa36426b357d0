"""
SnapShare Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for every failure the auth core
       can report.
Why:   Each failure surfaces as a distinct, typed outcome. The HTTP layer maps
       the type to a status code; services never build responses themselves.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, repositories and gate dependencies.
When:  During request processing. Nothing here is retried.

Exception Hierarchy:
    SnapShareError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── InvalidCredentialsError  → 401 Unauthorized (generic on purpose)
    ├── UnauthorizedError        → 401 Unauthorized (no-token / invalid-token)
    ├── ForbiddenError           → 403 Forbidden (role-mismatch / ownership-mismatch)
    ├── NotFoundError            → 404 Not Found
    ├── DuplicateEmailError      → 409 Conflict
    ├── InvalidTokenError        → raised by TokenService, surfaced as UnauthorizedError
    ├── HashingError             → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

Security Note:
    `message` is safe to return to clients. `context` is for server-side logs
    and must never contain plaintext passwords, password hashes, tokens or the
    signing key.
"""

from enum import Enum
from typing import Any, Dict, Optional


class SnapShareError(Exception):
    """
    Base exception for all SnapShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler opts in)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnapShareError):
    """
    Raised when client input fails validation.

    When:    Missing username/email/password, unknown role, password too short
             or too long for bcrypt.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateEmailError(SnapShareError):
    """
    Raised when registering an email that already belongs to a user.

    HTTP:    409 Conflict
    Raised both by the credential store's pre-check and by repositories that
    enforce uniqueness themselves (the SQL unique constraint).
    """

    def __init__(
        self,
        message: str = "User with this email already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(SnapShareError):
    """
    Raised when login fails for any reason tied to the credentials.

    Unknown email and wrong password produce the same class and the same
    message so a caller cannot enumerate registered accounts.
    HTTP:    401 Unauthorized
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid credentials", context=context)


class InvalidTokenError(SnapShareError):
    """
    Raised by TokenService.verify for a bad signature, an undecodable token,
    missing or mistyped claims, or an expired token.
    """

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedReason(str, Enum):
    NO_TOKEN = "no-token"
    INVALID_TOKEN = "invalid-token"


class UnauthorizedError(SnapShareError):
    """
    Raised by the Authenticate stage of the access gate.

    HTTP:    401 Unauthorized, with `WWW-Authenticate: Bearer`
    """

    MESSAGES = {
        UnauthorizedReason.NO_TOKEN: "Unauthorized - No token provided",
        UnauthorizedReason.INVALID_TOKEN: "Unauthorized - Invalid token",
    }

    def __init__(
        self,
        reason: UnauthorizedReason,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason.value
        super().__init__(message=self.MESSAGES[reason], context=ctx)
        self.reason = reason


class ForbiddenReason(str, Enum):
    ROLE_MISMATCH = "role-mismatch"
    OWNERSHIP_MISMATCH = "ownership-mismatch"


class ForbiddenError(SnapShareError):
    """
    Raised by the RequireRole / RequireOwnerOrRole stages of the access gate,
    and by PhotoService when a creator edits another creator's photo.

    The principal is authenticated but lacks the role or ownership needed.
    HTTP:    403 Forbidden
    """

    MESSAGES = {
        ForbiddenReason.ROLE_MISMATCH: "Forbidden - Insufficient role",
        ForbiddenReason.OWNERSHIP_MISMATCH: "Forbidden - Insufficient permissions",
    }

    def __init__(
        self,
        reason: ForbiddenReason,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason.value
        super().__init__(message=self.MESSAGES[reason], context=ctx)
        self.reason = reason


class HashingError(SnapShareError):
    """
    Raised when the password hasher cannot produce a hash.

    When:    Entropy or resource failure inside bcrypt. Fatal to the request.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Password hashing failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SnapShareError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown user id on GET /api/users/{id}, unknown photo id on the
             photo and comment routes.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(SnapShareError):
    """
    Raised when a user repository operation fails unexpectedly.

    HTTP:    500 Internal Server Error
    The message returned to the client is always generic; driver details go
    to the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
