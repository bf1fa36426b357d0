"""
SnapShare Backend — Token Service
====================================

What:  Issues signed, time-bounded access tokens and verifies them.
Why:   Tokens are stateless: the server keeps no session table. Everything
       needed to authenticate a request is inside the signed token.
How:   Compact JWS (JWT) signed with a shared secret via PyJWT.
       Claims: {id, email, role, iat, exp}. The signature covers all claims,
       so any change to a claim or to the expiry invalidates the token.

Verification order:
    1. Decode + signature check with the configured algorithm only
       (rejects alg=none and algorithm substitution)
    2. Claim shape check (all five claims present, correct types, known role)
    3. Expiry check against this service's clock: valid only while now < exp

Revocation:
    None. A token stays valid until it expires or the signing key changes.
    Logging out is a client-side discard.
"""

import logging
import time
from typing import Callable

import jwt
from pydantic import ValidationError as PydanticValidationError

from app.exceptions import InvalidTokenError
from app.schemas.auth import TokenClaims, UserRecord

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["id", "email", "role", "iat", "exp"]


class TokenService:
    """
    Stateless JWT issue/verify bound to one signing key.

    Attributes:
        ttl_seconds: token lifetime; exp = iat + ttl_seconds
        algorithm: HMAC algorithm name (HS256 by default)
        clock: returns the current epoch time in seconds; injectable for tests
    """

    def __init__(
        self,
        secret_key: str,
        ttl_seconds: int = 86_400,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ):
        if not secret_key:
            raise ValueError("TokenService requires a non-empty signing key")
        self._secret_key = secret_key
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm
        self.clock = clock

    def issue(self, user: UserRecord) -> str:
        """
        Issue a token for `user`.

        Claims are a read-only projection of the record at this moment;
        a later role change is not reflected until the next issue.
        """
        issued_at = int(self.clock())
        payload = {
            "id": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        token = jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        logger.debug("Issued token for user %s (exp=%d)", user.id, payload["exp"])
        return token

    def verify(self, token: str) -> TokenClaims:
        """
        Verify `token` and return its claims unmodified.

        Raises:
            InvalidTokenError: bad signature, malformed token, missing or
                mistyped claims, or current time >= exp.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={
                    "require": REQUIRED_CLAIMS,
                    # expiry is checked below against self.clock
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidTokenError("Token signature is invalid") from e
        except jwt.MissingRequiredClaimError as e:
            raise InvalidTokenError("Token is missing a required claim") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError("Token is malformed") from e

        try:
            claims = TokenClaims.model_validate(payload)
        except PydanticValidationError as e:
            raise InvalidTokenError("Token claims are invalid") from e

        if self.clock() >= claims.exp:
            raise InvalidTokenError("Token has expired")

        return claims
