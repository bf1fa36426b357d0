"""
SnapShare Backend — Password Hasher
======================================

What:  One-way salted hashing and constant-time verification of passwords.
Why:   Passwords are stored only as bcrypt hashes; the plaintext never
       reaches a repository or a log line.
How:   bcrypt with a fresh random salt per call. The salt and the cost
       factor are embedded in the output string ($2b$<rounds>$<salt><hash>),
       so verify() needs nothing but the stored hash.

Cost factor:
    Configured by BCRYPT_ROUNDS (default 10). Hashing is CPU-bound by
    design: roughly 50-100ms at 10 rounds. Tests use the minimum (4).

Input limit:
    bcrypt only reads the first 72 bytes of its input. AuthService rejects
    longer passwords at registration; hash() treats them as an internal
    failure because it should never see one.
"""

import logging

import bcrypt

from app.exceptions import HashingError

logger = logging.getLogger(__name__)

BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt hash/verify with a fixed work factor per instance."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """
        Derive a salted bcrypt hash of `plaintext`.

        Returns:
            The encoded hash as text (60 characters).

        Raises:
            HashingError: salt generation or hashing failed.
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(plaintext.encode("utf-8"), salt)
        except (ValueError, TypeError, OSError) as e:
            logger.error("Password hashing failed: %s", type(e).__name__)
            raise HashingError(context={"error_type": type(e).__name__}) from e
        return hashed.decode("utf-8")

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """
        Check `plaintext` against a stored hash in constant time.

        Returns False for a wrong password and for a malformed hash; never
        raises for either.
        """
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False
