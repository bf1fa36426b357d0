"""
SnapShare Backend — Password Hasher Unit Tests
=================================================

What we test:
    ✅ Output is a salted bcrypt hash carrying the configured cost
    ✅ Same plaintext hashes differently each time, yet both verify
    ✅ Wrong password and malformed hash verify as False (no exception)
    ✅ bcrypt failures surface as HashingError
"""

from unittest.mock import patch

import pytest

from app.exceptions import HashingError
from app.services.password_hasher import PasswordHasher


class TestHash:
    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_is_bcrypt_with_configured_cost(self):
        hashed = self.hasher.hash("s3cret!")
        assert hashed.startswith("$2b$04$")
        assert len(hashed) == 60

    def test_hash_never_contains_plaintext(self):
        assert "s3cret!" not in self.hasher.hash("s3cret!")

    def test_same_password_gets_a_fresh_salt(self):
        first = self.hasher.hash("s3cret!")
        second = self.hasher.hash("s3cret!")
        assert first != second
        assert self.hasher.verify("s3cret!", first)
        assert self.hasher.verify("s3cret!", second)

    def test_salt_failure_raises_hashing_error(self):
        with patch("app.services.password_hasher.bcrypt.gensalt", side_effect=ValueError("no entropy")):
            with pytest.raises(HashingError) as exc_info:
                self.hasher.hash("s3cret!")
        assert exc_info.value.context["error_type"] == "ValueError"


class TestVerify:
    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)
        self.stored = self.hasher.hash("s3cret!")

    def test_correct_password(self):
        assert self.hasher.verify("s3cret!", self.stored) is True

    def test_wrong_password(self):
        assert self.hasher.verify("S3cret!", self.stored) is False

    def test_empty_password(self):
        assert self.hasher.verify("", self.stored) is False

    def test_malformed_hash_returns_false(self):
        assert self.hasher.verify("s3cret!", "not-a-bcrypt-hash") is False

    def test_unicode_password(self):
        stored = self.hasher.hash("pässwörd-ü")
        assert self.hasher.verify("pässwörd-ü", stored)
        assert not self.hasher.verify("passwords-u", stored)
