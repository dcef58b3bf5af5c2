"""Tests for password hashing and validation."""

import pytest

from wastewise.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("Recycle2026")
        assert hashed.startswith("$argon2id$")
        assert verify_password("Recycle2026", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("Recycle2026")
        assert verify_password("Compost2026", hashed) is False

    def test_garbage_hash_rejected(self):
        assert verify_password("Recycle2026", "not-a-hash") is False


class TestPasswordStrength:
    def test_valid_password(self):
        validate_password_strength("greenbin42")  # Should not raise

    def test_empty_password_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("")

    def test_short_password_rejected(self):
        with pytest.raises(PasswordStrengthError, match="at least 8"):
            validate_password_strength("bin42")

    def test_no_digit_rejected(self):
        with pytest.raises(PasswordStrengthError, match="digit"):
            validate_password_strength("greenbinonly")

    def test_no_letter_rejected(self):
        with pytest.raises(PasswordStrengthError, match="letter"):
            validate_password_strength("1234567890")

    def test_too_long_password_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("a1" * 65)
