"""
Password hashing tests (PBKDF2-HMAC-SHA512, "salt:hexkey" format).
"""

import pytest

from oms.services.auth_service import (
    PasswordValidationError,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestHashPassword:

    def test_format(self):
        stored = hash_password("Password123!")
        salt, key = stored.split(":")
        assert len(salt) == 32
        assert len(key) == 128
        int(salt, 16)
        int(key, 16)

    def test_salt_is_random(self):
        assert hash_password("Password123!") != hash_password("Password123!")

    def test_verify_round_trip(self):
        stored = hash_password("Password123!")
        assert verify_password("Password123!", stored) is True
        assert verify_password("password123!", stored) is False


class TestVerifyFailsClosed:

    @pytest.mark.parametrize("stored", [
        "",
        "no-colon",
        "a:b:c",
        ":deadbeef",
        "abcd:",
        "abcd:not-hex",
        None,
    ])
    def test_malformed_hashes_return_false(self, stored):
        assert verify_password("Password123!", stored) is False

    def test_truncated_key_never_matches(self):
        salt, key = hash_password("Password123!").split(":")
        assert verify_password("Password123!", f"{salt}:{key[:64]}") is False


class TestPasswordStrength:

    def test_minimum_length(self):
        validate_password_strength("12345678")
        with pytest.raises(PasswordValidationError) as exc:
            validate_password_strength("1234567")
        assert exc.value.message == "Password must be at least 8 characters long"
        assert exc.value.status_code == 400
