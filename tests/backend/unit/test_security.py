"""
Unit tests for core.security module.
Tests password hashing, JWT token creation/validation.
"""
import pytest
import datetime as dt
from marketplace.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_TOKEN_EXPIRE_MINUTES,
    KIND_ADMIN,
    KIND_USER,
)


def _lifetime_minutes(payload: dict) -> float:
    return (payload["exp"] - payload["iat"]) / 60


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password_returns_different_hash_each_time(self):
        """Password hashing should produce different hashes (salt included)."""
        password = "TestPassword123"
        assert hash_password(password) != hash_password(password)

    def test_hash_password_is_not_plain_text(self):
        hashed = hash_password("TestPassword123")
        assert isinstance(hashed, str)
        assert hashed != "TestPassword123"
        assert hashed.startswith("$argon2")

    def test_verify_password_correct_password(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("TestPassword123", hashed) is True

    def test_verify_password_incorrect_password(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("WrongPassword456", hashed) is False

    def test_verify_password_is_case_sensitive(self):
        hashed = hash_password("Secret#1")
        assert verify_password("secret#1", hashed) is False


class TestJWTTokens:
    """Tests for JWT token creation and validation."""

    def test_user_token_claims(self):
        token = create_access_token("user-123", "pembeli")
        payload = decode_access_token(token)
        assert payload["sub"] == "user-123"
        assert payload["role"] == "pembeli"
        assert payload["kind"] == KIND_USER

    def test_admin_token_claims(self):
        token = create_access_token("admin-1", "super_admin", KIND_ADMIN)
        payload = decode_access_token(token)
        assert payload["sub"] == "admin-1"
        assert payload["role"] == "super_admin"
        assert payload["kind"] == KIND_ADMIN

    def test_admin_token_lasts_exactly_one_day(self):
        payload = decode_access_token(create_access_token("admin-1", "moderator", KIND_ADMIN))
        assert ADMIN_TOKEN_EXPIRE_MINUTES == 24 * 60
        assert abs(_lifetime_minutes(payload) - 24 * 60) < 1

    def test_user_token_uses_configured_lifetime(self):
        payload = decode_access_token(create_access_token("user-1", "pembeli"))
        assert abs(_lifetime_minutes(payload) - ACCESS_TOKEN_EXPIRE_MINUTES) < 1

    def test_token_expires_in_the_future(self):
        payload = decode_access_token(create_access_token("user-1", "pembeli"))
        assert payload["exp"] > dt.datetime.now(dt.timezone.utc).timestamp()

    def test_decode_access_token_invalid_token(self):
        with pytest.raises(Exception):  # jwt.InvalidTokenError or similar
            decode_access_token("invalid.token.here")

    def test_decode_access_token_wrong_secret(self):
        """A token signed with another secret must not verify."""
        import jwt
        token = create_access_token("user-1", "pembeli")
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, "wrong-secret", algorithms=["HS256"])

    def test_expired_token_is_rejected(self):
        import jwt
        from marketplace.core.security import JWT_SECRET, JWT_ALG
        now = dt.datetime.now(dt.timezone.utc)
        token = jwt.encode(
            {"sub": "u", "role": "pembeli", "kind": KIND_USER, "iat": now - dt.timedelta(days=2),
             "exp": now - dt.timedelta(days=1)},
            JWT_SECRET,
            algorithm=JWT_ALG,
        )
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)
