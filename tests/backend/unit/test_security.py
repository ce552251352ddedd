"""
Unit tests for core.security.
Covers password hashing and the JWT access tokens used by the auth gateway.
"""
import datetime as dt

import jwt
import pytest

from quotes_api.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    JWT_ALG,
    JWT_SECRET,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    """Argon2 hashing and verification."""

    def test_hash_is_salted(self):
        assert hash_password("Secret#123") != hash_password("Secret#123")

    def test_hash_is_not_plain_text(self):
        hashed = hash_password("Secret#123")
        assert hashed.startswith("$argon2")
        assert "Secret#123" not in hashed

    def test_verify_password(self):
        hashed = hash_password("Secret#123")
        assert verify_password("Secret#123", hashed) is True
        assert verify_password("secret#123", hashed) is False


class TestAccessTokens:
    """Token claims, expiry and tampering."""

    def test_claims(self):
        token = create_access_token("7b0c3f0e-0000-4000-8000-000000000001", "sales")
        payload = decode_access_token(token)
        assert payload["sub"] == "7b0c3f0e-0000-4000-8000-000000000001"
        assert payload["role"] == "sales"
        assert "iat" in payload and "exp" in payload

    def test_default_lifetime(self):
        payload = decode_access_token(create_access_token("u-1", "user"))
        diff_minutes = (payload["exp"] - payload["iat"]) / 60
        assert abs(diff_minutes - ACCESS_TOKEN_EXPIRE_MINUTES) < 1
        assert payload["exp"] > dt.datetime.now(dt.timezone.utc).timestamp()

    def test_custom_lifetime(self):
        payload = decode_access_token(create_access_token("u-1", "user", expires_minutes=5))
        assert payload["exp"] - payload["iat"] == 5 * 60

    def test_expired_token(self):
        token = create_access_token("u-1", "user", expires_minutes=-1)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_malformed_token(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token("invalid.token.here")

    def test_foreign_signature_rejected(self):
        forged = jwt.encode({"sub": "u-1", "role": "admin"}, JWT_SECRET + "-other", algorithm=JWT_ALG)
        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(forged)

    def test_role_is_part_of_the_token(self):
        as_user = create_access_token("same-user", "user")
        as_admin = create_access_token("same-user", "admin")
        assert as_user != as_admin
        assert decode_access_token(as_admin)["role"] == "admin"
