"""
Security module for authentication.
Handles password hashing and JWT token creation/validation.
"""
import datetime as dt

import jwt  # PyJWT
from passlib.context import CryptContext

from quotes_api.config import settings

# Password hashing context (argon2 only)
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

# JWT configuration
JWT_SECRET = settings.jwt_secret
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
JWT_ALG = "HS256"  # HMAC SHA-256


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Never store plain text passwords; call this only when the password
    itself changes so an existing hash is never hashed twice.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a stored hash.
    """
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: str, role: str, expires_minutes: int | None = None) -> str:
    """
    Create a JWT access token.

    Payload:
        - sub: user id
        - role: user role at issue time (informational; the gateway
          re-reads the role from the store on every request)
        - iat / exp: issue and expiry timestamps
    """
    now = dt.datetime.now(dt.timezone.utc)
    minutes = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": now + dt.timedelta(minutes=minutes),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is invalid or malformed
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
