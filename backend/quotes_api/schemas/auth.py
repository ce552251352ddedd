# quotes_api/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for registration, login and password change.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from quotes_api.config import settings

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"  # alphanumeric only


class ProfileIn(BaseModel):
    """
    Profile block supplied at registration.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)  # Display name (required)
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None


class RegisterIn(BaseModel):
    """
    Request model for account registration.
    Emails are stored lowercased so uniqueness ignores letter case.
    """
    username: str = Field(min_length=3, max_length=20, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(min_length=settings.password_min_length)
    profile: ProfileIn

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    """
    Request model for login. `username` also accepts the account email.
    """
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ChangePasswordIn(BaseModel):
    """
    Request model for changing the caller's own password.
    """
    currentPassword: str = Field(min_length=1)
    newPassword: str = Field(min_length=settings.password_min_length)
