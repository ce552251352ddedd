# quotes_api/schemas/admin.py
"""
Pydantic schemas for user management and admin endpoints.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict

Role = Literal["user", "sales", "admin"]


class ProfileUpdateIn(BaseModel):
    """
    Partial profile update. Only provided, non-empty fields are applied.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None


class MyProfileIn(BaseModel):
    """
    Request model for PUT /users/me/profile.
    """
    profile: Optional[ProfileUpdateIn] = None


class UserUpdateIn(BaseModel):
    """
    Admin update of another account. All fields are optional.
    """
    profile: Optional[ProfileUpdateIn] = None
    role: Optional[Role] = None
    isActive: Optional[bool] = None


class RoleChangeIn(BaseModel):
    """
    Request model for PATCH /users/{id}/role. Checked by the handler so an
    unknown role maps to InvalidRole.
    """
    role: Optional[str] = None


class SettingsIn(BaseModel):
    """
    Admin settings update. Sections are free-form and echoed back.
    """
    system: dict[str, Any] = {}
    email: dict[str, Any] = {}
    security: dict[str, Any] = {}
    quotes: dict[str, Any] = {}
