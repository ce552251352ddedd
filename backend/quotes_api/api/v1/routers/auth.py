# quotes_api/api/v1/routers/auth.py
import logging

from fastapi import APIRouter, Depends, status
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from quotes_api.api.v1.deps import get_current_user
from quotes_api.core.errors import (
    ConflictError,
    InvalidCredentials,
    LockedError,
    ValidationError,
)
from quotes_api.core.security import create_access_token
from quotes_api.models.user import User
from quotes_api.schemas.auth import ChangePasswordIn, LoginRequest, RegisterIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

DUPLICATE_USER_MESSAGE = "The username or email is already in use."


def _duplicate_user() -> ConflictError:
    return ConflictError(DUPLICATE_USER_MESSAGE, error="DuplicateUser")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn):
    """
    Register a new account.

    Username and email are checked together; a clash on either returns one
    DuplicateUser error. A concurrent insert that slips past the check hits
    the unique index and is reported the same way.

    Returns:
        dict: message, accessToken, and the public user object
    """
    if await User.filter(Q(username=body.username) | Q(email=body.email)).exists():
        raise _duplicate_user()

    user = User(
        username=body.username,
        email=body.email,
        role="user",
        name=body.profile.name,
        phone=body.profile.phone or None,
        department=body.profile.department or None,
        position=body.profile.position or None,
    )
    user.set_password(body.password)
    try:
        await user.save()
    except IntegrityError:
        raise _duplicate_user()

    logger.info("Registered user %s", user.username)
    token = create_access_token(str(user.id), user.role)
    return {"message": "Registration complete.", "accessToken": token, "user": user.to_dict()}


@router.post("/login")
async def login(payload: LoginRequest):
    """
    Authenticate with username (or email) and password.

    A locked account is rejected with 423 before the password is checked.
    Each wrong password counts towards the lockout threshold; a successful
    login clears the counter and records lastLogin.

    Raises:
        InvalidCredentials (401): unknown user or wrong password
        LockedError (423): too many failed attempts
    """
    identifier = payload.username.strip()
    user = await User.filter(Q(username=identifier) | Q(email=identifier.lower())).first()
    if not user:
        raise InvalidCredentials()

    if user.is_locked():
        raise LockedError()

    if not user.check_password(payload.password):
        await user.register_failed_login()
        logger.warning("Failed login for %s (%d attempts)", user.username, user.login_attempts)
        raise InvalidCredentials()

    await user.register_successful_login()
    token = create_access_token(str(user.id), user.role)
    return {"message": "Login successful.", "accessToken": token, "user": user.to_dict()}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """
    Current authenticated user.
    """
    return {"user": user.to_dict()}


@router.put("/change-password")
async def change_password(body: ChangePasswordIn, user: User = Depends(get_current_user)):
    """
    Change the caller's password after verifying the current one.
    """
    if not user.check_password(body.currentPassword):
        raise ValidationError("The current password is incorrect.", error="InvalidPassword")
    user.set_password(body.newPassword)
    await user.save(update_fields=["password_hash", "updated_at"])
    return {"message": "Password changed successfully."}


@router.post("/logout")
async def logout(user: User = Depends(get_current_user)):
    """
    Tokens are stateless; the client discards its copy. This only
    acknowledges the request for an authenticated caller.
    """
    return {"message": "Logged out."}
