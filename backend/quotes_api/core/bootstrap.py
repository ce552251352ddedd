# quotes_api/core/bootstrap.py
"""
First-run setup: make sure the service has an administrator.
"""
import os
import logging

from quotes_api.models.user import User

logger = logging.getLogger("uvicorn.error")


async def _free_username(wanted: str) -> str:
    candidate, n = wanted, 1
    while await User.filter(username=candidate).exists():
        n += 1
        candidate = f"{wanted}{n}"
    return candidate


async def _free_email(wanted: str, username: str) -> str:
    if not await User.filter(email=wanted).exists():
        return wanted
    local, _, domain = wanted.partition("@")
    return f"{local}+{username}@{domain}"


async def ensure_default_admin() -> None:
    """
    Create an admin account when none exists.

    Reads ADMIN_USERNAME (default "admin"), ADMIN_EMAIL (default
    "admin@example.com") and ADMIN_PASSWORD. Without ADMIN_PASSWORD nothing
    is created; there is no built-in fallback password.
    """
    if await User.filter(role="admin").exists():
        return

    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        logger.warning("No admin account and ADMIN_PASSWORD is unset; skipping default admin")
        return

    # A regular account may already hold the name or email
    username = await _free_username(os.getenv("ADMIN_USERNAME", "admin"))
    email = await _free_email(os.getenv("ADMIN_EMAIL", "admin@example.com").lower(), username)

    admin = User(username=username, email=email, role="admin", name="Administrator")
    admin.set_password(password)
    await admin.save()
    logger.warning("Created default admin %s <%s> (id=%s)", admin.username, admin.email, admin.id)
