# quotes_api/models/user.py
"""
Database model for users.
Holds credentials, role, profile, and login-lockout counters.
"""
import uuid
import datetime as dt

from tortoise import fields, models
from tortoise.expressions import F

from quotes_api.config import settings
from quotes_api.core.security import hash_password, verify_password

ROLES = ("user", "sales", "admin")


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime | None) -> dt.datetime | None:
    """Treat naive datetimes coming back from the store as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


class User(models.Model):
    """
    User database model.

    Security:
    - Password is stored as an argon2 hash and only re-hashed by set_password
    - Username and email are each unique
    - Role is one of ROLES; authorization is plain set membership
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    username = fields.CharField(max_length=64, unique=True, index=True)
    email = fields.CharField(max_length=256, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)
    role = fields.CharField(max_length=16, default="user", index=True)

    # Profile
    name = fields.CharField(max_length=128)
    phone = fields.CharField(max_length=32, null=True)
    department = fields.CharField(max_length=128, null=True)
    position = fields.CharField(max_length=128, null=True)

    is_active = fields.BooleanField(default=True)
    login_attempts = fields.IntField(default=0)
    lock_until = fields.DatetimeField(null=True)
    last_login = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "users"

    def __str__(self) -> str:
        return self.username

    # ----- password -----
    def set_password(self, plain: str) -> None:
        self.password_hash = hash_password(plain)

    def check_password(self, plain: str) -> bool:
        return verify_password(plain, self.password_hash)

    # ----- lockout -----
    def is_locked(self, now: dt.datetime | None = None) -> bool:
        lock_until = as_utc(self.lock_until)
        return bool(lock_until and lock_until > (now or utc_now()))

    async def register_failed_login(self) -> None:
        """
        Count a failed password check.

        An expired lock restarts the counter at 1. Otherwise the counter is
        incremented with a single atomic UPDATE, and the lock is set once the
        configured threshold is reached.
        """
        now = utc_now()
        if self.lock_until and not self.is_locked(now):
            await User.filter(id=self.id).update(login_attempts=1, lock_until=None)
        else:
            await User.filter(id=self.id).update(login_attempts=F("login_attempts") + 1)

        await self.refresh_from_db(fields=["login_attempts", "lock_until"])
        if self.login_attempts >= settings.max_login_attempts and not self.is_locked(now):
            self.lock_until = now + dt.timedelta(minutes=settings.lockout_minutes)
            await self.save(update_fields=["lock_until"])

    async def register_successful_login(self) -> None:
        self.login_attempts = 0
        self.lock_until = None
        self.last_login = utc_now()
        await self.save(update_fields=["login_attempts", "lock_until", "last_login", "updated_at"])

    # ----- serialisation -----
    @property
    def profile(self) -> dict:
        return {
            "name": self.name,
            "phone": self.phone,
            "department": self.department,
            "position": self.position,
        }

    def to_dict(self) -> dict:
        """Public representation; never includes the password hash."""
        return {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "profile": self.profile,
            "isActive": self.is_active,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
