# quotes_api/api/v1/routers/users.py
from __future__ import annotations

import datetime as dt
import math
import uuid

from fastapi import APIRouter, Depends, Query
from tortoise.expressions import Q
from tortoise.functions import Count

from quotes_api.api.v1.deps import get_current_user, require_admin
from quotes_api.core.errors import NotFoundError, ValidationError
from quotes_api.models.user import ROLES, User, as_utc, utc_now
from quotes_api.schemas.admin import MyProfileIn, ProfileUpdateIn, RoleChangeIn, UserUpdateIn

router = APIRouter(prefix="/users", tags=["users"])

SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "username": "username",
    "email": "email",
    "role": "role",
    "lastLogin": "last_login",
}

PROFILE_FIELDS = ("name", "phone", "department", "position")


async def _get_user_or_404(user_id: str) -> User:
    try:
        pk = uuid.UUID(user_id)
    except ValueError:
        raise NotFoundError("User not found.")
    u = await User.get_or_none(id=pk)
    if not u:
        raise NotFoundError("User not found.")
    return u


def _apply_profile(u: User, profile: ProfileUpdateIn | None) -> list[str]:
    """Copy non-empty profile values onto the user; return changed fields."""
    changed = []
    if profile is None:
        return changed
    for name in PROFILE_FIELDS:
        value = getattr(profile, name)
        if value:
            setattr(u, name, value)
            changed.append(name)
    return changed


def _is_self(u: User, current: User) -> bool:
    return str(u.id) == str(current.id)


@router.get("", dependencies=[Depends(require_admin)])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: str | None = Query(default=None),
    isActive: bool | None = Query(default=None),
    search: str | None = Query(default=None, description="Username, email, name or department"),
    sortBy: str = Query("createdAt"),
    sortOrder: str = Query("desc"),
):
    """
    Paginated user list (admin only).
    """
    field = SORT_FIELDS.get(sortBy)
    if field is None:
        raise ValidationError(f"sortBy: must be one of {', '.join(SORT_FIELDS)}")

    qs = User.all()
    if role:
        qs = qs.filter(role=role)
    if isActive is not None:
        qs = qs.filter(is_active=isActive)
    if search:
        qs = qs.filter(
            Q(username__icontains=search)
            | Q(email__icontains=search)
            | Q(name__icontains=search)
            | Q(department__icontains=search)
        )

    total = await qs.count()
    ordering = f"-{field}" if sortOrder == "desc" else field
    rows = await qs.order_by(ordering).offset((page - 1) * limit).limit(limit)
    return {
        "users": [u.to_dict() for u in rows],
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / limit),
            "totalItems": total,
            "itemsPerPage": limit,
        },
    }


@router.get("/stats/overview", dependencies=[Depends(require_admin)])
async def user_stats():
    """
    Totals by role and activity, sign-ups in the last 30 days, and last-login
    counts for the six most recent months.
    """
    total_users = await User.all().count()
    role_rows = await User.annotate(count=Count("id")).group_by("role").values("role", "count")
    active_users = await User.filter(is_active=True).count()
    recent_users = await User.filter(created_at__gte=utc_now() - dt.timedelta(days=30)).count()

    buckets: dict[tuple[int, int], int] = {}
    for last_login in await User.filter(last_login__isnull=False).values_list("last_login", flat=True):
        last_login = as_utc(last_login)
        key = (last_login.year, last_login.month)
        buckets[key] = buckets.get(key, 0) + 1
    last_login_stats = [
        {"year": year, "month": month, "count": buckets[(year, month)]}
        for year, month in sorted(buckets, reverse=True)[:6]
    ]

    return {
        "totalUsers": total_users,
        "roleStats": {row["role"]: row["count"] for row in role_rows},
        "activeUsers": active_users,
        "inactiveUsers": total_users - active_users,
        "recentUsers": recent_users,
        "lastLoginStats": last_login_stats,
    }


@router.put("/me/profile")
async def update_my_profile(body: MyProfileIn, user: User = Depends(get_current_user)):
    """
    Update the caller's own profile. Role and activity cannot be changed here.
    """
    changed = _apply_profile(user, body.profile)
    if changed:
        await user.save(update_fields=changed + ["updated_at"])
    return {"message": "Profile updated successfully.", "user": user.to_dict()}


@router.get("/{user_id}", dependencies=[Depends(require_admin)])
async def get_user(user_id: str):
    u = await _get_user_or_404(user_id)
    return {"user": u.to_dict()}


@router.put("/{user_id}", dependencies=[Depends(require_admin)])
async def update_user(user_id: str, body: UserUpdateIn):
    """
    Admin update of profile, role and activity. Never touches the password.
    """
    u = await _get_user_or_404(user_id)
    changed = _apply_profile(u, body.profile)
    if body.role is not None:
        u.role = body.role
        changed.append("role")
    if body.isActive is not None:
        u.is_active = body.isActive
        changed.append("is_active")
    if changed:
        await u.save(update_fields=changed + ["updated_at"])
    return {"message": "User updated successfully.", "user": u.to_dict()}


@router.patch("/{user_id}/toggle-status")
async def toggle_user_status(user_id: str, current: User = Depends(require_admin)):
    u = await _get_user_or_404(user_id)
    if _is_self(u, current):
        raise ValidationError("You cannot deactivate your own account.", error="InvalidOperation")
    u.is_active = not u.is_active
    await u.save(update_fields=["is_active", "updated_at"])
    state = "activated" if u.is_active else "deactivated"
    return {"message": f"User {state} successfully.", "isActive": u.is_active}


@router.patch("/{user_id}/role")
async def change_user_role(user_id: str, body: RoleChangeIn, current: User = Depends(require_admin)):
    if body.role not in ROLES:
        raise ValidationError("The requested role is not valid.", error="InvalidRole")
    u = await _get_user_or_404(user_id)
    if _is_self(u, current):
        raise ValidationError("You cannot change your own role.", error="InvalidOperation")
    u.role = body.role
    await u.save(update_fields=["role", "updated_at"])
    return {"message": "User role changed successfully.", "role": u.role}
