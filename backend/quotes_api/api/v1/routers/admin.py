# quotes_api/api/v1/routers/admin.py
from __future__ import annotations

import csv
import io
import logging
import os
import platform
import sys
import time
import uuid
import datetime as dt
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from tortoise.functions import Count

from quotes_api.api.v1.deps import get_quote_store, require_admin
from quotes_api.config import settings
from quotes_api.core.logs import recent_logs
from quotes_api.models.quote import Quote
from quotes_api.models.user import User, as_utc, utc_now
from quotes_api.schemas.admin import SettingsIn
from quotes_api.services.quote_store import QuoteStore, sales_person_summary, serialize_quote

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

CSV_COLUMNS = ("Quote Number", "Customer", "Sales Person", "Total Amount", "Status", "Quote Date", "Valid Until")


def _iso(value: dt.datetime | None) -> str | None:
    return as_utc(value).isoformat() if value else None


def _peak_rss() -> int | None:
    """Peak resident set size as reported by getrusage (KiB on Linux, bytes on macOS)."""
    if sys.platform == "win32":
        return None
    import resource

    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss


async def _top_salespeople(limit: int = 5) -> list[dict]:
    """
    Active quote totals per sales person, highest amount first.
    """
    totals: dict[str, dict] = {}
    for owner_id, amount in await Quote.filter(is_active=True).values_list("sales_person_id", "total_amount"):
        row = totals.setdefault(str(owner_id), {"totalQuotes": 0, "totalAmount": 0})
        row["totalQuotes"] += 1
        row["totalAmount"] += amount or 0

    ranked = sorted(totals.items(), key=lambda kv: kv[1]["totalAmount"], reverse=True)[:limit]
    users = {str(u.id): u for u in await User.filter(id__in=[uuid.UUID(owner) for owner, _ in ranked])}
    return [
        {
            "id": owner,
            "username": users[owner].username,
            "name": users[owner].name,
            **row,
        }
        for owner, row in ranked
        if owner in users
    ]


# ==============================================================================
# I. Dashboard
# ==============================================================================
@router.get("/dashboard")
async def dashboard(
    admin: User = Depends(require_admin),
    store: QuoteStore = Depends(get_quote_store),
):
    """
    Overview numbers, recent activity, monthly/status/role breakdowns and
    the top five sales people by quoted amount. Soft-deleted quotes are
    excluded throughout.
    """
    quote_stats = await store.stats(admin)
    total_users = await User.all().count()
    role_rows = await User.annotate(count=Count("id")).group_by("role").values("role", "count")

    recent_users = await User.all().order_by("-created_at").limit(5)
    recent_quotes = await (
        Quote.filter(is_active=True).select_related("sales_person").order_by("-created_at").limit(5)
    )

    return {
        "overview": {
            "totalUsers": total_users,
            "totalQuotes": quote_stats["totalQuotes"],
            "totalAmount": quote_stats["totalAmount"],
        },
        "recentActivity": {
            "users": [
                {
                    "id": str(u.id),
                    "username": u.username,
                    "name": u.name,
                    "role": u.role,
                    "createdAt": _iso(u.created_at),
                }
                for u in recent_users
            ],
            "quotes": [
                {
                    "id": str(q.id),
                    "quoteNumber": q.quote_number,
                    "customerName": q.customer_name,
                    "totalAmount": q.total_amount,
                    "status": q.status,
                    "salesPerson": sales_person_summary(q.sales_person),
                    "createdAt": _iso(q.created_at),
                }
                for q in recent_quotes
            ],
        },
        "monthlyStats": quote_stats["monthlyStats"],
        "statusStats": quote_stats["statusStats"],
        "roleStats": {row["role"]: row["count"] for row in role_rows},
        "topSalespeople": await _top_salespeople(),
    }


# ==============================================================================
# II. System information
# ==============================================================================
@router.get("/system-status")
async def system_status(request: Request):
    """
    Liveness of the database and basic process facts.
    """
    database = "connected"
    try:
        await User.first()
    except Exception:
        logger.exception("Database probe failed")
        database = "disconnected"

    started = getattr(request.app.state, "started_monotonic", time.monotonic())
    return {
        "database": database,
        "server": "running",
        "timestamp": utc_now().isoformat(),
        "uptime": round(time.monotonic() - started, 3),
        "pid": os.getpid(),
        "maxRss": _peak_rss(),
        "pythonVersion": platform.python_version(),
        "platform": platform.platform(),
        "version": settings.APP_VERSION,
    }


@router.get("/backup-info")
async def backup_info():
    """
    Backups run outside the API; this only describes the policy.
    """
    return {
        "lastBackup": None,
        "nextBackup": (utc_now() + dt.timedelta(days=1)).isoformat(),
        "backupSize": "0 MB",
        "collections": ["users", "quotes"],
        "autoBackup": True,
        "retentionDays": 30,
    }


@router.get("/logs")
async def get_logs(
    level: Literal["debug", "info", "warning", "error", "critical"] = Query("info"),
    limit: int = Query(100, ge=1, le=1000),
):
    """
    Recent application log records, newest first, at or above `level`.
    """
    logs = recent_logs.snapshot(min_level=logging.getLevelName(level.upper()), limit=limit)
    return {"logs": logs, "total": len(logs)}


def _current_settings() -> dict:
    return {
        "system": {
            "maintenanceMode": False,
            "allowRegistration": True,
            "maxFileSize": settings.max_file_size,
            "sessionTimeout": f"{settings.access_token_expire_minutes}m",
        },
        "email": {
            "enabled": bool(settings.smtp_host),
            "host": settings.smtp_host or "",
            "port": settings.smtp_port,
        },
        "security": {
            "passwordMinLength": settings.password_min_length,
            "maxLoginAttempts": settings.max_login_attempts,
            "lockoutDuration": f"{settings.lockout_minutes}m",
            "requireEmailVerification": False,
        },
        "quotes": {
            "defaultValidityDays": settings.quote_validity_days,
            "autoExpire": True,
            "allowMultipleProducts": True,
        },
    }


@router.get("/settings")
async def get_settings():
    return _current_settings()


@router.put("/settings")
async def update_settings(body: SettingsIn, admin: User = Depends(require_admin)):
    """
    Echo the submitted settings. Runtime configuration comes from the
    environment, so nothing is persisted here.
    """
    logger.info("Settings update submitted by %s", admin.username)
    return {
        "message": "Settings updated successfully.",
        "settings": {
            "system": body.system,
            "email": body.email,
            "security": body.security,
            "quotes": body.quotes,
            "updatedAt": utc_now().isoformat(),
            "updatedBy": str(admin.id),
        },
    }


# ==============================================================================
# III. Export
# ==============================================================================
@router.get("/export/quotes")
async def export_quotes(
    export_format: Literal["json", "csv"] = Query("json", alias="format"),
    startDate: dt.datetime | None = Query(default=None),
    endDate: dt.datetime | None = Query(default=None),
):
    """
    Export active quotes, optionally limited to a creation date range.
    """
    qs = Quote.filter(is_active=True)
    if startDate:
        qs = qs.filter(created_at__gte=as_utc(startDate))
    if endDate:
        qs = qs.filter(created_at__lte=as_utc(endDate))
    quotes = await qs.select_related("sales_person").order_by("-created_at")

    if export_format == "csv":
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(CSV_COLUMNS)
        for q in quotes:
            writer.writerow([
                q.quote_number,
                q.customer_name,
                q.sales_person.name if q.sales_person else "",
                q.total_amount,
                q.status,
                _iso(q.quote_date),
                _iso(q.valid_until),
            ])
        return Response(
            content=buf.getvalue(),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=quotes.csv"},
        )

    return {
        "exportDate": utc_now().isoformat(),
        "totalRecords": len(quotes),
        "data": [serialize_quote(q) for q in quotes],
    }
