# quotes_api/services/quote_store.py
"""
Quote persistence.

The store owns the two derived fields of a quote:
- total_amount, recomputed from the line items before every persist
- quote_number, reserved once at creation from a per-day atomic sequence
"""
from __future__ import annotations

import calendar
import logging
import uuid
import datetime as dt
from typing import Iterable, Optional

from tortoise.exceptions import IntegrityError
from tortoise.expressions import F, Q
from tortoise.functions import Count
from tortoise.queryset import QuerySet
from tortoise.transactions import in_transaction

from quotes_api.config import settings
from quotes_api.core.errors import ConflictError, ValidationError
from quotes_api.models.quote import DEFAULT_DESCRIPTION, QUOTE_STATUSES, Quote, QuoteSequence
from quotes_api.models.user import User, as_utc, utc_now
from quotes_api.schemas.quote import ProductIn, QuoteIn

logger = logging.getLogger(__name__)

QUOTE_NUMBER_PREFIX = "CQ"

# Public sort keys -> model fields
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "quoteDate": "quote_date",
    "validUntil": "valid_until",
    "totalAmount": "total_amount",
    "status": "status",
    "quoteNumber": "quote_number",
    "customerName": "customer_name",
}


# ===== Pure helpers =====
def line_total(rental_fee: float, quantity: int) -> float:
    return rental_fee * quantity


def build_line_items(products: Iterable[ProductIn]) -> list[dict]:
    """Line items as stored, each with a server-computed total."""
    return [
        {
            "name": p.name,
            "model": p.model,
            "rentalFee": p.rentalFee,
            "usagePeriod": p.usagePeriod,
            "contractPeriod": p.contractPeriod,
            "quantity": p.quantity,
            "total": line_total(p.rentalFee, p.quantity),
        }
        for p in products
    ]


def derive_total_amount(items: Iterable[dict]) -> float:
    return sum(line_total(item["rentalFee"], item["quantity"]) for item in items)


def day_key(moment: dt.datetime) -> str:
    return moment.strftime("%Y%m%d")


def format_quote_number(day: str, sequence: int) -> str:
    """CQ-YYYYMMDD-NNN; NNN is zero-padded to at least three digits."""
    return f"{QUOTE_NUMBER_PREFIX}-{day}-{sequence:03d}"


def resolve_status(requested: str, valid_until: dt.datetime, now: Optional[dt.datetime] = None) -> str:
    """
    Expiry guard: a quote whose validity has not passed cannot be marked
    expired and is kept as sent instead.
    """
    now = now or utc_now()
    if requested == "expired" and as_utc(valid_until) >= now:
        return "sent"
    return requested


def months_ago(moment: dt.datetime, months: int) -> dt.datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def monthly_buckets(rows: Iterable[tuple[dt.datetime, float]]) -> list[dict]:
    """Group (created_at, amount) pairs by calendar month, ascending."""
    buckets: dict[tuple[int, int], dict] = {}
    for created_at, amount in rows:
        key = (created_at.year, created_at.month)
        bucket = buckets.setdefault(key, {"year": key[0], "month": key[1], "count": 0, "totalAmount": 0})
        bucket["count"] += 1
        bucket["totalAmount"] += amount or 0
    return [buckets[k] for k in sorted(buckets)]


def _iso(value: Optional[dt.datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


def sales_person_summary(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": str(user.id), "username": user.username, "profile": user.profile}


def serialize_quote(quote: Quote) -> dict:
    """
    JSON representation. Expects sales_person to be fetched
    (select_related / fetch_related) when the expanded form is wanted.
    """
    sales_person = quote.sales_person if isinstance(quote.sales_person, User) else None
    return {
        "id": str(quote.id),
        "quoteNumber": quote.quote_number,
        "customer": quote.customer,
        "salesPerson": sales_person_summary(sales_person) or {"id": str(quote.sales_person_id)},
        "salesPhone": quote.sales_phone,
        "quoteDate": _iso(quote.quote_date),
        "validUntil": _iso(quote.valid_until),
        "description": quote.description,
        "products": quote.products,
        "totalAmount": quote.total_amount,
        "status": quote.status,
        "notes": quote.notes,
        "pdfUrl": quote.pdf_url,
        "isActive": quote.is_active,
        "createdAt": _iso(quote.created_at),
        "updatedAt": _iso(quote.updated_at),
    }


def _parse_id(quote_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(quote_id))
    except ValueError:
        return None


# ===== Store =====
class QuoteStore:
    """
    Async persistence operations for quotes.
    """

    # ----- scope -----
    @staticmethod
    def scoped(principal: User) -> QuerySet[Quote]:
        """
        Active quotes visible to the principal: all of them for admins,
        otherwise only the principal's own.
        """
        qs = Quote.filter(is_active=True)
        if principal.role != "admin":
            qs = qs.filter(sales_person_id=principal.id)
        return qs

    # ----- quote numbers -----
    async def reserve_sequence(self, day: str, day_start: dt.datetime) -> int:
        """
        Hand out the next sequence for `day` with one atomic increment.
        The counter row is seeded from the quotes already created that day.
        """
        async with in_transaction() as conn:
            counter = await QuoteSequence.filter(day=day).select_for_update().using_db(conn).first()
            if counter is None:
                existing = await Quote.filter(
                    created_at__gte=day_start,
                    created_at__lt=day_start + dt.timedelta(days=1),
                ).using_db(conn).count()
                counter = await QuoteSequence.create(day=day, value=existing, using_db=conn)
            await QuoteSequence.filter(id=counter.id).using_db(conn).update(value=F("value") + 1)
            await counter.refresh_from_db(fields=["value"], using_db=conn)
            return counter.value

    async def next_quote_number(self, now: Optional[dt.datetime] = None) -> str:
        now = now or utc_now()
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        day = day_key(now)
        return format_quote_number(day, await self.reserve_sequence(day, day_start))

    # ----- CRUD -----
    async def create(self, data: QuoteIn, sales_person: User) -> Quote:
        items = build_line_items(data.products)
        now = utc_now()

        for attempt in range(1, settings.quote_number_retries + 1):
            try:
                quote_number = await self.next_quote_number(now)
                quote = await Quote.create(
                    quote_number=quote_number,
                    customer_name=data.customer.name,
                    customer_phone=data.customer.phone or None,
                    customer_email=data.customer.email,
                    customer_address=data.customer.address or None,
                    sales_person=sales_person,
                    sales_phone=data.salesPhone,
                    quote_date=as_utc(data.quoteDate) or now,
                    valid_until=as_utc(data.validUntil),
                    description=data.description or DEFAULT_DESCRIPTION,
                    notes=data.notes or None,
                    products=items,
                    total_amount=derive_total_amount(items),
                )
            except IntegrityError:
                logger.warning("Quote number collision on attempt %d/%d", attempt, settings.quote_number_retries)
                continue
            logger.info("Quote %s created by %s", quote.quote_number, sales_person.username)
            return quote

        raise ConflictError("A unique quote number could not be assigned. Please submit again.")

    async def get(self, quote_id: str, include_inactive: bool = False) -> Optional[Quote]:
        pk = _parse_id(quote_id)
        if pk is None:
            return None
        qs = Quote.filter(id=pk)
        if not include_inactive:
            qs = qs.filter(is_active=True)
        return await qs.select_related("sales_person").first()

    async def list(
        self,
        principal: User,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[dt.datetime] = None,
        end_date: Optional[dt.datetime] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> tuple[list[Quote], int]:
        field = SORT_FIELDS.get(sort_by)
        if field is None:
            raise ValidationError(f"sortBy: must be one of {', '.join(SORT_FIELDS)}")

        qs = self.scoped(principal)
        if status:
            qs = qs.filter(status=status)
        if start_date:
            qs = qs.filter(quote_date__gte=as_utc(start_date))
        if end_date:
            qs = qs.filter(quote_date__lte=as_utc(end_date))
        if search:
            qs = qs.filter(
                Q(customer_name__icontains=search)
                | Q(customer_email__icontains=search)
                | Q(quote_number__icontains=search)
                | Q(description__icontains=search)
            )

        total = await qs.count()
        ordering = f"-{field}" if sort_order == "desc" else field
        rows = await (
            qs.select_related("sales_person")
            .order_by(ordering)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return rows, total

    async def update(self, quote: Quote, data: QuoteIn) -> Quote:
        """
        Replace customer, dates, texts and products. quote_number,
        sales_person and status are left untouched.
        """
        items = build_line_items(data.products)
        quote.customer_name = data.customer.name
        quote.customer_phone = data.customer.phone or None
        quote.customer_email = data.customer.email
        quote.customer_address = data.customer.address or None
        quote.sales_phone = data.salesPhone
        if data.quoteDate:
            quote.quote_date = as_utc(data.quoteDate)
        quote.valid_until = as_utc(data.validUntil)
        quote.description = data.description or DEFAULT_DESCRIPTION
        quote.notes = data.notes or None
        quote.products = items
        quote.total_amount = derive_total_amount(items)
        await quote.save()
        return quote

    async def set_status(self, quote: Quote, requested: str) -> Quote:
        if requested not in QUOTE_STATUSES:
            raise ValidationError("The requested status is not valid.", error="InvalidStatus")
        quote.status = resolve_status(requested, quote.valid_until)
        await quote.save(update_fields=["status", "updated_at"])
        return quote

    async def soft_delete(self, quote: Quote) -> None:
        await Quote.filter(id=quote.id).update(is_active=False)
        quote.is_active = False

    # ----- statistics -----
    async def stats(self, principal: User) -> dict:
        qs = self.scoped(principal)

        total_quotes = await qs.count()

        status_rows = await qs.annotate(count=Count("id")).group_by("status").values("status", "count")

        since = months_ago(utc_now(), 6)
        monthly_rows = await qs.filter(created_at__gte=since).values_list("created_at", "total_amount")

        amounts = await qs.values_list("total_amount", flat=True)

        return {
            "totalQuotes": total_quotes,
            "statusStats": {row["status"]: row["count"] for row in status_rows},
            "monthlyStats": monthly_buckets(monthly_rows),
            "totalAmount": sum(a or 0 for a in amounts),
        }
