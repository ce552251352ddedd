# quotes_api/models/quote.py
"""
Database models for quotes.

A Quote embeds its customer (flattened columns) and its product line items
(JSON list). QuoteSequence holds one counter row per calendar day and is the
source of the NNN part of quote numbers.
"""
import uuid

from tortoise import fields, models

QUOTE_STATUSES = ("draft", "sent", "accepted", "rejected", "expired")

DEFAULT_DESCRIPTION = "No product description or benefits were provided."


class Quote(models.Model):
    """
    Quote database model.

    Relationships:
    - Belongs to a User (sales_person), who owns it for access control

    Invariants:
    - quote_number is assigned once at creation and never updated
    - total_amount equals the sum of the line totals at the last save
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    quote_number = fields.CharField(max_length=32, unique=True, index=True)

    # Embedded customer
    customer_name = fields.CharField(max_length=128)
    customer_phone = fields.CharField(max_length=32, null=True)
    customer_email = fields.CharField(max_length=256, null=True)
    customer_address = fields.CharField(max_length=512, null=True)

    sales_person = fields.ForeignKeyField(
        "models.User",
        related_name="quotes",
        on_delete=fields.RESTRICT,
    )
    sales_phone = fields.CharField(max_length=32)
    quote_date = fields.DatetimeField(index=True)
    valid_until = fields.DatetimeField()

    description = fields.TextField(default=DEFAULT_DESCRIPTION)
    notes = fields.TextField(null=True)
    products = fields.JSONField(default=list)  # list of line item dicts, each with a server-computed total
    total_amount = fields.FloatField(default=0)

    status = fields.CharField(max_length=16, default="draft", index=True)
    pdf_url = fields.CharField(max_length=1024, null=True)  # attachment slot, not generated yet
    is_active = fields.BooleanField(default=True, index=True)

    created_at = fields.DatetimeField(auto_now_add=True, index=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "quotes"

    def __str__(self) -> str:
        return self.quote_number

    @property
    def customer(self) -> dict:
        return {
            "name": self.customer_name,
            "phone": self.customer_phone,
            "email": self.customer_email,
            "address": self.customer_address,
        }


class QuoteSequence(models.Model):
    """
    Per-day quote number counter.
    day: "YYYYMMDD"; value: last sequence handed out for that day.
    """
    id = fields.IntField(pk=True)
    day = fields.CharField(max_length=8, unique=True)
    value = fields.IntField(default=0)

    class Meta:
        table = "quote_sequences"
