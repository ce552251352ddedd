# quotes_api/schemas/quote.py
"""
Pydantic schemas for quote endpoints.
Client-supplied totals and quote numbers are not part of these models and
are therefore ignored if sent.
"""
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class CustomerIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)  # Customer name (required)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v):
        # Blank means no email; stored lowercased
        if isinstance(v, str):
            return v.strip().lower() or None
        return v


class ProductIn(BaseModel):
    """
    Product line item. `total` is computed server-side.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)  # Product family
    model: str = Field(min_length=1)  # Model name
    rentalFee: float = Field(ge=0)  # Monthly rental fee
    usagePeriod: int = Field(ge=1)  # Mandatory usage period (months)
    contractPeriod: int = Field(ge=1)  # Contract period (months)
    quantity: int = Field(ge=1)


class QuoteIn(BaseModel):
    """
    Request model for creating and fully replacing a quote.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    customer: CustomerIn
    salesPhone: str = Field(min_length=1)
    quoteDate: Optional[dt.datetime] = None  # Defaults to now
    validUntil: dt.datetime
    description: Optional[str] = None
    products: List[ProductIn] = Field(min_length=1)
    notes: Optional[str] = None


class QuoteStatusIn(BaseModel):
    """
    Request model for PATCH /quotes/{id}/status. The value is checked by the
    handler so an unknown status maps to InvalidStatus.
    """
    status: Optional[str] = None
