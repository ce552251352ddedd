# quotes_api/schemas/product.py
"""
Pydantic schemas for catalog endpoints.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

CustomerType = Literal["individual", "family", "business"]


class CalculatePriceIn(BaseModel):
    categoryId: str
    modelId: str
    quantity: int = Field(default=1, ge=1, le=10)
    contractPeriod: int = Field(default=24, ge=12, le=60)  # months


class RecommendationIn(BaseModel):
    customerType: CustomerType
    budget: Optional[float] = Field(default=None, ge=20000, le=200000)  # ceiling on base price
    preferences: Optional[List[str]] = None  # category ids


class ProductRef(BaseModel):
    categoryId: str
    modelId: str


class CompareIn(BaseModel):
    products: List[ProductRef] = Field(min_length=2, max_length=4)
