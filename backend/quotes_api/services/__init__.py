"""
Services Module

Domain logic behind the routers:
- Catalog: product lookup, pricing, recommendation and comparison
- Quote store: quote persistence, numbering and statistics
"""

from .catalog import (
    Catalog,
    CatalogModel,
    CatalogService,
    Category,
    RecommendationRule,
)
from .quote_store import (
    QuoteStore,
    derive_total_amount,
    serialize_quote,
)

__all__ = [
    # Catalog
    "Catalog",
    "CatalogModel",
    "CatalogService",
    "Category",
    "RecommendationRule",
    # Quotes
    "QuoteStore",
    "derive_total_amount",
    "serialize_quote",
]
