# quotes_api/services/catalog.py
"""
Product catalog: category/model lookup, tiered price calculation,
rule-based recommendation and side-by-side comparison.

CatalogService never mutates its Catalog and has no I/O; the Catalog is
handed in at construction (see catalog_data.DEFAULT_CATALOG).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from quotes_api.core.errors import NotFoundError, ValidationError


# ===== Catalog data types =====
@dataclass(frozen=True)
class CatalogModel:
    id: str
    name: str
    base_price: int


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    models: tuple[CatalogModel, ...]

    def find_model(self, model_id: str) -> Optional[CatalogModel]:
        return next((m for m in self.models if m.id == model_id), None)


@dataclass(frozen=True)
class RecommendationRule:
    category_id: str
    model_id: str
    reason: str
    priority: int


@dataclass(frozen=True)
class Catalog:
    """
    Immutable catalog configuration.

    features: (category_id, model_id) -> feature labels
    recommendations: customer type -> rules
    """
    categories: tuple[Category, ...]
    features: Mapping[tuple[str, str], tuple[str, ...]] = field(default_factory=dict)
    recommendations: Mapping[str, tuple[RecommendationRule, ...]] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the mappings so no caller can mutate the shared catalog
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))
        object.__setattr__(self, "recommendations", MappingProxyType(dict(self.recommendations)))

    def find_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def resolve(self, category_id: str, model_id: str) -> Optional[tuple[Category, CatalogModel]]:
        category = self.find_category(category_id)
        model = category.find_model(model_id) if category else None
        if not category or not model:
            return None
        return category, model


# ===== Discount tiers =====
# (minimum contract months, discount percent), checked top-down
CONTRACT_DISCOUNTS = ((36, 15), (24, 10), (18, 5))
# (minimum quantity, additional discount percent), checked top-down
QUANTITY_DISCOUNTS = ((3, 5), (2, 3))


def _tier(value: int, tiers: Iterable[tuple[int, int]]) -> int:
    for threshold, percent in tiers:
        if value >= threshold:
            return percent
    return 0


def discount_percent(contract_period: int, quantity: int) -> int:
    """
    Contract tier plus quantity tier, summed (not compounded).
    """
    return _tier(contract_period, CONTRACT_DISCOUNTS) + _tier(quantity, QUANTITY_DISCOUNTS)


def discounted_unit_price(base_price: int, percent: int) -> int:
    """
    Unit price after discount, rounded half-up to a whole currency unit.
    """
    price = Decimal(base_price) * (100 - percent) / 100
    return int(price.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _product_summary(category: Category, model: CatalogModel) -> dict:
    return {
        "categoryId": category.id,
        "categoryName": category.name,
        "modelId": model.id,
        "modelName": model.name,
        "basePrice": model.base_price,
    }


class CatalogService:
    """
    Read-only operations over a Catalog.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    # ----- lookup -----
    def list_categories(self) -> list[dict]:
        return [
            {"id": c.id, "name": c.name, "modelCount": len(c.models)}
            for c in self.catalog.categories
        ]

    def get_category(self, category_id: str) -> Category:
        category = self.catalog.find_category(category_id)
        if not category:
            raise NotFoundError("Product category not found.")
        return category

    def category_models(self, category_id: str) -> dict:
        category = self.get_category(category_id)
        return {
            "category": {"id": category.id, "name": category.name},
            "models": [
                {"id": m.id, "name": m.name, "basePrice": m.base_price}
                for m in category.models
            ],
        }

    def search(self, q: Optional[str] = None, category_id: Optional[str] = None) -> list[dict]:
        results = [
            _product_summary(c, m)
            for c in self.catalog.categories
            for m in c.models
        ]
        if category_id:
            results = [r for r in results if r["categoryId"] == category_id]
        if q:
            term = q.lower()
            results = [
                r for r in results
                if term in r["categoryName"].lower() or term in r["modelName"].lower()
            ]
        return results

    # ----- pricing -----
    def calculate_price(
        self,
        category_id: str,
        model_id: str,
        quantity: int = 1,
        contract_period: int = 24,
    ) -> dict:
        category = self.get_category(category_id)
        model = category.find_model(model_id)
        if not model:
            raise NotFoundError("Product model not found.")

        percent = discount_percent(contract_period, quantity)
        unit_price = discounted_unit_price(model.base_price, percent)
        total_price = unit_price * quantity
        original_total = model.base_price * quantity

        return {
            "product": _product_summary(category, model),
            "calculation": {
                "quantity": quantity,
                "contractPeriod": contract_period,
                "discountRate": percent,
                "discountedPrice": unit_price,
                "totalPrice": total_price,
            },
            "breakdown": {
                "originalTotal": original_total,
                "discountAmount": original_total - total_price,
                "finalTotal": total_price,
            },
        }

    # ----- recommendation -----
    def recommend(
        self,
        customer_type: str,
        budget: Optional[float] = None,
        preferences: Optional[list[str]] = None,
    ) -> list[dict]:
        rules = sorted(self.catalog.recommendations.get(customer_type, ()), key=lambda r: r.priority)

        items = []
        for rule in rules:
            resolved = self.catalog.resolve(rule.category_id, rule.model_id)
            if not resolved:
                continue
            category, model = resolved
            if budget is not None and model.base_price > budget:
                continue
            if preferences and category.id not in preferences:
                continue
            items.append({
                "categoryId": category.id,
                "modelId": model.id,
                "reason": rule.reason,
                "priority": rule.priority,
                "categoryName": category.name,
                "modelName": model.name,
                "basePrice": model.base_price,
            })
        return items

    # ----- comparison -----
    def compare(self, pairs: list[tuple[str, str]]) -> dict:
        """
        All-or-nothing: a single unresolved pair fails the whole comparison.
        """
        comparison = []
        for category_id, model_id in pairs:
            resolved = self.catalog.resolve(category_id, model_id)
            if not resolved:
                raise ValidationError("Some products could not be found.", error="InvalidProducts")
            category, model = resolved
            entry = _product_summary(category, model)
            entry["features"] = list(self.catalog.features.get((category.id, model.id), ()))
            comparison.append(entry)

        prices = [p["basePrice"] for p in comparison]
        categories: list[str] = []
        for p in comparison:
            if p["categoryName"] not in categories:
                categories.append(p["categoryName"])

        return {
            "comparison": comparison,
            "summary": {
                "priceRange": {"min": min(prices), "max": max(prices)},
                "categories": categories,
            },
        }
