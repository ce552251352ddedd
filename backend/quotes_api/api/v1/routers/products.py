# quotes_api/api/v1/routers/products.py
from fastapi import APIRouter, Depends, Query

from quotes_api.api.v1.deps import get_catalog_service, get_current_user, require_sales
from quotes_api.schemas.product import CalculatePriceIn, CompareIn, RecommendationIn
from quotes_api.services.catalog import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/categories", dependencies=[Depends(get_current_user)])
async def list_categories(catalog: CatalogService = Depends(get_catalog_service)):
    return {"categories": catalog.list_categories()}


@router.get("/categories/{category_id}/models", dependencies=[Depends(get_current_user)])
async def list_category_models(category_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.category_models(category_id)


@router.get("/search", dependencies=[Depends(get_current_user)])
async def search_products(
    q: str | None = Query(default=None, description="Substring of category or model name"),
    category: str | None = Query(default=None, description="Category id"),
    catalog: CatalogService = Depends(get_catalog_service),
):
    results = catalog.search(q, category)
    return {"query": {"q": q, "category": category}, "total": len(results), "results": results}


@router.post("/calculate-price", dependencies=[Depends(require_sales)])
async def calculate_price(body: CalculatePriceIn, catalog: CatalogService = Depends(get_catalog_service)):
    """
    Unit price after contract and quantity discounts, times quantity.
    """
    return catalog.calculate_price(body.categoryId, body.modelId, body.quantity, body.contractPeriod)


@router.post("/recommendations", dependencies=[Depends(require_sales)])
async def recommend_products(body: RecommendationIn, catalog: CatalogService = Depends(get_catalog_service)):
    recommendations = catalog.recommend(body.customerType, body.budget, body.preferences)
    return {
        "customerType": body.customerType,
        "budget": body.budget,
        "preferences": body.preferences,
        "recommendations": recommendations,
    }


@router.post("/compare", dependencies=[Depends(get_current_user)])
async def compare_products(body: CompareIn, catalog: CatalogService = Depends(get_catalog_service)):
    """
    Side-by-side detail for 2-4 products. Fails as a whole if any product
    is unknown.
    """
    return catalog.compare([(p.categoryId, p.modelId) for p in body.products])
