# quotes_api/api/v1/routers/quotes.py
import datetime as dt
import math

from fastapi import APIRouter, Depends, Query, status

from quotes_api.api.v1.deps import get_owned_quote, get_quote_store, require_sales
from quotes_api.models.quote import Quote
from quotes_api.models.user import User
from quotes_api.schemas.quote import QuoteIn, QuoteStatusIn
from quotes_api.services.quote_store import QuoteStore, serialize_quote

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_quote(
    body: QuoteIn,
    user: User = Depends(require_sales),
    store: QuoteStore = Depends(get_quote_store),
):
    """
    Create a quote owned by the caller.

    Line totals and totalAmount are computed server-side and the quote
    number is reserved from today's sequence.
    """
    quote = await store.create(body, user)
    return {"message": "Quote created successfully.", "quote": serialize_quote(quote)}


@router.get("")
async def list_quotes(
    user: User = Depends(require_sales),
    store: QuoteStore = Depends(get_quote_store),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None),
    startDate: dt.datetime | None = Query(default=None),
    endDate: dt.datetime | None = Query(default=None),
    sortBy: str = Query("createdAt"),
    sortOrder: str = Query("desc"),
):
    """
    Paginated list of active quotes.

    Non-admin callers only ever see their own quotes, whatever filters
    they pass.

    Returns:
        dict: quotes, pagination (currentPage, totalPages, totalItems, itemsPerPage)
    """
    rows, total = await store.list(
        user,
        status=status_,
        search=search,
        start_date=startDate,
        end_date=endDate,
        page=page,
        limit=limit,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
    return {
        "quotes": [serialize_quote(q) for q in rows],
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / limit),
            "totalItems": total,
            "itemsPerPage": limit,
        },
    }


@router.get("/stats/overview")
async def quote_stats(
    user: User = Depends(require_sales),
    store: QuoteStore = Depends(get_quote_store),
):
    """
    Counts by status, trailing six months by month, and total amount,
    scoped like the list.
    """
    return await store.stats(user)


@router.get("/{quote_id}")
async def get_quote(quote: Quote = Depends(get_owned_quote)):
    return {"quote": serialize_quote(quote)}


@router.put("/{quote_id}")
async def update_quote(
    body: QuoteIn,
    quote: Quote = Depends(get_owned_quote),
    store: QuoteStore = Depends(get_quote_store),
):
    """
    Replace customer, dates, texts and products; totalAmount is recomputed.
    The quote number never changes.
    """
    quote = await store.update(quote, body)
    return {"message": "Quote updated successfully.", "quote": serialize_quote(quote)}


@router.patch("/{quote_id}/status")
async def update_quote_status(
    body: QuoteStatusIn,
    quote: Quote = Depends(get_owned_quote),
    store: QuoteStore = Depends(get_quote_store),
):
    """
    Set the status. Asking for "expired" on a quote that is still valid
    stores "sent"; the stored value is returned.
    """
    quote = await store.set_status(quote, body.status or "")
    return {"message": "Quote status updated successfully.", "status": quote.status}


@router.delete("/{quote_id}")
async def delete_quote(
    quote: Quote = Depends(get_owned_quote),
    store: QuoteStore = Depends(get_quote_store),
):
    """
    Soft delete: the quote drops out of listings, statistics and exports.
    """
    await store.soft_delete(quote)
    return {"message": "Quote deleted successfully."}
