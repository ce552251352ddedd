# quotes_api/api/v1/deps.py
import logging
import uuid
from typing import Awaitable, Callable, Optional, TypeVar

import jwt
from fastapi import Depends, Header, Request

from quotes_api.core.errors import (
    AccountDisabled,
    AuthorizationError,
    ExpiredToken,
    InternalError,
    InvalidToken,
    MissingToken,
    NotFoundError,
)
from quotes_api.core.security import decode_access_token
from quotes_api.models.quote import Quote
from quotes_api.models.user import User
from quotes_api.services.catalog import CatalogService
from quotes_api.services.quote_store import QuoteStore

logger = logging.getLogger(__name__)

ELEVATED_ROLE = "admin"

T = TypeVar("T")


def _bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


async def get_current_user(authorization: str | None = Header(default=None)) -> User:
    """
    FastAPI dependency resolving the bearer token to an active User.

    Raises:
        MissingToken (401): no Authorization: Bearer header
        ExpiredToken (401): signature valid but token expired
        InvalidToken (401): bad signature, malformed token, or unknown user
        AccountDisabled (401): user exists but is deactivated
        InternalError (500): the user lookup itself failed

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            ...
    """
    token = _bearer_token(authorization)
    if not token:
        raise MissingToken()

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise ExpiredToken()
    except jwt.InvalidTokenError:
        raise InvalidToken()

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise InvalidToken()

    try:
        user = await User.get_or_none(id=user_id)
    except Exception as exc:
        logger.exception("Auth lookup failed for user %s", user_id)
        raise InternalError() from exc

    if not user:
        raise InvalidToken()
    if not user.is_active:
        raise AccountDisabled()
    return user


def require_roles(*roles: str) -> Callable[..., Awaitable[User]]:
    """
    Build a dependency that admits only principals whose role is in `roles`.
    Plain set membership; there is no role hierarchy.
    """
    allowed = frozenset(roles)

    async def _require(current: User = Depends(get_current_user)) -> User:
        if current.role not in allowed:
            raise AuthorizationError()
        return current

    return _require


require_admin = require_roles("admin")
require_sales = require_roles("admin", "sales")


async def authorize_ownership(
    resource_id: str,
    lookup: Callable[[str], Awaitable[Optional[T]]],
    owner_of: Callable[[T], object],
    principal: User,
) -> T:
    """
    Load a resource and decide whether `principal` may act on it.

    - missing resource -> NotFoundError
    - elevated role -> allowed regardless of owner
    - otherwise owner_of(resource) must equal the principal id

    Returns the resource so handlers do not look it up again.
    """
    resource = await lookup(resource_id)
    if resource is None:
        raise NotFoundError()
    if principal.role == ELEVATED_ROLE:
        return resource
    if str(owner_of(resource)) != str(principal.id):
        raise AuthorizationError("You do not have permission to access this resource.")
    return resource


def get_quote_store() -> QuoteStore:
    return QuoteStore()


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


async def get_owned_quote(
    quote_id: str,
    principal: User = Depends(require_sales),
    store: QuoteStore = Depends(get_quote_store),
) -> Quote:
    """
    Quote addressed by the path, checked for ownership. Admins also reach
    soft-deleted quotes; owners only see active ones.
    """

    async def lookup(qid: str) -> Optional[Quote]:
        return await store.get(qid, include_inactive=principal.role == ELEVATED_ROLE)

    return await authorize_ownership(quote_id, lookup, lambda q: q.sales_person_id, principal)
