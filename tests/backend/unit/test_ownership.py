"""
Unit tests for the generic ownership check in api.v1.deps.
Uses plain in-memory lookups; no database.
"""
from types import SimpleNamespace

import pytest

from quotes_api.api.v1.deps import authorize_ownership
from quotes_api.core.errors import AuthorizationError, NotFoundError

pytestmark = pytest.mark.asyncio

DOCS = {
    "doc-1": {"id": "doc-1", "owner": "u-1"},
    "doc-2": {"id": "doc-2", "owner": "u-2"},
}


async def _lookup(doc_id):
    return DOCS.get(doc_id)


def _owner(doc):
    return doc["owner"]


def _principal(user_id, role="sales"):
    return SimpleNamespace(id=user_id, role=role)


async def test_owner_is_allowed():
    doc = await authorize_ownership("doc-1", _lookup, _owner, _principal("u-1"))
    assert doc is DOCS["doc-1"]


async def test_other_principal_is_forbidden():
    with pytest.raises(AuthorizationError):
        await authorize_ownership("doc-1", _lookup, _owner, _principal("u-2"))


async def test_admin_bypasses_owner_check():
    doc = await authorize_ownership("doc-2", _lookup, _owner, _principal("u-9", role="admin"))
    assert doc["owner"] == "u-2"


@pytest.mark.parametrize("role", ["sales", "admin"])
async def test_missing_resource_is_not_found(role):
    with pytest.raises(NotFoundError):
        await authorize_ownership("doc-404", _lookup, _owner, _principal("u-1", role=role))
