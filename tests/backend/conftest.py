import os
import uuid
import datetime as dt

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ.setdefault("ENV", "test")

from quotes_api.core import db as db_module  # noqa: E402
from quotes_api.main import app  # noqa: E402
from quotes_api.models.user import User  # noqa: E402

db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database without an HTTP client, for store-level tests.
    """
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client():
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    Unhandled errors come back as 500 responses instead of being re-raised.
    """
    await _init_test_db()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture creating users of any role directly via the ORM.
    """

    async def _create_user(role: str = "user", password: str = "UserPass!23", **fields) -> tuple[User, str]:
        tag = uuid.uuid4().hex[:6]
        user = User(
            username=fields.pop("username", f"{role}{tag}"),
            email=fields.pop("email", f"{role}{tag}@example.com"),
            role=role,
            name=fields.pop("name", f"{role.title()} {tag}"),
            **fields,
        )
        user.set_password(password)
        await user.save()
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(username: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/auth/login",
            json={"username": username, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest_asyncio.fixture
async def login_as(create_user, auth_header_factory):
    """
    Create a user with the given role and return (user, headers).
    """

    async def _login_as(role: str = "sales", **fields) -> tuple[User, dict[str, str]]:
        user, password = await create_user(role=role, **fields)
        headers = await auth_header_factory(user.username, password)
        return user, headers

    return _login_as


@pytest.fixture
def quote_payload():
    """
    Factory for a valid quote body; keyword arguments override top-level keys.
    """

    def _payload(**overrides) -> dict:
        valid_until = dt.datetime.now(dt.timezone.utc) + dt.timedelta(days=30)
        body = {
            "customer": {
                "name": "Kim Minsu",
                "phone": "010-1234-5678",
                "email": "Minsu.Kim@Example.com",
                "address": "Seoul",
            },
            "salesPhone": "010-9999-0000",
            "validUntil": valid_until.isoformat(),
            "description": "Water purifier bundle",
            "products": [
                {
                    "name": "Water Purifier",
                    "model": "CHP-242R",
                    "rentalFee": 50000,
                    "usagePeriod": 36,
                    "contractPeriod": 60,
                    "quantity": 2,
                },
                {
                    "name": "Air Purifier",
                    "model": "AP-1220L",
                    "rentalFee": 32000,
                    "usagePeriod": 12,
                    "contractPeriod": 36,
                    "quantity": 1,
                },
            ],
            "notes": "Installation next week",
        }
        body.update(overrides)
        return body

    return _payload
