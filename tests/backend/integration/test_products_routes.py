import pytest


pytestmark = pytest.mark.asyncio


async def test_catalog_requires_authentication(client):
    resp = await client.get("/api/products/categories")
    assert resp.status_code == 401
    assert resp.json()["error"] == "AccessDenied"


async def test_categories_and_models(client, login_as):
    _, headers = await login_as("user")

    resp = await client.get("/api/products/categories", headers=headers)
    assert resp.status_code == 200
    categories = resp.json()["categories"]
    assert {c["id"] for c in categories} == {"water-purifier", "air-purifier", "rice-cooker", "steamer"}
    assert all(c["modelCount"] == 3 for c in categories)

    models = await client.get("/api/products/categories/water-purifier/models", headers=headers)
    assert models.status_code == 200
    body = models.json()
    assert body["category"]["id"] == "water-purifier"
    assert {"id": "chp-242r", "name": "CHP-242R", "basePrice": 50000} in body["models"]

    missing = await client.get("/api/products/categories/toaster/models", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"] == "NotFound"


async def test_search(client, login_as):
    _, headers = await login_as("user")

    resp = await client.get("/api/products/search", headers=headers, params={"q": "purifier"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 6
    assert {r["categoryId"] for r in body["results"]} == {"water-purifier", "air-purifier"}

    by_model = await client.get("/api/products/search", headers=headers, params={"q": "cs-100"})
    assert by_model.json()["total"] == 3

    scoped = await client.get(
        "/api/products/search",
        headers=headers,
        params={"q": "purifier", "category": "air-purifier"},
    )
    assert scoped.json()["total"] == 3

    everything = await client.get("/api/products/search", headers=headers)
    assert everything.json()["total"] == 12


async def test_calculate_price_stacks_discounts(client, login_as):
    _, headers = await login_as("sales")
    resp = await client.post(
        "/api/products/calculate-price",
        headers=headers,
        json={"categoryId": "water-purifier", "modelId": "chp-242r", "quantity": 3, "contractPeriod": 36},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["calculation"] == {
        "quantity": 3,
        "contractPeriod": 36,
        "discountRate": 20,
        "discountedPrice": 40000,
        "totalPrice": 120000,
    }
    assert body["breakdown"] == {"originalTotal": 150000, "discountAmount": 30000, "finalTotal": 120000}
    assert body["product"]["modelName"] == "CHP-242R"


async def test_calculate_price_defaults_and_errors(client, login_as):
    _, headers = await login_as("sales")

    defaults = await client.post(
        "/api/products/calculate-price",
        headers=headers,
        json={"categoryId": "air-purifier", "modelId": "ap-1220l"},
    )
    assert defaults.status_code == 200
    calc = defaults.json()["calculation"]
    assert (calc["quantity"], calc["contractPeriod"], calc["discountRate"]) == (1, 24, 10)
    assert calc["discountedPrice"] == 28800

    unknown_model = await client.post(
        "/api/products/calculate-price",
        headers=headers,
        json={"categoryId": "air-purifier", "modelId": "nope"},
    )
    assert unknown_model.status_code == 404

    out_of_range = await client.post(
        "/api/products/calculate-price",
        headers=headers,
        json={"categoryId": "air-purifier", "modelId": "ap-1220l", "quantity": 11},
    )
    assert out_of_range.status_code == 400


async def test_pricing_is_sales_only(client, login_as):
    _, headers = await login_as("user")
    resp = await client.post(
        "/api/products/calculate-price",
        headers=headers,
        json={"categoryId": "water-purifier", "modelId": "chp-242r"},
    )
    assert resp.status_code == 403


async def test_recommendations(client, login_as):
    _, headers = await login_as("sales")

    family = await client.post(
        "/api/products/recommendations",
        headers=headers,
        json={"customerType": "family"},
    )
    assert family.status_code == 200
    items = family.json()["recommendations"]
    assert [i["modelId"] for i in items] == ["chp-242r", "crp-htr0610f", "ap-1220r"]
    assert [i["priority"] for i in items] == [1, 2, 3]

    budget = await client.post(
        "/api/products/recommendations",
        headers=headers,
        json={"customerType": "family", "budget": 40000},
    )
    assert [i["modelId"] for i in budget.json()["recommendations"]] == ["crp-htr0610f", "ap-1220r"]

    preferred = await client.post(
        "/api/products/recommendations",
        headers=headers,
        json={"customerType": "business", "preferences": ["steamer"]},
    )
    assert [i["modelId"] for i in preferred.json()["recommendations"]] == ["cs-1002f"]

    bad_type = await client.post(
        "/api/products/recommendations",
        headers=headers,
        json={"customerType": "government"},
    )
    assert bad_type.status_code == 400


async def test_compare(client, login_as):
    _, headers = await login_as("user")

    resp = await client.post(
        "/api/products/compare",
        headers=headers,
        json={"products": [
            {"categoryId": "water-purifier", "modelId": "chp-242r"},
            {"categoryId": "air-purifier", "modelId": "ap-1220l"},
            {"categoryId": "water-purifier", "modelId": "chp-242l"},
        ]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["comparison"]) == 3
    assert body["comparison"][0]["features"] == ["Large capacity", "UV sterilization", "Smart filter reminder"]
    assert body["summary"]["priceRange"] == {"min": 32000, "max": 50000}
    assert body["summary"]["categories"] == ["Water Purifier", "Air Purifier"]


async def test_compare_fails_as_a_whole(client, login_as):
    _, headers = await login_as("user")

    resp = await client.post(
        "/api/products/compare",
        headers=headers,
        json={"products": [
            {"categoryId": "water-purifier", "modelId": "chp-242r"},
            {"categoryId": "water-purifier", "modelId": "missing"},
        ]},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidProducts"

    too_few = await client.post(
        "/api/products/compare",
        headers=headers,
        json={"products": [{"categoryId": "water-purifier", "modelId": "chp-242r"}]},
    )
    assert too_few.status_code == 400
