import pytest


@pytest.fixture
def category(client, admin):
    response = client.post(
        "/api/categories", json={"name": "Plumbing Supplies", "description": "Pipes and fittings"}, headers=admin["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def product_payload(category_id, **overrides):
    payload = {
        "category_id": category_id,
        "name": "Copper pipe 1/2in",
        "description": "Type L copper, 10ft length",
        "price": 25.0,
        "original_price": 30.0,
        "sku": "CU-PIPE-050",
        "stock_quantity": 40,
        "specifications": {"material": "copper", "diameter_in": 0.5},
        "dimensions": {"length": 120, "width": 0.5, "height": 0.5},
        "tags": ["pipe", "copper"],
    }
    payload.update(overrides)
    return payload


def test_category_names_are_unique_case_insensitively(client, admin, category):
    response = client.post("/api/categories", json={"name": "plumbing supplies"}, headers=admin["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Conflict"


def test_only_admins_manage_categories(client, customer):
    response = client.post("/api/categories", json={"name": "Tools"}, headers=customer["headers"])
    assert response.status_code == 403


def test_inactive_categories_hidden_from_public(client, admin, category):
    client.post("/api/categories", json={"name": "Retired", "is_active": False}, headers=admin["headers"])

    public = client.get("/api/categories").json()["data"]
    assert [c["name"] for c in public] == ["Plumbing Supplies"]

    everything = client.get("/api/categories", headers=admin["headers"]).json()["data"]
    assert {c["name"] for c in everything} == {"Plumbing Supplies", "Retired"}


def test_verified_provider_lists_product(client, make_provider, category):
    provider = make_provider()
    response = client.post("/api/products", json=product_payload(category["id"]), headers=provider["headers"])
    assert response.status_code == 201
    product = response.json()["data"]
    assert product["provider_id"] == provider["provider"]["id"]
    assert product["specifications"] == {"material": "copper", "diameter_in": 0.5}
    assert product["dimensions"] == {"length": 120, "width": 0.5, "height": 0.5}


def test_unverified_provider_cannot_list(client, make_provider, category):
    provider = make_provider(verified=False)
    response = client.post("/api/products", json=product_payload(category["id"]), headers=provider["headers"])
    assert response.status_code == 403


def test_product_guards(client, make_provider, category):
    provider = make_provider()
    assert client.post("/api/products", json=product_payload(category["id"]), headers=provider["headers"]).status_code == 201

    duplicate = client.post("/api/products", json=product_payload(category["id"]), headers=provider["headers"])
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "Conflict"

    unknown = client.post(
        "/api/products", json=product_payload("no-such-category", sku="OTHER-1"), headers=provider["headers"]
    )
    assert unknown.status_code == 404

    cheap_original = client.post(
        "/api/products",
        json=product_payload(category["id"], sku="OTHER-2", price=50, original_price=40),
        headers=provider["headers"],
    )
    assert cheap_original.status_code == 400
    assert cheap_original.json()["error"] == "ValidationError"


def test_product_filters(client, make_provider, category):
    provider = make_provider()
    client.post("/api/products", json=product_payload(category["id"]), headers=provider["headers"])
    client.post(
        "/api/products",
        json=product_payload(category["id"], name="Brass valve", sku="BR-VALVE-1", price=80, original_price=None, is_featured=True),
        headers=provider["headers"],
    )

    cheap = client.get("/api/products", params={"max_price": 50}).json()["data"]
    assert [p["sku"] for p in cheap["data"]] == ["CU-PIPE-050"]

    featured = client.get("/api/products", params={"is_featured": True}).json()["data"]
    assert [p["sku"] for p in featured["data"]] == ["BR-VALVE-1"]

    search = client.get("/api/products", params={"search": "valve"}).json()["data"]
    assert search["pagination"]["total"] == 1


def test_only_owner_edits_product(client, make_provider, category):
    owner = make_provider()
    other = make_provider()
    product = client.post("/api/products", json=product_payload(category["id"]), headers=owner["headers"]).json()["data"]

    denied = client.put(f"/api/products/{product['id']}", json={"price": 20}, headers=other["headers"])
    assert denied.status_code == 403

    updated = client.put(f"/api/products/{product['id']}", json={"price": 20}, headers=owner["headers"])
    assert updated.status_code == 200
    assert updated.json()["data"]["price"] == 20

    too_high = client.put(f"/api/products/{product['id']}", json={"price": 35}, headers=owner["headers"])
    assert too_high.status_code == 400


def test_category_with_products_cannot_be_deleted(client, admin, make_provider, category):
    provider = make_provider()
    product = client.post("/api/products", json=product_payload(category["id"]), headers=provider["headers"]).json()["data"]

    blocked = client.delete(f"/api/categories/{category['id']}", headers=admin["headers"])
    assert blocked.status_code == 400
    assert blocked.json()["error"] == "InvalidState"

    assert client.delete(f"/api/products/{product['id']}", headers=provider["headers"]).status_code == 200
    assert client.delete(f"/api/categories/{category['id']}", headers=admin["headers"]).status_code == 200
