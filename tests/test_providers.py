def test_provider_profile_starts_pending(client, register):
    account = register("provider")
    response = client.post(
        "/api/providers",
        json={"business_name": "Bright Sparks", "services_offered": ["electrical"], "service_areas": ["Dallas"]},
        headers=account["headers"],
    )
    assert response.status_code == 201
    provider = response.json()["data"]
    assert provider["verification_status"] == "pending"
    assert provider["user_id"] == account["user"]["id"]

    me = client.get("/api/providers/me", headers=account["headers"])
    assert me.status_code == 200
    assert me.json()["data"]["id"] == provider["id"]


def test_second_profile_for_same_user_conflicts(client, make_provider):
    provider = make_provider(verified=False)
    response = client.post(
        "/api/providers",
        json={"business_name": "Again", "services_offered": ["plumbing"], "service_areas": ["Austin"]},
        headers=provider["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Conflict"


def test_customer_cannot_create_provider_profile(client, customer):
    response = client.post(
        "/api/providers",
        json={"business_name": "Nope", "services_offered": ["plumbing"], "service_areas": ["Austin"]},
        headers=customer["headers"],
    )
    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


def test_only_admin_verifies(client, make_provider):
    provider = make_provider(verified=False)
    response = client.patch(
        f"/api/providers/{provider['provider']['id']}/verification",
        json={"verification_status": "verified"},
        headers=provider["headers"],
    )
    assert response.status_code == 403


def test_directory_filters(client, make_provider):
    make_provider(business_name="Ace Plumbing", services_offered=["plumbing"], service_areas=["Austin"])
    make_provider(
        verified=False, business_name="Volt Electric", services_offered=["electrical"], service_areas=["Houston"]
    )

    everyone = client.get("/api/providers")
    assert everyone.status_code == 200
    assert everyone.json()["data"]["pagination"]["total"] == 2

    plumbers = client.get("/api/providers", params={"service_type": "plumbing"}).json()["data"]
    assert [p["business_name"] for p in plumbers["data"]] == ["Ace Plumbing"]

    verified = client.get("/api/providers", params={"verification_status": "verified"}).json()["data"]
    assert [p["business_name"] for p in verified["data"]] == ["Ace Plumbing"]

    houston = client.get("/api/providers", params={"location": "houston"}).json()["data"]
    assert [p["business_name"] for p in houston["data"]] == ["Volt Electric"]


def test_owner_updates_profile_but_not_others(client, make_provider):
    first = make_provider()
    second = make_provider()

    own = client.put(
        f"/api/providers/{first['provider']['id']}", json={"bio": "Licensed since 2010"}, headers=first["headers"]
    )
    assert own.status_code == 200
    assert own.json()["data"]["bio"] == "Licensed since 2010"

    other = client.put(
        f"/api/providers/{first['provider']['id']}", json={"bio": "Hijacked"}, headers=second["headers"]
    )
    assert other.status_code == 403


def test_unknown_provider_is_not_found(client):
    response = client.get("/api/providers/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"
