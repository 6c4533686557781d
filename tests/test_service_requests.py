from conftest import request_payload


def test_create_request_round_trips_location(client, customer):
    response = client.post("/api/service-requests", json=request_payload(), headers=customer["headers"])
    assert response.status_code == 201
    created = response.json()["data"]
    assert created["status"] == "open"
    assert created["customer_id"] == customer["user"]["id"]

    fetched = client.get(f"/api/service-requests/{created['id']}", headers=customer["headers"]).json()["data"]
    assert fetched["location"] == request_payload()["location"]


def test_budget_min_above_max_is_rejected(client, customer):
    response = client.post(
        "/api/service-requests",
        json=request_payload(budget_min=500, budget_max=100),
        headers=customer["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_providers_cannot_post_requests(client, make_provider):
    provider = make_provider()
    response = client.post("/api/service-requests", json=request_payload(), headers=provider["headers"])
    assert response.status_code == 403


def test_listing_requires_auth_and_filters(client, customer, create_request):
    create_request(customer, title="Fix the roof", service_type="roofing")
    create_request(
        customer,
        title="Paint bedroom",
        service_type="painting",
        location={
            "address": "9 Elm St",
            "city": "Dallas",
            "state": "TX",
            "zip_code": "75001",
            "coordinates": {"lat": 32.7767, "lng": -96.797},
        },
    )

    assert client.get("/api/service-requests").status_code == 401

    everything = client.get("/api/service-requests", headers=customer["headers"]).json()["data"]
    assert everything["pagination"]["total"] == 2

    roofing = client.get(
        "/api/service-requests", params={"service_type": "roofing"}, headers=customer["headers"]
    ).json()["data"]
    assert [r["title"] for r in roofing["data"]] == ["Fix the roof"]

    dallas = client.get("/api/service-requests", params={"city": "dallas"}, headers=customer["headers"]).json()["data"]
    assert [r["title"] for r in dallas["data"]] == ["Paint bedroom"]

    search = client.get("/api/service-requests", params={"search": "PAINT"}, headers=customer["headers"]).json()["data"]
    assert search["pagination"]["total"] == 1


def test_pagination_metadata(client, customer, create_request):
    for i in range(3):
        create_request(customer, title=f"Job number {i}")

    page = client.get("/api/service-requests/my-requests", params={"page": 2, "limit": 2}, headers=customer["headers"])
    assert page.status_code == 200
    body = page.json()["data"]
    assert len(body["data"]) == 1
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}


def test_my_requests_only_lists_own(client, register, create_request):
    alice = register("customer")
    bob = register("customer")
    create_request(alice)
    create_request(bob)

    mine = client.get("/api/service-requests/my-requests", headers=alice["headers"]).json()["data"]
    assert mine["pagination"]["total"] == 1
    assert mine["data"][0]["customer_id"] == alice["user"]["id"]


def test_update_checks_merged_budget(client, customer, create_request):
    created = create_request(customer)
    response = client.put(
        f"/api/service-requests/{created['id']}", json={"budget_min": 400}, headers=customer["headers"]
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"

    ok = client.put(f"/api/service-requests/{created['id']}", json={"title": "Leaking bathroom sink"}, headers=customer["headers"])
    assert ok.status_code == 200
    assert ok.json()["data"]["title"] == "Leaking bathroom sink"


def test_other_customer_cannot_update(client, register, create_request):
    owner = register("customer")
    stranger = register("customer")
    created = create_request(owner)
    response = client.put(f"/api/service-requests/{created['id']}", json={"title": "Not mine"}, headers=stranger["headers"])
    assert response.status_code == 403


def test_admin_status_changes_follow_transition_table(client, admin, customer, create_request):
    created = create_request(customer)

    skip = client.put(
        f"/api/service-requests/{created['id']}/status", json={"status": "completed"}, headers=admin["headers"]
    )
    assert skip.status_code == 400
    assert skip.json()["error"] == "InvalidTransition"

    step = client.put(f"/api/service-requests/{created['id']}/status", json={"status": "quoted"}, headers=admin["headers"])
    assert step.status_code == 200
    assert step.json()["data"]["status"] == "quoted"

    not_admin = client.put(
        f"/api/service-requests/{created['id']}/status", json={"status": "booked"}, headers=customer["headers"]
    )
    assert not_admin.status_code == 403


def test_cancel_then_no_further_changes(client, customer, create_request):
    created = create_request(customer)
    cancelled = client.post(f"/api/service-requests/{created['id']}/cancel", headers=customer["headers"])
    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["status"] == "cancelled"

    again = client.post(f"/api/service-requests/{created['id']}/cancel", headers=customer["headers"])
    assert again.status_code == 400
    assert again.json()["error"] == "InvalidTransition"

    edit = client.put(f"/api/service-requests/{created['id']}", json={"title": "Too late now"}, headers=customer["headers"])
    assert edit.status_code == 400
    assert edit.json()["error"] == "InvalidState"


def test_delete_open_request(client, customer, create_request):
    created = create_request(customer)
    response = client.delete(f"/api/service-requests/{created['id']}", headers=customer["headers"])
    assert response.status_code == 200

    missing = client.get(f"/api/service-requests/{created['id']}", headers=customer["headers"])
    assert missing.status_code == 404


def test_request_stats_for_admin_and_owner(client, admin, register, create_request):
    alice = register("customer")
    bob = register("customer")
    first = create_request(alice)
    create_request(alice)
    create_request(bob)
    client.post(f"/api/service-requests/{first['id']}/cancel", headers=alice["headers"])

    platform = client.get("/api/service-requests/stats", headers=admin["headers"]).json()["data"]
    assert platform["totalRequests"] == 3
    assert platform["openRequests"] == 2
    assert platform["cancelledRequests"] == 1

    mine = client.get("/api/service-requests/my-stats", headers=alice["headers"]).json()["data"]
    assert mine["totalRequests"] == 2
    assert mine["openRequests"] == 1
    assert mine["cancelledRequests"] == 1
    assert mine["bookedRequests"] == 0

    assert client.get("/api/service-requests/stats", headers=alice["headers"]).status_code == 403
