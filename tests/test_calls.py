from datetime import timedelta

from app.models import Call, utcnow


def place_call(client, customer_account, provider_id, **extra):
    return client.post("/api/calls", json={"provider_id": provider_id, **extra}, headers=customer_account["headers"])


def test_customer_calls_verified_provider(client, customer, make_provider, create_request):
    provider = make_provider()
    request = create_request(customer)

    response = place_call(client, customer, provider["provider"]["id"], service_request_id=request["id"])
    assert response.status_code == 201
    call = response.json()["data"]
    assert call["status"] == "initiated"
    assert call["customer_id"] == customer["user"]["id"]
    assert call["service_request_id"] == request["id"]
    assert call["call_duration"] is None


def test_unverified_or_unknown_provider_cannot_be_called(client, customer, make_provider):
    pending = make_provider(verified=False)

    response = place_call(client, customer, pending["provider"]["id"])
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidState"

    assert place_call(client, customer, "missing").status_code == 404


def test_only_customers_place_calls(client, make_provider):
    provider = make_provider()
    other = make_provider()
    assert place_call(client, provider, other["provider"]["id"]).status_code == 403


def test_call_about_someone_elses_request_is_forbidden(client, register, make_provider, create_request):
    owner = register("customer")
    stranger = register("customer")
    request = create_request(owner)
    provider = make_provider()

    response = place_call(client, stranger, provider["provider"]["id"], service_request_id=request["id"])
    assert response.status_code == 403


def test_status_updates_follow_call_lifecycle(client, customer, make_provider):
    provider = make_provider()
    call = place_call(client, customer, provider["provider"]["id"]).json()["data"]
    url = f"/api/calls/{call['id']}/status"

    ringing = client.patch(url, json={"status": "ringing", "external_call_sid": "CA123"}, headers=provider["headers"])
    assert ringing.status_code == 200
    assert ringing.json()["data"]["external_call_sid"] == "CA123"

    live = client.patch(url, json={"status": "in_progress"}, headers=customer["headers"])
    assert live.status_code == 200

    done = client.patch(
        url,
        json={"status": "completed", "call_duration": 95, "recording_url": "https://rec.example.com/1"},
        headers=provider["headers"],
    )
    assert done.status_code == 200
    assert done.json()["data"]["call_duration"] == 95

    back = client.patch(url, json={"status": "ringing"}, headers=provider["headers"])
    assert back.status_code == 400
    assert back.json()["error"] == "InvalidTransition"


def test_call_sid_is_unique(client, customer, make_provider):
    provider = make_provider()
    first = place_call(client, customer, provider["provider"]["id"]).json()["data"]
    second = place_call(client, customer, provider["provider"]["id"]).json()["data"]
    client.patch(f"/api/calls/{first['id']}/status", json={"status": "ringing", "external_call_sid": "CA1"}, headers=customer["headers"])

    clash = client.patch(
        f"/api/calls/{second['id']}/status",
        json={"status": "ringing", "external_call_sid": "CA1"},
        headers=customer["headers"],
    )
    assert clash.status_code == 400
    assert clash.json()["error"] == "Conflict"


def test_end_call_records_duration_once(client, db_session, customer, make_provider):
    provider = make_provider()
    call = place_call(client, customer, provider["provider"]["id"]).json()["data"]

    row = db_session.get(Call, call["id"])
    row.created_at = utcnow() - timedelta(minutes=2)
    db_session.commit()

    ended = client.patch(f"/api/calls/{call['id']}/end", headers=provider["headers"])
    assert ended.status_code == 200
    data = ended.json()["data"]
    assert data["status"] == "completed"
    assert data["call_duration"] >= 120

    again = client.patch(f"/api/calls/{call['id']}/end", headers=customer["headers"])
    assert again.status_code == 400
    assert again.json()["error"] == "InvalidState"


def test_access_is_limited_to_participants(client, register, admin, customer, make_provider):
    provider = make_provider()
    call = place_call(client, customer, provider["provider"]["id"]).json()["data"]
    url = f"/api/calls/{call['id']}"

    assert client.get(url, headers=customer["headers"]).status_code == 200
    assert client.get(url, headers=provider["headers"]).status_code == 200
    assert client.get(url, headers=admin["headers"]).status_code == 200
    assert client.get(url, headers=register("customer")["headers"]).status_code == 403
    assert client.get(url, headers=make_provider()["headers"]).status_code == 403
    assert client.patch(f"{url}/end", headers=register("customer")["headers"]).status_code == 403
    assert client.get("/api/calls/missing", headers=admin["headers"]).status_code == 404


def test_listings_are_scoped_by_role(client, register, make_provider):
    alice = register("customer")
    bob = register("customer")
    p1 = make_provider()
    p2 = make_provider()
    place_call(client, alice, p1["provider"]["id"])
    place_call(client, alice, p2["provider"]["id"])
    place_call(client, bob, p1["provider"]["id"])

    assert client.get("/api/calls/my-calls", headers=alice["headers"]).json()["data"]["pagination"]["total"] == 2
    assert client.get("/api/calls/my-calls", headers=p1["headers"]).json()["data"]["pagination"]["total"] == 2
    assert (
        client.get("/api/calls/my-calls", params={"status": "completed"}, headers=alice["headers"]).json()["data"][
            "pagination"
        ]["total"]
        == 0
    )

    recent = client.get("/api/calls/recent", params={"limit": 1}, headers=p2["headers"]).json()["data"]
    assert len(recent) == 1
    assert recent[0]["customer_id"] == alice["user"]["id"]


def test_stats_for_provider_and_admin(client, admin, customer, make_provider):
    provider = make_provider()
    other = make_provider()
    completed = place_call(client, customer, provider["provider"]["id"]).json()["data"]
    failed = place_call(client, customer, provider["provider"]["id"]).json()["data"]
    place_call(client, customer, other["provider"]["id"])

    client.patch(
        f"/api/calls/{completed['id']}/status",
        json={"status": "completed", "call_duration": 60},
        headers=provider["headers"],
    )
    client.patch(f"/api/calls/{failed['id']}/status", json={"status": "failed"}, headers=provider["headers"])

    mine = client.get("/api/calls/stats", headers=provider["headers"]).json()["data"]
    assert mine["totalCalls"] == 2
    assert mine["completedCalls"] == 1
    assert mine["failedCalls"] == 1
    assert mine["totalDuration"] == 60
    assert mine["averageDuration"] == 60

    platform = client.get("/api/calls/stats", headers=admin["headers"]).json()["data"]
    assert platform["totalCalls"] == 3

    assert client.get("/api/calls/stats", headers=customer["headers"]).status_code == 403
