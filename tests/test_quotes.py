from datetime import timedelta

from app.models import Quote, utcnow
from conftest import in_days


def test_accepting_a_quote_rejects_its_siblings(client, customer, make_provider, create_request, submit_quote, accept_quote):
    p1 = make_provider()
    p2 = make_provider()
    p3 = make_provider()
    request = create_request(customer)
    q1 = submit_quote(p1, request["id"], amount=150)
    q2 = submit_quote(p2, request["id"], amount=200)
    q3 = submit_quote(p3, request["id"], amount=250)

    rejected = client.patch(f"/api/quotes/{q3['id']}/status", json={"status": "rejected"}, headers=customer["headers"])
    assert rejected.status_code == 200
    assert rejected.json()["data"]["status"] == "rejected"

    accepted = accept_quote(customer, q1["id"])
    assert accepted["status"] == "accepted"

    assert client.get(f"/api/quotes/{q2['id']}", headers=customer["headers"]).json()["data"]["status"] == "rejected"
    assert client.get(f"/api/quotes/{q3['id']}", headers=customer["headers"]).json()["data"]["status"] == "rejected"
    assert (
        client.get(f"/api/service-requests/{request['id']}", headers=customer["headers"]).json()["data"]["status"]
        == "quoted"
    )

    again = client.patch(f"/api/quotes/{q2['id']}/status", json={"status": "accepted"}, headers=customer["headers"])
    assert again.status_code == 400
    assert again.json()["error"] == "InvalidState"


def test_only_request_owner_decides(client, register, make_provider, create_request, submit_quote):
    owner = register("customer")
    stranger = register("customer")
    provider = make_provider()
    request = create_request(owner)
    quote = submit_quote(provider, request["id"])

    response = client.patch(f"/api/quotes/{quote['id']}/status", json={"status": "accepted"}, headers=stranger["headers"])
    assert response.status_code == 403

    by_provider = client.patch(
        f"/api/quotes/{quote['id']}/status", json={"status": "accepted"}, headers=provider["headers"]
    )
    assert by_provider.status_code == 403


def test_unverified_provider_cannot_quote(client, customer, make_provider, create_request):
    provider = make_provider(verified=False)
    request = create_request(customer)
    response = client.post(
        "/api/quotes",
        json={"service_request_id": request["id"], "amount": 150, "valid_until": in_days(3)},
        headers=provider["headers"],
    )
    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


def test_duplicate_quote_conflicts(client, customer, make_provider, create_request, submit_quote):
    provider = make_provider()
    request = create_request(customer)
    submit_quote(provider, request["id"])
    response = client.post(
        "/api/quotes",
        json={"service_request_id": request["id"], "amount": 180, "valid_until": in_days(3)},
        headers=provider["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Conflict"


def test_quote_must_fit_budget_and_expire_in_future(client, customer, make_provider, create_request):
    provider = make_provider()
    request = create_request(customer, budget_min=100, budget_max=300)

    too_high = client.post(
        "/api/quotes",
        json={"service_request_id": request["id"], "amount": 301, "valid_until": in_days(3)},
        headers=provider["headers"],
    )
    assert too_high.status_code == 400
    assert too_high.json()["error"] == "ValidationError"

    past = client.post(
        "/api/quotes",
        json={"service_request_id": request["id"], "amount": 150, "valid_until": in_days(-1)},
        headers=provider["headers"],
    )
    assert past.status_code == 400
    assert past.json()["error"] == "ValidationError"


def test_quotes_only_on_open_requests(client, customer, make_provider, create_request):
    provider = make_provider()
    request = create_request(customer)
    client.post(f"/api/service-requests/{request['id']}/cancel", headers=customer["headers"])

    response = client.post(
        "/api/quotes",
        json={"service_request_id": request["id"], "amount": 150, "valid_until": in_days(3)},
        headers=provider["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidState"


def test_accepting_past_valid_until_marks_expired(client, db_session, customer, make_provider, create_request, submit_quote):
    provider = make_provider()
    request = create_request(customer)
    quote = submit_quote(provider, request["id"])

    row = db_session.get(Quote, quote["id"])
    row.valid_until = utcnow() - timedelta(hours=1)
    db_session.commit()

    response = client.patch(f"/api/quotes/{quote['id']}/status", json={"status": "accepted"}, headers=customer["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Expired"

    stored = client.get(f"/api/quotes/{quote['id']}", headers=customer["headers"]).json()["data"]
    assert stored["status"] == "expired"
    assert (
        client.get(f"/api/service-requests/{request['id']}", headers=customer["headers"]).json()["data"]["status"]
        == "open"
    )


def test_rejecting_past_valid_until_marks_expired(client, db_session, customer, make_provider, create_request, submit_quote):
    provider = make_provider()
    request = create_request(customer)
    quote = submit_quote(provider, request["id"])

    row = db_session.get(Quote, quote["id"])
    row.valid_until = utcnow() - timedelta(minutes=5)
    db_session.commit()

    response = client.patch(f"/api/quotes/{quote['id']}/status", json={"status": "rejected"}, headers=customer["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Expired"
    assert client.get(f"/api/quotes/{quote['id']}", headers=customer["headers"]).json()["data"]["status"] == "expired"


def test_failed_accept_leaves_every_quote_pending(client, customer, make_provider, create_request, submit_quote):
    request = create_request(customer)
    a = submit_quote(make_provider(), request["id"], amount=150)
    b = submit_quote(make_provider(), request["id"], amount=200)
    client.post(f"/api/service-requests/{request['id']}/cancel", headers=customer["headers"])

    response = client.patch(f"/api/quotes/{a['id']}/status", json={"status": "accepted"}, headers=customer["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidTransition"

    for quote in (a, b):
        stored = client.get(f"/api/quotes/{quote['id']}", headers=customer["headers"]).json()["data"]
        assert stored["status"] == "pending"
    assert (
        client.get(f"/api/service-requests/{request['id']}", headers=customer["headers"]).json()["data"]["status"]
        == "cancelled"
    )


def test_provider_edits_and_withdraws_pending_quote(client, customer, make_provider, create_request, submit_quote):
    provider = make_provider()
    other = make_provider()
    request = create_request(customer)
    quote = submit_quote(provider, request["id"], amount=150)

    updated = client.put(f"/api/quotes/{quote['id']}", json={"amount": 175}, headers=provider["headers"])
    assert updated.status_code == 200
    assert updated.json()["data"]["amount"] == 175

    not_owner = client.put(f"/api/quotes/{quote['id']}", json={"amount": 120}, headers=other["headers"])
    assert not_owner.status_code == 403

    deleted = client.delete(f"/api/quotes/{quote['id']}", headers=provider["headers"])
    assert deleted.status_code == 200
    assert client.get(f"/api/quotes/{quote['id']}", headers=provider["headers"]).status_code == 404


def test_listings_and_stats(client, admin, customer, make_provider, create_request, submit_quote, accept_quote):
    provider = make_provider()
    first = create_request(customer, title="First job")
    second = create_request(customer, title="Second job")
    q1 = submit_quote(provider, first["id"], amount=150)
    submit_quote(provider, second["id"], amount=250)
    accept_quote(customer, q1["id"])

    mine = client.get("/api/quotes/my-quotes", headers=provider["headers"]).json()["data"]
    assert mine["pagination"]["total"] == 2

    for_request = client.get(f"/api/quotes/service-request/{first['id']}", headers=customer["headers"]).json()["data"]
    assert [q["id"] for q in for_request["data"]] == [q1["id"]]

    pending = client.get("/api/quotes", params={"status": "pending"}, headers=customer["headers"]).json()["data"]
    assert pending["pagination"]["total"] == 1

    stats = client.get("/api/quotes/my-stats", headers=provider["headers"]).json()["data"]
    assert stats["totalQuotes"] == 2
    assert stats["acceptedQuotes"] == 1
    assert stats["pendingQuotes"] == 1
    assert stats["averageAmount"] == 150

    assert client.get("/api/quotes/stats", headers=provider["headers"]).status_code == 403
    assert client.get("/api/quotes/stats", headers=admin["headers"]).json()["data"]["totalQuotes"] == 2
