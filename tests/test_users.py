def test_admin_lists_and_searches_users(client, admin, register):
    register("customer", first_name="Grace", last_name="Hopper")
    register("customer")
    register("provider")

    everyone = client.get("/api/users", headers=admin["headers"]).json()["data"]
    assert everyone["pagination"]["total"] == 4
    assert all("password_hash" not in u for u in everyone["data"])

    providers = client.get("/api/users", params={"user_type": "provider"}, headers=admin["headers"]).json()["data"]
    assert providers["pagination"]["total"] == 1

    found = client.get("/api/users", params={"search": "hopper"}, headers=admin["headers"]).json()["data"]
    assert [u["first_name"] for u in found["data"]] == ["Grace"]


def test_user_management_is_admin_only(client, customer):
    assert client.get("/api/users", headers=customer["headers"]).status_code == 403
    assert client.get("/api/users/stats", headers=customer["headers"]).status_code == 403
    assert client.post(f"/api/users/{customer['user']['id']}/verify", headers=customer["headers"]).status_code == 403
    assert client.delete(f"/api/users/{customer['user']['id']}", headers=customer["headers"]).status_code == 403


def test_user_stats(client, admin, register):
    register("customer")
    register("customer")
    register("provider")

    stats = client.get("/api/users/stats", headers=admin["headers"]).json()["data"]
    assert stats == {
        "totalUsers": 4,
        "customers": 2,
        "providers": 1,
        "admins": 1,
        "verifiedUsers": 1,
        "unverifiedUsers": 3,
    }


def test_users_read_and_edit_only_their_own_account(client, admin, register):
    alice = register("customer")
    bob = register("customer")
    url = f"/api/users/{alice['user']['id']}"

    assert client.get(url, headers=alice["headers"]).status_code == 200
    assert client.get(url, headers=admin["headers"]).status_code == 200
    assert client.get(url, headers=bob["headers"]).status_code == 403

    renamed = client.put(url, json={"first_name": "Alicia"}, headers=alice["headers"])
    assert renamed.status_code == 200
    assert renamed.json()["data"]["first_name"] == "Alicia"

    assert client.put(url, json={"first_name": "Mallory"}, headers=bob["headers"]).status_code == 403

    taken = client.put(url, json={"phone": bob["user"]["phone"]}, headers=admin["headers"])
    assert taken.status_code == 400
    assert taken.json()["error"] == "Conflict"


def test_verify_user_once(client, admin, customer):
    url = f"/api/users/{customer['user']['id']}/verify"

    verified = client.post(url, headers=admin["headers"])
    assert verified.status_code == 200
    assert verified.json()["data"]["is_verified"] is True

    again = client.post(url, headers=admin["headers"])
    assert again.status_code == 400
    assert again.json()["error"] == "InvalidState"


def test_admin_deletes_user(client, admin, customer):
    url = f"/api/users/{customer['user']['id']}"
    assert client.delete(url, headers=admin["headers"]).status_code == 200
    assert client.get(url, headers=admin["headers"]).status_code == 404
    assert client.delete("/api/users/missing", headers=admin["headers"]).status_code == 404
