from conftest import auth_headers


def test_health_ok(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_returns_tokens_and_sanitized_user(register):
    account = register("customer", email="Jane@Example.com", phone="(512) 555-0101")
    user = account["user"]
    assert user["email"] == "jane@example.com"
    assert user["phone"] == "+15125550101"
    assert user["user_type"] == "customer"
    assert "password_hash" not in user
    assert account["tokens"]["accessToken"]
    assert account["tokens"]["refreshToken"]


def test_register_rejects_duplicate_email(client, register):
    register("customer", email="dup@example.com")
    response = client.post(
        "/api/auth/register",
        json={
            "email": "dup@example.com",
            "phone": "+15550001111",
            "password": "correct-horse",
            "user_type": "customer",
            "first_name": "Second",
            "last_name": "User",
        },
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Conflict"


def test_register_cannot_self_assign_admin(client):
    response = client.post(
        "/api/auth/register",
        json={
            "email": "sneaky@example.com",
            "phone": "+15550002222",
            "password": "correct-horse",
            "user_type": "admin",
            "first_name": "Sneaky",
            "last_name": "User",
        },
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_login_and_me(client, register):
    register("provider", email="pat@example.com")
    login = client.post("/api/auth/login", json={"email": "pat@example.com", "password": "correct-horse"})
    assert login.status_code == 200
    token = login.json()["data"]["tokens"]["accessToken"]

    me = client.get("/api/auth/me", headers=auth_headers(token))
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "pat@example.com"
    assert me.json()["data"]["user_type"] == "provider"


def test_login_with_wrong_password(client, register):
    register("customer", email="kim@example.com")
    response = client.post("/api/auth/login", json={"email": "kim@example.com", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_garbage_token_rejected(client):
    response = client.get("/api/auth/me", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 401


def test_refresh_token_issues_new_pair(client, register):
    account = register("customer")
    response = client.post("/api/auth/refresh", json={"refreshToken": account["tokens"]["refreshToken"]})
    assert response.status_code == 200
    tokens = response.json()["data"]
    me = client.get("/api/auth/me", headers=auth_headers(tokens["accessToken"]))
    assert me.status_code == 200


def test_access_token_is_not_a_refresh_token(client, register):
    account = register("customer")
    response = client.post("/api/auth/refresh", json={"refreshToken": account["tokens"]["accessToken"]})
    assert response.status_code == 401


def test_update_profile_and_change_password(client, register):
    account = register("customer", email="lee@example.com")
    profile = client.put("/api/auth/profile", json={"first_name": "Lee"}, headers=account["headers"])
    assert profile.status_code == 200
    assert profile.json()["data"]["first_name"] == "Lee"

    wrong = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "not-it-at-all", "newPassword": "battery-staple"},
        headers=account["headers"],
    )
    assert wrong.status_code == 401

    changed = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "correct-horse", "newPassword": "battery-staple"},
        headers=account["headers"],
    )
    assert changed.status_code == 200

    login = client.post("/api/auth/login", json={"email": "lee@example.com", "password": "battery-staple"})
    assert login.status_code == 200
