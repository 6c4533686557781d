import itertools
import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so they must be in place before app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from app.database import Base, build_engine, build_session_factory, get_db
from app.main import app
from app.models import User
from app.security_utils import create_token_pair, hash_password


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    factory = build_session_factory(engine)

    def override_get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def client(session_factory):
    return TestClient(app)


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def in_days(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def register(client):
    """Register a user through the API; returns {"user", "headers", "tokens"}"""
    counter = itertools.count(1)

    def _register(user_type: str = "customer", **overrides):
        n = next(counter)
        payload = {
            "email": f"{user_type}{n}@example.com",
            "phone": f"+1555{n:07d}",
            "password": "correct-horse",
            "user_type": user_type,
            "first_name": "Test",
            "last_name": f"User{n}",
        }
        payload.update(overrides)
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {
            "user": data["user"],
            "tokens": data["tokens"],
            "headers": auth_headers(data["tokens"]["accessToken"]),
        }

    return _register


@pytest.fixture
def admin(db_session):
    user = User(
        email="admin@example.com",
        phone="+15559990000",
        password_hash=hash_password("admin-password"),
        user_type="admin",
        first_name="Ada",
        last_name="Admin",
        is_verified=True,
    )
    db_session.add(user)
    db_session.commit()
    tokens = create_token_pair(user.id, user.email, user.user_type)
    return {"user": {"id": user.id, "email": user.email}, "headers": auth_headers(tokens["accessToken"])}


@pytest.fixture
def customer(register):
    return register("customer")


@pytest.fixture
def make_provider(client, register, admin):
    """Provider account with a profile, verified unless told otherwise"""

    def _make_provider(verified: bool = True, **profile):
        account = register("provider")
        payload = {
            "business_name": "Ace Plumbing",
            "services_offered": ["plumbing"],
            "service_areas": ["Austin"],
            "years_experience": 5,
        }
        payload.update(profile)
        response = client.post("/api/providers", json=payload, headers=account["headers"])
        assert response.status_code == 201, response.text
        provider = response.json()["data"]

        if verified:
            response = client.patch(
                f"/api/providers/{provider['id']}/verification",
                json={"verification_status": "verified"},
                headers=admin["headers"],
            )
            assert response.status_code == 200, response.text
            provider = response.json()["data"]

        account["provider"] = provider
        return account

    return _make_provider


def request_payload(**overrides) -> dict:
    payload = {
        "service_type": "plumbing",
        "title": "Leaking kitchen sink",
        "description": "Water pooling under the sink after every use.",
        "location": {
            "address": "12 Main St",
            "city": "Austin",
            "state": "TX",
            "zip_code": "73301",
            "coordinates": {"lat": 30.2672, "lng": -97.7431},
        },
        "urgency": "high",
        "budget_min": 100,
        "budget_max": 300,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_request(client):
    def _create_request(customer_account, **overrides):
        response = client.post(
            "/api/service-requests", json=request_payload(**overrides), headers=customer_account["headers"]
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create_request


@pytest.fixture
def submit_quote(client):
    def _submit_quote(provider_account, request_id: str, amount: float = 150, valid_days: float = 7):
        response = client.post(
            "/api/quotes",
            json={
                "service_request_id": request_id,
                "amount": amount,
                "notes": "Parts and labour included",
                "valid_until": in_days(valid_days),
            },
            headers=provider_account["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _submit_quote


@pytest.fixture
def accept_quote(client):
    def _accept_quote(customer_account, quote_id: str):
        response = client.patch(
            f"/api/quotes/{quote_id}/status", json={"status": "accepted"}, headers=customer_account["headers"]
        )
        assert response.status_code == 200, response.text
        return response.json()["data"]

    return _accept_quote
