import itertools
import os

# Configure the app before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("OPENAI_API_KEY", None)

import pytest
from fastapi.testclient import TestClient

from api import app
from sqlalchemy_db import DatabaseEngine


@pytest.fixture
def client():
    """Test client over a fresh in-memory database; startup seeds the default categories."""
    database = DatabaseEngine()
    database.create_tables()
    with TestClient(app) as test_client:
        yield test_client
    database.drop_tables()


@pytest.fixture
def register(client):
    """Factory registering a user and returning its profile and auth headers."""
    counter = itertools.count(1)

    def _register(email=None, password="secret123", **fields):
        email = email or f"user{next(counter)}@example.com"
        response = client.post(
            "/api/auth/register", json={"email": email, "password": password, **fields}
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "user": body["user"],
            "headers": {"Authorization": f"Bearer {body['token']['access_token']}"},
        }

    return _register


@pytest.fixture
def owner(register):
    return register(email="owner@example.com")


@pytest.fixture
def wallet(client, owner):
    response = client.post(
        "/api/wallets", json={"name": "Household", "type": "shared"}, headers=owner["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def category_id(client, owner):
    """Look up a default category id by name."""

    def _category_id(name):
        response = client.get("/api/categories", headers=owner["headers"])
        for category in response.json():
            if category["name"] == name:
                return category["id"]
        raise AssertionError(f"No category named {name}")

    return _category_id


@pytest.fixture
def add_member(client, register, owner):
    """Factory inviting a new user into a wallet with a role and accepting the invitation."""

    def _add_member(wallet_id, role, email=None):
        member = register(email=email)
        response = client.post(
            f"/api/wallets/{wallet_id}/invitations",
            json={"email": member["user"]["email"], "role": role},
            headers=owner["headers"],
        )
        assert response.status_code == 201, response.text
        accepted = client.post(
            f"/api/invitations/{response.json()['id']}/accept", headers=member["headers"]
        )
        assert accepted.status_code == 200, accepted.text
        return member

    return _add_member


@pytest.fixture
def create_transaction(client, owner, category_id):
    def _create(wallet_id, amount, type="expense", category="Food & Dining", headers=None, **fields):
        response = client.post(
            "/api/transactions",
            json={
                "wallet_id": wallet_id,
                "category_id": category_id(category),
                "type": type,
                "amount": amount,
                **fields,
            },
            headers=headers or owner["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
