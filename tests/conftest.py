"""Shared fixtures: a testing app on an in-memory database, reset per test."""
import os

os.environ["APP_ENV"] = "test"

import pytest

from api import create_app
from models import storage


@pytest.fixture
def app():
    app = create_app("test")
    with app.app_context():
        storage.drop_all()
        yield app
        storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_payload():
    return {
        "username": "alice",
        "email": "alice@x.com",
        "fullName": "Alice Liddell",
        "password": "S1",
    }


@pytest.fixture
def registered_user(client, user_payload):
    response = client.post("/api/v1/users/register", json=user_payload)
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def login(client, registered_user, user_payload):
    """Log alice in and return the response body's data."""
    response = client.post(
        "/api/v1/users/login",
        json={"usernameOrEmail": user_payload["username"], "password": user_payload["password"]},
    )
    assert response.status_code == 200
    return response.get_json()["data"]


@pytest.fixture
def auth_headers(login):
    return {"Authorization": f"Bearer {login['accessToken']}"}
