"""
Shared pytest fixtures.

The environment is pinned before any application module is imported, since
core.config builds its settings singleton at import time.
"""
import os

os.environ["APP_ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["FIRST_ADMIN_EMAIL"] = ""
os.environ["FIRST_ADMIN_PASSWORD"] = ""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from database import Database
from main import create_app


@pytest.fixture
def database() -> Database:
    """Fresh in-memory SQLite database per test."""
    return Database("sqlite:///:memory:")


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    # Entering the client runs the lifespan, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(client, database):
    """Session on the same database the app uses (tables already created)."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


def register(client, email, password="secret-pw"):
    return client.post("/api/auth/register", json={"email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_token(client):
    """Token of the first registered user, who is promoted to admin."""
    response = register(client, "a@x.com", "pw1")
    assert response.json()["user"]["role"] == "admin"
    return response.json()["token"]


@pytest.fixture
def user_token(client, admin_token):
    response = register(client, "b@x.com", "pw2")
    assert response.json()["user"]["role"] == "user"
    return response.json()["token"]
