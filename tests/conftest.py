"""Shared fixtures for the API tests.

Every test gets a fresh in-memory mongomock database, injected into the
application through the ``get_database`` dependency override.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any

import mongomock
import pytest
from fastapi.testclient import TestClient

from auth.rate_limit import auth_rate_limiter
from auth.utils import create_token_for_user, get_password_hash
from database import get_database
from main import app

PASSWORD = "Secret123"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Hash the shared test password once; bcrypt is slow on purpose."""
    return get_password_hash(PASSWORD)


@pytest.fixture
def db() -> Any:
    """Return an empty in-memory database."""
    return mongomock.MongoClient()["product_listing_test"]


@pytest.fixture
def client(db: Any) -> Generator[TestClient, None, None]:
    """Create a test client bound to the in-memory database."""
    app.dependency_overrides[get_database] = lambda: db
    auth_rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    auth_rate_limiter.reset()


@pytest.fixture
def make_product(db: Any) -> Callable[..., dict]:
    """Return a factory inserting products with increasing creation times."""
    sequence = count()

    def _make(**overrides: Any) -> dict:
        n = next(sequence)
        created = BASE_TIME + timedelta(minutes=n)
        doc = {
            "name": f"Product {n}",
            "description": f"Description of product number {n}",
            "price": 10.0,
            "category": "Electronics",
            "image_url": None,
            "stock": 10,
            "created_at": created,
            "updated_at": created,
        }
        doc.update(overrides)
        doc["_id"] = db.products.insert_one(doc).inserted_id
        return doc

    return _make


@pytest.fixture
def make_user(db: Any, password_hash: str) -> Callable[..., dict]:
    """Return a factory inserting users with the shared test password."""

    def _make(username: str = "alice", role: str = "user", email: str | None = None) -> dict:
        doc = {
            "username": username,
            "email": email,
            "password": password_hash,
            "role": role,
            "created_at": BASE_TIME,
            "updated_at": BASE_TIME,
        }
        doc["_id"] = db.users.insert_one(doc).inserted_id
        return doc

    return _make


@pytest.fixture
def customer(make_user: Callable[..., dict]) -> dict:
    return make_user("alice", email="alice@example.com")


@pytest.fixture
def other_customer(make_user: Callable[..., dict]) -> dict:
    return make_user("bob")


@pytest.fixture
def admin(make_user: Callable[..., dict]) -> dict:
    return make_user("root", role="admin")


def auth_headers(user: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}


@pytest.fixture
def headers_for() -> Callable[[dict], dict[str, str]]:
    """Return a function building bearer headers for any user."""
    return auth_headers


@pytest.fixture
def customer_headers(customer: dict) -> dict[str, str]:
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin: dict) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture
def address() -> dict[str, str]:
    return {
        "street": "1 Main Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "USA",
    }
