# tests/conftest.py
# Environment is set before anything imports bootcamp_api.core.config,
# which reads settings at import time.

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-1234567890")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("GEOCODER_API_KEY", "test-geocoder-key")

from unittest.mock import MagicMock

import httpx
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from bootcamp_api.core.config import Settings
from bootcamp_api.main import create_app
from bootcamp_api.middleware.rbac import protect
from bootcamp_api.utils.geocoder import Geocoder

BOSTON = {
    "street": "233 Bay State Rd",
    "adminArea5": "Boston",
    "adminArea3": "MA",
    "postalCode": "02215",
    "adminArea1": "US",
    "latLng": {"lat": 42.350846, "lng": -71.104028},
}


def mapquest_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"results": [{"locations": [BOSTON]}]})


@pytest.fixture
def test_settings(tmp_path):
    return Settings(FILE_UPLOAD_PATH=str(tmp_path / "uploads"), MAX_FILE_UPLOAD=1024)


@pytest.fixture
def geocoder():
    client = httpx.AsyncClient(transport=httpx.MockTransport(mapquest_handler))
    return Geocoder(client, "https://geocoder.test/address", "test-key")


@pytest.fixture
def fake_db():
    db = MagicMock()
    db.use_transactions = False
    return db


@pytest.fixture
def app(test_settings, fake_db, geocoder):
    return create_app(settings=test_settings, database=fake_db, geocoder=geocoder)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def login_as(app):
    """Skip token handling and run the request as the given user document."""

    def _login(user: dict):
        app.dependency_overrides[protect] = lambda: user
        return user

    yield _login
    app.dependency_overrides.clear()


def make_user(role: str, **extra) -> dict:
    return {
        "_id": ObjectId(),
        "name": f"{role.title()} Account",
        "email": f"{role}-{ObjectId()}@example.com",
        "role": role,
        **extra,
    }


@pytest.fixture
def admin():
    return make_user("admin")


@pytest.fixture
def publisher():
    return make_user("publisher")


@pytest.fixture
def other_publisher():
    return make_user("publisher")


@pytest.fixture
def regular_user():
    return make_user("user")


@pytest.fixture
def bootcamp_doc(publisher):
    return {
        "_id": ObjectId(),
        "name": "Devworks Bootcamp",
        "slug": "devworks-bootcamp",
        "description": "Full stack JavaScript bootcamp",
        "careers": ["Web Development"],
        "photo": "no-photo.jpg",
        "user": publisher["_id"],
        "singleOwner": True,
    }
