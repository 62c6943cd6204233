import os

# Settings are read at import time; point them at test values first
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("LICENSE_ENCRYPTION_KEY", "test-license-encryption-key")
os.environ.setdefault("LICENSE_ISSUER_KEY", "test-issuer-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dukan.core.config import settings
from dukan.core.database import get_db
from dukan.main import app
from dukan.models import Base


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def issue_key(client: TestClient, shop_id: int, days: int = 30) -> str:
    r = client.post(
        "/licenses/issue",
        json={"shopId": shop_id, "days": days},
        headers={"X-Issuer-Key": settings.license_issuer_key},
    )
    assert r.status_code == 200, r.text
    return r.json()["licenseKey"]


def login(client: TestClient, username: str, password: str, license_key: str) -> str:
    r = client.post("/login", json={"username": username, "password": password, "licenseKey": license_key})
    assert r.status_code == 200, r.text
    return r.json()["token"]


@pytest.fixture()
def make_shop(client):
    """Register a shop, license it and log its admin in."""

    def _make(name: str = "alice"):
        password = "secret123"
        r = client.post(
            "/register",
            json={
                "username": name,
                "password": password,
                "email": f"{name}@example.com",
                "shopName": f"{name.title()} Stores",
            },
        )
        assert r.status_code == 201, r.text
        shop_id = r.json()["shopId"]
        key = issue_key(client, shop_id)
        token = login(client, name, password, key)
        return {
            "shop_id": shop_id,
            "username": name,
            "password": password,
            "license_key": key,
            "token": token,
            "headers": auth_headers(token),
        }

    return _make


@pytest.fixture()
def shop(make_shop):
    return make_shop("alice")


@pytest.fixture()
def make_product(client):
    def _make(headers, **overrides):
        payload = {
            "name": "Soap",
            "unit": "piece",
            "quantity": 5,
            "costPrice": 10,
            "sellingPrice": 15,
        }
        payload.update(overrides)
        r = client.post("/products", json=payload, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["product"]

    return _make


@pytest.fixture()
def staff_headers(client, shop):
    r = client.post(
        "/staff/add",
        json={"username": "bob", "password": "staffpass", "email": "bob@example.com", "designation": "Cashier"},
        headers=shop["headers"],
    )
    assert r.status_code == 201, r.text
    token = login(client, "bob", "staffpass", shop["license_key"])
    return auth_headers(token)
