from datetime import datetime, timedelta

import pytest

from dukan.core.config import settings
from dukan.core.licensing import decode_license_key, encode_license_key, license_is_valid
from dukan.models.license import License


def test_key_round_trip_binds_shop():
    key = encode_license_key("abc123", 42)
    assert decode_license_key(key) == ("abc123", 42)


def test_key_from_other_encryption_secret_is_rejected():
    key = encode_license_key("abc123", 42, key_material="someone-else")
    assert decode_license_key(key) is None


@pytest.mark.parametrize("key", ["", "not-a-token", "gAAAAA"])
def test_malformed_keys_decode_to_none(key):
    assert decode_license_key(key) is None


def test_validity_window():
    now = datetime(2026, 1, 1)
    assert license_is_valid(True, now, now)
    assert not license_is_valid(True, now - timedelta(seconds=1), now)
    assert not license_is_valid(False, now + timedelta(days=1), now)


def test_issue_requires_issuer_key(client, shop):
    r = client.post("/licenses/issue", json={"shopId": shop["shop_id"], "days": 10})
    assert r.status_code == 403
    r = client.post(
        "/licenses/issue",
        json={"shopId": shop["shop_id"], "days": 10},
        headers={"X-Issuer-Key": "wrong"},
    )
    assert r.status_code == 403


def test_issue_for_unknown_shop_is_not_found(client):
    r = client.post(
        "/licenses/issue",
        json={"shopId": 12345, "days": 10},
        headers={"X-Issuer-Key": settings.license_issuer_key},
    )
    assert r.status_code == 404


def test_validate_reports_state(client, db, shop):
    r = client.get("/licenses/validate", params={"key": shop["license_key"]})
    assert r.json()["valid"] is True
    assert r.json()["validUntil"]

    r = client.get("/licenses/validate", params={"key": "bogus"})
    assert r.json() == {"valid": False, "message": "Invalid license key", "validUntil": None}

    lic = db.query(License).filter(License.shop_id == shop["shop_id"]).one()
    lic.valid_until = datetime.utcnow() - timedelta(minutes=1)
    db.commit()
    r = client.get("/licenses/validate", params={"key": shop["license_key"]})
    assert r.json()["valid"] is False
    db.expire_all()
    assert db.query(License).filter(License.shop_id == shop["shop_id"]).one().is_active is False


def test_status_shows_own_license(client, shop):
    r = client.get("/licenses/status", headers=shop["headers"])
    assert r.status_code == 200
    body = r.json()
    assert body["shopId"] == shop["shop_id"]
    assert body["isActive"] is True


def test_shop_settings(client, shop, staff_headers):
    r = client.put("/shop/settings", json={"gstin": "29ABCDE1234F1Z5", "phone": "555"}, headers=shop["headers"])
    assert r.status_code == 200
    assert r.json()["gstin"] == "29ABCDE1234F1Z5"
    assert r.json()["name"] == "Alice Stores"

    assert client.put("/shop/settings", json={"phone": "1"}, headers=staff_headers).status_code == 403
    assert client.get("/shop/settings", headers=staff_headers).json()["phone"] == "555"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "database": "ok"}
