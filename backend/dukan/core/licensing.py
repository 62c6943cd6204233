"""
License key codec.

A license key is a Fernet token wrapping ``"<secret>:<shop_id>"``. The secret
is stored on the shop's license row, so the key alone identifies the shop and
proves possession of the current license.
"""
import base64
import hashlib
import secrets
from datetime import datetime
from typing import Optional, Tuple

from cryptography.fernet import Fernet, InvalidToken

from dukan.core.config import settings


def _fernet(key_material: Optional[str] = None) -> Fernet:
    material = key_material if key_material is not None else settings.license_encryption_key
    digest = hashlib.sha256(material.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def new_license_secret() -> str:
    return secrets.token_hex(16)


def encode_license_key(secret: str, shop_id: int, key_material: Optional[str] = None) -> str:
    payload = f"{secret}:{shop_id}".encode()
    return _fernet(key_material).encrypt(payload).decode()


def decode_license_key(license_key: str, key_material: Optional[str] = None) -> Optional[Tuple[str, int]]:
    """Return ``(secret, shop_id)`` or None when the key is malformed or forged."""
    if not license_key:
        return None
    try:
        raw = _fernet(key_material).decrypt(license_key.strip().encode()).decode()
    except (InvalidToken, ValueError):
        return None
    secret, sep, shop_part = raw.rpartition(":")
    if not sep or not secret or not shop_part.isdigit():
        return None
    return secret, int(shop_part)


def license_is_valid(is_active: bool, valid_until: datetime, now: datetime) -> bool:
    return bool(is_active) and valid_until >= now
