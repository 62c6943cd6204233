"""
License gate: issues subscription keys and decides whether a shop may log in.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from dukan.core.errors import Forbidden, InvalidInput, NotFound, Unauthorized
from dukan.core.licensing import decode_license_key, encode_license_key, license_is_valid, new_license_secret
from dukan.models.license import License
from dukan.models.shop import Shop


logger = logging.getLogger(__name__)


def issue_license(db: Session, shop_id: int, days: int, now: Optional[datetime] = None) -> tuple[License, str]:
    """
    Create or renew the shop's license and return it with its key.

    Renewal rotates the secret, so keys handed out earlier stop working.
    Commits.
    """
    if days <= 0:
        raise InvalidInput("days must be positive")
    shop = db.query(Shop).filter(Shop.id == shop_id).first()
    if not shop:
        raise NotFound(f"Shop {shop_id} not found")

    now = now or datetime.utcnow()
    secret = new_license_secret()
    lic = db.query(License).filter(License.shop_id == shop_id).with_for_update().first()
    if lic is None:
        lic = License(shop_id=shop_id)
        db.add(lic)
    lic.secret = secret
    lic.valid_until = now + timedelta(days=days)
    lic.is_active = True
    lic.issued_at = now
    db.commit()
    db.refresh(lic)
    logger.info("license issued shop_id=%s valid_until=%s", shop_id, lic.valid_until.isoformat())
    return lic, encode_license_key(secret, shop_id)


def resolve_license(db: Session, license_key: str) -> License:
    """Map a license key to its row; any mismatch is Unauthorized."""
    decoded = decode_license_key(license_key)
    if decoded is None:
        raise Unauthorized("Invalid license key")
    secret, shop_id = decoded
    lic = db.query(License).filter(License.shop_id == shop_id, License.secret == secret).first()
    if lic is None:
        raise Unauthorized("Invalid license key")
    return lic


def enforce_license(db: Session, lic: License, now: Optional[datetime] = None) -> None:
    """
    Raise Forbidden unless the license is active and unexpired.

    A license still marked active past its expiry is switched off (and
    committed) before rejecting, so no session is issued against it.
    """
    now = now or datetime.utcnow()
    if license_is_valid(lic.is_active, lic.valid_until, now):
        return
    if lic.is_active:
        lic.is_active = False
        db.commit()
        logger.warning("license expired shop_id=%s valid_until=%s, deactivated", lic.shop_id, lic.valid_until.isoformat())
        raise Forbidden("License expired. Please renew your subscription.")
    raise Forbidden("License is inactive or expired. Please renew your subscription.")


def validate_key(db: Session, license_key: str, now: Optional[datetime] = None) -> License:
    lic = resolve_license(db, license_key)
    enforce_license(db, lic, now)
    return lic


def get_shop_license(db: Session, shop_id: int) -> License:
    lic = db.query(License).filter(License.shop_id == shop_id).first()
    if lic is None:
        raise NotFound("No license issued for this shop")
    return lic
