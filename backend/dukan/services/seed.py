import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from dukan.core.config import settings
from dukan.core.roles import Role
from dukan.core.security import hash_password
from dukan.models.product import Product
from dukan.models.shop import Shop
from dukan.models.user import User
from dukan.services.license_service import issue_license


logger = logging.getLogger(__name__)

DEMO_USERNAME = "demo_admin"
DEMO_PASSWORD = "secret123"

DEMO_PRODUCTS = [
    # name, unit, quantity, cost, price, tax rate, barcode, hsn, category
    ("Basmati Rice 5kg", "bag", 40, "320.00", "399.00", "5", "8901000000011", "1006", "Grocery"),
    ("Sunflower Oil 1L", "bottle", 60, "120.00", "145.00", "5", "8901000000028", "1512", "Grocery"),
    ("Toor Dal 1kg", "packet", 8, "110.00", "135.00", "5", "8901000000035", "0713", "Grocery"),
    ("Bath Soap", "piece", 120, "22.00", "30.00", "18", "8901000000042", "3401", "Personal care"),
    ("Notebook A5", "piece", 75, "35.00", "50.00", "12", "8901000000059", "4820", "Stationery"),
]


def seed_demo(db: Session) -> Optional[str]:
    """
    Create a demo shop with an admin, a license and a few products.
    Returns the license key when the shop is created, None if it already existed.
    """
    if db.query(User).filter(User.username == DEMO_USERNAME).first():
        return None

    shop = Shop(name="Demo Kirana Store", address="12 Market Road", phone="9000000000")
    db.add(shop)
    db.flush()
    db.add(User(
        shop_id=shop.id,
        username=DEMO_USERNAME,
        email="admin@demo.example.com",
        hashed_password=hash_password(DEMO_PASSWORD),
        role=Role.admin.value,
    ))
    for name, unit, qty, cost, price, rate, barcode, hsn, category in DEMO_PRODUCTS:
        db.add(Product(
            shop_id=shop.id,
            name=name,
            unit=unit,
            quantity=qty,
            cost_price=Decimal(cost),
            selling_price=Decimal(price),
            tax_rate=Decimal(rate),
            barcode=barcode,
            hsn_code=hsn,
            category=category,
        ))
    db.commit()

    _, key = issue_license(db, shop.id, settings.default_license_days)
    logger.info("demo shop seeded shop_id=%s username=%s license_key=%s", shop.id, DEMO_USERNAME, key)
    return key
