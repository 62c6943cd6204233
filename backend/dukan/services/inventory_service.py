"""
Inventory ledger: per-shop product records.

Every lookup is keyed by (product_id, shop_id); a product belonging to
another shop is reported exactly like a missing one.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dukan.core.errors import Conflict, InvalidInput, NotFound
from dukan.models.product import Product


logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    "name",
    "unit",
    "quantity",
    "cost_price",
    "selling_price",
    "tax_rate",
    "barcode",
    "hsn_code",
    "category",
    "low_stock_threshold",
)


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    values = {k: data.get(k) for k in PRODUCT_FIELDS}
    for key in ("name", "unit"):
        if not values[key] or not str(values[key]).strip():
            raise InvalidInput(f"{key} is required")
        values[key] = str(values[key]).strip()
    for key in ("cost_price", "selling_price"):
        if values[key] is None:
            raise InvalidInput(f"{key} is required")
    values["quantity"] = int(values["quantity"] or 0)
    values["tax_rate"] = Decimal(str(values["tax_rate"] or 0))
    if values["low_stock_threshold"] is None:
        values["low_stock_threshold"] = 10
    if values["quantity"] < 0:
        raise InvalidInput("quantity cannot be negative")
    for key in ("cost_price", "selling_price", "tax_rate"):
        if Decimal(str(values[key])) < 0:
            raise InvalidInput(f"{key} cannot be negative")
    # Empty barcode means "no barcode", not a shared empty one
    barcode = (values["barcode"] or "").strip()
    values["barcode"] = barcode or None
    return values


def _check_unique(db: Session, shop_id: int, values: Dict[str, Any], exclude_id: Optional[int] = None) -> None:
    if values["barcode"]:
        query = db.query(Product.id).filter(Product.barcode == values["barcode"])
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise Conflict(f"Barcode {values['barcode']} is already assigned to another product")
    query = db.query(Product.id).filter(Product.shop_id == shop_id, Product.name == values["name"])
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise Conflict(f"A product named {values['name']} already exists")


def _conflict_from_integrity(exc: IntegrityError) -> Conflict:
    msg = str(exc.orig).lower()
    if "barcode" in msg:
        return Conflict("Barcode is already assigned to another product")
    if "name" in msg:
        return Conflict("A product with this name already exists")
    return Conflict("Product violates a uniqueness rule")


def get_product(db: Session, shop_id: int, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.shop_id == shop_id).first()
    if not product:
        raise NotFound("Product not found")
    return product


def list_products(
    db: Session,
    shop_id: int,
    q: Optional[str] = None,
    category: Optional[str] = None,
    low_stock: bool = False,
    skip: int = 0,
    limit: int = 200,
) -> List[Product]:
    logger.debug("list_products shop_id=%s q=%s skip=%s limit=%s", shop_id, q, skip, limit)
    query = db.query(Product).filter(Product.shop_id == shop_id)
    if q:
        qn = q.strip().lower()
        if qn:
            query = query.filter(
                or_(
                    func.lower(Product.name).like(f"%{qn}%"),
                    func.lower(Product.barcode).like(f"%{qn}%"),
                    func.lower(Product.category).like(f"%{qn}%"),
                )
            )
    if category:
        query = query.filter(Product.category == category)
    if low_stock:
        query = query.filter(Product.quantity <= Product.low_stock_threshold)
    return query.order_by(Product.name.asc()).offset(skip).limit(limit).all()


def list_categories(db: Session, shop_id: int) -> List[str]:
    rows = (
        db.query(Product.category)
        .filter(Product.shop_id == shop_id, Product.category.isnot(None))
        .distinct()
        .order_by(Product.category.asc())
        .all()
    )
    return [row[0] for row in rows if row[0]]


def create_product(db: Session, shop_id: int, data: Dict[str, Any]) -> Product:
    values = _clean(data)
    _check_unique(db, shop_id, values)
    product = Product(shop_id=shop_id, **values)
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _conflict_from_integrity(exc)
    db.refresh(product)
    logger.info("product created shop_id=%s product_id=%s", shop_id, product.id)
    return product


def update_product(db: Session, shop_id: int, product_id: int, data: Dict[str, Any]) -> Product:
    product = get_product(db, shop_id, product_id)
    values = _clean(data)
    _check_unique(db, shop_id, values, exclude_id=product.id)
    for key, value in values.items():
        setattr(product, key, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _conflict_from_integrity(exc)
    db.refresh(product)
    return product


def delete_product(db: Session, shop_id: int, product_id: int) -> None:
    product = get_product(db, shop_id, product_id)
    db.delete(product)
    db.commit()
    logger.info("product deleted shop_id=%s product_id=%s", shop_id, product_id)


def lookup_by_barcode(db: Session, shop_id: int, code: str) -> Product:
    product = db.query(Product).filter(Product.shop_id == shop_id, Product.barcode == code.strip()).first()
    if not product:
        raise NotFound("Product not found")
    return product
