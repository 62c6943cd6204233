from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dukan.core.errors import Conflict, InvalidInput, NotFound
from dukan.models.customer import Customer


def _normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _find_by_phone(db: Session, shop_id: int, phone: str) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.shop_id == shop_id, Customer.phone == phone).first()


def upsert_customer(
    db: Session,
    shop_id: int,
    name: Optional[str],
    phone: Optional[str],
    address: Optional[str] = None,
    gstin: Optional[str] = None,
) -> Customer:
    """
    Create the shop's customer for this phone, or overwrite the existing one.
    Phone is the key (unique per shop); name, address and GSTIN are replaced
    on re-add. If another request inserts the same phone first, its row is
    updated instead.
    """
    normalized_name = _normalize_text(name)
    normalized_phone = _normalize_text(phone)
    if not normalized_phone:
        raise InvalidInput("phone is required")
    if not normalized_name:
        raise InvalidInput("name is required")
    fields = {
        "name": normalized_name,
        "address": _normalize_text(address),
        "gstin": _normalize_text(gstin),
    }

    customer = _find_by_phone(db, shop_id, normalized_phone)
    if customer:
        for key, value in fields.items():
            setattr(customer, key, value)
    else:
        customer = Customer(shop_id=shop_id, phone=normalized_phone, **fields)
        db.add(customer)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        customer = _find_by_phone(db, shop_id, normalized_phone)
        if not customer:
            raise Conflict("A customer with this phone already exists")
        for key, value in fields.items():
            setattr(customer, key, value)
        db.commit()
    db.refresh(customer)
    return customer


def get_customer(db: Session, shop_id: int, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id, Customer.shop_id == shop_id).first()
    if not customer:
        raise NotFound("Customer not found")
    return customer


def list_customers(db: Session, shop_id: int, search: Optional[str] = None) -> List[Customer]:
    query = db.query(Customer).filter(Customer.shop_id == shop_id)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(Customer.name.ilike(term) | Customer.phone.ilike(term))
    return query.order_by(Customer.name.asc()).all()
