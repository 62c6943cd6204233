"""
Sale transaction engine.

A sale is booked in one database transaction: header, line items and stock
decrements either all commit or all roll back.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from dukan.core.errors import AppError, Conflict, InsufficientStock, InvalidInput, NotFound, TransactionFailed
from dukan.core.invoice_numbers import generate_invoice_number
from dukan.models.customer import Customer
from dukan.models.product import Product
from dukan.models.sale import Sale, SaleItem


logger = logging.getLogger(__name__)


def _validate_items(items: List[Dict[str, Any]]) -> None:
    for item in items:
        if item.get("product_id") is None:
            raise InvalidInput("Every item needs a productId")
        if int(item.get("quantity") or 0) <= 0:
            raise InvalidInput(f"Quantity for product {item['product_id']} must be positive")


def _lock_product(db: Session, shop_id: int, product_id: int) -> Product:
    # Row lock held until commit/rollback; closes the read-then-write race
    # between two registers selling the same product.
    product = (
        db.query(Product)
        .filter(Product.id == product_id, Product.shop_id == shop_id)
        .with_for_update()
        .first()
    )
    if not product:
        raise NotFound(f"Product {product_id} not found")
    return product


def create_sale(
    db: Session,
    shop_id: int,
    user_id: Optional[int],
    items: List[Dict[str, Any]],
    total_amount: Optional[Decimal],
    total_tax: Optional[Decimal] = None,
    payment_method: Optional[str] = None,
    invoice_number: Optional[str] = None,
    customer_id: Optional[int] = None,
    is_gstr_applicable: bool = False,
) -> Sale:
    """
    Book a sale and decrement stock atomically.

    Items are processed in input order. Each product row is locked, checked
    and decremented, and its current cost price is copied onto the sale item.

    Raises:
        InvalidInput: missing total or empty cart
        NotFound: customer or product not in this shop
        InsufficientStock: an item would drive stock below zero
        Conflict: invoice number already used
        TransactionFailed: any other database error
    """
    if total_amount is None:
        raise InvalidInput("totalAmount is required")
    if not items:
        raise InvalidInput("Cart is empty")
    _validate_items(items)

    number = (invoice_number or "").strip()
    try:
        if customer_id is not None:
            customer = db.query(Customer.id).filter(Customer.id == customer_id, Customer.shop_id == shop_id).first()
            if not customer:
                raise NotFound(f"Customer {customer_id} not found")

        if not number:
            number = generate_invoice_number(db, shop_id)
        sale = Sale(
            shop_id=shop_id,
            user_id=user_id,
            customer_id=customer_id,
            invoice_number=number,
            total_amount=Decimal(str(total_amount)),
            total_tax=Decimal(str(total_tax or 0)),
            payment_method=(payment_method or "cash").strip() or "cash",
            is_gstr_applicable=bool(is_gstr_applicable),
            sale_date=datetime.utcnow(),
        )
        db.add(sale)
        db.flush()

        for item in items:
            product = _lock_product(db, shop_id, int(item["product_id"]))
            quantity = int(item["quantity"])
            new_quantity = int(product.quantity) - quantity
            if new_quantity < 0:
                raise InsufficientStock(
                    f"Insufficient stock for {product.name}: {product.quantity} available, {quantity} requested"
                )
            db.add(SaleItem(
                sale_id=sale.id,
                product_id=product.id,
                quantity=quantity,
                price_per_unit=Decimal(str(item.get("price_per_unit") or 0)),
                tax_amount=Decimal(str(item.get("tax_amount") or 0)),
                cost_price=product.cost_price,
            ))
            product.quantity = new_quantity

        db.commit()
    except AppError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        if "invoice_number" in str(exc.orig).lower():
            raise Conflict(f"Invoice number {number} already exists")
        logger.exception("sale rolled back shop_id=%s", shop_id)
        raise TransactionFailed("Failed to record sale", reason=str(exc.orig))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("sale rolled back shop_id=%s", shop_id)
        raise TransactionFailed("Failed to record sale", reason=str(exc))

    db.refresh(sale)
    logger.info(
        "sale booked shop_id=%s sale_id=%s invoice=%s items=%s",
        shop_id, sale.id, sale.invoice_number, len(items),
    )
    return sale


def get_sale(db: Session, shop_id: int, sale_id: int) -> Sale:
    sale = (
        db.query(Sale)
        .options(selectinload(Sale.items).selectinload(SaleItem.product), selectinload(Sale.customer))
        .filter(Sale.id == sale_id, Sale.shop_id == shop_id)
        .first()
    )
    if not sale:
        raise NotFound("Sale not found")
    return sale


def list_sales(
    db: Session,
    shop_id: int,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    skip: int = 0,
    limit: int = 50,
) -> List[Sale]:
    query = db.query(Sale).options(selectinload(Sale.customer)).filter(Sale.shop_id == shop_id)
    if date_from:
        query = query.filter(Sale.sale_date >= date_from)
    if date_to:
        query = query.filter(Sale.sale_date <= date_to)
    return (
        query.order_by(Sale.sale_date.desc(), Sale.id.desc())
        .offset(skip)
        .limit(min(200, max(1, limit)))
        .all()
    )
