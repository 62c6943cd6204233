"""
Purchase book: supplier bills that restock products.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from dukan.core.errors import AppError, InvalidInput, NotFound, TransactionFailed
from dukan.models.product import Product
from dukan.models.purchase import Purchase, PurchaseItem


logger = logging.getLogger(__name__)


def create_purchase(
    db: Session,
    shop_id: int,
    supplier_name: str,
    items: List[Dict[str, Any]],
    supplier_gstin: Optional[str] = None,
    bill_number: Optional[str] = None,
    purchase_date: Optional[datetime] = None,
) -> Purchase:
    """
    Record a purchase; each item adds to stock and resets the product's cost
    price to what was paid. All or nothing.
    """
    if not supplier_name or not supplier_name.strip():
        raise InvalidInput("supplierName is required")
    if not items:
        raise InvalidInput("A purchase needs at least one item")
    for item in items:
        if int(item.get("quantity") or 0) <= 0:
            raise InvalidInput("Purchased quantity must be positive")
        if Decimal(str(item.get("cost_price") or 0)) < 0:
            raise InvalidInput("costPrice cannot be negative")

    try:
        purchase = Purchase(
            shop_id=shop_id,
            supplier_name=supplier_name.strip(),
            supplier_gstin=(supplier_gstin or "").strip() or None,
            bill_number=(bill_number or "").strip() or None,
            purchase_date=purchase_date or datetime.utcnow(),
        )
        db.add(purchase)
        db.flush()

        total_amount = Decimal("0")
        total_tax = Decimal("0")
        for item in items:
            product = (
                db.query(Product)
                .filter(Product.id == item["product_id"], Product.shop_id == shop_id)
                .with_for_update()
                .first()
            )
            if not product:
                raise NotFound(f"Product {item['product_id']} not found")
            quantity = int(item["quantity"])
            cost_price = Decimal(str(item.get("cost_price") or 0))
            tax_amount = Decimal(str(item.get("tax_amount") or 0))
            db.add(PurchaseItem(
                purchase_id=purchase.id,
                product_id=product.id,
                quantity=quantity,
                cost_price=cost_price,
                tax_amount=tax_amount,
            ))
            product.quantity = int(product.quantity) + quantity
            product.cost_price = cost_price
            total_amount += cost_price * quantity + tax_amount
            total_tax += tax_amount

        purchase.total_amount = total_amount
        purchase.total_tax = total_tax
        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("purchase rolled back shop_id=%s", shop_id)
        raise TransactionFailed("Failed to record purchase", reason=str(exc))

    db.refresh(purchase)
    logger.info("purchase recorded shop_id=%s purchase_id=%s", shop_id, purchase.id)
    return purchase


def list_purchases(db: Session, shop_id: int, limit: int = 100) -> List[Purchase]:
    return (
        db.query(Purchase)
        .options(selectinload(Purchase.items))
        .filter(Purchase.shop_id == shop_id)
        .order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
        .limit(limit)
        .all()
    )
