from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from dukan.core.errors import InvalidInput, NotFound
from dukan.models.expense import Expense


def add_expense(
    db: Session,
    shop_id: int,
    description: str,
    amount: Decimal,
    category: Optional[str] = None,
    tax_amount: Optional[Decimal] = None,
    expense_date: Optional[datetime] = None,
) -> Expense:
    if not description or not description.strip():
        raise InvalidInput("description is required")
    if amount is None or Decimal(str(amount)) <= 0:
        raise InvalidInput("amount must be positive")
    if tax_amount is not None and Decimal(str(tax_amount)) < 0:
        raise InvalidInput("taxAmount cannot be negative")
    expense = Expense(
        shop_id=shop_id,
        description=description.strip(),
        category=(category or "").strip() or None,
        amount=Decimal(str(amount)),
        tax_amount=Decimal(str(tax_amount)) if tax_amount is not None else None,
        expense_date=expense_date or datetime.utcnow(),
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)
    return expense


def list_expenses(db: Session, shop_id: int, limit: int = 200) -> List[Expense]:
    return (
        db.query(Expense)
        .filter(Expense.shop_id == shop_id)
        .order_by(Expense.expense_date.desc(), Expense.id.desc())
        .limit(limit)
        .all()
    )


def delete_expense(db: Session, shop_id: int, expense_id: int) -> None:
    expense = db.query(Expense).filter(Expense.id == expense_id, Expense.shop_id == shop_id).first()
    if not expense:
        raise NotFound("Expense not found")
    db.delete(expense)
    db.commit()
