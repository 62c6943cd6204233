from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user, require_admin
from dukan.core.serialization_helpers import CamelModel, Money
from dukan.models.user import User
from dukan.services import expense_service


router = APIRouter()


class ExpenseIn(CamelModel):
    description: str
    amount: Money
    category: Optional[str] = None
    # Leave empty when the bill has no itemised GST
    tax_amount: Optional[Money] = None
    expense_date: Optional[datetime] = None


class ExpenseOut(CamelModel):
    id: int
    description: str
    category: Optional[str] = None
    amount: Money
    tax_amount: Optional[Money] = None
    expense_date: datetime


class ExpenseResponse(CamelModel):
    success: bool = True
    expense: ExpenseOut


class MessageResponse(CamelModel):
    success: bool = True
    message: str


@router.post("", response_model=ExpenseResponse, status_code=201)
def add_expense(data: ExpenseIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    expense = expense_service.add_expense(
        db,
        shop_id=user.shop_id,
        description=data.description,
        amount=data.amount,
        category=data.category,
        tax_amount=data.tax_amount,
        expense_date=data.expense_date,
    )
    return ExpenseResponse(expense=ExpenseOut.model_validate(expense))


@router.get("", response_model=List[ExpenseOut])
def list_expenses(
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return expense_service.list_expenses(db, user.shop_id, limit=limit)


@router.delete("/{expense_id}", response_model=MessageResponse)
def delete_expense(expense_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    expense_service.delete_expense(db, admin.shop_id, expense_id)
    return MessageResponse(message="Expense deleted")
