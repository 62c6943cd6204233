from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user, require_admin
from dukan.core.serialization_helpers import CamelModel, Money
from dukan.models.user import User
from dukan.services import closing_service


router = APIRouter()


class ClosingIn(CamelModel):
    closing_date: Optional[date] = None
    opening_cash: Money = Decimal("0")
    closing_cash: Money = Decimal("0")
    notes: Optional[str] = None


class ClosingOut(CamelModel):
    id: int
    closing_date: date
    opening_cash: Money
    closing_cash: Money
    notes: Optional[str] = None
    totals: Dict[str, Any]
    created_at: datetime


class ClosingResponse(CamelModel):
    success: bool = True
    closing: ClosingOut


@router.post("", response_model=ClosingResponse, status_code=201)
def close_day(data: ClosingIn, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    closing = closing_service.close_day(
        db,
        shop_id=admin.shop_id,
        closing_date=data.closing_date,
        opening_cash=data.opening_cash,
        closing_cash=data.closing_cash,
        notes=data.notes,
    )
    return ClosingResponse(closing=ClosingOut.model_validate(closing))


@router.get("", response_model=List[ClosingOut])
def list_closings(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return closing_service.list_closings(db, user.shop_id)
