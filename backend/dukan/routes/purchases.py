from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user, require_admin
from dukan.core.serialization_helpers import CamelModel, Money
from dukan.models.user import User
from dukan.services import purchase_service


router = APIRouter()


class PurchaseItemIn(CamelModel):
    product_id: int
    quantity: int
    cost_price: Money
    tax_amount: Money = Decimal("0")


class PurchaseCreate(CamelModel):
    supplier_name: str
    supplier_gstin: Optional[str] = None
    bill_number: Optional[str] = None
    purchase_date: Optional[datetime] = None
    items: List[PurchaseItemIn] = Field(default_factory=list)


class PurchaseItemOut(CamelModel):
    id: int
    product_id: Optional[int] = None
    quantity: int
    cost_price: Money
    tax_amount: Money


class PurchaseOut(CamelModel):
    id: int
    supplier_name: str
    supplier_gstin: Optional[str] = None
    bill_number: Optional[str] = None
    purchase_date: datetime
    total_amount: Money
    total_tax: Money
    items: List[PurchaseItemOut]


class PurchaseResponse(CamelModel):
    success: bool = True
    purchase: PurchaseOut


@router.post("", response_model=PurchaseResponse, status_code=201)
def create_purchase(data: PurchaseCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    purchase = purchase_service.create_purchase(
        db,
        shop_id=admin.shop_id,
        supplier_name=data.supplier_name,
        items=[item.model_dump() for item in data.items],
        supplier_gstin=data.supplier_gstin,
        bill_number=data.bill_number,
        purchase_date=data.purchase_date,
    )
    return PurchaseResponse(purchase=PurchaseOut.model_validate(purchase))


@router.get("", response_model=List[PurchaseOut])
def list_purchases(
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return purchase_service.list_purchases(db, user.shop_id, limit=limit)
