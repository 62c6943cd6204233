from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user
from dukan.core.serialization_helpers import CamelModel, Money
from dukan.models.sale import Sale
from dukan.models.user import User
from dukan.services import sales_service


router = APIRouter()


class SaleItemIn(CamelModel):
    product_id: int
    quantity: int
    price_per_unit: Money = Decimal("0")
    tax_amount: Money = Decimal("0")


class SaleCreate(CamelModel):
    customer_id: Optional[int] = None
    total_amount: Optional[Money] = None
    total_tax: Money = Decimal("0")
    payment_method: Optional[str] = None
    invoice_number: Optional[str] = None
    items: List[SaleItemIn] = Field(default_factory=list)
    is_gstr_applicable: bool = Field(default=False, alias="isGSTRApplicable")


class SaleItemOut(CamelModel):
    id: int
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    quantity: int
    price_per_unit: Money
    tax_amount: Money
    cost_price: Money


class SaleOut(CamelModel):
    id: int
    sale_id: int
    invoice_number: str
    sale_date: datetime
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    user_id: Optional[int] = None
    total_amount: Money
    total_tax: Money
    payment_method: str
    is_gstr_applicable: bool = Field(alias="isGSTRApplicable")
    items: Optional[List[SaleItemOut]] = None


class SaleResponse(CamelModel):
    success: bool = True
    sale: SaleOut


def _sale_out(sale: Sale, with_items: bool = True) -> SaleOut:
    items = None
    if with_items:
        items = [
            SaleItemOut(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else None,
                quantity=item.quantity,
                price_per_unit=item.price_per_unit,
                tax_amount=item.tax_amount,
                cost_price=item.cost_price,
            )
            for item in sale.items
        ]
    return SaleOut(
        id=sale.id,
        sale_id=sale.id,
        invoice_number=sale.invoice_number,
        sale_date=sale.sale_date,
        customer_id=sale.customer_id,
        customer_name=sale.customer.name if sale.customer else None,
        user_id=sale.user_id,
        total_amount=sale.total_amount,
        total_tax=sale.total_tax,
        payment_method=sale.payment_method,
        is_gstr_applicable=sale.is_gstr_applicable,
        items=items,
    )


@router.post("", response_model=SaleResponse, status_code=201)
def create_sale(data: SaleCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    sale = sales_service.create_sale(
        db,
        shop_id=user.shop_id,
        user_id=user.id,
        items=[item.model_dump() for item in data.items],
        total_amount=data.total_amount,
        total_tax=data.total_tax,
        payment_method=data.payment_method,
        invoice_number=data.invoice_number,
        customer_id=data.customer_id,
        is_gstr_applicable=data.is_gstr_applicable,
    )
    return SaleResponse(sale=_sale_out(sale))


@router.get("", response_model=List[SaleOut])
def list_sales(
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    sales = sales_service.list_sales(db, user.shop_id, date_from=date_from, date_to=date_to, skip=skip, limit=limit)
    return [_sale_out(sale, with_items=False) for sale in sales]


@router.get("/{sale_id}", response_model=SaleOut)
def get_sale(sale_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _sale_out(sales_service.get_sale(db, user.shop_id, sale_id))
