from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user, require_admin
from dukan.core.serialization_helpers import CamelModel, Money
from dukan.models.user import User
from dukan.services import inventory_service


router = APIRouter()


class ProductIn(CamelModel):
    name: str
    unit: str
    cost_price: Money
    selling_price: Money
    quantity: int = 0
    tax_rate: Money = Decimal("0")
    barcode: Optional[str] = None
    hsn_code: Optional[str] = None
    category: Optional[str] = None
    low_stock_threshold: int = 10


class ProductOut(CamelModel):
    id: int
    name: str
    unit: str
    quantity: int
    cost_price: Money
    selling_price: Money
    tax_rate: Money
    barcode: Optional[str] = None
    hsn_code: Optional[str] = None
    category: Optional[str] = None
    low_stock_threshold: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProductResponse(CamelModel):
    success: bool = True
    product: ProductOut


class MessageResponse(CamelModel):
    success: bool = True
    message: str


@router.get("", response_model=List[ProductOut])
def list_products(
    q: Optional[str] = Query(None, description="Search by name, barcode or category"),
    category: Optional[str] = Query(None),
    low_stock: bool = Query(False, alias="lowStock"),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=2000),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return inventory_service.list_products(
        db, user.shop_id, q=q, category=category, low_stock=low_stock, skip=skip, limit=limit
    )


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return inventory_service.list_categories(db, user.shop_id)


@router.get("/barcode/{code}", response_model=ProductResponse)
def lookup_by_barcode(code: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    product = inventory_service.lookup_by_barcode(db, user.shop_id, code)
    return ProductResponse(product=ProductOut.model_validate(product))


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(data: ProductIn, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    product = inventory_service.create_product(db, user.shop_id, data.model_dump())
    return ProductResponse(product=ProductOut.model_validate(product))


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return inventory_service.get_product(db, user.shop_id, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    data: ProductIn,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    product = inventory_service.update_product(db, user.shop_id, product_id, data.model_dump())
    return ProductResponse(product=ProductOut.model_validate(product))


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    inventory_service.delete_product(db, user.shop_id, product_id)
    return MessageResponse(message="Product deleted")
