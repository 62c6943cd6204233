from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user
from dukan.core.serialization_helpers import CamelModel
from dukan.models.user import User
from dukan.services import customer_service


router = APIRouter()


class CustomerIn(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None


class CustomerOut(CamelModel):
    id: int
    name: str
    phone: str
    address: Optional[str] = None
    gstin: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CustomerResponse(CamelModel):
    success: bool = True
    customer: CustomerOut


@router.post("", response_model=CustomerResponse)
def save_customer(data: CustomerIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Create a customer, or update the one already holding this phone number."""
    customer = customer_service.upsert_customer(
        db, user.shop_id, name=data.name, phone=data.phone, address=data.address, gstin=data.gstin
    )
    return CustomerResponse(customer=CustomerOut.model_validate(customer))


@router.get("", response_model=List[CustomerOut])
def list_customers(
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return customer_service.list_customers(db, user.shop_id, search=search)


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return customer_service.get_customer(db, user.shop_id, customer_id)
