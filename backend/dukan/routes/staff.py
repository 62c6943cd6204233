from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import require_admin
from dukan.core.serialization_helpers import CamelModel
from dukan.models.user import User
from dukan.services import identity_service


router = APIRouter()


class StaffCreate(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    email: EmailStr
    designation: Optional[str] = None
    phone: Optional[str] = None


class StaffUpdate(CamelModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    designation: Optional[str] = None
    phone: Optional[str] = None


class StaffOut(CamelModel):
    id: int
    username: str
    email: str
    role: str
    designation: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime


class StaffResponse(CamelModel):
    success: bool = True
    staff: StaffOut


class MessageResponse(CamelModel):
    success: bool = True
    message: str


def _staff_out(user: User) -> StaffOut:
    detail = user.staff_detail
    return StaffOut(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        designation=detail.designation if detail else None,
        phone=detail.phone if detail else None,
        created_at=user.created_at,
    )


@router.post("/add", response_model=StaffResponse, status_code=201)
def add_staff(data: StaffCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    user = identity_service.add_staff(
        db,
        shop_id=admin.shop_id,
        username=data.username,
        password=data.password,
        email=data.email,
        designation=data.designation,
        phone=data.phone,
    )
    return StaffResponse(staff=_staff_out(user))


@router.get("/list", response_model=List[StaffOut])
def list_staff(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return [_staff_out(u) for u in identity_service.list_staff(db, admin.shop_id)]


@router.put("/update/{user_id}", response_model=StaffResponse)
def update_staff(
    user_id: int,
    data: StaffUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = identity_service.update_staff(
        db,
        shop_id=admin.shop_id,
        user_id=user_id,
        email=data.email,
        password=data.password,
        designation=data.designation,
        phone=data.phone,
    )
    return StaffResponse(staff=_staff_out(user))


@router.delete("/delete/{user_id}", response_model=MessageResponse)
def delete_staff(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    identity_service.delete_staff(db, admin.shop_id, user_id)
    return MessageResponse(message="Staff member deleted")
