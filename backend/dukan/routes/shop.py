from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user, require_admin
from dukan.core.serialization_helpers import CamelModel
from dukan.models.user import User
from dukan.services import identity_service


router = APIRouter()


class ShopSettings(CamelModel):
    id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    gstin: Optional[str] = None
    created_at: datetime


class ShopSettingsUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = None
    phone: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=20)


@router.get("/settings", response_model=ShopSettings)
def get_settings(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return identity_service.get_shop(db, user.shop_id)


@router.put("/settings", response_model=ShopSettings)
def update_settings(data: ShopSettingsUpdate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return identity_service.update_shop_settings(db, admin.shop_id, **data.model_dump(exclude_unset=True))
