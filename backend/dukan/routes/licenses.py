from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.orm import Session

from dukan.core.config import settings
from dukan.core.database import get_db
from dukan.core.deps import get_current_user, require_issuer
from dukan.core.errors import AppError
from dukan.core.serialization_helpers import CamelModel
from dukan.models.user import User
from dukan.services import license_service


router = APIRouter()


class IssueRequest(CamelModel):
    shop_id: int
    days: int = Field(default_factory=lambda: settings.default_license_days, gt=0)


class IssueResponse(CamelModel):
    success: bool = True
    license_key: str
    shop_id: int
    valid_until: datetime


class ValidateResponse(CamelModel):
    valid: bool
    message: str
    valid_until: Optional[datetime] = None


class LicenseStatus(CamelModel):
    shop_id: int
    is_active: bool
    valid_until: datetime
    issued_at: datetime


@router.post("/issue", response_model=IssueResponse, dependencies=[Depends(require_issuer)])
def issue(data: IssueRequest, db: Session = Depends(get_db)):
    lic, key = license_service.issue_license(db, data.shop_id, data.days)
    return IssueResponse(license_key=key, shop_id=lic.shop_id, valid_until=lic.valid_until)


@router.get("/validate", response_model=ValidateResponse)
def validate(key: str = Query(...), db: Session = Depends(get_db)):
    """Check a license key without logging in; reports failures in the body."""
    try:
        lic = license_service.validate_key(db, key)
    except AppError as exc:
        return ValidateResponse(valid=False, message=exc.message)
    return ValidateResponse(valid=True, message="License is valid", valid_until=lic.valid_until)


@router.get("/status", response_model=LicenseStatus)
def status(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return license_service.get_shop_license(db, user.shop_id)
