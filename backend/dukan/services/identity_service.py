"""
Tenant and identity store: shop registration, login and staff accounts.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dukan.core.errors import Conflict, Forbidden, InvalidInput, NotFound, Unauthorized
from dukan.core.roles import Role
from dukan.core.security import create_access_token, hash_password, verify_password
from dukan.models.shop import Shop
from dukan.models.user import StaffDetail, User
from dukan.services.license_service import enforce_license, resolve_license


logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _require_text(value: str, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInput(f"{field} is required")
    return cleaned


def _ensure_identity_free(db: Session, username: str, email: str, exclude_user_id: Optional[int] = None) -> None:
    query = db.query(User).filter(or_(User.username == username, User.email == email))
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    existing = query.first()
    if existing:
        if existing.username == username:
            raise Conflict("Username already exists")
        raise Conflict("Email already registered")


def _conflict_from_integrity(exc: IntegrityError) -> Conflict:
    msg = str(exc.orig).lower()
    if "username" in msg:
        return Conflict("Username already exists")
    if "email" in msg:
        return Conflict("Email already registered")
    return Conflict("Account already exists")


def register(db: Session, shop_name: str, username: str, password: str, email: str) -> int:
    shop_name = _require_text(shop_name, "shopName")
    username = _require_text(username, "username")
    email = _normalize_email(email)
    _ensure_identity_free(db, username, email)

    shop = Shop(name=shop_name)
    db.add(shop)
    try:
        db.flush()
        admin = User(
            shop_id=shop.id,
            username=username,
            email=email,
            hashed_password=hash_password(password),
            role=Role.admin.value,
        )
        db.add(admin)
        db.commit()
    except IntegrityError as exc:
        # A concurrent registration won the race; the shop row goes too
        db.rollback()
        raise _conflict_from_integrity(exc)
    logger.info("shop registered shop_id=%s admin=%s", shop.id, username)
    return shop.id


def authenticate(db: Session, username: str, password: str, license_key: str) -> dict:
    lic = resolve_license(db, license_key)
    enforce_license(db, lic)

    user = db.query(User).filter(User.username == username.strip(), User.shop_id == lic.shop_id).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.info("failed login username=%s shop_id=%s", username, lic.shop_id)
        raise Unauthorized("Invalid username or password")

    token = create_access_token(shop_id=user.shop_id, user_id=user.id, role=user.role)
    return {"token": token, "role": user.role, "shop_id": user.shop_id}


def add_staff(
    db: Session,
    shop_id: int,
    username: str,
    password: str,
    email: str,
    designation: Optional[str] = None,
    phone: Optional[str] = None,
) -> User:
    username = _require_text(username, "username")
    email = _normalize_email(email)
    _ensure_identity_free(db, username, email)

    user = User(
        shop_id=shop_id,
        username=username,
        email=email,
        hashed_password=hash_password(password),
        role=Role.staff.value,
    )
    user.staff_detail = StaffDetail(designation=designation, phone=phone)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _conflict_from_integrity(exc)
    db.refresh(user)
    logger.info("staff added shop_id=%s user_id=%s", shop_id, user.id)
    return user


def list_staff(db: Session, shop_id: int) -> List[User]:
    return (
        db.query(User)
        .filter(User.shop_id == shop_id, User.role == Role.staff.value)
        .order_by(User.username.asc())
        .all()
    )


def _get_shop_user(db: Session, shop_id: int, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id, User.shop_id == shop_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def update_staff(
    db: Session,
    shop_id: int,
    user_id: int,
    email: Optional[str] = None,
    password: Optional[str] = None,
    designation: Optional[str] = None,
    phone: Optional[str] = None,
) -> User:
    user = _get_shop_user(db, shop_id, user_id)
    if user.role != Role.staff.value:
        raise Forbidden("Only staff accounts can be edited here")

    if email:
        email = _normalize_email(email)
        _ensure_identity_free(db, user.username, email, exclude_user_id=user.id)
        user.email = email
    if password:
        user.hashed_password = hash_password(password)
    if designation is not None or phone is not None:
        detail = user.staff_detail or StaffDetail()
        if designation is not None:
            detail.designation = designation
        if phone is not None:
            detail.phone = phone
        user.staff_detail = detail

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _conflict_from_integrity(exc)
    db.refresh(user)
    return user


def delete_staff(db: Session, shop_id: int, user_id: int) -> None:
    user = _get_shop_user(db, shop_id, user_id)
    if user.role != Role.staff.value:
        raise Forbidden("Admin accounts cannot be deleted")
    db.delete(user)
    db.commit()
    logger.info("staff deleted shop_id=%s user_id=%s", shop_id, user_id)


def get_shop(db: Session, shop_id: int) -> Shop:
    shop = db.query(Shop).filter(Shop.id == shop_id).first()
    if not shop:
        raise NotFound("Shop not found")
    return shop


def update_shop_settings(db: Session, shop_id: int, **fields) -> Shop:
    shop = get_shop(db, shop_id)
    for key in ("name", "address", "phone", "gstin"):
        value = fields.get(key)
        if value is not None:
            setattr(shop, key, value)
    db.commit()
    db.refresh(shop)
    return shop
