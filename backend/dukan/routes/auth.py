from fastapi import APIRouter, Depends, status
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.serialization_helpers import CamelModel
from dukan.services import identity_service


router = APIRouter()


class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    email: EmailStr
    shop_name: str = Field(min_length=1, max_length=255)


class RegisterResponse(CamelModel):
    success: bool = True
    shop_id: int


class LoginRequest(CamelModel):
    username: str
    password: str
    license_key: str


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    role: str
    shop_id: int


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    shop_id = identity_service.register(
        db,
        shop_name=data.shop_name,
        username=data.username,
        password=data.password,
        email=data.email,
    )
    return RegisterResponse(shop_id=shop_id)


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    result = identity_service.authenticate(db, data.username, data.password, data.license_key)
    return LoginResponse(token=result["token"], role=result["role"], shop_id=result["shop_id"])
