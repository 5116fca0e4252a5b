import re
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import field_validator
from sqlalchemy.orm import Session

from fastfeast.database import get_db
from fastfeast.errors import ValidationError
from fastfeast.schemas import CamelModel
from fastfeast.user_service.repository import UserRepository
from fastfeast.user_service.security import (
    create_access_token,
    get_current_user_id,
    get_password_hash,
    verify_password,
)

router = APIRouter(tags=["users"])

EMAIL_REGEX = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
PHONE_REGEX = r'^\+?\d{7,15}$'


def _check_phone(v):
    if v is None or v == "":
        return None
    if not re.match(PHONE_REGEX, v.replace(" ", "")):
        raise ValueError('Invalid phone number (7-15 digits, optional leading +)')
    return v


# --- DTOs ---
class UserCreate(CamelModel):
    username: str
    email: str
    password: str
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not v.strip():
            raise ValueError('Username is required')
        return v.strip()

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        v = v.strip().lower()
        if not re.match(EMAIL_REGEX, v):
            raise ValueError('Invalid email address')
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters')
        return v

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class LoginRequest(CamelModel):
    email: str
    password: str


class UserUpdate(CamelModel):
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None


class AuthResponse(CamelModel):
    token: str
    user: UserResponse


def _issue_token(user) -> dict:
    token = create_access_token({"sub": user.email, "id": user.id})
    return {"token": token, "user": UserResponse.model_validate(user)}


# --- API AUTH ---
@router.post("/register", response_model=AuthResponse)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    users = UserRepository(db)
    if users.get_by_email(payload.email):
        raise ValidationError("User already exists")

    user = users.create(
        username=payload.username,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        phone=payload.phone,
        address=payload.address,
    )
    db.commit()
    db.refresh(user)
    return _issue_token(user)


@router.post("/login", response_model=AuthResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = UserRepository(db).get_by_email(req.email.strip().lower())
    if not user or not verify_password(req.password, user.hashed_password):
        raise ValidationError("Invalid credentials")
    return _issue_token(user)


# --- API PROFILE ---
@router.get("/users/me", response_model=UserResponse)
def get_me(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return UserRepository(db).get_by_id(user_id)


@router.put("/users/me", response_model=UserResponse)
def update_me(payload: UserUpdate, user_id: int = Depends(get_current_user_id),
              db: Session = Depends(get_db)):
    user = UserRepository(db).update_contact(user_id, phone=payload.phone, address=payload.address)
    db.commit()
    db.refresh(user)
    return user
