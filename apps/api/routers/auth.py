"""
Authentication API endpoints.

Provides:
- User registration (token issued immediately)
- Login (JWT token generation)
- Current user lookup
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, field_serializer, ConfigDict
from typing import Optional
from uuid import UUID
from datetime import datetime
import logging

from core.database import get_db
from core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    ACCESS_TOKEN_EXPIRE_MINUTES,
)
from core.auth import get_current_user
from core.exceptions import PreconditionError, UnauthorizedError
from models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 8


class UserRegister(BaseModel):
    """Schema for user registration."""
    email: EmailStr
    password: str
    display_name: Optional[str] = None


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: UUID
    email: str
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('id')
    def serialize_id(self, id: UUID) -> str:
        return str(id)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = ACCESS_TOKEN_EXPIRE_MINUTES * 60  # seconds
    user: Optional[UserResponse] = None


def _token_response(user: User) -> TokenResponse:
    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return TokenResponse(
        access_token=access_token,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """
    Register a new user account.

    Issues a token immediately so the client can go straight to
    profile onboarding.
    """
    email = user_data.email.strip().lower()

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise PreconditionError("Email already registered")

    if len(user_data.password) < MIN_PASSWORD_LENGTH:
        raise PreconditionError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    user = User(
        email=email,
        password_hash=get_password_hash(user_data.password),
        display_name=user_data.display_name or email.split("@")[0],
    )
    db.add(user)
    db.flush()

    logger.info(f"User registered: {user.id}")
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    email = credentials.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login attempt", extra={"extra_fields": {"email": email}})
        raise UnauthorizedError("Incorrect email or password")

    return _token_response(user)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
