"""
Email/password authentication routes issuing bearer tokens.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import Session

from auth_service import TokenResponse, create_access_token, get_current_user
from models import User
from repositories import UserRepository
from sqlalchemy_db import get_db_session

# Create router
auth_router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# Request Models
class UserRegisterRequest(BaseModel):
    """User registration request model."""

    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserLoginRequest(BaseModel):
    """User login request model."""

    email: EmailStr
    password: str


# Response Models
class AuthResponse(BaseModel):
    """Authentication response model."""

    message: str
    user: dict
    token: TokenResponse


class MessageResponse(BaseModel):
    message: str


@auth_router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(request: UserRegisterRequest, session: Session = Depends(get_db_session)):
    """
    Register a new user and sign them in.

    Args:
        request: Email, password and optional profile fields

    Returns:
        The created user (without password) and an access token
    """
    try:
        user = UserRepository(session).create_user(
            email=request.email,
            password=request.password,
            username=request.username,
            first_name=request.first_name,
            last_name=request.last_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return AuthResponse(
        message="User registered successfully",
        user=user.to_dict(),
        token=create_access_token(user.id),
    )


@auth_router.post("/login", response_model=AuthResponse)
def login_user(request: UserLoginRequest, session: Session = Depends(get_db_session)):
    """Login user and return token."""
    user = UserRepository(session).authenticate(request.email, request.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    return AuthResponse(
        message="Login successful",
        user=user.to_dict(),
        token=create_access_token(user.id),
    )


@auth_router.post("/logout", response_model=MessageResponse)
def logout_user(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; clients discard them to log out."""
    return MessageResponse(message="Logged out successfully")


@auth_router.get("/user")
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user.to_dict()
