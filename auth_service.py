"""
Email/password authentication with bcrypt hashes and signed JWT bearer tokens.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlmodel import Session

from models import User
from sqlalchemy_db import get_db_session


class AuthConfig:
    """JWT configuration."""

    def __init__(self):
        self.secret_key = os.getenv("JWT_SECRET")
        self.algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.access_token_expire_minutes = int(
            os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)
        )

        if not self.secret_key:
            raise ValueError("JWT_SECRET must be set in environment variables")


class TokenResponse(BaseModel):
    """Access token returned after register/login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


# Global auth config
auth_config = AuthConfig()

# HTTP Bearer for token validation; missing tokens are reported as 401 below
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a plain-text password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a plain-text password against a stored bcrypt hash."""
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> TokenResponse:
    """
    Issue a signed access token for a user.

    Args:
        user_id: Value stored in the 'sub' claim
        expires_minutes: Override for the configured lifetime

    Returns:
        Token response with the encoded JWT
    """
    minutes = expires_minutes or auth_config.access_token_expire_minutes
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    token = jwt.encode(payload, auth_config.secret_key, algorithm=auth_config.algorithm)
    return TokenResponse(access_token=token, expires_in=minutes * 60)


def decode_access_token(token: str) -> str:
    """
    Verify a token and return the user id it was issued for.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(
            token, auth_config.secret_key, algorithms=[auth_config.algorithm]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid JWT token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing 'sub'",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


# Dependency to get current user from JWT token
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_db_session),
) -> User:
    """
    Get current authenticated user from the bearer token.

    Use this as a dependency in routes that require authentication.
    """
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = decode_access_token(credentials.credentials)
    user = session.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
