"""
Profile, preferences and account reset routes for the current user.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import Session

from auth_service import get_current_user
from constants import RESET_CONFIRMATION_TEXT, Theme
from models import User
from repositories import UserRepository
from sqlalchemy_db import get_db_session

router = APIRouter(prefix="/api/users/me", tags=["users"])


class ProfileUpdateRequest(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None


class PreferencesUpdateRequest(BaseModel):
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    timezone: Optional[str] = None
    language: Optional[str] = None
    theme: Optional[Theme] = None
    date_format: Optional[str] = None
    ai_preferences: Optional[dict] = None
    notification_preferences: Optional[dict] = None
    privacy_settings: Optional[dict] = None


class ResetRequest(BaseModel):
    confirmation_text: str


@router.get("")
def get_profile(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Get the current user with their preferences.

    Returns:
        User fields plus a ``preferences`` object (defaults when none are saved)
    """
    data = current_user.to_dict()
    data["preferences"] = UserRepository(session).get_preferences_dict(current_user.id)
    return data


@router.patch("")
def update_profile(
    request: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Update name and email of the current user."""
    try:
        user = UserRepository(session).update_profile(
            current_user, request.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return user.to_dict()


@router.get("/preferences")
def get_preferences(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return UserRepository(session).get_preferences_dict(current_user.id)


@router.patch("/preferences")
def update_preferences(
    request: PreferencesUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Create or update the current user's preferences."""
    changes = request.model_dump(exclude_unset=True, mode="json")
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid preferences data"
        )
    if "currency" in changes and changes["currency"]:
        changes["currency"] = changes["currency"].upper()

    preferences = UserRepository(session).upsert_preferences(current_user.id, changes)
    return preferences.to_dict()


@router.post("/reset")
def reset_account(
    request: ResetRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Delete all of the current user's financial data.

    Args:
        request: Must carry the exact confirmation text

    Returns:
        Confirmation message and reset time
    """
    if request.confirmation_text != RESET_CONFIRMATION_TEXT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Confirmation text must be '{RESET_CONFIRMATION_TEXT}'",
        )

    reset_at = UserRepository(session).reset_user_data(current_user)
    return {"message": "All data has been reset successfully", "reset_at": reset_at.isoformat()}
