"""
SQLModel models for users and their preferences.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from constants import DEFAULT_PREFERENCES
from utils import isoformat, new_id


class User(SQLModel, table=True):
    """SQLModel model for application users."""

    __tablename__ = "users"

    # Primary key
    id: str = Field(default_factory=new_id, primary_key=True)

    # Credentials
    email: str = Field(unique=True, index=True)
    username: Optional[str] = Field(default=None, unique=True)
    password_hash: Optional[str] = Field(default=None)
    auth_provider: str = Field(default="basic")

    # Profile
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    email_verified: bool = Field(default=False)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id='{self.id}', username='{self.username}', email='{self.email}')>"

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.username or self.email

    def to_dict(self) -> dict:
        """Convert User to dictionary. The password hash is never included."""
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "profile_image_url": self.profile_image_url,
            "auth_provider": self.auth_provider,
            "email_verified": self.email_verified,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def to_public_dict(self) -> dict:
        """Short form used when embedding a user in other resources."""
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "profile_image_url": self.profile_image_url,
        }


class UserPreferences(SQLModel, table=True):
    """Per-user display, AI and privacy settings."""

    __tablename__ = "user_preferences"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)

    currency: str = Field(default=DEFAULT_PREFERENCES["currency"])
    timezone: str = Field(default=DEFAULT_PREFERENCES["timezone"])
    language: str = Field(default=DEFAULT_PREFERENCES["language"])
    theme: str = Field(default=DEFAULT_PREFERENCES["theme"])
    date_format: str = Field(default=DEFAULT_PREFERENCES["date_format"])
    ai_preferences: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    notification_preferences: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    privacy_settings: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert preferences to dictionary, filling unset JSON settings with defaults."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "currency": self.currency,
            "timezone": self.timezone,
            "language": self.language,
            "theme": self.theme,
            "date_format": self.date_format,
            "ai_preferences": self.ai_preferences or dict(DEFAULT_PREFERENCES["ai_preferences"]),
            "notification_preferences": self.notification_preferences
            or dict(DEFAULT_PREFERENCES["notification_preferences"]),
            "privacy_settings": self.privacy_settings
            or dict(DEFAULT_PREFERENCES["privacy_settings"]),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    @staticmethod
    def defaults_for(user_id: str) -> dict:
        """Preference payload returned before a user has saved anything."""
        data = {key: value for key, value in DEFAULT_PREFERENCES.items()}
        for key in ("ai_preferences", "notification_preferences", "privacy_settings"):
            data[key] = dict(DEFAULT_PREFERENCES[key])
        data["user_id"] = user_id
        return data
