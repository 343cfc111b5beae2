"""
SQLModel models for in-app notifications and the alert rules that raise them.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from constants import NotificationPriority
from utils import isoformat, new_id


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    type: str
    title: str
    message: str
    data: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    is_read: bool = Field(default=False)
    priority: str = Field(default=NotificationPriority.NORMAL.value)
    action_url: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "data": self.data,
            "is_read": self.is_read,
            "priority": self.priority,
            "action_url": self.action_url,
            "created_at": isoformat(self.created_at),
        }


class Alert(SQLModel, table=True):
    """User-defined rule, e.g. a spending limit over a rolling window."""

    __tablename__ = "alerts"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    wallet_id: Optional[str] = Field(default=None, foreign_key="wallets.id")
    name: str
    type: str
    conditions: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    actions: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    last_triggered: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "wallet_id": self.wallet_id,
            "name": self.name,
            "type": self.type,
            "conditions": self.conditions or {},
            "actions": self.actions or {},
            "is_active": self.is_active,
            "last_triggered": isoformat(self.last_triggered),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
