"""
SQLModel model for savings goals.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from constants import GoalPriority
from utils import cents_to_dollars_float, isoformat, new_id, percent


class Goal(SQLModel, table=True):
    """A savings target tracked by cumulative contributions."""

    __tablename__ = "goals"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    wallet_id: Optional[str] = Field(default=None, foreign_key="wallets.id")
    name: str
    description: Optional[str] = None
    target_amount: int = Field(description="Cents")
    current_amount: int = Field(default=0, description="Cents")
    target_date: Optional[datetime] = None
    category: Optional[str] = None
    priority: str = Field(default=GoalPriority.MEDIUM.value)
    is_active: bool = Field(default=True)
    achieved_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def __repr__(self) -> str:
        return f"<Goal(id='{self.id}', name='{self.name}', {self.current_amount}/{self.target_amount})>"

    @property
    def is_achieved(self) -> bool:
        return self.achieved_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "wallet_id": self.wallet_id,
            "name": self.name,
            "description": self.description,
            "target_amount": cents_to_dollars_float(self.target_amount),
            "current_amount": cents_to_dollars_float(self.current_amount),
            "progress": percent(self.current_amount, self.target_amount),
            "target_date": isoformat(self.target_date),
            "category": self.category,
            "priority": self.priority,
            "is_active": self.is_active,
            "achieved_at": isoformat(self.achieved_at),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
