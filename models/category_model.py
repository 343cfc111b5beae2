"""
SQLModel model for transaction categories.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from constants import TransactionType
from utils import isoformat, new_id


class Category(SQLModel, table=True):
    """Income or expense category. Defaults are shared, custom ones belong to their creator."""

    __tablename__ = "categories"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: Optional[str] = None
    type: str = Field(default=TransactionType.EXPENSE.value)
    icon: Optional[str] = None
    color: Optional[str] = None
    is_default: bool = Field(default=False)
    parent_id: Optional[str] = Field(default=None, foreign_key="categories.id")
    created_by: Optional[str] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.now)

    def __repr__(self) -> str:
        return f"<Category(id='{self.id}', name='{self.name}', type='{self.type}')>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "icon": self.icon,
            "color": self.color,
            "is_default": self.is_default,
            "parent_id": self.parent_id,
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
        }
