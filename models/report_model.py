"""
SQLModel model for saved report definitions.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from utils import isoformat, new_id


class Report(SQLModel, table=True):
    __tablename__ = "reports"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    name: str
    description: Optional[str] = None
    type: str
    config: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    schedule: Optional[str] = None
    last_generated: Optional[datetime] = None
    is_public: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "config": self.config or {},
            "schedule": self.schedule,
            "last_generated": isoformat(self.last_generated),
            "is_public": self.is_public,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
