"""
SQLModel model for wallet transactions.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from constants import TransactionType
from utils import cents_to_dollars_float, isoformat, new_id


class Transaction(SQLModel, table=True):
    """SQLModel model for financial transactions."""

    __tablename__ = "transactions"

    # Primary key
    id: str = Field(default_factory=new_id, primary_key=True)

    # Ownership
    wallet_id: str = Field(foreign_key="wallets.id", index=True)
    category_id: str = Field(foreign_key="categories.id", index=True)
    created_by: str = Field(foreign_key="users.id", index=True)

    # Transaction details
    type: str = Field(description="Transaction type: 'expense' or 'income'")
    amount: int = Field(description="Amount stored in cents")
    description: Optional[str] = None
    receipt_url: Optional[str] = None
    tags: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    location: Optional[str] = None
    is_recurring: bool = Field(default=False)
    recurring_pattern: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    date: datetime = Field(default_factory=datetime.now, index=True)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def __repr__(self) -> str:
        """String representation of Transaction."""
        return f"<Transaction(id='{self.id}', type='{self.type}', amount={self.amount}, description='{self.description}')>"

    @property
    def signed_amount(self) -> int:
        """Effect of this transaction on its wallet balance, in cents."""
        if self.type == TransactionType.INCOME.value:
            return self.amount
        return -self.amount

    def to_dict(self) -> dict:
        """Convert Transaction to dictionary."""
        return {
            "id": self.id,
            "wallet_id": self.wallet_id,
            "category_id": self.category_id,
            "type": self.type,
            "amount": cents_to_dollars_float(self.amount),
            "description": self.description,
            "receipt_url": self.receipt_url,
            "tags": self.tags or [],
            "location": self.location,
            "is_recurring": self.is_recurring,
            "recurring_pattern": self.recurring_pattern,
            "created_by": self.created_by,
            "date": isoformat(self.date),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
