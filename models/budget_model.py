"""
SQLModel models for budgets and their planned-vs-actual line items.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from constants import BudgetPeriod, BudgetType
from utils import cents_to_dollars_float, isoformat, new_id, percent


class Budget(SQLModel, table=True):
    """Spending plan for a wallet, optionally tied to a category."""

    __tablename__ = "budgets"

    id: str = Field(default_factory=new_id, primary_key=True)
    wallet_id: str = Field(foreign_key="wallets.id", index=True)
    category_id: Optional[str] = Field(default=None, foreign_key="categories.id")
    name: str = Field(default="Budget")
    description: Optional[str] = None
    amount: int = Field(description="Limit stored in cents")
    period: str = Field(default=BudgetPeriod.MONTHLY.value)
    budget_type: str = Field(default=BudgetType.CATEGORY.value)
    start_date: datetime = Field(default_factory=datetime.now)
    end_date: Optional[datetime] = None
    is_active: bool = Field(default=True)
    created_by: str = Field(foreign_key="users.id")

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def __repr__(self) -> str:
        return f"<Budget(id='{self.id}', name='{self.name}', amount={self.amount})>"

    def to_dict(self, spent: Optional[int] = None) -> dict:
        """Convert Budget to dictionary; ``spent`` adds the usage figures."""
        data = {
            "id": self.id,
            "wallet_id": self.wallet_id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "amount": cents_to_dollars_float(self.amount),
            "period": self.period,
            "budget_type": self.budget_type,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if spent is not None:
            data["spent"] = cents_to_dollars_float(spent)
            data["remaining"] = cents_to_dollars_float(self.amount - spent)
            data["percent_used"] = percent(spent, self.amount)
            data["is_exceeded"] = spent > self.amount
        return data


class BudgetItem(SQLModel, table=True):
    """A planned purchase inside a budget and what was actually paid."""

    __tablename__ = "budget_items"

    id: str = Field(default_factory=new_id, primary_key=True)
    budget_id: str = Field(foreign_key="budgets.id", index=True)
    name: str
    description: Optional[str] = None
    unit: Optional[str] = None

    planned_quantity: Optional[float] = None
    planned_unit_price: Optional[int] = Field(default=None, description="Cents")
    planned_amount: int = Field(description="Cents")

    actual_quantity: Optional[float] = None
    actual_unit_price: Optional[int] = Field(default=None, description="Cents")
    actual_amount: Optional[int] = Field(default=None, description="Cents")

    is_purchased: bool = Field(default=False)
    purchase_date: Optional[datetime] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def variance(self) -> Optional[int]:
        """Actual minus planned, in cents. None until something was paid."""
        if self.actual_amount is None:
            return None
        return self.actual_amount - self.planned_amount

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "budget_id": self.budget_id,
            "name": self.name,
            "description": self.description,
            "unit": self.unit,
            "planned_quantity": self.planned_quantity,
            "planned_unit_price": cents_to_dollars_float(self.planned_unit_price),
            "planned_amount": cents_to_dollars_float(self.planned_amount),
            "actual_quantity": self.actual_quantity,
            "actual_unit_price": cents_to_dollars_float(self.actual_unit_price),
            "actual_amount": cents_to_dollars_float(self.actual_amount),
            "variance": cents_to_dollars_float(self.variance),
            "is_purchased": self.is_purchased,
            "purchase_date": isoformat(self.purchase_date),
            "notes": self.notes,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
