"""
Budget and budget item repository.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, func
from sqlmodel import Session, col, select

from models import Budget, BudgetItem, Category, Wallet, WalletMember
from utils import line_total_cents


class BudgetRepository:
    """Repository class for budgets and their line items."""

    def __init__(self, session: Session):
        self.session = session

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        return self.session.get(Budget, budget_id)

    def get_item(self, item_id: str) -> Optional[BudgetItem]:
        return self.session.get(BudgetItem, item_id)

    def spent_by_budget(self, budget_ids: List[str]) -> Dict[str, int]:
        """
        Sum of actual amounts of purchased items per budget, in cents.

        Budgets without purchases are reported as 0.
        """
        spent = {budget_id: 0 for budget_id in budget_ids}
        if not budget_ids:
            return spent
        statement = (
            select(BudgetItem.budget_id, func.sum(BudgetItem.actual_amount))
            .where(
                col(BudgetItem.budget_id).in_(budget_ids),
                BudgetItem.is_purchased == True,  # noqa: E712
                col(BudgetItem.actual_amount).is_not(None),
            )
            .group_by(BudgetItem.budget_id)
        )
        for budget_id, total in self.session.exec(statement).all():
            spent[budget_id] = int(total or 0)
        return spent

    def _item_counts(self, budget_ids: List[str]) -> Dict[str, int]:
        if not budget_ids:
            return {}
        statement = (
            select(BudgetItem.budget_id, func.count())
            .where(col(BudgetItem.budget_id).in_(budget_ids))
            .group_by(BudgetItem.budget_id)
        )
        return dict(self.session.exec(statement).all())

    def list_wallet_budgets(self, wallet_id: str) -> List[dict]:
        """Active budgets of a wallet with their spending figures, newest first."""
        statement = (
            select(Budget)
            .where(Budget.wallet_id == wallet_id, Budget.is_active == True)  # noqa: E712
            .order_by(col(Budget.created_at).desc())
        )
        budgets = self.session.exec(statement).all()
        spent = self.spent_by_budget([budget.id for budget in budgets])
        return [budget.to_dict(spent=spent[budget.id]) for budget in budgets]

    def list_user_budgets(self, user_id: str) -> List[dict]:
        """
        Active budgets across every wallet the user belongs to.

        Returns:
            Budget dictionaries enriched with category, wallet, spent and item count
        """
        statement = (
            select(Budget, Wallet, Category)
            .join(Wallet, col(Wallet.id) == Budget.wallet_id)
            .join(WalletMember, col(WalletMember.wallet_id) == Wallet.id)
            .join(Category, col(Category.id) == Budget.category_id, isouter=True)
            .where(WalletMember.user_id == user_id, Budget.is_active == True)  # noqa: E712
            .order_by(col(Budget.created_at).desc())
        )
        rows = self.session.exec(statement).all()
        budget_ids = [budget.id for budget, _, _ in rows]
        spent = self.spent_by_budget(budget_ids)
        item_counts = self._item_counts(budget_ids)

        results = []
        for budget, wallet, category in rows:
            data = budget.to_dict(spent=spent[budget.id])
            data["wallet"] = wallet.to_summary_dict()
            data["category"] = category.to_dict() if category else None
            data["item_count"] = item_counts.get(budget.id, 0)
            results.append(data)
        return results

    def get_budget_detail(self, budget: Budget) -> dict:
        """A budget with its items and planned/actual totals."""
        items = self.list_items(budget.id)
        spent = self.spent_by_budget([budget.id])[budget.id]
        data = budget.to_dict(spent=spent)
        data["items"] = [item.to_dict() for item in items]
        data["planned_total"] = sum(item.planned_amount for item in items) / 100
        data["item_count"] = len(items)
        data["purchased_count"] = sum(1 for item in items if item.is_purchased)
        return data

    def create_budget(self, wallet_id: str, created_by: str, **fields) -> Budget:
        budget = Budget(wallet_id=wallet_id, created_by=created_by, **fields)
        self.session.add(budget)
        self.session.commit()
        self.session.refresh(budget)
        return budget

    def update_budget(self, budget: Budget, changes: dict) -> Budget:
        for key, value in changes.items():
            setattr(budget, key, value)
        budget.updated_at = datetime.now()
        self.session.add(budget)
        self.session.commit()
        self.session.refresh(budget)
        return budget

    def delete_budget(self, budget: Budget):
        """Delete a budget together with its items."""
        self.session.execute(delete(BudgetItem).where(col(BudgetItem.budget_id) == budget.id))
        self.session.delete(budget)
        self.session.commit()

    def list_items(self, budget_id: str) -> List[BudgetItem]:
        statement = (
            select(BudgetItem)
            .where(BudgetItem.budget_id == budget_id)
            .order_by(col(BudgetItem.created_at))
        )
        return list(self.session.exec(statement).all())

    def create_item(self, budget_id: str, **fields) -> BudgetItem:
        """
        Add a planned item to a budget.

        When no planned amount is given it is computed from the planned
        quantity and unit price.

        Raises:
            ValueError: If the planned amount cannot be determined
        """
        if fields.get("planned_amount") is None:
            quantity = fields.get("planned_quantity")
            unit_price = fields.get("planned_unit_price")
            if quantity is None or unit_price is None:
                raise ValueError(
                    "planned_amount is required when quantity and unit price are not both given"
                )
            fields["planned_amount"] = line_total_cents(quantity, unit_price)

        item = BudgetItem(budget_id=budget_id, **fields)
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def update_item(self, item: BudgetItem, changes: dict) -> BudgetItem:
        for key, value in changes.items():
            setattr(item, key, value)
        item.updated_at = datetime.now()
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def record_purchase(
        self,
        item: BudgetItem,
        actual_quantity: float,
        actual_unit_price: int,
        actual_amount: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> BudgetItem:
        """
        Record what was actually bought for a planned item.

        Args:
            item: The budget item
            actual_quantity: Quantity bought
            actual_unit_price: Price per unit in cents
            actual_amount: Total paid in cents; computed from quantity and unit price when omitted
            notes: Optional free text

        Returns:
            The updated item, marked as purchased
        """
        if actual_amount is None:
            actual_amount = line_total_cents(actual_quantity, actual_unit_price)

        item.actual_quantity = actual_quantity
        item.actual_unit_price = actual_unit_price
        item.actual_amount = actual_amount
        item.is_purchased = True
        item.purchase_date = datetime.now()
        if notes is not None:
            item.notes = notes
        item.updated_at = datetime.now()

        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def delete_item(self, item: BudgetItem):
        self.session.delete(item)
        self.session.commit()
