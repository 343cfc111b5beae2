"""
Transaction repository for database operations.

Inserting, updating or deleting a transaction adjusts the wallet balance in
the same database transaction as the row change.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func, update
from sqlmodel import Session, col, select

from constants import TransactionType
from models import Category, Transaction, User, Wallet


class TransactionRepository:
    """Repository class for transaction database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.session.get(Transaction, transaction_id)

    def _apply_balance(self, wallet_id: str, delta: int):
        """Shift a wallet balance by ``delta`` cents in SQL, without committing."""
        if not delta:
            return
        self.session.execute(
            update(Wallet)
            .where(col(Wallet.id) == wallet_id)
            .values(balance=col(Wallet.balance) + delta, updated_at=datetime.now())
        )

    def insert_transaction(
        self,
        wallet_id: str,
        category_id: str,
        created_by: str,
        amount: int,
        type: str,
        date: Optional[datetime] = None,
        **fields,
    ) -> Transaction:
        """
        Insert a new transaction and update the wallet balance.

        Args:
            wallet_id: Wallet the transaction belongs to
            category_id: Category of the transaction
            created_by: User recording it
            amount: Amount in cents, always positive
            type: Transaction type ('expense' or 'income')
            date: Transaction date (defaults to current time if not provided)
            **fields: Optional columns (description, tags, location, ...)

        Returns:
            The created Transaction instance
        """
        if amount <= 0:
            raise ValueError("Amount must be greater than zero")

        # Use current time if date not provided
        if date is None:
            date = datetime.now()

        transaction = Transaction(
            wallet_id=wallet_id,
            category_id=category_id,
            created_by=created_by,
            amount=amount,
            type=type,
            date=date,
            **fields,
        )
        self.session.add(transaction)
        self._apply_balance(wallet_id, transaction.signed_amount)
        self.session.commit()
        self.session.refresh(transaction)
        return transaction

    def update_transaction(self, transaction: Transaction, changes: dict) -> Transaction:
        """Apply changes and move the wallet balance by the difference in effect."""
        if "amount" in changes and changes["amount"] <= 0:
            raise ValueError("Amount must be greater than zero")

        previous_effect = transaction.signed_amount
        for key, value in changes.items():
            setattr(transaction, key, value)
        transaction.updated_at = datetime.now()

        self.session.add(transaction)
        self._apply_balance(transaction.wallet_id, transaction.signed_amount - previous_effect)
        self.session.commit()
        self.session.refresh(transaction)
        return transaction

    def delete_transaction(self, transaction: Transaction):
        """Delete a transaction and reverse its effect on the wallet balance."""
        self._apply_balance(transaction.wallet_id, -transaction.signed_amount)
        self.session.delete(transaction)
        self.session.commit()

    def _detail_statement(self):
        return (
            select(Transaction, Category, Wallet, User)
            .join(Category, col(Category.id) == Transaction.category_id)
            .join(Wallet, col(Wallet.id) == Transaction.wallet_id)
            .join(User, col(User.id) == Transaction.created_by)
        )

    @staticmethod
    def _to_detail(row) -> dict:
        transaction, category, wallet, creator = row
        data = transaction.to_dict()
        data["category"] = category.to_dict()
        data["wallet"] = wallet.to_summary_dict()
        data["creator"] = creator.to_public_dict()
        return data

    def get_transaction_detail(self, transaction_id: str) -> Optional[dict]:
        row = self.session.exec(
            self._detail_statement().where(Transaction.id == transaction_id)
        ).first()
        return self._to_detail(row) if row else None

    def list_wallet_transactions(
        self,
        wallet_id: str,
        limit: int = 50,
        offset: int = 0,
        days: Optional[int] = None,
    ) -> List[dict]:
        """
        Get a page of wallet transactions, newest first.

        Args:
            wallet_id: Wallet to list
            limit: Page size
            offset: Rows to skip
            days: Only include transactions dated within the last N days
        """
        statement = self._detail_statement().where(Transaction.wallet_id == wallet_id)
        if days:
            statement = statement.where(
                Transaction.date >= datetime.now() - timedelta(days=days)
            )
        statement = (
            statement.order_by(col(Transaction.date).desc(), col(Transaction.created_at).desc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_detail(row) for row in self.session.exec(statement).all()]

    def list_user_transactions(self, user_id: str, limit: int = 50, offset: int = 0) -> List[dict]:
        """Transactions recorded by a user across all wallets, newest first."""
        statement = (
            self._detail_statement()
            .where(Transaction.created_by == user_id)
            .order_by(col(Transaction.date).desc(), col(Transaction.created_at).desc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_detail(row) for row in self.session.exec(statement).all()]

    def summarize(
        self, wallet_ids: List[str], start: datetime, end: datetime
    ) -> Dict[str, int]:
        """
        Total income and expenses in cents for the given wallets and date range.

        Returns:
            Dictionary with income, expenses and count
        """
        totals = {"income": 0, "expenses": 0, "count": 0}
        if not wallet_ids:
            return totals

        statement = (
            select(Transaction.type, func.coalesce(func.sum(Transaction.amount), 0), func.count())
            .where(
                col(Transaction.wallet_id).in_(wallet_ids),
                Transaction.date >= start,
                Transaction.date <= end,
            )
            .group_by(Transaction.type)
        )
        for tx_type, total, count in self.session.exec(statement).all():
            if tx_type == TransactionType.INCOME.value:
                totals["income"] += int(total)
            else:
                totals["expenses"] += int(total)
            totals["count"] += count
        return totals

    def category_totals(
        self,
        wallet_ids: List[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        type: str = TransactionType.EXPENSE.value,
    ) -> List[dict]:
        """Per-category totals in cents, largest first."""
        if not wallet_ids:
            return []

        total = func.sum(Transaction.amount)
        statement = (
            select(Category, total, func.count())
            .select_from(Transaction)
            .join(Category, col(Category.id) == Transaction.category_id)
            .where(col(Transaction.wallet_id).in_(wallet_ids), Transaction.type == type)
        )
        if start is not None:
            statement = statement.where(Transaction.date >= start)
        if end is not None:
            statement = statement.where(Transaction.date <= end)
        statement = statement.group_by(Category.id).order_by(total.desc())

        return [
            {"category": category, "total": int(amount), "count": count}
            for category, amount, count in self.session.exec(statement).all()
        ]

    def list_rows(
        self,
        wallet_ids: List[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """
        Flat transaction rows for analytics, newest first.

        Each row carries the category name, amount in dollars, type and date.
        """
        if not wallet_ids:
            return []

        statement = (
            select(Transaction, Category)
            .join(Category, col(Category.id) == Transaction.category_id)
            .where(col(Transaction.wallet_id).in_(wallet_ids))
        )
        if start is not None:
            statement = statement.where(Transaction.date >= start)
        if end is not None:
            statement = statement.where(Transaction.date <= end)
        if type is not None:
            statement = statement.where(Transaction.type == type)
        statement = statement.order_by(col(Transaction.date).desc())
        if limit is not None:
            statement = statement.limit(limit)

        return [
            {
                "id": transaction.id,
                "wallet_id": transaction.wallet_id,
                "category_id": category.id,
                "category": category.name,
                "amount": transaction.amount / 100,
                "type": transaction.type,
                "date": transaction.date,
                "description": transaction.description,
            }
            for transaction, category in self.session.exec(statement).all()
        ]
