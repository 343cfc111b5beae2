"""
Category repository.
"""

import logging
from typing import List, Optional

from sqlmodel import Session, col, or_, select

from constants import DEFAULT_EXPENSE_CATEGORIES, DEFAULT_INCOME_CATEGORIES, TransactionType
from models import Budget, Category, Transaction

logger = logging.getLogger(__name__)


class CategoryRepository:
    """Repository class for category database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.session.get(Category, category_id)

    def get_visible_category(self, category_id: str, user_id: str) -> Optional[Category]:
        """A category the user may use: a default or one they created."""
        category = self.get_category(category_id)
        if category is None:
            return None
        if not category.is_default and category.created_by != user_id:
            return None
        return category

    def list_categories(self, user_id: str, type: Optional[str] = None) -> List[Category]:
        """
        Get the default categories plus the user's own, ordered by name.

        Args:
            user_id: The requesting user
            type: Optional 'income' or 'expense' filter
        """
        statement = select(Category).where(
            or_(Category.is_default == True, Category.created_by == user_id)  # noqa: E712
        )
        if type:
            statement = statement.where(Category.type == type)
        statement = statement.order_by(col(Category.name))
        return list(self.session.exec(statement).all())

    def create_category(self, user_id: str, **fields) -> Category:
        category = Category(created_by=user_id, is_default=False, **fields)
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        return category

    def update_category(self, category: Category, changes: dict) -> Category:
        for key, value in changes.items():
            setattr(category, key, value)
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        return category

    def delete_category(self, category: Category):
        """
        Raises:
            ValueError: If transactions, budgets or subcategories still reference the category
        """
        references = [
            select(Transaction.id).where(Transaction.category_id == category.id),
            select(Budget.id).where(Budget.category_id == category.id),
            select(Category.id).where(Category.parent_id == category.id),
        ]
        if any(self.session.exec(statement).first() for statement in references):
            raise ValueError("Category is in use and cannot be deleted")

        self.session.delete(category)
        self.session.commit()

    def seed_default_categories(self) -> int:
        """
        Insert the default income and expense categories if none exist yet.

        Returns:
            Number of categories created (0 when already seeded)
        """
        existing = self.session.exec(
            select(Category).where(Category.is_default == True)  # noqa: E712
        ).first()
        if existing is not None:
            return 0

        defaults = [
            (TransactionType.INCOME.value, DEFAULT_INCOME_CATEGORIES),
            (TransactionType.EXPENSE.value, DEFAULT_EXPENSE_CATEGORIES),
        ]
        created = 0
        for category_type, entries in defaults:
            for name, icon, color in entries:
                self.session.add(
                    Category(name=name, type=category_type, icon=icon, color=color, is_default=True)
                )
                created += 1
        self.session.commit()
        logger.info("Seeded %d default categories", created)
        return created
