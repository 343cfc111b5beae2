"""
Repository package for database operations.
"""

from .user_repository import UserRepository
from .wallet_repository import WalletRepository
from .invitation_repository import InvitationRepository
from .category_repository import CategoryRepository
from .transaction_repository import TransactionRepository
from .budget_repository import BudgetRepository
from .goal_repository import GoalRepository
from .notification_repository import AlertRepository, NotificationRepository
from .report_repository import ReportRepository

__all__ = [
    "AlertRepository",
    "BudgetRepository",
    "CategoryRepository",
    "GoalRepository",
    "InvitationRepository",
    "NotificationRepository",
    "ReportRepository",
    "TransactionRepository",
    "UserRepository",
    "WalletRepository",
]
