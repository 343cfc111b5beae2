"""
SQLModel models for the household finance application.
"""

from .user_model import User, UserPreferences
from .wallet_model import Wallet, WalletInvitation, WalletMember
from .category_model import Category
from .transaction_model import Transaction
from .budget_model import Budget, BudgetItem
from .goal_model import Goal
from .notification_model import Alert, Notification
from .report_model import Report

__all__ = [
    "Alert",
    "Budget",
    "BudgetItem",
    "Category",
    "Goal",
    "Notification",
    "Report",
    "Transaction",
    "User",
    "UserPreferences",
    "Wallet",
    "WalletInvitation",
    "WalletMember",
]
