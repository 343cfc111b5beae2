"""
API routes package.
"""

from .auth_routes import auth_router
from .user_routes import router as user_router
from .wallet_routes import router as wallet_router
from .invitation_routes import router as invitation_router
from .category_routes import router as category_router
from .transaction_routes import router as transaction_router
from .budget_routes import router as budget_router, item_router as budget_item_router
from .goal_routes import router as goal_router
from .notification_routes import router as notification_router
from .alert_routes import router as alert_router
from .report_routes import router as report_router
from .ai_routes import router as ai_router

__all__ = [
    "ai_router",
    "alert_router",
    "auth_router",
    "budget_item_router",
    "budget_router",
    "category_router",
    "goal_router",
    "invitation_router",
    "notification_router",
    "report_router",
    "transaction_router",
    "user_router",
    "wallet_router",
]
