from enum import Enum


class WalletRole(str, Enum):
    OWNER = "owner"
    MANAGER = "manager"
    CONTRIBUTOR = "contributor"
    VIEWER = "viewer"


class WalletType(str, Enum):
    PERSONAL = "personal"
    SHARED = "shared"
    SAVINGS_GOAL = "savings_goal"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class BudgetType(str, Enum):
    CATEGORY = "category"
    DETAILED = "detailed"
    MIXED = "mixed"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class GoalPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NotificationType(str, Enum):
    GOAL_CREATED = "goal_created"
    GOAL_ACHIEVED = "goal_achieved"
    BUDGET_ALERT = "budget_alert"
    INVITATION = "invitation"
    SYSTEM = "system"


class NotificationPriority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class AlertType(str, Enum):
    SPENDING_LIMIT = "spending_limit"
    LOW_BALANCE = "low_balance"
    CUSTOM = "custom"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


INVITATION_TTL_DAYS = 7

DEFAULT_ALERT_PERIOD_DAYS = 30
MAX_ALERT_PERIOD_DAYS = 366

RESET_CONFIRMATION_TEXT = "delete-all-data"

# (name, icon, color)
DEFAULT_INCOME_CATEGORIES = [
    ("Salary", "briefcase", "#10B981"),
    ("Freelance", "laptop", "#059669"),
    ("Investment", "trending-up", "#047857"),
    ("Business", "building", "#065F46"),
    ("Other Income", "plus-circle", "#6B7280"),
]

DEFAULT_EXPENSE_CATEGORIES = [
    ("Food & Dining", "utensils", "#EF4444"),
    ("Transportation", "car", "#F97316"),
    ("Shopping", "shopping-bag", "#F59E0B"),
    ("Entertainment", "film", "#8B5CF6"),
    ("Bills & Utilities", "file-text", "#3B82F6"),
    ("Healthcare", "heart", "#EC4899"),
    ("Education", "book", "#06B6D4"),
    ("Travel", "plane", "#14B8A6"),
    ("Home & Garden", "home", "#84CC16"),
    ("Personal Care", "user", "#A855F7"),
    ("Other Expenses", "more-horizontal", "#6B7280"),
]

DEFAULT_PREFERENCES = {
    "currency": "USD",
    "timezone": "UTC",
    "language": "en",
    "theme": Theme.LIGHT.value,
    "date_format": "MM/DD/YYYY",
    "ai_preferences": {"categorization": True, "insights": True},
    "notification_preferences": {"email": True, "push": True},
    "privacy_settings": {"analytics": True, "data_sharing": False},
}
