"""
User, preferences and account reset repository.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlmodel import Session, col, select

from auth_service import hash_password, verify_password
from models import Alert, Category, Goal, Notification, Report, User, UserPreferences, Wallet
from repositories.wallet_repository import delete_wallet_rows


class UserRepository:
    """Repository class for user database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email.lower())).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.username == username)).first()

    def create_user(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """
        Register a user with a hashed password.

        Raises:
            ValueError: If the email or username is already taken
        """
        if self.get_user_by_email(email):
            raise ValueError("User already exists with this email")
        if username and self.get_user_by_username(username):
            raise ValueError("Username already taken")

        user = User(
            email=email.lower(),
            username=username,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, or None."""
        user = self.get_user_by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def update_profile(self, user: User, changes: dict) -> User:
        """
        Update name and email fields.

        Raises:
            ValueError: If the new email belongs to another user
        """
        if changes.get("email"):
            changes["email"] = changes["email"].lower()
            other = self.get_user_by_email(changes["email"])
            if other is not None and other.id != user.id:
                raise ValueError("Email is already in use")

        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = datetime.now()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        statement = select(UserPreferences).where(UserPreferences.user_id == user_id)
        return self.session.exec(statement).first()

    def get_preferences_dict(self, user_id: str) -> dict:
        """Stored preferences, or the defaults when the user has saved none."""
        preferences = self.get_preferences(user_id)
        if preferences is None:
            return UserPreferences.defaults_for(user_id)
        return preferences.to_dict()

    def upsert_preferences(self, user_id: str, changes: dict) -> UserPreferences:
        """Create or update a user's preferences. JSON settings are merged key by key."""
        preferences = self.get_preferences(user_id)
        if preferences is None:
            preferences = UserPreferences(user_id=user_id)

        current = preferences.to_dict()
        for key, value in changes.items():
            if isinstance(value, dict) and isinstance(current.get(key), dict):
                value = {**current[key], **value}
            setattr(preferences, key, value)
        preferences.updated_at = datetime.now()

        self.session.add(preferences)
        self.session.commit()
        self.session.refresh(preferences)
        return preferences

    def reset_user_data(self, user: User) -> datetime:
        """
        Delete all financial data owned by a user in a single commit.

        Wallets the user created are removed with their budgets, items,
        transactions, invitations and members. Goals, notifications, alerts,
        reports, preferences and custom categories go too. The account itself
        is kept.

        Returns:
            Time of the reset
        """
        wallet_ids = list(
            self.session.exec(select(Wallet.id).where(Wallet.created_by == user.id)).all()
        )
        delete_wallet_rows(self.session, wallet_ids)

        for model in (Goal, Notification, Alert, Report, UserPreferences):
            self.session.execute(delete(model).where(col(model.user_id) == user.id))
        self.session.execute(
            delete(Category).where(
                col(Category.created_by) == user.id,
                Category.is_default == False,  # noqa: E712
            )
        )
        self.session.commit()
        return datetime.now()
