"""
Savings goal repository.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from constants import NotificationPriority, NotificationType
from models import Goal
from repositories.notification_repository import NotificationRepository
from utils import format_currency

logger = logging.getLogger(__name__)


class GoalRepository:
    """Repository class for savings goals."""

    def __init__(self, session: Session):
        self.session = session
        self.notifications = NotificationRepository(session)

    def get_user_goal(self, goal_id: str, user_id: str) -> Optional[Goal]:
        """A goal owned by the user; goals of other users are treated as missing."""
        goal = self.session.get(Goal, goal_id)
        if goal is None or goal.user_id != user_id:
            return None
        return goal

    def list_goals(self, user_id: str) -> List[Goal]:
        statement = (
            select(Goal).where(Goal.user_id == user_id).order_by(col(Goal.created_at).desc())
        )
        return list(self.session.exec(statement).all())

    def _notify(self, goal: Goal, **fields):
        """Create a notification about a goal; failures are logged and do not propagate."""
        try:
            self.notifications.create_notification(user_id=goal.user_id, **fields)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning("Failed to create %s notification for goal %s: %s", fields.get("type"), goal.id, e)

    def create_goal(self, user_id: str, **fields) -> Goal:
        """
        Create a goal and notify its owner.

        Args:
            user_id: Owner of the goal
            **fields: Goal columns, amounts in cents

        Returns:
            The created Goal instance
        """
        goal = Goal(user_id=user_id, **fields)
        self.session.add(goal)
        self.session.commit()
        self.session.refresh(goal)

        self._notify(
            goal,
            type=NotificationType.GOAL_CREATED.value,
            title="New goal created",
            message=f"You created the goal '{goal.name}' with a target of {format_currency(goal.target_amount)}.",
            data={"goal_id": goal.id},
            action_url=f"/goals/{goal.id}",
        )
        if goal.current_amount >= goal.target_amount:
            return self._save_and_check_achievement(goal)
        return goal

    def update_goal(self, goal: Goal, changes: dict) -> Goal:
        for key, value in changes.items():
            setattr(goal, key, value)
        goal.updated_at = datetime.now()
        return self._save_and_check_achievement(goal)

    def delete_goal(self, goal: Goal):
        self.session.delete(goal)
        self.session.commit()

    def contribute(self, goal: Goal, amount: int) -> Goal:
        """
        Add a contribution to a goal.

        The first time the current amount reaches the target the goal is marked
        achieved, deactivated and a high-priority notification is sent.

        Args:
            goal: The goal to contribute to
            amount: Contribution in cents

        Raises:
            ValueError: If the amount is not positive
        """
        if amount <= 0:
            raise ValueError("Invalid contribution amount")

        goal.current_amount += amount
        goal.updated_at = datetime.now()
        return self._save_and_check_achievement(goal)

    def _save_and_check_achievement(self, goal: Goal) -> Goal:
        """Persist a goal, marking it achieved the first time it reaches its target."""
        just_achieved = not goal.is_achieved and goal.current_amount >= goal.target_amount
        if just_achieved:
            goal.achieved_at = datetime.now()
            goal.is_active = False

        self.session.add(goal)
        self.session.commit()
        self.session.refresh(goal)

        if just_achieved:
            self._notify(
                goal,
                type=NotificationType.GOAL_ACHIEVED.value,
                title="Goal achieved!",
                message=f"Congratulations! You reached your goal '{goal.name}'.",
                data={"goal_id": goal.id},
                priority=NotificationPriority.HIGH.value,
                action_url=f"/goals/{goal.id}",
            )
        return goal
