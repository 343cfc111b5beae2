"""
Notification and alert repository.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlmodel import Session, col, or_, select

from constants import (
    DEFAULT_ALERT_PERIOD_DAYS,
    AlertType,
    NotificationPriority,
    NotificationType,
    TransactionType,
)
from models import Alert, Notification, Transaction, WalletMember
from utils import dollars_to_cents, format_currency

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Repository class for user notifications."""

    def __init__(self, session: Session):
        self.session = session

    def create_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[dict] = None,
        priority: str = NotificationPriority.NORMAL.value,
        action_url: Optional[str] = None,
        commit: bool = True,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            data=data,
            priority=priority,
            action_url=action_url,
        )
        self.session.add(notification)
        if commit:
            self.session.commit()
            self.session.refresh(notification)
        return notification

    def get_user_notification(self, notification_id: str, user_id: str) -> Optional[Notification]:
        notification = self.session.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            return None
        return notification

    def list_notifications(
        self, user_id: str, page: int = 1, limit: int = 20, unread_only: bool = False
    ) -> Tuple[List[Notification], int]:
        """
        Get a page of a user's notifications, newest first.

        Returns:
            The page of notifications and the total matching count
        """
        conditions = [Notification.user_id == user_id]
        if unread_only:
            conditions.append(Notification.is_read == False)  # noqa: E712

        total = self.session.exec(
            select(func.count()).select_from(Notification).where(*conditions)
        ).one()
        statement = (
            select(Notification)
            .where(*conditions)
            .order_by(col(Notification.created_at).desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(self.session.exec(statement).all()), total

    def unread_count(self, user_id: str) -> int:
        return self.session.exec(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        ).one()

    def mark_read(self, notification: Notification) -> Notification:
        notification.is_read = True
        self.session.add(notification)
        self.session.commit()
        self.session.refresh(notification)
        return notification

    def mark_many_read(self, user_id: str, notification_ids: List[str]) -> int:
        """Mark the given notifications of a user as read; other users' ids are ignored."""
        if not notification_ids:
            return 0
        result = self.session.execute(
            update(Notification)
            .where(
                col(Notification.user_id) == user_id,
                col(Notification.id).in_(notification_ids),
            )
            .values(is_read=True)
        )
        self.session.commit()
        return result.rowcount

    def delete_notification(self, notification: Notification):
        self.session.delete(notification)
        self.session.commit()


class AlertRepository:
    """Repository class for user alert rules."""

    def __init__(self, session: Session):
        self.session = session

    def get_user_alert(self, alert_id: str, user_id: str) -> Optional[Alert]:
        alert = self.session.get(Alert, alert_id)
        if alert is None or alert.user_id != user_id:
            return None
        return alert

    def list_alerts(self, user_id: str) -> List[Alert]:
        statement = (
            select(Alert).where(Alert.user_id == user_id).order_by(col(Alert.created_at).desc())
        )
        return list(self.session.exec(statement).all())

    def create_alert(self, user_id: str, **fields) -> Alert:
        alert = Alert(user_id=user_id, **fields)
        self.session.add(alert)
        self.session.commit()
        self.session.refresh(alert)
        return alert

    def update_alert(self, alert: Alert, changes: dict) -> Alert:
        for key, value in changes.items():
            setattr(alert, key, value)
        alert.updated_at = datetime.now()
        self.session.add(alert)
        self.session.commit()
        self.session.refresh(alert)
        return alert

    def delete_alert(self, alert: Alert):
        self.session.delete(alert)
        self.session.commit()

    def _expenses_since(self, wallet_ids: List[str], since: datetime) -> int:
        statement = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            col(Transaction.wallet_id).in_(wallet_ids),
            Transaction.type == TransactionType.EXPENSE.value,
            Transaction.date >= since,
        )
        return int(self.session.exec(statement).one())

    def _member_wallets(self, wallet_id: str) -> Dict[str, List[str]]:
        """Map each member of ``wallet_id`` to every wallet they belong to."""
        member_ids = select(WalletMember.user_id).where(WalletMember.wallet_id == wallet_id)
        statement = select(WalletMember.user_id, WalletMember.wallet_id).where(
            col(WalletMember.user_id).in_(member_ids)
        )
        wallets = defaultdict(list)
        for user_id, member_wallet_id in self.session.exec(statement).all():
            wallets[user_id].append(member_wallet_id)
        return wallets

    def evaluate_spending_alerts(self, wallet_id: str) -> List[Alert]:
        """
        Fire active spending-limit alerts affected by a new expense in ``wallet_id``.

        An alert bound to a wallet watches that wallet; an unbound alert watches
        every wallet of its owner.

        Returns:
            Alerts that fired
        """
        member_wallet_ids = self._member_wallets(wallet_id)
        if not member_wallet_ids:
            return []

        statement = select(Alert).where(
            col(Alert.user_id).in_(list(member_wallet_ids)),
            Alert.type == AlertType.SPENDING_LIMIT.value,
            Alert.is_active == True,  # noqa: E712
            or_(Alert.wallet_id == wallet_id, col(Alert.wallet_id).is_(None)),
        )
        notifications = NotificationRepository(self.session)
        fired = []
        now = datetime.now()
        for alert in self.session.exec(statement).all():
            conditions = alert.conditions or {}
            if conditions.get("amount") is None:
                continue
            try:
                limit = dollars_to_cents(str(conditions["amount"]))
                period_days = int(conditions.get("period_days", DEFAULT_ALERT_PERIOD_DAYS))
                since = now - timedelta(days=period_days)
            except (TypeError, ValueError, ArithmeticError) as e:
                logger.warning("Skipping malformed alert %s: %s", alert.id, e)
                continue
            scope = [alert.wallet_id] if alert.wallet_id else member_wallet_ids[alert.user_id]
            spent = self._expenses_since(scope, since)
            if spent <= limit:
                continue

            alert.last_triggered = now
            self.session.add(alert)
            notifications.create_notification(
                user_id=alert.user_id,
                type=NotificationType.BUDGET_ALERT.value,
                title=f"Alert: {alert.name}",
                message=(
                    f"Spending of {format_currency(spent)} in the last {period_days} days "
                    f"exceeded your limit of {format_currency(limit)}."
                ),
                data={"alert_id": alert.id, "spent": spent / 100, "limit": limit / 100},
                priority=NotificationPriority.HIGH.value,
                commit=False,
            )
            fired.append(alert)

        if fired:
            self.session.commit()
            logger.info("Fired %d spending alert(s) for wallet %s", len(fired), wallet_id)
        return fired
