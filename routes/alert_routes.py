"""
Alert rule routes.
"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from auth_service import get_current_user
from constants import DEFAULT_ALERT_PERIOD_DAYS, MAX_ALERT_PERIOD_DAYS, AlertType
from models import User
from permissions import VIEW_WALLET, require_wallet_role
from repositories import AlertRepository
from sqlalchemy_db import get_db_session

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


class AlertCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: AlertType
    wallet_id: Optional[str] = None
    conditions: dict = Field(default_factory=dict)
    actions: dict = Field(default_factory=dict)
    is_active: bool = True


class AlertUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    wallet_id: Optional[str] = None
    conditions: Optional[dict] = None
    actions: Optional[dict] = None
    is_active: Optional[bool] = None


def _check_conditions(alert_type: str, conditions: Optional[dict]):
    """Spending limits need a positive numeric amount and an optional bounded period."""
    if alert_type != AlertType.SPENDING_LIMIT.value or conditions is None:
        return
    amount = conditions.get("amount")
    if (
        not isinstance(amount, (int, float))
        or isinstance(amount, bool)
        or amount <= 0
        or (isinstance(amount, float) and not math.isfinite(amount))
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Spending limit alerts require a positive 'amount' condition",
        )
    period_days = conditions.get("period_days", DEFAULT_ALERT_PERIOD_DAYS)
    if (
        not isinstance(period_days, int)
        or isinstance(period_days, bool)
        or not 1 <= period_days <= MAX_ALERT_PERIOD_DAYS
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"'period_days' must be a whole number between 1 and {MAX_ALERT_PERIOD_DAYS}",
        )


@router.get("")
def list_alerts(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return [alert.to_dict() for alert in AlertRepository(session).list_alerts(current_user.id)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_alert(
    request: AlertCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Create an alert rule.

    A ``spending_limit`` alert fires when expenses over ``conditions.period_days``
    (default 30) exceed ``conditions.amount`` dollars.
    """
    if request.wallet_id:
        require_wallet_role(session, request.wallet_id, current_user.id, VIEW_WALLET)
    _check_conditions(request.type.value, request.conditions)

    fields = request.model_dump()
    fields["type"] = request.type.value
    return AlertRepository(session).create_alert(current_user.id, **fields).to_dict()


@router.put("/{alert_id}")
def update_alert(
    alert_id: str,
    request: AlertUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = AlertRepository(session)
    alert = repository.get_user_alert(alert_id, current_user.id)
    if alert is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")

    changes = request.model_dump(exclude_unset=True)
    for key in ("name", "is_active"):
        if key in changes and changes[key] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} cannot be null"
            )
    if changes.get("wallet_id"):
        require_wallet_role(session, changes["wallet_id"], current_user.id, VIEW_WALLET)
    if "conditions" in changes:
        _check_conditions(alert.type, changes["conditions"])
    return repository.update_alert(alert, changes).to_dict()


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_alert(
    alert_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = AlertRepository(session)
    alert = repository.get_user_alert(alert_id, current_user.id)
    if alert is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
    repository.delete_alert(alert)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
