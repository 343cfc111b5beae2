"""
Savings goal routes.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from auth_service import get_current_user
from constants import GoalPriority
from models import Goal, User
from permissions import VIEW_WALLET, require_wallet_role
from repositories import GoalRepository
from sqlalchemy_db import get_db_session
from utils import to_naive, validate_amount

router = APIRouter(prefix="/api/goals", tags=["goals"])


class GoalCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    target_amount: Decimal = Field(gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    target_date: Optional[datetime] = None
    category: Optional[str] = None
    priority: GoalPriority = GoalPriority.MEDIUM
    wallet_id: Optional[str] = None


class GoalUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    target_amount: Optional[Decimal] = Field(default=None, gt=0)
    target_date: Optional[datetime] = None
    category: Optional[str] = None
    priority: Optional[GoalPriority] = None
    wallet_id: Optional[str] = None
    is_active: Optional[bool] = None


class ContributionRequest(BaseModel):
    amount: Optional[Decimal] = None


def _to_columns(data: dict, session: Session, user: User) -> dict:
    for key in ("target_amount", "current_amount"):
        if data.get(key) is not None:
            data[key] = validate_amount(data[key], allow_zero=key == "current_amount")
    if data.get("priority") is not None:
        data["priority"] = data["priority"].value
    if "target_date" in data:
        data["target_date"] = to_naive(data["target_date"])
    if data.get("wallet_id"):
        require_wallet_role(session, data["wallet_id"], user.id, VIEW_WALLET)
    return data


def _get_goal(goal_id: str, user: User, repository: GoalRepository) -> Goal:
    goal = repository.get_user_goal(goal_id, user.id)
    if goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal


@router.get("")
def list_goals(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return [goal.to_dict() for goal in GoalRepository(session).list_goals(current_user.id)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_goal(
    request: GoalCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Create a savings goal and notify the user.

    Args:
        request: Name, target amount in dollars and optional details

    Returns:
        The created goal
    """
    try:
        fields = _to_columns(request.model_dump(), session, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return GoalRepository(session).create_goal(current_user.id, **fields).to_dict()


@router.get("/{goal_id}")
def get_goal(
    goal_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return _get_goal(goal_id, current_user, GoalRepository(session)).to_dict()


def _update(goal_id: str, request: GoalUpdateRequest, user: User, session: Session) -> dict:
    repository = GoalRepository(session)
    goal = _get_goal(goal_id, user, repository)
    changes = request.model_dump(exclude_unset=True)
    try:
        for key in ("name", "target_amount", "priority", "is_active"):
            if key in changes and changes[key] is None:
                raise ValueError(f"{key} cannot be null")
        changes = _to_columns(changes, session, user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return repository.update_goal(goal, changes).to_dict()


@router.put("/{goal_id}")
def replace_goal(
    goal_id: str,
    request: GoalUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return _update(goal_id, request, current_user, session)


@router.patch("/{goal_id}")
def update_goal(
    goal_id: str,
    request: GoalUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return _update(goal_id, request, current_user, session)


@router.delete("/{goal_id}")
def delete_goal(
    goal_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = GoalRepository(session)
    repository.delete_goal(_get_goal(goal_id, current_user, repository))
    return {"message": "Goal deleted successfully"}


@router.post("/{goal_id}/contribute")
def contribute_to_goal(
    goal_id: str,
    request: ContributionRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Add money to a goal. Reaching the target marks the goal achieved.

    Args:
        request: Contribution amount in dollars, must be positive

    Returns:
        The updated goal
    """
    repository = GoalRepository(session)
    goal = _get_goal(goal_id, current_user, repository)

    if request.amount is None or request.amount <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid contribution amount"
        )
    try:
        goal = repository.contribute(goal, validate_amount(request.amount))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return goal.to_dict()
