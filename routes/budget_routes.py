"""
Budget and budget item routes.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from analytics import FinanceAnalyzer
from auth_service import get_current_user
from constants import BudgetPeriod, BudgetType, TransactionType
from models import Budget, BudgetItem, User
from permissions import (
    DELETE_BUDGET_ITEM,
    MANAGE_BUDGETS,
    VIEW_WALLET,
    WRITE_BUDGET_ITEM,
    require_wallet_role,
)
from repositories import BudgetRepository, CategoryRepository, TransactionRepository
from sqlalchemy_db import get_db_session
from utils import to_naive, validate_amount

router = APIRouter(prefix="/api/budgets", tags=["budgets"])
item_router = APIRouter(prefix="/api/budget-items", tags=["budgets"])

analyzer = FinanceAnalyzer()

SUGGESTION_WINDOW_DAYS = 90
SUGGESTION_MAX_TRANSACTIONS = 100


class BudgetCreateRequest(BaseModel):
    wallet_id: str
    category_id: Optional[str] = None
    name: str = Field(default="Budget", min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Decimal = Field(gt=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    budget_type: BudgetType = BudgetType.CATEGORY
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BudgetUpdateRequest(BaseModel):
    category_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    period: Optional[BudgetPeriod] = None
    budget_type: Optional[BudgetType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class SuggestionRequest(BaseModel):
    wallet_id: str


class BudgetItemCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    unit: Optional[str] = None
    planned_quantity: Optional[float] = Field(default=None, gt=0)
    planned_unit_price: Optional[Decimal] = Field(default=None, ge=0)
    planned_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class BudgetItemUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    unit: Optional[str] = None
    planned_quantity: Optional[float] = Field(default=None, gt=0)
    planned_unit_price: Optional[Decimal] = Field(default=None, ge=0)
    planned_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class PurchaseRequest(BaseModel):
    actual_quantity: float = Field(gt=0)
    actual_unit_price: Decimal = Field(ge=0)
    actual_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


MONEY_FIELDS = ("amount", "planned_unit_price", "planned_amount")


def _to_columns(data: dict) -> dict:
    """Convert dollar amounts to cents, enums to values and dates to naive local time."""
    for key in MONEY_FIELDS:
        if data.get(key) is not None:
            data[key] = validate_amount(data[key], allow_zero=key != "amount")
    for key in ("period", "budget_type"):
        if data.get(key) is not None:
            data[key] = data[key].value
    for key in ("start_date", "end_date"):
        if key in data:
            data[key] = to_naive(data[key])
    return data


def _check_dates(start: Optional[datetime], end: Optional[datetime]):
    if start is not None and end is not None and end < start:
        raise ValueError("end_date must be after start_date")


def _check_category(session: Session, category_id: Optional[str], user: User):
    if category_id and CategoryRepository(session).get_visible_category(category_id, user.id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")


def _load_budget(session: Session, budget_id: str, user: User, action: str) -> Budget:
    budget = BudgetRepository(session).get_budget(budget_id)
    if budget is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    require_wallet_role(session, budget.wallet_id, user.id, action)
    return budget


def _load_item(session: Session, item_id: str, user: User, action: str) -> BudgetItem:
    repository = BudgetRepository(session)
    item = repository.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget item not found")
    budget = repository.get_budget(item.budget_id)
    require_wallet_role(session, budget.wallet_id, user.id, action)
    return item


@router.get("")
def list_budgets(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Active budgets across the current user's wallets, with spending figures."""
    return BudgetRepository(session).list_user_budgets(current_user.id)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_budget(
    request: BudgetCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Create a budget for a wallet.

    Args:
        request: Wallet, optional category, limit in dollars, period and dates

    Returns:
        The created budget
    """
    require_wallet_role(session, request.wallet_id, current_user.id, MANAGE_BUDGETS)
    _check_category(session, request.category_id, current_user)

    try:
        fields = _to_columns(request.model_dump(exclude={"wallet_id"}, exclude_none=True))
        _check_dates(fields.get("start_date"), fields.get("end_date"))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    budget = BudgetRepository(session).create_budget(
        request.wallet_id, created_by=current_user.id, **fields
    )
    return budget.to_dict(spent=0)


@router.post("/ai-suggestions")
def suggest_budgets(
    request: SuggestionRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Suggest monthly budgets per category from the last 90 days of expenses.

    Returns:
        Suggestions with the monthly average, suggested amount and reasoning
    """
    require_wallet_role(session, request.wallet_id, current_user.id, VIEW_WALLET)
    rows = TransactionRepository(session).list_rows(
        [request.wallet_id],
        start=datetime.now() - timedelta(days=SUGGESTION_WINDOW_DAYS),
        type=TransactionType.EXPENSE.value,
        limit=SUGGESTION_MAX_TRANSACTIONS,
    )
    return {
        "wallet_id": request.wallet_id,
        "analyzed_transactions": len(rows),
        "suggestions": analyzer.suggest_budgets(rows, months=SUGGESTION_WINDOW_DAYS // 30),
    }


@router.get("/health-check")
def budget_health_check(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Score the current user's active budgets; each exceeded budget costs 20 points."""
    budgets = BudgetRepository(session).list_user_budgets(current_user.id)
    return analyzer.budget_health(budgets)


@router.get("/{budget_id}")
def get_budget(
    budget_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    budget = _load_budget(session, budget_id, current_user, VIEW_WALLET)
    return BudgetRepository(session).get_budget_detail(budget)


@router.put("/{budget_id}")
def update_budget(
    budget_id: str,
    request: BudgetUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    budget = _load_budget(session, budget_id, current_user, MANAGE_BUDGETS)
    changes = request.model_dump(exclude_unset=True)
    _check_category(session, changes.get("category_id"), current_user)

    try:
        for key in ("name", "amount", "period", "budget_type", "start_date", "is_active"):
            if key in changes and changes[key] is None:
                raise ValueError(f"{key} cannot be null")
        changes = _to_columns(changes)
        _check_dates(
            changes.get("start_date", budget.start_date),
            changes.get("end_date", budget.end_date),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    repository = BudgetRepository(session)
    budget = repository.update_budget(budget, changes)
    return budget.to_dict(spent=repository.spent_by_budget([budget.id])[budget.id])


@router.delete("/{budget_id}")
def delete_budget(
    budget_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Delete a budget and its items."""
    budget = _load_budget(session, budget_id, current_user, MANAGE_BUDGETS)
    BudgetRepository(session).delete_budget(budget)
    return {"message": "Budget deleted successfully"}


# Budget items


@router.get("/{budget_id}/items")
def list_budget_items(
    budget_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    _load_budget(session, budget_id, current_user, VIEW_WALLET)
    return [item.to_dict() for item in BudgetRepository(session).list_items(budget_id)]


@router.post("/{budget_id}/items", status_code=status.HTTP_201_CREATED)
def create_budget_item(
    budget_id: str,
    request: BudgetItemCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Add a planned item to a budget.

    The planned amount defaults to planned quantity times planned unit price.
    """
    _load_budget(session, budget_id, current_user, WRITE_BUDGET_ITEM)
    try:
        fields = _to_columns(request.model_dump(exclude_none=True))
        item = BudgetRepository(session).create_item(budget_id, **fields)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return item.to_dict()


@item_router.put("/{item_id}")
def update_budget_item(
    item_id: str,
    request: BudgetItemUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    item = _load_item(session, item_id, current_user, WRITE_BUDGET_ITEM)
    changes = request.model_dump(exclude_unset=True)
    try:
        if "name" in changes and changes["name"] is None:
            raise ValueError("name cannot be null")
        if "planned_amount" in changes and changes["planned_amount"] is None:
            raise ValueError("planned_amount cannot be null")
        changes = _to_columns(changes)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return BudgetRepository(session).update_item(item, changes).to_dict()


@item_router.put("/{item_id}/purchase")
def record_purchase(
    item_id: str,
    request: PurchaseRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Record what was actually bought for a planned item.

    Args:
        request: Actual quantity and unit price; actual amount defaults to their product

    Returns:
        The item marked as purchased, with its variance against the plan
    """
    item = _load_item(session, item_id, current_user, WRITE_BUDGET_ITEM)
    try:
        unit_price = validate_amount(request.actual_unit_price, allow_zero=True)
        actual_amount = (
            validate_amount(request.actual_amount, allow_zero=True)
            if request.actual_amount is not None
            else None
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    item = BudgetRepository(session).record_purchase(
        item,
        actual_quantity=request.actual_quantity,
        actual_unit_price=unit_price,
        actual_amount=actual_amount,
        notes=request.notes,
    )
    return item.to_dict()


@item_router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget_item(
    item_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    item = _load_item(session, item_id, current_user, DELETE_BUDGET_ITEM)
    BudgetRepository(session).delete_item(item)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
