"""
Transaction routes for the financial API.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from auth_service import get_current_user
from constants import TransactionType
from models import User
from permissions import DELETE_TRANSACTION, VIEW_WALLET, WRITE_TRANSACTION, require_wallet_role
from repositories import AlertRepository, CategoryRepository, TransactionRepository
from sqlalchemy_db import get_db_session
from utils import to_naive, validate_amount

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/transactions", tags=["transactions"])


# Pydantic models
class TransactionCreateRequest(BaseModel):
    wallet_id: str
    category_id: str
    type: TransactionType
    amount: Decimal = Field(gt=0)
    description: Optional[str] = None
    date: Optional[datetime] = None
    receipt_url: Optional[str] = None
    tags: Optional[List[str]] = None
    location: Optional[str] = None
    is_recurring: bool = False
    recurring_pattern: Optional[dict] = None


class TransactionUpdateRequest(BaseModel):
    category_id: Optional[str] = None
    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None
    date: Optional[datetime] = None
    receipt_url: Optional[str] = None
    tags: Optional[List[str]] = None
    location: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[dict] = None


def _check_category(session: Session, category_id: str, user: User):
    if CategoryRepository(session).get_visible_category(category_id, user.id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")


def _evaluate_alerts(session: Session, wallet_id: str):
    """Run spending alerts after an expense; failures are logged, not raised."""
    try:
        AlertRepository(session).evaluate_spending_alerts(wallet_id)
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Spending alert evaluation failed for wallet %s: %s", wallet_id, e)


@router.get("")
def list_my_transactions(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Transactions recorded by the current user across all wallets."""
    return TransactionRepository(session).list_user_transactions(
        current_user.id, limit=limit, offset=offset
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_transaction(
    request: TransactionCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Create a new transaction and update the wallet balance.

    Args:
        request: Wallet, category, type, amount in dollars and optional details

    Returns:
        The created transaction with its category, wallet and creator
    """
    require_wallet_role(session, request.wallet_id, current_user.id, WRITE_TRANSACTION)
    _check_category(session, request.category_id, current_user)

    try:
        amount_cents = validate_amount(request.amount)
        fields = request.model_dump(exclude={"wallet_id", "category_id", "type", "amount", "date"})
        repository = TransactionRepository(session)
        transaction = repository.insert_transaction(
            wallet_id=request.wallet_id,
            category_id=request.category_id,
            created_by=current_user.id,
            amount=amount_cents,
            type=request.type.value,
            date=to_naive(request.date),
            **fields,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if transaction.type == TransactionType.EXPENSE.value:
        _evaluate_alerts(session, transaction.wallet_id)

    return repository.get_transaction_detail(transaction.id)


@router.get("/{transaction_id}")
def get_transaction(
    transaction_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = TransactionRepository(session)
    transaction = repository.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    require_wallet_role(session, transaction.wallet_id, current_user.id, VIEW_WALLET)
    return repository.get_transaction_detail(transaction_id)


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: str,
    request: TransactionUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Update a transaction. Amount or type changes are reflected in the wallet balance.
    """
    repository = TransactionRepository(session)
    transaction = repository.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    require_wallet_role(session, transaction.wallet_id, current_user.id, WRITE_TRANSACTION)

    changes = request.model_dump(exclude_unset=True)
    if changes.get("category_id"):
        _check_category(session, changes["category_id"], current_user)

    try:
        for key in ("category_id", "type", "amount"):
            if key in changes and changes[key] is None:
                raise ValueError(f"{key} cannot be null")
        if "amount" in changes:
            changes["amount"] = validate_amount(changes["amount"])
        if "type" in changes:
            changes["type"] = TransactionType(changes["type"]).value
        if "date" in changes:
            changes["date"] = to_naive(changes["date"]) or transaction.date
        repository.update_transaction(transaction, changes)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return repository.get_transaction_detail(transaction_id)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Delete a transaction and reverse its effect on the wallet balance."""
    repository = TransactionRepository(session)
    transaction = repository.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    require_wallet_role(session, transaction.wallet_id, current_user.id, DELETE_TRANSACTION)

    repository.delete_transaction(transaction)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
