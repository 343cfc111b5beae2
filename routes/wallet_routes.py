"""
Wallet routes: wallets, members, invitations and per-wallet listings and analytics.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import Session

from auth_service import get_current_user
from constants import WalletRole, WalletType
from models import User
from permissions import (
    DELETE_WALLET,
    EDIT_WALLET,
    MANAGE_MEMBERS,
    VIEW_WALLET,
    require_wallet_role,
)
from repositories import (
    BudgetRepository,
    InvitationRepository,
    TransactionRepository,
    WalletRepository,
)
from sqlalchemy_db import get_db_session
from utils import cents_to_dollars_float, resolve_date_range, to_naive, validate_amount

router = APIRouter(prefix="/api/wallets", tags=["wallets"])


class WalletCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    type: WalletType = WalletType.PERSONAL
    currency: str = Field(default="USD", min_length=3, max_length=3)
    goal_amount: Optional[Decimal] = Field(default=None, ge=0)
    goal_date: Optional[datetime] = None


class WalletUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    type: Optional[WalletType] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    goal_amount: Optional[Decimal] = Field(default=None, ge=0)
    goal_date: Optional[datetime] = None
    is_archived: Optional[bool] = None


class RoleUpdateRequest(BaseModel):
    role: str


class InvitationCreateRequest(BaseModel):
    email: EmailStr
    role: WalletRole = WalletRole.VIEWER


def _wallet_fields(data: dict) -> dict:
    """Convert request values to column values."""
    for key in ("name", "type", "currency", "is_archived"):
        if key in data and data[key] is None:
            raise ValueError(f"{key} cannot be null")
    if data.get("type") is not None:
        data["type"] = WalletType(data["type"]).value
    if data.get("currency"):
        data["currency"] = data["currency"].upper()
    if "goal_amount" in data:
        goal_amount = data["goal_amount"]
        data["goal_amount"] = (
            validate_amount(goal_amount, allow_zero=True) if goal_amount is not None else None
        )
    if data.get("goal_date") is not None:
        data["goal_date"] = to_naive(data["goal_date"])
    return data


@router.get("")
def list_wallets(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Get the current user's wallets with members and counts, newest first."""
    return WalletRepository(session).list_user_wallets(current_user.id)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_wallet(
    request: WalletCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Create a wallet. The creator becomes its owner.

    Args:
        request: Wallet name, type, currency and optional savings goal

    Returns:
        The created wallet
    """
    try:
        fields = _wallet_fields(request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    wallet = WalletRepository(session).create_wallet(current_user.id, **fields)
    return wallet.to_dict()


@router.get("/{wallet_id}")
def get_wallet(
    wallet_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Get a wallet with its members. Only members may see it."""
    repository = WalletRepository(session)
    wallet = repository.get_wallet(wallet_id)
    if wallet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wallet not found")
    member = require_wallet_role(session, wallet_id, current_user.id, VIEW_WALLET)

    data = wallet.to_dict()
    data["members"] = repository.list_members(wallet_id)
    data["current_user_role"] = member.role
    return data


@router.put("/{wallet_id}")
def update_wallet(
    wallet_id: str,
    request: WalletUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = WalletRepository(session)
    wallet = repository.get_wallet(wallet_id)
    if wallet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wallet not found")
    require_wallet_role(session, wallet_id, current_user.id, EDIT_WALLET)

    try:
        changes = _wallet_fields(request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return repository.update_wallet(wallet, changes).to_dict()


@router.delete("/{wallet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_wallet(
    wallet_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Delete a wallet and everything in it. Owners only."""
    repository = WalletRepository(session)
    wallet = repository.get_wallet(wallet_id)
    if wallet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wallet not found")
    require_wallet_role(session, wallet_id, current_user.id, DELETE_WALLET)

    repository.delete_wallet(wallet)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Members


@router.get("/{wallet_id}/members")
def list_members(
    wallet_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    require_wallet_role(session, wallet_id, current_user.id, VIEW_WALLET)
    return WalletRepository(session).list_members(wallet_id)


@router.put("/{wallet_id}/members/{user_id}/role")
def update_member_role(
    wallet_id: str,
    user_id: str,
    request: RoleUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Change a member's role.

    Args:
        wallet_id: The wallet
        user_id: The member whose role changes
        request: New role, one of owner, manager, contributor, viewer

    Returns:
        The updated membership
    """
    acting = require_wallet_role(session, wallet_id, current_user.id, MANAGE_MEMBERS)
    try:
        member = WalletRepository(session).update_member_role(
            wallet_id, user_id, request.role, acting_role=acting.role
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return member.to_dict()


@router.delete("/{wallet_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    wallet_id: str,
    user_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    acting = require_wallet_role(session, wallet_id, current_user.id, MANAGE_MEMBERS)
    try:
        removed = WalletRepository(session).remove_member(
            wallet_id, user_id, acting_role=acting.role
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Invitations


@router.post("/{wallet_id}/invitations", status_code=status.HTTP_201_CREATED)
def create_invitation(
    wallet_id: str,
    request: InvitationCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Invite someone to the wallet by email. Invitations expire after seven days."""
    acting = require_wallet_role(session, wallet_id, current_user.id, MANAGE_MEMBERS)
    if request.role == WalletRole.OWNER and acting.role != WalletRole.OWNER.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only an owner can grant or revoke the owner role",
        )
    try:
        invitation = InvitationRepository(session).create_invitation(
            wallet_id, request.email, request.role.value, invited_by=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return invitation.to_dict()


@router.get("/{wallet_id}/invitations")
def list_invitations(
    wallet_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    require_wallet_role(session, wallet_id, current_user.id, MANAGE_MEMBERS)
    invitations = InvitationRepository(session).list_wallet_invitations(wallet_id)
    return [invitation.to_dict() for invitation in invitations]


# Wallet-scoped listings


@router.get("/{wallet_id}/transactions")
def list_wallet_transactions(
    wallet_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    days: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Get wallet transactions ordered by date, newest first.

    Args:
        limit: Page size
        offset: Rows to skip
        days: Only include the last N days
    """
    require_wallet_role(session, wallet_id, current_user.id, VIEW_WALLET)
    return TransactionRepository(session).list_wallet_transactions(
        wallet_id, limit=limit, offset=offset, days=days
    )


@router.get("/{wallet_id}/budgets")
def list_wallet_budgets(
    wallet_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    require_wallet_role(session, wallet_id, current_user.id, VIEW_WALLET)
    return BudgetRepository(session).list_wallet_budgets(wallet_id)


@router.get("/{wallet_id}/summary")
def get_wallet_summary(
    wallet_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Income and expense totals for a wallet. Defaults to the last 30 days.

    Returns:
        total_income, total_expenses, balance (income minus expenses) and transaction_count
    """
    require_wallet_role(session, wallet_id, current_user.id, VIEW_WALLET)
    try:
        start, end = resolve_date_range(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    totals = TransactionRepository(session).summarize([wallet_id], start, end)
    return {
        "total_income": cents_to_dollars_float(totals["income"]),
        "total_expenses": cents_to_dollars_float(totals["expenses"]),
        "balance": cents_to_dollars_float(totals["income"] - totals["expenses"]),
        "transaction_count": totals["count"],
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
    }


@router.get("/{wallet_id}/category-spending")
def get_category_spending(
    wallet_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Expenses grouped by category, largest first."""
    require_wallet_role(session, wallet_id, current_user.id, VIEW_WALLET)
    try:
        start, end = resolve_date_range(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    totals = TransactionRepository(session).category_totals([wallet_id], start, end)
    return [
        {
            "category": row["category"].to_dict(),
            "total": cents_to_dollars_float(row["total"]),
            "count": row["count"],
        }
        for row in totals
    ]
