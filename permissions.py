"""
Wallet role permissions.

Every wallet action is allowed for a fixed set of member roles. Routes ask
``require_wallet_role`` for the membership row, which raises 404 when the
wallet does not exist and 403 when the caller is not a member or their role
is not allowed.
"""

from typing import Dict, FrozenSet

from fastapi import HTTPException, status
from sqlmodel import Session, select

from constants import WalletRole
from models import Wallet, WalletMember

OWNER = WalletRole.OWNER.value
MANAGER = WalletRole.MANAGER.value
CONTRIBUTOR = WalletRole.CONTRIBUTOR.value
VIEWER = WalletRole.VIEWER.value

ALL_ROLES = frozenset({OWNER, MANAGER, CONTRIBUTOR, VIEWER})
EDITORS = frozenset({OWNER, MANAGER})
WRITERS = frozenset({OWNER, MANAGER, CONTRIBUTOR})

VIEW_WALLET = "view_wallet"
EDIT_WALLET = "edit_wallet"
DELETE_WALLET = "delete_wallet"
WRITE_TRANSACTION = "write_transaction"
DELETE_TRANSACTION = "delete_transaction"
MANAGE_MEMBERS = "manage_members"
MANAGE_BUDGETS = "manage_budgets"
WRITE_BUDGET_ITEM = "write_budget_item"
DELETE_BUDGET_ITEM = "delete_budget_item"

WALLET_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    VIEW_WALLET: ALL_ROLES,
    EDIT_WALLET: EDITORS,
    DELETE_WALLET: frozenset({OWNER}),
    WRITE_TRANSACTION: WRITERS,
    DELETE_TRANSACTION: EDITORS,
    MANAGE_MEMBERS: EDITORS,
    MANAGE_BUDGETS: EDITORS,
    WRITE_BUDGET_ITEM: WRITERS,
    DELETE_BUDGET_ITEM: EDITORS,
}


def is_valid_role(role: str) -> bool:
    return role in ALL_ROLES


def has_permission(role: str, action: str) -> bool:
    """Whether ``role`` may perform ``action``. Unknown actions are denied."""
    return role in WALLET_PERMISSIONS.get(action, frozenset())


def get_membership(session: Session, wallet_id: str, user_id: str):
    """Return the membership row of ``user_id`` in ``wallet_id``, or None."""
    statement = select(WalletMember).where(
        WalletMember.wallet_id == wallet_id, WalletMember.user_id == user_id
    )
    return session.exec(statement).first()


def require_wallet_role(
    session: Session, wallet_id: str, user_id: str, action: str = VIEW_WALLET
) -> WalletMember:
    """
    Check that a user may perform an action on a wallet.

    Returns:
        The caller's membership row

    Raises:
        HTTPException: 404 when the wallet is missing, 403 when the user is
            not a member or lacks the role
    """
    if session.get(Wallet, wallet_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wallet not found")
    member = get_membership(session, wallet_id, user_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Access denied"
        )
    if not has_permission(member.role, action):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return member
