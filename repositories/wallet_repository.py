"""
Wallet and membership repository.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, func, update
from sqlmodel import Session, col, select

from constants import WalletRole
from models import (
    Alert,
    Budget,
    BudgetItem,
    Goal,
    Transaction,
    User,
    Wallet,
    WalletInvitation,
    WalletMember,
)
from permissions import OWNER, is_valid_role


def delete_wallet_rows(session: Session, wallet_ids: List[str]):
    """
    Delete wallets and everything hanging off them. Does not commit.

    Goals keep existing but lose their wallet link; wallet-scoped alerts are removed.
    """
    if not wallet_ids:
        return

    budget_ids = select(Budget.id).where(col(Budget.wallet_id).in_(wallet_ids))
    session.execute(delete(BudgetItem).where(col(BudgetItem.budget_id).in_(budget_ids)))
    session.execute(delete(Budget).where(col(Budget.wallet_id).in_(wallet_ids)))
    session.execute(delete(Transaction).where(col(Transaction.wallet_id).in_(wallet_ids)))
    session.execute(
        delete(WalletInvitation).where(col(WalletInvitation.wallet_id).in_(wallet_ids))
    )
    session.execute(delete(WalletMember).where(col(WalletMember.wallet_id).in_(wallet_ids)))
    session.execute(delete(Alert).where(col(Alert.wallet_id).in_(wallet_ids)))
    session.execute(
        update(Goal).where(col(Goal.wallet_id).in_(wallet_ids)).values(wallet_id=None)
    )
    session.execute(delete(Wallet).where(col(Wallet.id).in_(wallet_ids)))


class WalletRepository:
    """Repository class for wallet and wallet member database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_wallet(self, wallet_id: str) -> Optional[Wallet]:
        return self.session.get(Wallet, wallet_id)

    def get_user_wallet_ids(self, user_id: str) -> List[str]:
        """Ids of every wallet the user is a member of."""
        statement = select(WalletMember.wallet_id).where(WalletMember.user_id == user_id)
        return list(self.session.exec(statement).all())

    def list_user_wallets(self, user_id: str) -> List[dict]:
        """
        Get the wallets a user belongs to, newest first.

        Returns:
            Wallet dictionaries with their members and row counts
        """
        statement = (
            select(Wallet)
            .join(WalletMember, WalletMember.wallet_id == Wallet.id)
            .where(WalletMember.user_id == user_id)
            .order_by(col(Wallet.created_at).desc())
        )
        wallets = self.session.exec(statement).all()
        wallet_ids = [wallet.id for wallet in wallets]

        transaction_counts = self._count_by_wallet(Transaction, wallet_ids)
        member_counts = self._count_by_wallet(WalletMember, wallet_ids)

        results = []
        for wallet in wallets:
            data = wallet.to_dict()
            data["members"] = self.list_members(wallet.id)
            data["counts"] = {
                "transactions": transaction_counts.get(wallet.id, 0),
                "members": member_counts.get(wallet.id, 0),
            }
            results.append(data)
        return results

    def _count_by_wallet(self, model, wallet_ids: List[str]) -> Dict[str, int]:
        if not wallet_ids:
            return {}
        statement = (
            select(model.wallet_id, func.count())
            .where(col(model.wallet_id).in_(wallet_ids))
            .group_by(model.wallet_id)
        )
        return {wallet_id: count for wallet_id, count in self.session.exec(statement).all()}

    def create_wallet(self, user_id: str, **fields) -> Wallet:
        """
        Create a wallet and make its creator the owner, in one commit.

        Args:
            user_id: The creating user
            **fields: Wallet columns (name, description, type, currency, ...)

        Returns:
            The created Wallet instance
        """
        wallet = Wallet(created_by=user_id, **fields)
        self.session.add(wallet)
        self.session.flush()
        self.session.add(
            WalletMember(wallet_id=wallet.id, user_id=user_id, role=WalletRole.OWNER.value)
        )
        self.session.commit()
        self.session.refresh(wallet)
        return wallet

    def update_wallet(self, wallet: Wallet, changes: dict) -> Wallet:
        for key, value in changes.items():
            setattr(wallet, key, value)
        wallet.updated_at = datetime.now()
        self.session.add(wallet)
        self.session.commit()
        self.session.refresh(wallet)
        return wallet

    def delete_wallet(self, wallet: Wallet):
        delete_wallet_rows(self.session, [wallet.id])
        self.session.commit()

    def list_members(self, wallet_id: str) -> List[dict]:
        """Members of a wallet with their public user profile, oldest first."""
        statement = (
            select(WalletMember, User)
            .join(User, User.id == WalletMember.user_id)
            .where(WalletMember.wallet_id == wallet_id)
            .order_by(col(WalletMember.joined_at))
        )
        members = []
        for member, user in self.session.exec(statement).all():
            data = member.to_dict()
            data["user"] = user.to_public_dict()
            members.append(data)
        return members

    def get_member(self, wallet_id: str, user_id: str) -> Optional[WalletMember]:
        statement = select(WalletMember).where(
            WalletMember.wallet_id == wallet_id, WalletMember.user_id == user_id
        )
        return self.session.exec(statement).first()

    def add_member(
        self,
        wallet_id: str,
        user_id: str,
        role: str,
        invited_by: Optional[str] = None,
    ) -> WalletMember:
        """Add a member without committing. An existing membership is returned unchanged."""
        existing = self.get_member(wallet_id, user_id)
        if existing is not None:
            return existing
        member = WalletMember(
            wallet_id=wallet_id, user_id=user_id, role=role, invited_by=invited_by
        )
        self.session.add(member)
        return member

    def _owner_count(self, wallet_id: str) -> int:
        statement = (
            select(func.count())
            .select_from(WalletMember)
            .where(WalletMember.wallet_id == wallet_id, WalletMember.role == OWNER)
        )
        return self.session.exec(statement).one()

    def update_member_role(
        self, wallet_id: str, user_id: str, role: str, acting_role: str
    ) -> Optional[WalletMember]:
        """
        Change a member's role.

        Args:
            wallet_id: Wallet the membership belongs to
            user_id: Member whose role changes
            role: New role
            acting_role: Role of the member making the change

        Returns:
            The updated membership, or None if the user is not a member

        Raises:
            ValueError: If the role is invalid or the change would break ownership rules
        """
        if not is_valid_role(role):
            raise ValueError("Invalid role")

        member = self.get_member(wallet_id, user_id)
        if member is None:
            return None

        touches_owner = OWNER in (role, member.role)
        if touches_owner and acting_role != OWNER:
            raise PermissionError("Only an owner can grant or revoke the owner role")
        if member.role == OWNER and role != OWNER and self._owner_count(wallet_id) <= 1:
            raise ValueError("A wallet must keep at least one owner")

        member.role = role
        self.session.add(member)
        self.session.commit()
        self.session.refresh(member)
        return member

    def remove_member(self, wallet_id: str, user_id: str, acting_role: str) -> bool:
        """
        Remove a member from a wallet.

        Returns:
            False if the user was not a member

        Raises:
            PermissionError: If a non-owner tries to remove an owner
            ValueError: If the member is the last owner
        """
        member = self.get_member(wallet_id, user_id)
        if member is None:
            return False
        if member.role == OWNER:
            if acting_role != OWNER:
                raise PermissionError("Only an owner can remove an owner")
            if self._owner_count(wallet_id) <= 1:
                raise ValueError("A wallet must keep at least one owner")

        self.session.delete(member)
        self.session.commit()
        return True
