"""
SQLModel models for wallets, their members and pending invitations.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from constants import INVITATION_TTL_DAYS, InvitationStatus, WalletRole, WalletType
from utils import cents_to_dollars_float, isoformat, new_id


class Wallet(SQLModel, table=True):
    """An account-like container for transactions shared through membership."""

    __tablename__ = "wallets"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: Optional[str] = None
    type: str = Field(default=WalletType.PERSONAL.value)
    currency: str = Field(default="USD")
    balance: int = Field(default=0, description="Balance stored in cents")
    goal_amount: Optional[int] = Field(default=None, description="Goal stored in cents")
    goal_date: Optional[datetime] = None
    is_archived: bool = Field(default=False)
    created_by: str = Field(foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def __repr__(self) -> str:
        return f"<Wallet(id='{self.id}', name='{self.name}', balance={self.balance})>"

    def to_dict(self) -> dict:
        """Convert Wallet to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "currency": self.currency,
            "balance": cents_to_dollars_float(self.balance),
            "goal_amount": cents_to_dollars_float(self.goal_amount),
            "goal_date": isoformat(self.goal_date),
            "is_archived": self.is_archived,
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def to_summary_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "currency": self.currency}


class WalletMember(SQLModel, table=True):
    """Membership of a user in a wallet with a role."""

    __tablename__ = "wallet_members"

    id: str = Field(default_factory=new_id, primary_key=True)
    wallet_id: str = Field(foreign_key="wallets.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    role: str = Field(default=WalletRole.VIEWER.value)
    permissions: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    invited_by: Optional[str] = Field(default=None, foreign_key="users.id")
    joined_at: datetime = Field(default_factory=datetime.now)

    def __repr__(self) -> str:
        return f"<WalletMember(wallet_id='{self.wallet_id}', user_id='{self.user_id}', role='{self.role}')>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "wallet_id": self.wallet_id,
            "user_id": self.user_id,
            "role": self.role,
            "permissions": self.permissions,
            "invited_by": self.invited_by,
            "joined_at": isoformat(self.joined_at),
        }


def default_invitation_expiry() -> datetime:
    return datetime.now() + timedelta(days=INVITATION_TTL_DAYS)


class WalletInvitation(SQLModel, table=True):
    """An invitation for an email address to join a wallet."""

    __tablename__ = "wallet_invitations"

    id: str = Field(default_factory=new_id, primary_key=True)
    wallet_id: str = Field(foreign_key="wallets.id", index=True)
    email: str = Field(index=True)
    role: str = Field(default=WalletRole.VIEWER.value)
    invited_by: str = Field(foreign_key="users.id")
    status: str = Field(default=InvitationStatus.PENDING.value)
    expires_at: datetime = Field(default_factory=default_invitation_expiry)
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_expired(self) -> bool:
        return self.expires_at < datetime.now()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "wallet_id": self.wallet_id,
            "email": self.email,
            "role": self.role,
            "invited_by": self.invited_by,
            "status": self.status,
            "expires_at": isoformat(self.expires_at),
            "created_at": isoformat(self.created_at),
        }
