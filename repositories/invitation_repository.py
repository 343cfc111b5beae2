"""
Wallet invitation repository.
"""

from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, col, select

from constants import InvitationStatus, NotificationType
from models import User, Wallet, WalletInvitation
from permissions import is_valid_role
from repositories.notification_repository import NotificationRepository
from repositories.wallet_repository import WalletRepository


class InvitationRepository:
    """Repository class for wallet invitations."""

    def __init__(self, session: Session):
        self.session = session

    def get_invitation(self, invitation_id: str) -> Optional[WalletInvitation]:
        return self.session.get(WalletInvitation, invitation_id)

    def create_invitation(
        self, wallet_id: str, email: str, role: str, invited_by: str
    ) -> WalletInvitation:
        """
        Invite an email address to a wallet. The invitation expires after seven days.

        When the address belongs to a registered user they also get an
        ``invitation`` notification.

        Raises:
            ValueError: If the role is invalid or a pending invitation already exists
        """
        if not is_valid_role(role):
            raise ValueError("Invalid role")

        email = email.lower()
        statement = select(WalletInvitation).where(
            WalletInvitation.wallet_id == wallet_id,
            WalletInvitation.email == email,
            WalletInvitation.status == InvitationStatus.PENDING.value,
            WalletInvitation.expires_at >= datetime.now(),
        )
        if self.session.exec(statement).first() is not None:
            raise ValueError("A pending invitation already exists for this email")

        invitation = WalletInvitation(
            wallet_id=wallet_id, email=email, role=role, invited_by=invited_by
        )
        self.session.add(invitation)
        self._notify_invitee(invitation)
        self.session.commit()
        self.session.refresh(invitation)
        return invitation

    def _notify_invitee(self, invitation: WalletInvitation):
        """Queue an invitation notification for a registered invitee, in the caller's commit."""
        invitee = self.session.exec(select(User).where(User.email == invitation.email)).first()
        if invitee is None:
            return
        wallet = self.session.get(Wallet, invitation.wallet_id)
        inviter = self.session.get(User, invitation.invited_by)
        NotificationRepository(self.session).create_notification(
            user_id=invitee.id,
            type=NotificationType.INVITATION.value,
            title="Wallet invitation",
            message=f"{inviter.display_name} invited you to join '{wallet.name}' as {invitation.role}.",
            data={"invitation_id": invitation.id, "wallet_id": wallet.id},
            action_url="/invitations",
            commit=False,
        )

    def list_wallet_invitations(self, wallet_id: str) -> List[WalletInvitation]:
        statement = (
            select(WalletInvitation)
            .where(WalletInvitation.wallet_id == wallet_id)
            .order_by(col(WalletInvitation.created_at).desc())
        )
        return list(self.session.exec(statement).all())

    def list_pending_for_email(self, email: str) -> List[dict]:
        """Pending, unexpired invitations addressed to an email, with their wallet."""
        statement = (
            select(WalletInvitation, Wallet)
            .join(Wallet, Wallet.id == WalletInvitation.wallet_id)
            .where(
                WalletInvitation.email == email.lower(),
                WalletInvitation.status == InvitationStatus.PENDING.value,
                WalletInvitation.expires_at >= datetime.now(),
            )
            .order_by(col(WalletInvitation.created_at).desc())
        )
        results = []
        for invitation, wallet in self.session.exec(statement).all():
            data = invitation.to_dict()
            data["wallet"] = wallet.to_summary_dict()
            results.append(data)
        return results

    def _check_respondable(self, invitation: WalletInvitation, user: User):
        if invitation.email != user.email.lower():
            raise PermissionError("This invitation was sent to a different email")
        if invitation.status != InvitationStatus.PENDING.value:
            raise ValueError(f"Invitation is already {invitation.status}")
        if invitation.is_expired:
            invitation.status = InvitationStatus.EXPIRED.value
            self.session.add(invitation)
            self.session.commit()
            raise ValueError("Invitation has expired")

    def accept_invitation(self, invitation: WalletInvitation, user: User) -> WalletInvitation:
        """
        Accept an invitation and join the wallet with the invited role.

        Raises:
            PermissionError: If the invitation is addressed to someone else
            ValueError: If it is no longer pending or has expired
        """
        self._check_respondable(invitation, user)

        WalletRepository(self.session).add_member(
            invitation.wallet_id,
            user.id,
            role=invitation.role,
            invited_by=invitation.invited_by,
        )
        invitation.status = InvitationStatus.ACCEPTED.value
        self.session.add(invitation)
        self.session.commit()
        self.session.refresh(invitation)
        return invitation

    def decline_invitation(self, invitation: WalletInvitation, user: User) -> WalletInvitation:
        self._check_respondable(invitation, user)
        invitation.status = InvitationStatus.DECLINED.value
        self.session.add(invitation)
        self.session.commit()
        self.session.refresh(invitation)
        return invitation
