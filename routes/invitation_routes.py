"""
Routes for the invitee side of wallet invitations.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from auth_service import get_current_user
from models import User
from repositories import InvitationRepository
from sqlalchemy_db import get_db_session

router = APIRouter(prefix="/api/invitations", tags=["invitations"])


@router.get("")
def list_my_invitations(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Pending, unexpired invitations addressed to the current user's email."""
    return InvitationRepository(session).list_pending_for_email(current_user.email)


def _respond(invitation_id: str, accept: bool, user: User, session: Session) -> dict:
    repository = InvitationRepository(session)
    invitation = repository.get_invitation(invitation_id)
    if invitation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")

    try:
        if accept:
            invitation = repository.accept_invitation(invitation, user)
        else:
            invitation = repository.decline_invitation(invitation, user)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return invitation.to_dict()


@router.post("/{invitation_id}/accept")
def accept_invitation(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Join the wallet with the invited role."""
    return _respond(invitation_id, True, current_user, session)


@router.post("/{invitation_id}/decline")
def decline_invitation(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return _respond(invitation_id, False, current_user, session)
