"""
Notification routes. Every operation is scoped to the current user.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel
from sqlmodel import Session

from auth_service import get_current_user
from models import User
from repositories import NotificationRepository
from sqlalchemy_db import get_db_session

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


class BulkReadRequest(BaseModel):
    notification_ids: List[str]


@router.get("")
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Get a page of notifications, newest first.

    Returns:
        notifications, page, limit, total and unread_count
    """
    repository = NotificationRepository(session)
    notifications, total = repository.list_notifications(
        current_user.id, page=page, limit=limit, unread_only=unread_only
    )
    return {
        "notifications": [notification.to_dict() for notification in notifications],
        "page": page,
        "limit": limit,
        "total": total,
        "unread_count": repository.unread_count(current_user.id),
    }


@router.patch("/{notification_id}/read")
def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = NotificationRepository(session)
    notification = repository.get_user_notification(notification_id, current_user.id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return repository.mark_read(notification).to_dict()


@router.post("/bulk-read")
def mark_notifications_read(
    request: BulkReadRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    updated = NotificationRepository(session).mark_many_read(
        current_user.id, request.notification_ids
    )
    return {"message": "Notifications marked as read", "updated": updated}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = NotificationRepository(session)
    notification = repository.get_user_notification(notification_id, current_user.id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    repository.delete_notification(notification)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
