"""
API routes for the caller's notification inbox.

Endpoints:
- GET /notifications - List notifications (paged, optionally unread only)
- GET /notifications/unread-count - Count unread notifications
- PATCH /notifications/read-all - Mark every notification as read
- GET /notifications/{notification_id} - Get one notification
- PATCH /notifications/{notification_id}/read - Mark a notification as read
- DELETE /notifications/{notification_id} - Delete a notification
- DELETE /notifications - Delete all notifications

Notifications belong to a user, not an organization, so these routes need
only an authenticated caller.
"""
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime

from tasklane.auth.rbac import get_current_user_id
from tasklane.db.database import get_db
from tasklane.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


# ==================== Response Models ====================

class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]]
    read: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
    total_count: int


class CountResponse(BaseModel):
    count: int


# ==================== Endpoints ====================

@router.get("", response_model=NotificationListResponse)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    unread_only: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    List the caller's notifications, newest first.
    """
    service = NotificationService(db)
    return NotificationListResponse(
        notifications=service.list_for_user(user_id, unread_only, limit=limit, offset=(page - 1) * limit),
        unread_count=service.unread_count(user_id),
        total_count=service.count_for_user(user_id),
    )


@router.get("/unread-count", response_model=CountResponse)
def get_unread_count(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return CountResponse(count=NotificationService(db).unread_count(user_id))


@router.patch("/read-all", response_model=CountResponse)
def mark_all_notifications_read(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return CountResponse(count=NotificationService(db).mark_all_read(user_id))


@router.delete("", response_model=CountResponse)
def delete_all_notifications(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return CountResponse(count=NotificationService(db).delete_all(user_id))


@router.get("/{notification_id}", response_model=NotificationResponse)
def get_notification(
    notification_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return NotificationService(db).get(user_id, notification_id)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return NotificationService(db).mark_as_read(user_id, notification_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete one of the caller's notifications. Other users' notifications answer 404.
    """
    NotificationService(db).delete(user_id, notification_id)
