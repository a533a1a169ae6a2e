"""
In-app notifications for invitation lifecycle events.

The invitation service talks to a NotificationSink. Delivery is best
effort: the caller logs and counts failures and never rolls back the
transition that triggered the notification.
"""
import enum
import logging
from typing import Any, Dict, List, Optional, Protocol
from uuid import UUID

from sqlalchemy.orm import Session

from tasklane.errors import NotFoundError
from tasklane.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationEvent(str, enum.Enum):
    INVITATION_CREATED = "invitation_created"
    INVITATION_ACCEPTED = "invitation_accepted"


class NotificationSink(Protocol):
    def notify(self, user_id: str, event: NotificationEvent, payload: Dict[str, Any]) -> None:
        ...


def _render(event: NotificationEvent, payload: Dict[str, Any]) -> tuple[str, str]:
    organization = payload.get("organization_name") or "an organization"
    if event == NotificationEvent.INVITATION_CREATED:
        inviter = payload.get("inviter_name") or "A team member"
        role = payload.get("role", "member")
        return "Organization Invitation", f"{inviter} invited you to join {organization} as {role}"
    invitee = payload.get("invited_email") or "Someone"
    return "Invitation Accepted", f"{invitee} accepted your invitation to join {organization}"


class NotificationService:
    """Persists notifications to the notifications table."""

    def __init__(self, db: Session):
        self.db = db

    def notify(self, user_id: str, event: NotificationEvent, payload: Dict[str, Any]) -> None:
        title, message = _render(event, payload)
        notification = Notification(
            user_id=user_id,
            type=event.value,
            title=title,
            message=message,
            data=payload,
            read=False,
        )
        self.db.add(notification)
        self.db.commit()
        logger.info(f"Notified user {user_id} of {event.value}")

    def list_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Notification]:
        """
        Get a user's notifications, newest first.
        """
        query = self._query_for_user(user_id)
        if unread_only:
            query = query.filter(Notification.read.is_(False))
        query = query.order_by(Notification.created_at.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_for_user(self, user_id: str) -> int:
        return self._query_for_user(user_id).count()

    def unread_count(self, user_id: str) -> int:
        return self._query_for_user(user_id).filter(Notification.read.is_(False)).count()

    def get(self, user_id: str, notification_id: UUID) -> Notification:
        """
        Get one of the user's notifications.

        Raises:
            NotFoundError: unknown id, or the notification belongs to someone else
        """
        notification = self._query_for_user(user_id).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotFoundError("Notification not found")
        return notification

    def mark_as_read(self, user_id: str, notification_id: UUID) -> Notification:
        notification = self.get(user_id, notification_id)

        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: str) -> int:
        """
        Mark every unread notification of the user as read.

        Returns:
            Number of notifications updated
        """
        count = self._query_for_user(user_id).filter(
            Notification.read.is_(False)
        ).update({Notification.read: True}, synchronize_session=False)
        self.db.commit()
        logger.info(f"Marked {count} notifications read for user {user_id}")
        return count

    def delete(self, user_id: str, notification_id: UUID) -> None:
        notification = self.get(user_id, notification_id)
        self.db.delete(notification)
        self.db.commit()

    def delete_all(self, user_id: str) -> int:
        count = self._query_for_user(user_id).delete(synchronize_session=False)
        self.db.commit()
        logger.info(f"Deleted {count} notifications for user {user_id}")
        return count

    def _query_for_user(self, user_id: str):
        return self.db.query(Notification).filter(Notification.user_id == user_id)
