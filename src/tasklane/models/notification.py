"""
Notification model - in-app notifications shown in a user's inbox.
"""
from sqlalchemy import Boolean, Column, JSON, String, Text

from tasklane.db.database import Base
from tasklane.models.base_model import uuid_pk
from tasklane.models.mixins import TimestampMixin


class Notification(Base, TimestampMixin):
    __tablename__ = "notifications"

    id = uuid_pk()
    user_id = Column(String(255), nullable=False, index=True)

    # invitation_created | invitation_accepted
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)

    read = Column(Boolean, nullable=False, default=False)
