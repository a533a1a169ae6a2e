from uuid import uuid4

from sqlalchemy import Column, String, Text

from tasklane.db.database import Base
from tasklane.models.mixins import TimestampMixin


class Organization(Base, TimestampMixin):
    """A tenant. Every membership, invitation and task belongs to exactly one."""
    __tablename__ = "organizations"

    id = Column(String(255), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    # User who created the organization (first OWNER)
    owner_id = Column(String(255), nullable=False, index=True)

    def __repr__(self):
        return f"<Organization(id={self.id}, name={self.name})>"
