"""
OrganizationMember model - tracks which users belong to which organizations.

Each row binds one user to one organization with exactly one role.
"""
import enum

from sqlalchemy import Column, DateTime, Index, String
from sqlalchemy.dialects.postgresql import UUID

from tasklane.db.database import Base
from tasklane.models.base_model import org_fk, utcnow, uuid_pk
from tasklane.models.mixins import TimestampMixin


class JoinedVia(str, enum.Enum):
    """How a member came to be in the organization."""
    DIRECT = "direct"
    INVITATION = "invitation"
    OWNER = "owner"


class OrganizationMember(Base, TimestampMixin):
    """
    Tracks user membership in organizations.

    Stores role and how/when the user joined. Removing a member deletes
    the row, so a removed user can be invited again.
    """
    __tablename__ = "organization_members"

    id = uuid_pk()

    organization_id = org_fk()

    # Identity-provider user id
    user_id = Column(String(255), nullable=False, index=True)

    # owner | admin | member | viewer
    role = Column(String(50), nullable=False, default="member")

    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    joined_via = Column(String(50), nullable=False, default=JoinedVia.DIRECT.value)

    # Invitation tracking
    invited_by = Column(String(255), nullable=True)
    invitation_id = Column(UUID(as_uuid=True), nullable=True)

    __table_args__ = (
        # One user can only be a member once per org
        Index("ix_org_members_org_user", "organization_id", "user_id", unique=True),
    )

    def __repr__(self):
        return f"<OrganizationMember(user={self.user_id}, org={self.organization_id}, role={self.role})>"
