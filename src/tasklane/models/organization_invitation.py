"""
OrganizationInvitation model - time-boxed, single-use offers to join an organization.

Status moves one way: pending -> accepted | declined | expired.
Cancelled invitations are deleted, not transitioned.
"""
import enum

from sqlalchemy import Column, DateTime, Index, String, Text, text

from tasklane.db.database import Base
from tasklane.models.base_model import as_utc, org_fk, utcnow, uuid_pk
from tasklane.models.mixins import TimestampMixin


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


TERMINAL_STATUSES = frozenset({
    InvitationStatus.ACCEPTED,
    InvitationStatus.DECLINED,
    InvitationStatus.EXPIRED,
})


class OrganizationInvitation(Base, TimestampMixin):
    """
    Pending (or settled) invitation to join an organization.

    Created when an owner/admin invites an email address. Only one pending
    invitation may exist per (organization, email); the partial unique index
    enforces this at the storage layer.
    """
    __tablename__ = "organization_invitations"

    id = uuid_pk()

    organization_id = org_fk()

    # Who sent the invitation
    invited_by = Column(String(255), nullable=False)

    # Normalized (lower-cased) email address of the invitee
    invited_email = Column(String(320), nullable=False, index=True)

    # Role they'll have when they join
    role = Column(String(50), nullable=False, default="member")

    # Secure single-use token for accepting/declining
    token = Column(String(255), nullable=False, unique=True, index=True)

    status = Column(String(50), nullable=False, default=InvitationStatus.PENDING.value)

    personal_message = Column(Text, nullable=True)

    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_org_invitations_pending_email",
            "organization_id",
            "invited_email",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_org_invitations_org_status", "organization_id", "status"),
    )

    def is_expired(self, now=None) -> bool:
        """True once the expiry instant has passed, whatever the stored status."""
        return (now or utcnow()) > as_utc(self.expires_at)

    @property
    def is_terminal(self) -> bool:
        return InvitationStatus(self.status) in TERMINAL_STATUSES

    def __repr__(self):
        return f"<OrganizationInvitation(email={self.invited_email}, org={self.organization_id}, status={self.status})>"
