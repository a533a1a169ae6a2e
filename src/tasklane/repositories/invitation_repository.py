# src/tasklane/repositories/invitation_repository.py

"""
Invitation data access layer.

Methods here never commit; the calling service owns the transaction so a
status transition and its side effects (membership insert) commit or roll
back together.
"""

from __future__ import annotations
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from tasklane.models.organization_invitation import InvitationStatus, OrganizationInvitation


class InvitationRepository:
    """
    Data access methods for OrganizationInvitation model.
    """

    @staticmethod
    def add(db: Session, invitation: OrganizationInvitation) -> OrganizationInvitation:
        db.add(invitation)
        db.flush()
        return invitation

    @staticmethod
    def get_by_id(db: Session, invitation_id: UUID, organization_id: str | None = None) -> OrganizationInvitation | None:
        """
        Get invitation by ID, optionally scoped to one organization.
        """
        query = db.query(OrganizationInvitation).filter(OrganizationInvitation.id == invitation_id)
        if organization_id is not None:
            query = query.filter(OrganizationInvitation.organization_id == organization_id)
        return query.first()

    @staticmethod
    def get_by_token(db: Session, token: str) -> OrganizationInvitation | None:
        return db.query(OrganizationInvitation).filter(OrganizationInvitation.token == token).first()

    @staticmethod
    def token_exists(db: Session, token: str) -> bool:
        return db.query(OrganizationInvitation.id).filter(OrganizationInvitation.token == token).first() is not None

    @staticmethod
    def get_pending_for_email(db: Session, organization_id: str, email: str) -> OrganizationInvitation | None:
        return db.query(OrganizationInvitation).filter(
            OrganizationInvitation.organization_id == organization_id,
            OrganizationInvitation.invited_email == email,
            OrganizationInvitation.status == InvitationStatus.PENDING.value
        ).first()

    @staticmethod
    def list_for_organization(
        db: Session,
        organization_id: str,
        status: InvitationStatus | None = None
    ) -> list[OrganizationInvitation]:
        """
        List invitations for an organization, newest first.
        """
        query = db.query(OrganizationInvitation).filter(
            OrganizationInvitation.organization_id == organization_id
        )
        if status is not None:
            query = query.filter(OrganizationInvitation.status == status.value)
        return query.order_by(OrganizationInvitation.created_at.desc()).all()

    @staticmethod
    def count_by_status(db: Session, organization_id: str) -> dict[str, int]:
        rows = db.query(
            OrganizationInvitation.status,
            func.count(OrganizationInvitation.id)
        ).filter(
            OrganizationInvitation.organization_id == organization_id
        ).group_by(OrganizationInvitation.status).all()
        return {status: count for status, count in rows}

    @staticmethod
    def transition(
        db: Session,
        invitation_id: UUID,
        *,
        from_status: InvitationStatus,
        to_status: InvitationStatus,
        **values: Any
    ) -> bool:
        """
        Conditionally move an invitation between statuses.

        Issues a single UPDATE ... WHERE id = :id AND status = :from_status,
        so of two concurrent transitions on the same row only one matches.

        Args:
            db: Database session
            invitation_id: Invitation UUID
            from_status: Status the row must currently have
            to_status: Status to write
            **values: Extra columns to write in the same statement

        Returns:
            True if this call performed the transition
        """
        updated = db.query(OrganizationInvitation).filter(
            OrganizationInvitation.id == invitation_id,
            OrganizationInvitation.status == from_status.value
        ).update(
            {"status": to_status.value, **values},
            synchronize_session=False
        )
        return updated == 1

    @staticmethod
    def expire_overdue(db: Session, now: datetime) -> int:
        """
        Bulk-expire pending invitations whose expiry has passed.

        Returns:
            Number of rows transitioned
        """
        return db.query(OrganizationInvitation).filter(
            OrganizationInvitation.status == InvitationStatus.PENDING.value,
            OrganizationInvitation.expires_at < now
        ).update(
            {"status": InvitationStatus.EXPIRED.value},
            synchronize_session=False
        )

    @staticmethod
    def delete_pending(db: Session, invitation_id: UUID) -> bool:
        """
        Delete an invitation only while it is still pending.

        Returns:
            True if a row was deleted
        """
        deleted = db.query(OrganizationInvitation).filter(
            OrganizationInvitation.id == invitation_id,
            OrganizationInvitation.status == InvitationStatus.PENDING.value
        ).delete(synchronize_session=False)
        return deleted == 1
