# src/tasklane/repositories/membership_repository.py

"""
Organization membership data access layer.
"""

from __future__ import annotations
from sqlalchemy.orm import Session

from tasklane.models.organization_member import OrganizationMember


class MembershipRepository:
    """
    Data access methods for OrganizationMember model. Never commits.
    """

    @staticmethod
    def add(db: Session, member: OrganizationMember) -> OrganizationMember:
        db.add(member)
        db.flush()
        return member

    @staticmethod
    def get(db: Session, organization_id: str, user_id: str) -> OrganizationMember | None:
        return db.query(OrganizationMember).filter(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.user_id == user_id
        ).first()

    @staticmethod
    def get_role(db: Session, organization_id: str, user_id: str) -> str | None:
        member = MembershipRepository.get(db, organization_id, user_id)
        return member.role if member else None

    @staticmethod
    def list_for_organization(db: Session, organization_id: str) -> list[OrganizationMember]:
        return db.query(OrganizationMember).filter(
            OrganizationMember.organization_id == organization_id
        ).order_by(OrganizationMember.joined_at).all()

    @staticmethod
    def list_for_user(db: Session, user_id: str) -> list[OrganizationMember]:
        return db.query(OrganizationMember).filter(
            OrganizationMember.user_id == user_id
        ).order_by(OrganizationMember.joined_at).all()

    @staticmethod
    def delete(db: Session, member: OrganizationMember) -> None:
        db.delete(member)
        db.flush()
