"""
Organization service for creating organizations and resolving memberships.

The creator of an organization becomes its first owner in the same
transaction that creates the organization.
"""
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from tasklane.errors import ValidationError
from tasklane.models.base_model import utcnow
from tasklane.models.organization import Organization
from tasklane.models.organization_member import JoinedVia, OrganizationMember
from tasklane.auth.permissions import Role
from tasklane.repositories import MembershipRepository

logger = logging.getLogger(__name__)


class OrganizationService:
    """Service for organization bootstrap and membership lookups."""

    def __init__(self, db: Session):
        self.db = db

    def create_organization(
        self,
        owner_id: str,
        name: str,
        description: Optional[str] = None
    ) -> Organization:
        """
        Create an organization and make its creator the owner.

        Args:
            owner_id: User creating the organization
            name: Organization name
            description: Optional description

        Returns:
            Organization object

        Raises:
            ValidationError: If name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Organization name is required")

        organization = Organization(name=name, description=description, owner_id=owner_id)
        self.db.add(organization)
        self.db.flush()

        MembershipRepository.add(self.db, OrganizationMember(
            organization_id=organization.id,
            user_id=owner_id,
            role=Role.OWNER.value,
            joined_at=utcnow(),
            joined_via=JoinedVia.OWNER.value,
        ))

        self.db.commit()
        self.db.refresh(organization)

        logger.info(f"Created organization {organization.id} owned by {owner_id}")
        return organization

    def get_user_organizations(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Get all organizations a user belongs to, with the user's role in each.

        Returns:
            Dicts with organization fields plus role, joined_at and joined_via,
            oldest membership first
        """
        members = MembershipRepository.list_for_user(self.db, user_id)
        if not members:
            return []

        organizations = {
            organization.id: organization
            for organization in self.db.query(Organization).filter(
                Organization.id.in_([m.organization_id for m in members])
            ).all()
        }
        workspaces = []
        for member in members:
            organization = organizations.get(member.organization_id)
            if not organization:
                continue
            workspaces.append({
                "id": organization.id,
                "name": organization.name,
                "description": organization.description,
                "owner_id": organization.owner_id,
                "role": member.role,
                "joined_at": member.joined_at,
                "joined_via": member.joined_via,
            })
        return workspaces

    def get_member_role(self, user_id: str, organization_id: str) -> Optional[str]:
        """
        Get a user's role in an organization.

        Returns:
            Role string ('owner', 'admin', 'member', 'viewer') or None
        """
        return MembershipRepository.get_role(self.db, organization_id, user_id)
