"""
Organization member management: role changes and removal.

Rules:
- Only owners change roles; admins cannot change anyone's role
- An owner's role is never changed here, and nobody is promoted to owner
- Owners remove anyone except themselves
- Admins remove members and viewers only
- Members and viewers remove nobody

Nothing here stops owners from removing each other down to zero owners.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from tasklane.auth.context import ActorContext
from tasklane.auth.permissions import Permission, PermissionEngine, Role, coerce_role, default_engine
from tasklane.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from tasklane.metrics import access_denied_total
from tasklane.models.organization_member import OrganizationMember
from tasklane.repositories import MembershipRepository

logger = logging.getLogger(__name__)


class MemberService:
    """Service enforcing who may change or remove whose membership."""

    def __init__(self, db: Session, engine: PermissionEngine = default_engine):
        self.db = db
        self.engine = engine

    def list_members(self, actor: ActorContext) -> List[OrganizationMember]:
        """
        List members of the actor's organization, oldest first.
        """
        return MembershipRepository.list_for_organization(self.db, actor.organization_id)

    def get_member(self, actor: ActorContext, user_id: str) -> OrganizationMember:
        member = MembershipRepository.get(self.db, actor.organization_id, user_id)
        if not member:
            raise NotFoundError("Member not found")
        return member

    def update_role(self, actor: ActorContext, user_id: str, new_role: str | Role) -> OrganizationMember:
        """
        Change a member's role.

        Args:
            actor: Requesting member (must be an owner)
            user_id: Member whose role changes
            new_role: admin, member or viewer

        Returns:
            Updated OrganizationMember

        Raises:
            ForbiddenError: requester is not an owner, or target is an owner
            NotFoundError: target is not a member
            ValidationError: new_role is unknown or owner
        """
        self._require_role_manager(actor, user_id)

        role = coerce_role(new_role)
        if role is None or role == Role.OWNER:
            raise ValidationError("Role must be one of: admin, member, viewer")

        member = self.get_member(actor, user_id)

        if member.role == Role.OWNER:
            self._deny(actor, "update_role", user_id)
            raise ForbiddenError("Cannot change owner role")

        previous = member.role
        member.role = role.value
        self.db.commit()
        self.db.refresh(member)

        logger.info(
            f"Updated role for {user_id} in {actor.organization_id} "
            f"from {previous} to {role.value} by {actor.actor_id}"
        )
        return member

    def promote_to_admin(self, actor: ActorContext, user_id: str) -> OrganizationMember:
        self._require_role_manager(actor, user_id)
        member = self.get_member(actor, user_id)
        if member.role == Role.ADMIN:
            raise ConflictError("Member is already an admin")
        return self.update_role(actor, user_id, Role.ADMIN)

    def demote_from_admin(self, actor: ActorContext, user_id: str) -> OrganizationMember:
        """Demote an admin to member."""
        self._require_role_manager(actor, user_id)
        member = self.get_member(actor, user_id)
        # Owners fall through to update_role, which rejects them
        if member.role not in (Role.ADMIN, Role.OWNER):
            raise ConflictError("Member is not an admin")
        return self.update_role(actor, user_id, Role.MEMBER)

    def remove_member(self, actor: ActorContext, user_id: str) -> None:
        """
        Remove a member from the organization.

        Raises:
            ForbiddenError: requester may not remove this member
            NotFoundError: target is not a member
        """
        if not self.engine.has_permission(actor.role, Permission.MEMBER_REMOVE):
            self._deny(actor, "remove", user_id)
            raise ForbiddenError("Insufficient permissions to remove members")

        member = self.get_member(actor, user_id)

        if actor.role == Role.OWNER:
            if member.user_id == actor.actor_id:
                self._deny(actor, "remove", user_id)
                raise ForbiddenError("Owners cannot remove themselves")
        elif actor.role == Role.ADMIN:
            if member.role in (Role.OWNER, Role.ADMIN):
                self._deny(actor, "remove", user_id)
                raise ForbiddenError("Admins cannot remove other admins or owners")
        else:
            self._deny(actor, "remove", user_id)
            raise ForbiddenError("Insufficient permissions to remove members")

        MembershipRepository.delete(self.db, member)
        self.db.commit()
        logger.info(f"Removed user {user_id} from {actor.organization_id} by {actor.actor_id}")

    def _require_role_manager(self, actor: ActorContext, user_id: str) -> None:
        if not self.engine.has_permission(actor.role, Permission.MEMBER_UPDATE_ROLE):
            self._deny(actor, "update_role", user_id)
            raise ForbiddenError("Only owners can change member roles")

    def _deny(self, actor: ActorContext, action: str, target_user_id: str) -> None:
        access_denied_total.labels(check=f"member_{action}").inc()
        logger.warning(
            f"Member {action} denied: user={actor.actor_id} role={actor.role.value} "
            f"target={target_user_id} org={actor.organization_id}"
        )
