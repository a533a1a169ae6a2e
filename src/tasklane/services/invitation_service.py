"""
Organization invitation lifecycle.

Handles:
- Invitation creation and token issuance
- Lookup by token, with lazy expiry
- Acceptance (membership creation, optional user provisioning)
- Decline, cancellation and resend
- Listing, statistics and an optional bulk expiry sweep

Status moves one way: pending -> accepted | declined | expired. Every
transition is a conditional UPDATE guarded on status = 'pending', so
concurrent requests on the same invitation cannot both succeed.
"""
import logging
import os
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from opentelemetry import trace
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tasklane.auth.context import ActorContext
from tasklane.auth.permissions import Permission, PermissionEngine, Role, coerce_role, default_engine
from tasklane.errors import (
    ConflictError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    TokenGenerationError,
    ValidationError,
)
from tasklane.metrics import (
    access_denied_total,
    invitation_transitions_total,
    invitations_created_total,
    notification_failures_total,
)
from tasklane.models.base_model import utcnow
from tasklane.models.organization import Organization
from tasklane.models.organization_invitation import InvitationStatus, OrganizationInvitation
from tasklane.models.organization_member import JoinedVia, OrganizationMember
from tasklane.models.user import User
from tasklane.repositories import InvitationRepository, MembershipRepository
from tasklane.services.identity_service import DatabaseIdentityProvider, IdentityProvider, normalize_email
from tasklane.services.notification_service import NotificationEvent, NotificationService, NotificationSink

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

INVITATION_TTL = timedelta(days=int(os.getenv("INVITATION_TTL_DAYS", "7")))
TOKEN_ATTEMPTS = 3

_email_adapter = TypeAdapter(EmailStr)


class InvitationService:
    """Service owning invitation status transitions and token lifecycle."""

    def __init__(
        self,
        db: Session,
        identity: Optional[IdentityProvider] = None,
        notifier: Optional[NotificationSink] = None,
        engine: PermissionEngine = default_engine,
    ):
        self.db = db
        self.identity = identity or DatabaseIdentityProvider(db)
        self.notifier = notifier or NotificationService(db)
        self.engine = engine

    # ------------------------------------------------------------------
    # Commands from organization owners/admins
    # ------------------------------------------------------------------

    def create_invitation(
        self,
        actor: ActorContext,
        email: str,
        role: str | Role = Role.MEMBER,
        message: Optional[str] = None
    ) -> OrganizationInvitation:
        """
        Invite an email address to join the actor's organization.

        Args:
            actor: Inviting owner/admin
            email: Address to invite
            role: Role granted on acceptance (admin, member or viewer)
            message: Optional personal message

        Returns:
            The pending OrganizationInvitation

        Raises:
            ForbiddenError: actor is not an owner/admin
            ValidationError: malformed email or role
            ConflictError: already a member, or a pending invitation exists
        """
        self._require_inviter(actor, "send")
        email = self._validate_email(email)
        role = self._validate_role(role)

        with tracer.start_as_current_span("invitation.create") as span:
            span.set_attribute("organization.id", actor.organization_id)

            invited_user = self.identity.lookup_user_by_email(email)
            if invited_user and MembershipRepository.get(self.db, actor.organization_id, invited_user.id):
                raise ConflictError("User is already a member of this organization")

            if InvitationRepository.get_pending_for_email(self.db, actor.organization_id, email):
                raise ConflictError("A pending invitation already exists for this email")

            now = utcnow()
            invitation = OrganizationInvitation(
                organization_id=actor.organization_id,
                invited_by=actor.actor_id,
                invited_email=email,
                role=role.value,
                token=self._generate_token(),
                status=InvitationStatus.PENDING.value,
                personal_message=message,
                created_at=now,
                expires_at=now + INVITATION_TTL,
            )

            token = invitation.token
            try:
                InvitationRepository.add(self.db, invitation)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                # A concurrent insert took the email or the token
                if InvitationRepository.get_pending_for_email(self.db, actor.organization_id, email):
                    raise ConflictError("A pending invitation already exists for this email")
                if InvitationRepository.get_by_token(self.db, token):
                    raise TokenGenerationError("Invitation token was taken concurrently, retry the request") from exc
                raise

            self.db.refresh(invitation)
            invitations_created_total.inc()
            logger.info(f"Created invitation {invitation.id} for {email} to join {actor.organization_id}")

        if invited_user:
            self._dispatch(invited_user.id, NotificationEvent.INVITATION_CREATED, {
                "invitation_id": str(invitation.id),
                "organization_id": invitation.organization_id,
                "organization_name": self._organization_name(invitation.organization_id),
                "inviter_name": self._user_name(actor.actor_id),
                "role": invitation.role,
            })
        else:
            logger.info(f"No in-app notification for {email}; invitee has no account yet")

        return invitation

    def list_invitations(
        self,
        actor: ActorContext,
        status: Optional[InvitationStatus] = None
    ) -> List[OrganizationInvitation]:
        """
        List invitations for the actor's organization, newest first.
        """
        self._require_inviter(actor, "view")
        return InvitationRepository.list_for_organization(self.db, actor.organization_id, status)

    def get_invitation_stats(self, actor: ActorContext) -> Dict[str, int]:
        """
        Count the organization's invitations per status.

        Returns:
            {"total": n, "pending": n, "accepted": n, "declined": n, "expired": n}
        """
        self._require_inviter(actor, "view")
        counts = InvitationRepository.count_by_status(self.db, actor.organization_id)
        stats = {status.value: counts.get(status.value, 0) for status in InvitationStatus}
        stats["total"] = sum(stats.values())
        return stats

    def cancel_invitation(self, actor: ActorContext, invitation_id: UUID) -> None:
        """
        Cancel a pending invitation by deleting it.

        Raises:
            ForbiddenError: actor is not an owner/admin
            NotFoundError: no such invitation in the actor's organization
            ConflictError: invitation is no longer pending
        """
        self._require_inviter(actor, "cancel")

        invitation = InvitationRepository.get_by_id(self.db, invitation_id, actor.organization_id)
        if not invitation:
            raise NotFoundError("Invitation not found")

        if invitation.status != InvitationStatus.PENDING:
            raise ConflictError(f"Cannot cancel invitation with status: {invitation.status}")

        if not InvitationRepository.delete_pending(self.db, invitation_id):
            self.db.rollback()
            raise ConflictError("Invitation is no longer pending")

        self.db.commit()
        logger.info(f"Cancelled invitation {invitation_id} by {actor.actor_id}")

    def resend_invitation(self, actor: ActorContext, invitation_id: UUID) -> OrganizationInvitation:
        """
        Rotate a pending invitation's token and push its expiry out again.

        The old token stops working immediately.

        Raises:
            ForbiddenError: actor is not an owner/admin
            NotFoundError: no such invitation in the actor's organization
            ExpiredError: invitation expired (including lazily, right now)
            ConflictError: invitation was accepted or declined
        """
        self._require_inviter(actor, "resend")

        invitation = InvitationRepository.get_by_id(self.db, invitation_id, actor.organization_id)
        if not invitation:
            raise NotFoundError("Invitation not found")

        self._ensure_pending(invitation)

        now = utcnow()
        rotated = InvitationRepository.transition(
            self.db,
            invitation.id,
            from_status=InvitationStatus.PENDING,
            to_status=InvitationStatus.PENDING,
            token=self._generate_token(),
            expires_at=now + INVITATION_TTL,
        )
        if not rotated:
            self.db.rollback()
            raise ConflictError("Invitation is no longer pending")

        self.db.commit()
        self.db.refresh(invitation)
        logger.info(f"Resent invitation {invitation.id} by {actor.actor_id}")
        return invitation

    # ------------------------------------------------------------------
    # Token-based commands from the invitee
    # ------------------------------------------------------------------

    def get_invitation_by_token(self, token: str) -> OrganizationInvitation:
        """
        Look up an open invitation by its token.

        A pending invitation found past its expiry is transitioned to
        expired and committed before ExpiredError is raised.

        Raises:
            NotFoundError: unknown token
            ExpiredError: invitation has expired
            ConflictError: invitation was already accepted or declined
        """
        invitation = InvitationRepository.get_by_token(self.db, token) if token else None
        if not invitation:
            raise NotFoundError("Invitation not found or invalid")

        self._ensure_pending(invitation)
        return invitation

    def accept_invitation(
        self,
        token: str,
        password: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> OrganizationMember:
        """
        Accept an invitation and add the invitee to the organization.

        If the invited email has no account, one is provisioned through the
        identity provider using the supplied password and names.

        Returns:
            The new OrganizationMember

        Raises:
            NotFoundError / ExpiredError: see get_invitation_by_token
            ConflictError: already accepted (including a concurrent accept)
                or the user is already a member
            ValidationError: new account needs a valid password
        """
        with tracer.start_as_current_span("invitation.accept") as span:
            invitation = self.get_invitation_by_token(token)
            span.set_attribute("invitation.id", str(invitation.id))

            invitation_id = invitation.id
            organization_id = invitation.organization_id
            invited_email = invitation.invited_email
            invited_by = invitation.invited_by

            existing_user = self.identity.lookup_user_by_email(invited_email)
            if existing_user:
                user_id = existing_user.id
            else:
                user_id = self.identity.create_user(
                    invited_email,
                    password,
                    {"first_name": first_name, "last_name": last_name},
                )

            now = utcnow()
            try:
                accepted = InvitationRepository.transition(
                    self.db,
                    invitation_id,
                    from_status=InvitationStatus.PENDING,
                    to_status=InvitationStatus.ACCEPTED,
                    accepted_at=now,
                )
                if not accepted:
                    raise ConflictError("Invitation has already been accepted")

                member = MembershipRepository.add(self.db, OrganizationMember(
                    organization_id=organization_id,
                    user_id=user_id,
                    role=invitation.role,
                    joined_at=now,
                    joined_via=JoinedVia.INVITATION.value,
                    invited_by=invited_by,
                    invitation_id=invitation_id,
                ))
                self.db.commit()
            except ConflictError:
                self.db.rollback()
                raise
            except IntegrityError:
                self.db.rollback()
                raise ConflictError("User is already a member of this organization")

            self.db.refresh(member)
            invitation_transitions_total.labels(status=InvitationStatus.ACCEPTED.value).inc()
            logger.info(f"User {user_id} accepted invitation {invitation_id} to join {organization_id}")

        self._dispatch(invited_by, NotificationEvent.INVITATION_ACCEPTED, {
            "invitation_id": str(invitation_id),
            "organization_id": organization_id,
            "organization_name": self._organization_name(organization_id),
            "invited_email": invited_email,
            "user_id": user_id,
        })

        return member

    def decline_invitation(self, token: str, reason: Optional[str] = None) -> OrganizationInvitation:
        """
        Decline an invitation. No membership is created.

        Raises:
            NotFoundError / ExpiredError / ConflictError: see get_invitation_by_token
        """
        invitation = self.get_invitation_by_token(token)

        declined = InvitationRepository.transition(
            self.db,
            invitation.id,
            from_status=InvitationStatus.PENDING,
            to_status=InvitationStatus.DECLINED,
        )
        if not declined:
            self.db.rollback()
            raise ConflictError("Invitation is no longer pending")

        self.db.commit()
        self.db.refresh(invitation)
        invitation_transitions_total.labels(status=InvitationStatus.DECLINED.value).inc()
        logger.info(f"Invitation {invitation.id} declined" + (f": {reason}" if reason else ""))
        return invitation

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def expire_overdue_invitations(self, now: Optional[datetime] = None) -> int:
        """
        Mark every overdue pending invitation as expired.

        Optional; token lookups expire invitations lazily on their own.

        Returns:
            Number of invitations expired
        """
        count = InvitationRepository.expire_overdue(self.db, now or utcnow())
        self.db.commit()
        if count:
            invitation_transitions_total.labels(status=InvitationStatus.EXPIRED.value).inc(count)
        logger.info(f"Expired {count} overdue invitations")
        return count

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_inviter(self, actor: ActorContext, action: str) -> None:
        if not self.engine.has_permission(actor.role, Permission.ORG_INVITE):
            access_denied_total.labels(check="invitation").inc()
            logger.warning(
                f"Invitation {action} denied: user={actor.actor_id} role={actor.role.value} "
                f"org={actor.organization_id}"
            )
            raise ForbiddenError(f"Only owners and admins can {action} invitations")

    def _ensure_pending(self, invitation: OrganizationInvitation) -> None:
        if invitation.status == InvitationStatus.PENDING and invitation.is_expired():
            self._expire(invitation)
            raise ExpiredError("Invitation has expired")

        if invitation.status == InvitationStatus.EXPIRED:
            raise ExpiredError("Invitation has expired")

        if invitation.is_terminal:
            raise ConflictError(f"Invitation has already been {invitation.status}")

    def _expire(self, invitation: OrganizationInvitation) -> None:
        expired = InvitationRepository.transition(
            self.db,
            invitation.id,
            from_status=InvitationStatus.PENDING,
            to_status=InvitationStatus.EXPIRED,
        )
        self.db.commit()
        if expired:
            invitation_transitions_total.labels(status=InvitationStatus.EXPIRED.value).inc()
            logger.info(f"Invitation {invitation.id} expired on lookup")

    def _generate_token(self) -> str:
        for _ in range(TOKEN_ATTEMPTS):
            token = secrets.token_urlsafe(32)
            if not InvitationRepository.token_exists(self.db, token):
                return token
            logger.warning("Invitation token collision, regenerating")
        raise TokenGenerationError(f"Could not generate a unique invitation token in {TOKEN_ATTEMPTS} attempts")

    def _dispatch(self, user_id: str, event: NotificationEvent, payload: Dict[str, Any]) -> None:
        """Best-effort notification; the committed transition stands either way."""
        try:
            self.notifier.notify(user_id, event, payload)
        except Exception:
            notification_failures_total.labels(event=event.value).inc()
            logger.exception(f"Failed to deliver {event.value} notification to {user_id}")
            self.db.rollback()

    @staticmethod
    def _validate_email(email: str) -> str:
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        try:
            _email_adapter.validate_python(email)
        except PydanticValidationError:
            raise ValidationError(f"Invalid email address: {email}")
        return email

    @staticmethod
    def _validate_role(role: str | Role) -> Role:
        parsed = coerce_role(role)
        if parsed is None or parsed == Role.OWNER:
            raise ValidationError("Invitation role must be one of: admin, member, viewer")
        return parsed

    def _organization_name(self, organization_id: str) -> str:
        organization = self.db.get(Organization, organization_id)
        return organization.name if organization else organization_id

    def _user_name(self, user_id: str) -> str:
        user = self.db.get(User, user_id)
        return user.display_name if user else "Team member"
