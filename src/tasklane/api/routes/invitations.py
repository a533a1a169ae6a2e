"""
API routes for organization invitations.

Endpoints (owners and admins of the current organization):
- POST /organizations/current/invitations - Invite an email address
- GET /organizations/current/invitations - List invitations
- GET /organizations/current/invitations/stats - Invitation counts per status
- DELETE /organizations/current/invitations/{invitation_id} - Cancel invitation
- POST /organizations/current/invitations/{invitation_id}/resend - Rotate token and resend

Endpoints (invitee, identified by token only):
- GET /invitations/{token} - Show invitation details
- POST /invitations/{token}/accept - Accept invitation
- POST /invitations/{token}/decline - Decline invitation
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from tasklane.auth.context import ActorContext
from tasklane.auth.permissions import Permission, PermissionEngine
from tasklane.auth.rbac import get_permission_engine, require_permission
from tasklane.db.database import get_db
from tasklane.models.organization import Organization
from tasklane.models.organization_invitation import InvitationStatus, OrganizationInvitation
from tasklane.models.user import User
from tasklane.services.email_service import EmailService
from tasklane.services.invitation_service import InvitationService

router = APIRouter(tags=["invitations"])


# ==================== Request/Response Models ====================

class InviteUserRequest(BaseModel):
    """Request to invite a user to the organization."""
    email: EmailStr
    role: str = "member"
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "colleague@company.com",
                "role": "member",
                "message": "Join us on the sprint board"
            }
        }


class AcceptInvitationRequest(BaseModel):
    """Only needed when the invited email has no account yet."""
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class DeclineInvitationRequest(BaseModel):
    reason: Optional[str] = None


class OrganizationInvitationResponse(BaseModel):
    """Response model for organization invitation."""
    id: UUID
    organization_id: str
    invited_email: str
    role: str
    status: str
    invited_by: str
    personal_message: Optional[str]
    expires_at: datetime
    accepted_at: Optional[datetime]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class InvitationDetailsResponse(BaseModel):
    """What the invitee sees before accepting."""
    organization_id: str
    organization_name: str
    invited_email: str
    role: str
    inviter_name: str
    personal_message: Optional[str]
    expires_at: datetime


class InvitationStatsResponse(BaseModel):
    total: int
    pending: int
    accepted: int
    declined: int
    expired: int


class AcceptedMembershipResponse(BaseModel):
    id: UUID
    organization_id: str
    user_id: str
    role: str
    joined_at: Optional[datetime]
    joined_via: str

    class Config:
        from_attributes = True


# ==================== Helpers ====================

def _names_for(db: Session, invitation: OrganizationInvitation) -> tuple[str, str]:
    organization = db.get(Organization, invitation.organization_id)
    inviter = db.get(User, invitation.invited_by)
    organization_name = organization.name if organization else invitation.organization_id
    inviter_name = inviter.display_name if inviter else "Team member"
    return organization_name, inviter_name


def _queue_invitation_email(background_tasks: BackgroundTasks, db: Session, invitation: OrganizationInvitation):
    organization_name, inviter_name = _names_for(db, invitation)
    email_service = EmailService()
    background_tasks.add_task(
        email_service.send_invitation_email,
        to_email=invitation.invited_email,
        inviter_name=inviter_name,
        organization_name=organization_name,
        invitation_token=invitation.token,
        personal_message=invitation.personal_message
    )


# ==================== Organization-side endpoints ====================

@router.post(
    "/organizations/current/invitations",
    response_model=OrganizationInvitationResponse,
    status_code=status.HTTP_201_CREATED
)
def invite_user_to_organization(
    request: InviteUserRequest,
    background_tasks: BackgroundTasks,
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    Invite a user to join the current organization.

    Only owners and admins can invite users. The invitation email is sent
    in the background after the invitation is stored.
    """
    service = InvitationService(db, engine=engine)
    invitation = service.create_invitation(actor, request.email, request.role, request.message)
    _queue_invitation_email(background_tasks, db, invitation)
    return invitation


@router.get("/organizations/current/invitations", response_model=List[OrganizationInvitationResponse])
def list_invitations(
    status_filter: Optional[InvitationStatus] = Query(None, alias="status"),
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    List invitations for the current organization, newest first.

    Only owners and admins can view invitations.
    """
    return InvitationService(db, engine=engine).list_invitations(actor, status_filter)


@router.get("/organizations/current/invitations/stats", response_model=InvitationStatsResponse)
def get_invitation_stats(
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    return InvitationService(db, engine=engine).get_invitation_stats(actor)


@router.delete("/organizations/current/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_invitation(
    invitation_id: UUID,
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    Cancel a pending invitation. The invitation link stops working.
    """
    InvitationService(db, engine=engine).cancel_invitation(actor, invitation_id)


@router.post(
    "/organizations/current/invitations/{invitation_id}/resend",
    response_model=OrganizationInvitationResponse
)
def resend_invitation(
    invitation_id: UUID,
    background_tasks: BackgroundTasks,
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    Issue a fresh token and expiry for a pending invitation and email it again.
    """
    invitation = InvitationService(db, engine=engine).resend_invitation(actor, invitation_id)
    _queue_invitation_email(background_tasks, db, invitation)
    return invitation


# ==================== Invitee endpoints ====================

@router.get("/invitations/{token}", response_model=InvitationDetailsResponse)
def get_invitation(token: str, db: Session = Depends(get_db)):
    """
    Show an open invitation. Expired invitations answer 410.
    """
    invitation = InvitationService(db).get_invitation_by_token(token)
    organization_name, inviter_name = _names_for(db, invitation)
    return InvitationDetailsResponse(
        organization_id=invitation.organization_id,
        organization_name=organization_name,
        invited_email=invitation.invited_email,
        role=invitation.role,
        inviter_name=inviter_name,
        personal_message=invitation.personal_message,
        expires_at=invitation.expires_at,
    )


@router.post("/invitations/{token}/accept", response_model=AcceptedMembershipResponse)
def accept_invitation(
    token: str,
    request: Optional[AcceptInvitationRequest] = None,
    db: Session = Depends(get_db)
):
    """
    Accept an invitation.

    Invitees without an account must supply a password; an account is
    created for the invited email before the membership is added.
    """
    request = request or AcceptInvitationRequest()
    return InvitationService(db).accept_invitation(
        token,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name
    )


@router.post("/invitations/{token}/decline", status_code=status.HTTP_204_NO_CONTENT)
def decline_invitation(
    token: str,
    request: Optional[DeclineInvitationRequest] = None,
    db: Session = Depends(get_db)
):
    InvitationService(db).decline_invitation(token, reason=request.reason if request else None)
