"""
API routes for organizations and their members.

Endpoints:
- POST /organizations - Create an organization (caller becomes owner)
- GET /organizations - List the caller's organizations with their role in each
- GET /organizations/current/members - List organization members
- PATCH /organizations/current/members/{user_id}/role - Update member role
- POST /organizations/current/members/{user_id}/promote - Promote to admin
- POST /organizations/current/members/{user_id}/demote - Demote admin to member
- DELETE /organizations/current/members/{user_id} - Remove member
"""
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from tasklane.auth.context import ActorContext
from tasklane.auth.permissions import Permission, PermissionEngine
from tasklane.auth.rbac import get_current_user_id, get_permission_engine, require_permission
from tasklane.db.database import get_db
from tasklane.services.member_service import MemberService
from tasklane.services.organization_service import OrganizationService

router = APIRouter(prefix="/organizations", tags=["organizations"])


# ==================== Request/Response Models ====================

class CreateOrganizationRequest(BaseModel):
    """Request to create an organization."""
    name: str
    description: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Acme Platform Team",
                "description": "Backlog for the platform squad"
            }
        }


class OrganizationResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    owner_id: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class WorkspaceResponse(BaseModel):
    """An organization the caller belongs to."""
    id: str
    name: str
    description: Optional[str]
    owner_id: Optional[str]
    role: str
    joined_at: Optional[datetime]
    joined_via: str


class UpdateMemberRoleRequest(BaseModel):
    """Request to update a member's role."""
    role: str

    class Config:
        json_schema_extra = {
            "example": {
                "role": "admin"
            }
        }


class OrganizationMemberResponse(BaseModel):
    """Response model for organization member."""
    id: UUID
    organization_id: str
    user_id: str
    role: str
    joined_at: Optional[datetime]
    joined_via: str
    invited_by: Optional[str]

    class Config:
        from_attributes = True


# ==================== Endpoints ====================

@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
def create_organization(
    request: CreateOrganizationRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a new organization. The caller becomes its owner.
    """
    service = OrganizationService(db)
    return service.create_organization(owner_id=user_id, name=request.name, description=request.description)


@router.get("", response_model=List[WorkspaceResponse])
def list_my_organizations(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    List every organization the caller is a member of, oldest membership first.

    Needs no organization context, so clients can call it before choosing one.
    """
    return OrganizationService(db).get_user_organizations(user_id)


@router.get("/current/members", response_model=List[OrganizationMemberResponse])
def list_organization_members(
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    db: Session = Depends(get_db)
):
    """
    List all members of the current organization with their roles and join dates.
    """
    return MemberService(db).list_members(actor)


@router.patch("/current/members/{user_id}/role", response_model=OrganizationMemberResponse)
def update_member_role(
    user_id: str,
    request: UpdateMemberRoleRequest,
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    Update a member's role.

    Only owners can change roles. Owner roles cannot be changed.
    """
    return MemberService(db, engine).update_role(actor, user_id, request.role)


@router.post("/current/members/{user_id}/promote", response_model=OrganizationMemberResponse)
def promote_member(
    user_id: str,
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    return MemberService(db, engine).promote_to_admin(actor, user_id)


@router.post("/current/members/{user_id}/demote", response_model=OrganizationMemberResponse)
def demote_member(
    user_id: str,
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    return MemberService(db, engine).demote_from_admin(actor, user_id)


@router.delete("/current/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_organization_member(
    user_id: str,
    actor: ActorContext = Depends(require_permission(Permission.ORG_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    Remove a member from the organization.

    - Owners can remove anyone except themselves
    - Admins can remove members and viewers only
    """
    MemberService(db, engine).remove_member(actor, user_id)
