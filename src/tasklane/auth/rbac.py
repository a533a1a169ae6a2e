"""
Request-scoped actor resolution and role gates for FastAPI.

These dependencies only build the ActorContext and apply coarse role or
permission gates. Instance-level decisions (this task, this member) are
made by the services calling the policy functions explicitly.

Usage:
    @router.post("/tasks")
    def create_task(
        actor: ActorContext = Depends(require_permission(Permission.TASK_CREATE)),
        ...
    ):
        ...
"""
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tasklane.auth.context import ActorContext, decode_claims
from tasklane.auth.permissions import Permission, PermissionEngine, Role, default_engine, is_role_at_least
from tasklane.db.database import get_db
from tasklane.errors import ForbiddenError, UnauthorizedError
from tasklane.metrics import access_denied_total
from tasklane.repositories import MembershipRepository

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_permission_engine() -> PermissionEngine:
    """The engine used by request handlers. Override in tests."""
    return default_engine


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, Any]:
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")
    return decode_claims(credentials.credentials)


async def get_current_user_id(claims: Dict[str, Any] = Depends(get_token_claims)) -> str:
    return claims["sub"]


async def get_current_organization_id(claims: Dict[str, Any] = Depends(get_token_claims)) -> str:
    organization_id = claims.get("org_id")
    if not organization_id:
        raise UnauthorizedError("Token carries no organization context")
    return organization_id


async def get_actor_context(
    user_id: str = Depends(get_current_user_id),
    organization_id: str = Depends(get_current_organization_id),
    db: Session = Depends(get_db)
) -> ActorContext:
    """
    Resolve the caller's role in the organization named by their token.

    The stored membership is authoritative; a role claim in the token is
    never trusted.
    """
    role = MembershipRepository.get_role(db, organization_id, user_id)
    if not role:
        logger.warning(f"User {user_id} has no role in organization {organization_id}")
        raise ForbiddenError("You do not have access to this organization")

    return ActorContext(actor_id=user_id, role=role, organization_id=organization_id)


def require_permission(permission: Permission) -> Callable:
    """
    FastAPI dependency that requires a specific permission.

    Returns:
        Dependency resolving to the ActorContext, raising ForbiddenError
        if the role lacks the permission
    """
    async def check_permission(
        actor: ActorContext = Depends(get_actor_context),
        engine: PermissionEngine = Depends(get_permission_engine)
    ) -> ActorContext:
        if not engine.has_permission(actor.role, permission):
            access_denied_total.labels(check=permission.value).inc()
            logger.warning(
                f"Permission denied: user={actor.actor_id} role={actor.role.value} "
                f"permission={permission.value} org={actor.organization_id}"
            )
            raise ForbiddenError(f"Permission denied. Required permission: {permission.value}")
        return actor

    return check_permission


def require_role(minimum_role: Role) -> Callable:
    """
    FastAPI dependency that requires at least a specific role.
    """
    async def check_role(actor: ActorContext = Depends(get_actor_context)) -> ActorContext:
        if not is_role_at_least(actor.role, minimum_role):
            access_denied_total.labels(check=f"role:{minimum_role.value}").inc()
            logger.warning(
                f"Role check failed: user={actor.actor_id} role={actor.role.value} "
                f"minimum={minimum_role.value} org={actor.organization_id}"
            )
            raise ForbiddenError(f"Insufficient privileges: {minimum_role.value} role or higher required")
        return actor

    return check_role
