"""
Authorization module for Tasklane.

This module provides:
- Permission definitions and the permission engine (permissions.py)
- The per-request actor context (context.py)
- The task access policy (task_policy.py)
- FastAPI dependencies resolving the actor and gating routes (rbac.py)

Usage:
    from tasklane.auth import (
        ActorContext,
        Permission,
        Role,
        PermissionEngine,
        can_view,
        require_permission,
    )
"""

# Re-export from permissions.py
from tasklane.auth.permissions import (
    DEFAULT_ROLE_PERMISSIONS,
    OWNERSHIP_SENSITIVE_PERMISSIONS,
    Permission,
    PermissionEngine,
    Role,
    coerce_role,
    default_engine,
    is_role_at_least,
)

# Re-export from context.py
from tasklane.auth.context import ActorContext, decode_claims

# Re-export from task_policy.py
from tasklane.auth.task_policy import (
    authorize_update,
    can_delete,
    can_edit,
    can_mark_complete,
    can_view,
    is_completion_only,
)

# Re-export from rbac.py
from tasklane.auth.rbac import (
    get_actor_context,
    get_current_organization_id,
    get_current_user_id,
    get_permission_engine,
    require_permission,
    require_role,
)

__all__ = [
    # Permissions
    "DEFAULT_ROLE_PERMISSIONS",
    "OWNERSHIP_SENSITIVE_PERMISSIONS",
    "Permission",
    "PermissionEngine",
    "Role",
    "coerce_role",
    "default_engine",
    "is_role_at_least",

    # Context
    "ActorContext",
    "decode_claims",

    # Task policy
    "authorize_update",
    "can_delete",
    "can_edit",
    "can_mark_complete",
    "can_view",
    "is_completion_only",

    # RBAC
    "get_actor_context",
    "get_current_organization_id",
    "get_current_user_id",
    "get_permission_engine",
    "require_permission",
    "require_role",
]
