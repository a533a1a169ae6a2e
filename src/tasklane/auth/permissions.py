"""
Permission definitions and the role-based permission engine.

This module defines:
- All permissions in the system ({resource}:{action} tags)
- The role hierarchy
- The default Role -> Permission table
- PermissionEngine, which answers "does this role hold this permission"

Roles (highest to lowest privilege):
- owner: Full access, including deleting the organization and changing roles
- admin: Full task/project access, can invite and remove members
- member: Can create and update tasks and projects
- viewer: Read-only access

Permissions are scoped to a resource type, never to an instance.
Instance checks ("may this actor delete THIS task") live in
tasklane.auth.task_policy and tasklane.services.member_service.
"""
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, FrozenSet


class Permission(str, Enum):
    """All permissions in the Tasklane system."""

    USER_READ = "user:read"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"

    ORG_READ = "organization:read"
    ORG_CREATE = "organization:create"
    ORG_UPDATE = "organization:update"
    ORG_DELETE = "organization:delete"
    ORG_INVITE = "organization:invite"

    MEMBER_REMOVE = "member:remove"
    MEMBER_UPDATE_ROLE = "member:update_role"

    TASK_READ = "task:read"
    TASK_CREATE = "task:create"
    TASK_UPDATE = "task:update"
    TASK_DELETE = "task:delete"

    PROJECT_READ = "project:read"
    PROJECT_CREATE = "project:create"
    PROJECT_UPDATE = "project:update"
    PROJECT_DELETE = "project:delete"


class Role(str, Enum):
    """User roles in order of privilege (highest first)."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


# Role hierarchy for comparison
ROLE_HIERARCHY = {
    Role.OWNER: 4,
    Role.ADMIN: 3,
    Role.MEMBER: 2,
    Role.VIEWER: 1,
}


# Role-level grant is necessary but not sufficient for these; the instance
# check is the caller's job.
OWNERSHIP_SENSITIVE_PERMISSIONS: FrozenSet[Permission] = frozenset({
    Permission.USER_DELETE,
    Permission.ORG_DELETE,
    Permission.TASK_DELETE,
    Permission.PROJECT_DELETE,
})


_VIEWER = frozenset({
    Permission.USER_READ,
    Permission.ORG_READ,
    Permission.TASK_READ,
    Permission.PROJECT_READ,
})

_MEMBER = _VIEWER | {
    Permission.TASK_CREATE,
    Permission.TASK_UPDATE,
    Permission.PROJECT_CREATE,
    Permission.PROJECT_UPDATE,
}

_ADMIN = _MEMBER | {
    Permission.USER_CREATE,
    Permission.USER_UPDATE,
    Permission.ORG_UPDATE,
    Permission.ORG_INVITE,
    Permission.MEMBER_REMOVE,
    Permission.TASK_DELETE,
    Permission.PROJECT_DELETE,
}

# Owners have ALL permissions
_OWNER = frozenset(Permission)


DEFAULT_ROLE_PERMISSIONS: Mapping[Role, FrozenSet[Permission]] = MappingProxyType({
    Role.OWNER: _OWNER,
    Role.ADMIN: frozenset(_ADMIN),
    Role.MEMBER: frozenset(_MEMBER),
    Role.VIEWER: _VIEWER,
})


def coerce_role(role: str | Role | None) -> Optional[Role]:
    """
    Convert a stored role string to a Role.

    Returns None for None or an unknown role string.
    """
    if role is None or isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def is_role_at_least(role: str | Role | None, minimum_role: Role) -> bool:
    """
    Check if a role is at least as privileged as the minimum role.

    Args:
        role: User's role
        minimum_role: Minimum required role

    Returns:
        True if role meets or exceeds minimum
    """
    role = coerce_role(role)
    if role is None:
        return False
    return ROLE_HIERARCHY[role] >= ROLE_HIERARCHY[minimum_role]


class PermissionEngine:
    """
    Evaluates role-level permissions against an injected table.

    The table is frozen on construction. It must cover every role and be
    monotonic under the hierarchy: a role holds every permission of the
    roles below it.
    """

    def __init__(self, table: Mapping[Role, Iterable[Permission]] = DEFAULT_ROLE_PERMISSIONS):
        frozen = {Role(role): frozenset(perms) for role, perms in table.items()}

        missing = set(Role) - set(frozen)
        if missing:
            raise ValueError(f"Permission table is missing roles: {sorted(r.value for r in missing)}")

        ordered = sorted(Role, key=lambda r: ROLE_HIERARCHY[r])
        for lower, higher in zip(ordered, ordered[1:]):
            gap = frozen[lower] - frozen[higher]
            if gap:
                raise ValueError(
                    f"Role {higher.value} lacks permissions held by {lower.value}: "
                    f"{sorted(p.value for p in gap)}"
                )

        self._table: Mapping[Role, FrozenSet[Permission]] = MappingProxyType(frozen)

    @property
    def table(self) -> Mapping[Role, FrozenSet[Permission]]:
        return self._table

    def has_permission(
        self,
        role: str | Role | None,
        permission: Permission,
        resource_owner_id: Optional[str] = None,
    ) -> bool:
        """
        Check if a role holds a permission.

        resource_owner_id is accepted for ownership-sensitive permissions
        but never compared against anything: this is a capability gate,
        not an instance-ownership gate.

        Returns:
            True if role has the permission, False otherwise
        """
        role = coerce_role(role)
        if role is None:
            return False

        return permission in self._table[role]

    def has_any_permission(self, role: str | Role | None, permissions: Iterable[Permission]) -> bool:
        """Check if a role has at least one of the permissions."""
        return any(self.has_permission(role, p) for p in permissions)

    def has_all_permissions(self, role: str | Role | None, permissions: Iterable[Permission]) -> bool:
        """Check if a role has every one of the permissions."""
        return all(self.has_permission(role, p) for p in permissions)

    def get_role_permissions(self, role: str | Role | None) -> FrozenSet[Permission]:
        role = coerce_role(role)
        if role is None:
            return frozenset()
        return self._table[role]


default_engine = PermissionEngine()
