import pytest

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


def test_higher_roles_hold_every_lower_role_permission():
    ordered = [Role.VIEWER, Role.MEMBER, Role.ADMIN, Role.OWNER]
    for lower, higher in zip(ordered, ordered[1:]):
        assert DEFAULT_ROLE_PERMISSIONS[lower] <= DEFAULT_ROLE_PERMISSIONS[higher]


def test_owner_holds_every_permission():
    for permission in Permission:
        assert default_engine.has_permission(Role.OWNER, permission)


@pytest.mark.parametrize("role,permission,expected", [
    (Role.VIEWER, Permission.TASK_READ, True),
    (Role.VIEWER, Permission.TASK_CREATE, False),
    (Role.MEMBER, Permission.TASK_UPDATE, True),
    (Role.MEMBER, Permission.TASK_DELETE, False),
    (Role.MEMBER, Permission.ORG_INVITE, False),
    (Role.ADMIN, Permission.ORG_INVITE, True),
    (Role.ADMIN, Permission.MEMBER_REMOVE, True),
    (Role.ADMIN, Permission.MEMBER_UPDATE_ROLE, False),
    (Role.ADMIN, Permission.ORG_DELETE, False),
    (Role.ADMIN, Permission.USER_DELETE, False),
    (Role.OWNER, Permission.MEMBER_UPDATE_ROLE, True),
])
def test_default_table(role, permission, expected):
    assert default_engine.has_permission(role, permission) is expected


def test_role_strings_are_accepted():
    assert default_engine.has_permission("admin", Permission.TASK_DELETE)
    assert not default_engine.has_permission("viewer", Permission.TASK_DELETE)


def test_unknown_role_has_no_permissions():
    assert not default_engine.has_permission("superuser", Permission.TASK_READ)
    assert not default_engine.has_permission(None, Permission.TASK_READ)
    assert default_engine.get_role_permissions("superuser") == frozenset()


def test_resource_owner_id_does_not_change_the_answer():
    for permission in OWNERSHIP_SENSITIVE_PERMISSIONS:
        for role in Role:
            assert default_engine.has_permission(role, permission, resource_owner_id="someone-else") == \
                default_engine.has_permission(role, permission)


def test_any_and_all_permissions():
    perms = [Permission.TASK_DELETE, Permission.TASK_READ]
    assert default_engine.has_any_permission(Role.VIEWER, perms)
    assert not default_engine.has_all_permissions(Role.VIEWER, perms)
    assert default_engine.has_all_permissions(Role.ADMIN, perms)
    assert not default_engine.has_any_permission(Role.VIEWER, [Permission.ORG_DELETE])


def test_injected_table_is_used():
    table = {
        Role.OWNER: {Permission.TASK_READ, Permission.TASK_DELETE},
        Role.ADMIN: {Permission.TASK_READ, Permission.TASK_DELETE},
        Role.MEMBER: {Permission.TASK_READ},
        Role.VIEWER: set(),
    }
    engine = PermissionEngine(table)

    assert engine.has_permission(Role.MEMBER, Permission.TASK_READ)
    assert not engine.has_permission(Role.VIEWER, Permission.TASK_READ)
    assert not engine.has_permission(Role.OWNER, Permission.ORG_DELETE)


def test_engine_table_is_read_only():
    with pytest.raises(TypeError):
        default_engine.table[Role.VIEWER] = frozenset(Permission)


def test_non_monotonic_table_is_rejected():
    table = {
        Role.OWNER: set(),
        Role.ADMIN: {Permission.TASK_DELETE},
        Role.MEMBER: set(),
        Role.VIEWER: set(),
    }
    with pytest.raises(ValueError, match="owner lacks permissions held by admin"):
        PermissionEngine(table)


def test_table_missing_a_role_is_rejected():
    with pytest.raises(ValueError, match="missing roles"):
        PermissionEngine({Role.OWNER: set(Permission)})


def test_role_hierarchy():
    assert is_role_at_least(Role.OWNER, Role.ADMIN)
    assert is_role_at_least("member", Role.MEMBER)
    assert not is_role_at_least(Role.VIEWER, Role.MEMBER)
    assert not is_role_at_least("superuser", Role.VIEWER)


def test_coerce_role():
    assert coerce_role("admin") is Role.ADMIN
    assert coerce_role(Role.VIEWER) is Role.VIEWER
    assert coerce_role("nope") is None
    assert coerce_role(None) is None
