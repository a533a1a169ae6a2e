import pytest

from tasklane.auth.permissions import Role
from tasklane.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from tasklane.models import OrganizationMember
from tasklane.services.invitation_service import InvitationService
from tasklane.services.member_service import MemberService


@pytest.fixture
def service(db):
    return MemberService(db)


def _role(db, user_id):
    member = db.query(OrganizationMember).filter_by(organization_id="org-1", user_id=user_id).first()
    return member.role if member else None


def test_list_members(service, org, actor):
    members = service.list_members(actor("viewer-1", Role.VIEWER))

    assert {m.user_id for m in members} == {"owner-1", "admin-1", "member-1", "viewer-1"}


def test_owner_changes_roles(service, db, org, actor):
    updated = service.update_role(actor("owner-1", Role.OWNER), "member-1", "viewer")

    assert updated.role == "viewer"
    assert _role(db, "member-1") == "viewer"


def test_admin_cannot_change_roles(service, db, org, actor):
    with pytest.raises(ForbiddenError, match="Only owners can change member roles"):
        service.update_role(actor("admin-1", Role.ADMIN), "member-1", "viewer")

    assert _role(db, "member-1") == "member"


def test_owner_role_cannot_be_changed(service, db, org, actor, make_member):
    make_member("owner-2", role="owner")

    with pytest.raises(ForbiddenError, match="Cannot change owner role"):
        service.update_role(actor("owner-1", Role.OWNER), "owner-2", "admin")

    assert _role(db, "owner-2") == "owner"


@pytest.mark.parametrize("new_role", ["owner", "superuser"])
def test_invalid_target_role(service, org, actor, new_role):
    with pytest.raises(ValidationError):
        service.update_role(actor("owner-1", Role.OWNER), "member-1", new_role)


def test_update_role_of_non_member(service, org, actor):
    with pytest.raises(NotFoundError):
        service.update_role(actor("owner-1", Role.OWNER), "stranger", "viewer")


def test_promote_and_demote(service, db, org, actor):
    owner = actor("owner-1", Role.OWNER)

    assert service.promote_to_admin(owner, "member-1").role == "admin"
    with pytest.raises(ConflictError):
        service.promote_to_admin(owner, "member-1")

    assert service.demote_from_admin(owner, "member-1").role == "member"
    with pytest.raises(ConflictError, match="not an admin"):
        service.demote_from_admin(owner, "member-1")


def test_owner_cannot_be_demoted(service, org, actor, make_member):
    make_member("owner-2", role="owner")

    with pytest.raises(ForbiddenError, match="Cannot change owner role"):
        service.demote_from_admin(actor("owner-1", Role.OWNER), "owner-2")


# ---------------------------------------------------------
# removal
# ---------------------------------------------------------

def test_admin_removes_member_but_not_another_admin(service, db, org, actor, make_member):
    make_member("admin-2", role="admin")
    admin = actor("admin-1", Role.ADMIN)

    service.remove_member(admin, "member-1")
    assert _role(db, "member-1") is None

    with pytest.raises(ForbiddenError, match="Admins cannot remove other admins or owners"):
        service.remove_member(admin, "admin-2")
    assert _role(db, "admin-2") == "admin"


def test_admin_cannot_remove_owner(service, db, org, actor):
    with pytest.raises(ForbiddenError):
        service.remove_member(actor("admin-1", Role.ADMIN), "owner-1")

    assert _role(db, "owner-1") == "owner"


def test_admin_removes_viewer(service, db, org, actor):
    service.remove_member(actor("admin-1", Role.ADMIN), "viewer-1")

    assert _role(db, "viewer-1") is None


def test_owner_cannot_remove_self(service, db, org, actor):
    with pytest.raises(ForbiddenError, match="Owners cannot remove themselves"):
        service.remove_member(actor("owner-1", Role.OWNER), "owner-1")

    assert _role(db, "owner-1") == "owner"


def test_owner_removes_admin_and_other_owner(service, db, org, actor, make_member):
    make_member("owner-2", role="owner")
    owner = actor("owner-1", Role.OWNER)

    service.remove_member(owner, "admin-1")
    service.remove_member(owner, "owner-2")

    assert _role(db, "admin-1") is None
    assert _role(db, "owner-2") is None


@pytest.mark.parametrize("user_id,role", [("member-1", Role.MEMBER), ("viewer-1", Role.VIEWER)])
def test_members_and_viewers_remove_nobody(service, db, org, actor, user_id, role):
    with pytest.raises(ForbiddenError, match="Insufficient permissions"):
        service.remove_member(actor(user_id, role), "viewer-1" if user_id != "viewer-1" else "member-1")

    assert _role(db, "viewer-1") == "viewer"
    assert _role(db, "member-1") == "member"


def test_remove_non_member(service, org, actor):
    with pytest.raises(NotFoundError):
        service.remove_member(actor("owner-1", Role.OWNER), "stranger")


def test_removed_member_can_be_reinvited(db, org, actor, service):
    service.remove_member(actor("owner-1", Role.OWNER), "member-1")

    invitation = InvitationService(db).create_invitation(actor("owner-1", Role.OWNER), "member@example.com")
    member = InvitationService(db).accept_invitation(invitation.token)

    assert member.user_id == "member-1"
    assert _role(db, "member-1") == "member"
