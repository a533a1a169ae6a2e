import pytest
from sqlalchemy.exc import IntegrityError

from tasklane.models import OrganizationMember
from tasklane.models.base_model import utcnow
from tasklane.repositories import MembershipRepository


def test_get_role(db, org):
    assert MembershipRepository.get_role(db, "org-1", "admin-1") == "admin"
    assert MembershipRepository.get_role(db, "org-1", "stranger") is None
    assert MembershipRepository.get_role(db, "org-2", "admin-1") is None


def test_one_membership_per_user_and_organization(db, org):
    with pytest.raises(IntegrityError):
        MembershipRepository.add(db, OrganizationMember(
            organization_id="org-1",
            user_id="member-1",
            role="viewer",
            joined_at=utcnow(),
        ))
    db.rollback()

    assert MembershipRepository.get_role(db, "org-1", "member-1") == "member"


def test_list_for_organization_is_oldest_first(db, org):
    members = MembershipRepository.list_for_organization(db, "org-1")

    assert [m.user_id for m in members] == ["owner-1", "admin-1", "member-1", "viewer-1"]


def test_list_for_user_and_delete(db, org):
    assert [m.organization_id for m in MembershipRepository.list_for_user(db, "viewer-1")] == ["org-1"]

    MembershipRepository.delete(db, MembershipRepository.get(db, "org-1", "viewer-1"))
    db.commit()

    assert MembershipRepository.list_for_user(db, "viewer-1") == []
