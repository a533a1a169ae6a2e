import pytest

from tasklane.errors import ValidationError
from tasklane.models import OrganizationMember
from tasklane.services.organization_service import OrganizationService


def test_create_organization_makes_creator_owner(db):
    service = OrganizationService(db)

    organization = service.create_organization("user-1", "  Acme  ", "Platform team")

    assert organization.name == "Acme"
    assert organization.owner_id == "user-1"

    member = db.query(OrganizationMember).filter_by(organization_id=organization.id).one()
    assert member.user_id == "user-1"
    assert member.role == "owner"
    assert member.joined_via == "owner"


def test_create_organization_requires_name(db):
    with pytest.raises(ValidationError):
        OrganizationService(db).create_organization("user-1", "   ")

    assert db.query(OrganizationMember).count() == 0


def test_get_user_organizations_and_role(db, org):
    service = OrganizationService(db)
    other = service.create_organization("admin-1", "Side project")

    roles = {o["name"]: o["role"] for o in service.get_user_organizations("admin-1")}

    assert roles == {"Acme": "admin", "Side project": "owner"}
    assert service.get_member_role("admin-1", "org-1") == "admin"
    assert service.get_member_role("admin-1", other.id) == "owner"
    assert service.get_member_role("stranger", "org-1") is None
    assert service.get_user_organizations("stranger") == []
