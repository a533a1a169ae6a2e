import pytest

from tasklane.errors import ValidationError
from tasklane.models import User
from tasklane.services.identity_service import DatabaseIdentityProvider, normalize_email


def test_normalize_email():
    assert normalize_email("  Someone@Example.COM ") == "someone@example.com"
    assert normalize_email(None) == ""


def test_lookup_is_case_insensitive(db, make_user):
    make_user("u-1", email="someone@example.com")
    provider = DatabaseIdentityProvider(db)

    assert provider.lookup_user_by_email("SOMEONE@example.com").id == "u-1"
    assert provider.lookup_user_by_email("nobody@example.com") is None
    assert provider.lookup_user_by_email("") is None


def test_create_user_flushes_without_committing(db):
    provider = DatabaseIdentityProvider(db)

    user_id = provider.create_user("New@Example.com", "long enough", {"first_name": "Nia"})

    assert db.get(User, user_id).email == "new@example.com"
    db.rollback()
    assert db.get(User, user_id) is None


@pytest.mark.parametrize("password", [None, "", "short"])
def test_create_user_requires_password(db, password):
    with pytest.raises(ValidationError, match="at least 8 characters"):
        DatabaseIdentityProvider(db).create_user("new@example.com", password, {})
