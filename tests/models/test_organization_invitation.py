from datetime import datetime, timedelta, timezone

from tasklane.models import OrganizationInvitation
from tasklane.models.base_model import as_utc


def _invitation(expires_at, status="pending"):
    return OrganizationInvitation(
        organization_id="org-1",
        invited_by="owner-1",
        invited_email="x@example.com",
        role="member",
        token="tok",
        status=status,
        expires_at=expires_at,
    )


def test_is_expired_compares_against_now():
    now = datetime(2026, 1, 10, tzinfo=timezone.utc)

    assert _invitation(now - timedelta(seconds=1)).is_expired(now)
    assert not _invitation(now + timedelta(days=1)).is_expired(now)


def test_is_expired_treats_naive_timestamps_as_utc():
    now = datetime(2026, 1, 10, tzinfo=timezone.utc)
    naive = datetime(2026, 1, 9, 23, 0)

    assert _invitation(naive).is_expired(now)
    assert as_utc(naive).tzinfo is timezone.utc


def test_is_terminal():
    future = datetime.now(timezone.utc) + timedelta(days=1)

    assert not _invitation(future).is_terminal
    for status in ("accepted", "declined", "expired"):
        assert _invitation(future, status=status).is_terminal
