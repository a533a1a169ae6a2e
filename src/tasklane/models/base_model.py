"""Standard column definitions and time helpers for consistency."""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID


def uuid_pk():
    return Column(UUID(as_uuid=True), primary_key=True, default=uuid4, nullable=False)


def org_fk(nullable: bool = False, ondelete: str = "CASCADE"):
    return Column(
        String(255),
        ForeignKey("organizations.id", ondelete=ondelete),
        nullable=nullable,
        index=True
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
