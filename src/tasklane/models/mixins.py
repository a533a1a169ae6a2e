"""
Mixins for SQLAlchemy models.
Provides reusable column sets for audit trails and timestamps.
"""
from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func


class TimestampMixin:
    """
    Adds created_at / updated_at columns to any model.

    Usage:
        class MyModel(Base, TimestampMixin):
            __tablename__ = "my_table"
            id = Column(UUID, primary_key=True)
            # created_at, updated_at are inherited automatically
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="UTC timestamp when record was created"
    )

    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now(),
        comment="UTC timestamp when record was last updated"
    )
