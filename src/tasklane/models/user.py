from uuid import uuid4

from sqlalchemy import Column, String

from tasklane.db.database import Base
from tasklane.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Local profile of an identity-provider user. Credentials live upstream."""
    __tablename__ = "users"

    id = Column(String(255), primary_key=True, default=lambda: str(uuid4()))
    email = Column(String(320), unique=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email
