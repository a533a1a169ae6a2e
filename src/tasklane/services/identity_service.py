"""
Identity store boundary.

The invitation flow needs two things from the identity provider: find a
user by email, and provision a user when someone accepts an invitation
without an account. IdentityProvider is that boundary;
DatabaseIdentityProvider is the default, backed by the local users table.
"""
import logging
from typing import Any, Dict, Optional, Protocol

from sqlalchemy.orm import Session

from tasklane.errors import ValidationError
from tasklane.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class IdentityProvider(Protocol):
    def lookup_user_by_email(self, email: str) -> Optional[User]:
        ...

    def create_user(self, email: str, password: str, profile: Dict[str, Any]) -> str:
        ...


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class DatabaseIdentityProvider:
    """
    Identity provider backed by the users table.

    create_user only flushes, so the new profile commits or rolls back with
    the caller's transaction. Passwords are checked for length and then
    handed to the upstream auth service; they are never stored here.
    """

    def __init__(self, db: Session):
        self.db = db

    def lookup_user_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        if not email:
            return None
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, email: str, password: str, profile: Dict[str, Any]) -> str:
        """
        Provision a user profile for an invitee who has no account yet.

        Args:
            email: Invitee email
            password: Initial password chosen at acceptance time
            profile: first_name / last_name

        Returns:
            New user id

        Raises:
            ValidationError: if the password is missing or too short
        """
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        user = User(
            email=normalize_email(email),
            first_name=profile.get("first_name"),
            last_name=profile.get("last_name"),
        )
        self.db.add(user)
        self.db.flush()

        logger.info(f"Provisioned user {user.id} for {user.email}")
        return user.id
