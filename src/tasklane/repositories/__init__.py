# src/tasklane/repositories/__init__.py
from .invitation_repository import InvitationRepository
from .membership_repository import MembershipRepository

__all__ = [
    "InvitationRepository",
    "MembershipRepository",
]
