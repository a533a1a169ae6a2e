from tasklane.db.database import Base

# Import all models so Alembic and create_all can discover them
from .organization import Organization
from .organization_member import OrganizationMember, JoinedVia
from .organization_invitation import OrganizationInvitation, InvitationStatus
from .task import Task, TaskStatus, TaskPriority
from .user import User
from .notification import Notification
