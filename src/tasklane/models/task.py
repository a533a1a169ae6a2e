import enum

from sqlalchemy import Column, DateTime, String, Text

from tasklane.db.database import Base
from tasklane.models.base_model import org_fk, uuid_pk
from tasklane.models.mixins import TimestampMixin


class TaskStatus(str, enum.Enum):
    DRAFT = "draft"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"
    ARCHIVED = "archived"


class TaskPriority(str, enum.Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Task(Base, TimestampMixin):
    __tablename__ = "tasks"

    id = uuid_pk()
    organization_id = org_fk()

    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")

    status = Column(String(50), nullable=False, default=TaskStatus.TODO.value)
    priority = Column(String(50), nullable=False, default=TaskPriority.MEDIUM.value)

    creator_id = Column(String(255), nullable=False, index=True)
    assignee_id = Column(String(255), nullable=True, index=True)

    # Set when status enters done, cleared when the task is reopened
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Task(id={self.id}, status={self.status}, assignee={self.assignee_id})>"
