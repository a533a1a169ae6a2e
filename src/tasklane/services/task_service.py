"""
Task service: task CRUD routed through the task access policy.

Every call is scoped to the actor's organization; a task from another
organization is reported as not found.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from tasklane.auth import task_policy
from tasklane.auth.context import ActorContext
from tasklane.auth.permissions import Permission, PermissionEngine, default_engine
from tasklane.errors import ForbiddenError, NotFoundError, ValidationError
from tasklane.metrics import access_denied_total
from tasklane.models.base_model import utcnow
from tasklane.models.task import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "status", "priority", "assignee_id"})
NON_NULLABLE_FIELDS = frozenset({"title", "description", "status", "priority"})


def _parse_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid task status: {value}")


def _parse_priority(value: Any) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        raise ValidationError(f"Invalid task priority: {value}")


class TaskService:

    def __init__(self, db: Session, engine: PermissionEngine = default_engine):
        self.db = db
        self.engine = engine

    def create_task(
        self,
        actor: ActorContext,
        title: str,
        description: str = "",
        priority: str | TaskPriority = TaskPriority.MEDIUM,
        status: str | TaskStatus = TaskStatus.TODO,
        assignee_id: Optional[str] = None
    ) -> Task:
        if not self.engine.has_permission(actor.role, Permission.TASK_CREATE):
            access_denied_total.labels(check="task_create").inc()
            logger.warning(f"Task create denied: user={actor.actor_id} role={actor.role.value}")
            raise ForbiddenError(f"Permission denied. Required permission: {Permission.TASK_CREATE.value}")

        title = (title or "").strip()
        if not title:
            raise ValidationError("Task title is required")

        status = _parse_status(status)
        now = utcnow()
        task = Task(
            organization_id=actor.organization_id,
            title=title,
            description=description or "",
            status=status.value,
            priority=_parse_priority(priority).value,
            creator_id=actor.actor_id,
            assignee_id=assignee_id,
            created_at=now,
            updated_at=now,
            completed_at=now if status == TaskStatus.DONE else None,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Created task {task.id} in {actor.organization_id} by {actor.actor_id}")
        return task

    def list_tasks(self, actor: ActorContext, status: Optional[List[TaskStatus]] = None) -> List[Task]:
        """
        List the tasks in the actor's organization that the actor may see.
        """
        query = self.db.query(Task).filter(Task.organization_id == actor.organization_id)
        if status:
            query = query.filter(Task.status.in_([_parse_status(s).value for s in status]))
        tasks = query.order_by(Task.created_at.desc()).all()
        return [t for t in tasks if task_policy.can_view(t, actor.actor_id, actor.role)]

    def get_task(self, actor: ActorContext, task_id: UUID) -> Task:
        task = self.db.query(Task).filter(
            Task.id == task_id,
            Task.organization_id == actor.organization_id
        ).first()
        if not task:
            raise NotFoundError("Task not found")

        if not task_policy.can_view(task, actor.actor_id, actor.role):
            access_denied_total.labels(check="task_view").inc()
            raise ForbiddenError("You do not have permission to access this task")

        return task

    def update_task(self, actor: ActorContext, task_id: UUID, changes: Mapping[str, Any]) -> Task:
        """
        Apply a partial update to a task.

        A request that only sets status to done is checked with the lenient
        mark-complete rule; anything else needs general edit rights.
        Entering done stamps completed_at; leaving done clears it.

        Raises:
            NotFoundError: task is not in the actor's organization
            ForbiddenError: the routed access check failed
            ValidationError: empty update, unknown field or bad value
        """
        if not changes:
            raise ValidationError("No fields to update")

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown task fields: {sorted(unknown)}")

        nulled = sorted(field for field in NON_NULLABLE_FIELDS if field in changes and changes[field] is None)
        if nulled:
            raise ValidationError(f"Task fields cannot be null: {nulled}")

        normalized: Dict[str, Any] = dict(changes)
        if "status" in normalized:
            normalized["status"] = _parse_status(normalized["status"])
        if "priority" in normalized:
            normalized["priority"] = _parse_priority(normalized["priority"])
        if "title" in normalized and not (normalized["title"] or "").strip():
            raise ValidationError("Task title cannot be empty")

        task = self.get_task(actor, task_id)
        task_policy.authorize_update(task, normalized, actor.actor_id, actor.role)

        previous_status = task.status
        for field, value in normalized.items():
            setattr(task, field, value.value if isinstance(value, (TaskStatus, TaskPriority)) else value)

        now = utcnow()
        if "status" in normalized:
            if normalized["status"] == TaskStatus.DONE and previous_status != TaskStatus.DONE:
                task.completed_at = now
            elif normalized["status"] != TaskStatus.DONE and previous_status == TaskStatus.DONE:
                task.completed_at = None
        task.updated_at = now

        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Updated task {task.id} fields={sorted(normalized)} by {actor.actor_id}")
        return task

    def delete_task(self, actor: ActorContext, task_id: UUID) -> None:
        task = self.get_task(actor, task_id)

        if not task_policy.can_delete(task, actor.actor_id, actor.role):
            access_denied_total.labels(check="task_delete").inc()
            logger.warning(f"Task delete denied: user={actor.actor_id} role={actor.role.value} task={task_id}")
            raise ForbiddenError("You do not have permission to delete this task")

        self.db.delete(task)
        self.db.commit()
        logger.info(f"Deleted task {task_id} by {actor.actor_id}")
