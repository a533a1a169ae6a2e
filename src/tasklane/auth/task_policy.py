"""
Task access policy.

Instance-level rules for tasks, layered over role permissions:

- can_view: owner/admin see everything; members see tasks they created or
  are assigned; viewers see only tasks assigned to them
- can_edit: owner/admin edit everything; members edit tasks they created;
  viewers never edit
- can_delete: owner/admin only
- can_mark_complete: the assignee (member or above) may close an open task

All functions are pure. `task` is anything with `status`, `creator_id` and
`assignee_id` attributes (an ORM Task or a plain namespace).
"""
import logging
from typing import Any, Mapping

from tasklane.auth.permissions import Role, coerce_role
from tasklane.errors import ForbiddenError
from tasklane.metrics import access_denied_total
from tasklane.models.task import TaskStatus

logger = logging.getLogger(__name__)

_MANAGERS = (Role.OWNER, Role.ADMIN)


def _is_assignee(task: Any, actor_id: str) -> bool:
    return task.assignee_id is not None and task.assignee_id == actor_id


def _is_creator(task: Any, actor_id: str) -> bool:
    return task.creator_id == actor_id


def can_view(task: Any, actor_id: str, role: str | Role | None) -> bool:
    role = coerce_role(role)
    if role in _MANAGERS:
        return True
    if role == Role.MEMBER:
        return _is_assignee(task, actor_id) or _is_creator(task, actor_id)
    if role == Role.VIEWER:
        return _is_assignee(task, actor_id)
    return False


def can_edit(task: Any, actor_id: str, role: str | Role | None) -> bool:
    """
    Being the assignee is not enough; assignees close work via can_mark_complete.

    authorize_update decides which of the two checks a given update needs.
    """
    role = coerce_role(role)
    if role in _MANAGERS:
        return True
    if role == Role.MEMBER:
        return _is_creator(task, actor_id)
    return False


def can_delete(task: Any, actor_id: str, role: str | Role | None) -> bool:
    return coerce_role(role) in _MANAGERS


def can_mark_complete(task: Any, actor_id: str, role: str | Role | None) -> bool:
    return (
        coerce_role(role) in (Role.MEMBER, Role.ADMIN, Role.OWNER)
        and _is_assignee(task, actor_id)
        and task.status != TaskStatus.DONE
    )


def is_completion_only(changes: Mapping[str, Any]) -> bool:
    """True when the update sets status to done and touches nothing else."""
    return set(changes) == {"status"} and changes["status"] == TaskStatus.DONE


def authorize_update(task: Any, changes: Mapping[str, Any], actor_id: str, role: str | Role | None) -> None:
    """
    Route an update request to the right check.

    A request whose only field is status=done goes through the lenient
    can_mark_complete path; any other field set goes through can_edit.

    Raises:
        ForbiddenError: if the routed check denies the update
    """
    if is_completion_only(changes):
        if not can_mark_complete(task, actor_id, role):
            access_denied_total.labels(check="task_complete").inc()
            logger.warning(f"Mark-complete denied: actor={actor_id} role={role} task={getattr(task, 'id', None)}")
            raise ForbiddenError("You can only mark open tasks assigned to you as complete")
        return

    if not can_edit(task, actor_id, role):
        access_denied_total.labels(check="task_edit").inc()
        logger.warning(f"Edit denied: actor={actor_id} role={role} task={getattr(task, 'id', None)}")
        raise ForbiddenError("You do not have permission to edit this task")
