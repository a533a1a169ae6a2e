"""
API routes for tasks in the current organization.

Endpoints:
- POST /tasks - Create a task
- GET /tasks - List tasks visible to the caller
- GET /tasks/{task_id} - Get a task
- PATCH /tasks/{task_id} - Update a task (or just mark it done)
- DELETE /tasks/{task_id} - Delete a task
"""
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from tasklane.auth.context import ActorContext
from tasklane.auth.permissions import Permission, PermissionEngine
from tasklane.auth.rbac import get_permission_engine, require_permission
from tasklane.db.database import get_db
from tasklane.models.task import TaskPriority, TaskStatus
from tasklane.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


class CreateTaskRequest(BaseModel):
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    assignee_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Write release notes",
                "priority": "high",
                "assignee_id": "user_2abc"
            }
        }


class UpdateTaskRequest(BaseModel):
    """Partial update. A body with only status=done is a completion request."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[str] = None


class TaskResponse(BaseModel):
    id: UUID
    organization_id: str
    title: str
    description: str
    status: str
    priority: str
    creator_id: str
    assignee_id: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    request: CreateTaskRequest,
    actor: ActorContext = Depends(require_permission(Permission.TASK_CREATE)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    return TaskService(db, engine).create_task(
        actor,
        title=request.title,
        description=request.description,
        priority=request.priority,
        status=request.status,
        assignee_id=request.assignee_id
    )


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    status_filter: Optional[List[TaskStatus]] = Query(None, alias="status"),
    actor: ActorContext = Depends(require_permission(Permission.TASK_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    List tasks the caller can see, optionally filtered by status.
    """
    return TaskService(db, engine).list_tasks(actor, status_filter)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: UUID,
    actor: ActorContext = Depends(require_permission(Permission.TASK_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    return TaskService(db, engine).get_task(actor, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: UUID,
    request: UpdateTaskRequest,
    actor: ActorContext = Depends(require_permission(Permission.TASK_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    """
    Update a task.

    Assignees may mark their open task done even without edit rights;
    every other change requires edit rights on the task.
    """
    changes = request.model_dump(exclude_unset=True)
    return TaskService(db, engine).update_task(actor, task_id, changes)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: UUID,
    actor: ActorContext = Depends(require_permission(Permission.TASK_READ)),
    engine: PermissionEngine = Depends(get_permission_engine),
    db: Session = Depends(get_db)
):
    TaskService(db, engine).delete_task(actor, task_id)
