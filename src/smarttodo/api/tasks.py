"""Task API routes.

Learn: These routes are the HTTP interface to TaskService. The service
handles all validation and ownership checks; routes just translate HTTP
to service calls and wrap results in the envelope. Errors are raised as
typed AppErrors and rendered by the handlers in smarttodo.errors.

Key patterns:
- PUT is a partial update: only keys present in the JSON body are applied
- task_id is taken as a plain string so a malformed id is the service's
  400, not FastAPI's 422
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo.auth.dependencies import CurrentIdentity, get_current_user
from smarttodo.db.engine import get_db
from smarttodo.db.store import TaskStore
from smarttodo.schemas.envelope import Envelope
from smarttodo.schemas.task import (
    TaskCreate,
    TaskData,
    TaskListData,
    TaskRead,
    TaskUpdate,
)
from smarttodo.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(TaskStore(db))


@router.post(
    "",
    response_model=Envelope[TaskData],
    response_model_exclude_none=True,
    status_code=201,
)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a new task owned by the caller."""
    task = await svc.create_task(
        identity,
        title=body.title,
        description=body.description,
        status=body.status,
    )
    return Envelope(
        message="Task created successfully.",
        data=TaskData(task=TaskRead.model_validate(task)),
    )


@router.get("", response_model=Envelope[TaskListData], response_model_exclude_none=True)
async def list_tasks(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, newest first."""
    tasks = [TaskRead.model_validate(t) for t in await svc.list_tasks(identity)]
    return Envelope(
        message="Tasks retrieved successfully.",
        data=TaskListData(tasks=tasks, count=len(tasks)),
    )


@router.get("/{task_id}", response_model=Envelope[TaskData], response_model_exclude_none=True)
async def get_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Get a single task (owner only)."""
    task = await svc.get_task(identity, task_id)
    return Envelope(
        message="Task retrieved successfully.",
        data=TaskData(task=TaskRead.model_validate(task)),
    )


@router.put("/{task_id}", response_model=Envelope[TaskData], response_model_exclude_none=True)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task (owner only)."""
    task = await svc.update_task(identity, task_id, body.model_dump(exclude_unset=True))
    return Envelope(
        message="Task updated successfully.",
        data=TaskData(task=TaskRead.model_validate(task)),
    )


@router.delete("/{task_id}", response_model=Envelope[dict], response_model_exclude_none=True)
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Delete a task permanently (owner only)."""
    await svc.delete_task(identity, task_id)
    return Envelope(message="Task deleted successfully.")
