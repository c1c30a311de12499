"""Task service — business logic for owner-scoped task CRUD.

Learn: Every operation on an existing task follows the same fixed sequence,
and the order matters:

1. Parse the id            → 400 if it is not a UUID
2. Look the task up        → 404 if it does not exist
3. Ask the authorizer      → 403 if the caller is not the owner
4. Validate + apply fields → 400 on bad title/status
5. One store write         → 500 if the store fails

Create never takes an owner from the caller; the owner is always the
authenticated identity handed in by the auth gate.
"""

import uuid
from typing import Optional

import structlog

from smarttodo.auth.dependencies import CurrentIdentity
from smarttodo.auth.ownership import Decision, authorize
from smarttodo.db.models import TASK_STATUSES, Task
from smarttodo.db.store import TaskStore
from smarttodo.errors import Forbidden, NotFound, ValidationFailed, store_failures

logger = structlog.get_logger()

TITLE_MAX_LENGTH = 200

_STATUS_MESSAGE = 'Status must be either "pending" or "completed".'


def _clean_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise ValidationFailed("Title is required.")
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationFailed(f"Title must be at most {TITLE_MAX_LENGTH} characters.")
    return title


def _clean_status(status: Optional[str]) -> str:
    if status not in TASK_STATUSES:
        raise ValidationFailed(_STATUS_MESSAGE)
    return status


def parse_task_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ValidationFailed("Invalid task ID format.")


class TaskService:
    """Business logic for task CRUD, scoped to one owner per call."""

    def __init__(self, store: TaskStore):
        self.store = store

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        identity: CurrentIdentity,
        title: Optional[str],
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Task:
        """Create a task owned by the caller, in 'pending' unless told otherwise."""
        clean_title = _clean_title(title)
        clean_status = "pending" if status is None else _clean_status(status)

        with store_failures("Server error while creating task."):
            task = await self.store.create(
                owner_id=identity.user_id,
                title=clean_title,
                description=(description or "").strip(),
                status=clean_status,
            )
        logger.info("task.created", task_id=str(task.id), owner_id=str(identity.user_id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, identity: CurrentIdentity) -> list[Task]:
        with store_failures("Server error while retrieving tasks."):
            return await self.store.list_for_owner(identity.user_id)

    async def get_task(self, identity: CurrentIdentity, task_id: str) -> Task:
        with store_failures("Server error while retrieving task."):
            return await self._owned_task(identity, task_id, "view")

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        identity: CurrentIdentity,
        task_id: str,
        changes: dict,
    ) -> Task:
        """Apply the fields present in `changes`; absent fields are untouched.

        Learn: an omitted status is a no-op, but an explicit status outside
        pending/completed is rejected, even if it is null.
        """
        with store_failures("Server error while updating task."):
            task = await self._owned_task(identity, task_id, "update")

            updates = {}
            if "title" in changes:
                updates["title"] = _clean_title(changes["title"])
            if "description" in changes:
                updates["description"] = (changes["description"] or "").strip()
            if "status" in changes:
                updates["status"] = _clean_status(changes["status"])

            for field, value in updates.items():
                setattr(task, field, value)
            task = await self.store.save(task)
        logger.info("task.updated", task_id=str(task.id), fields=sorted(changes))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, identity: CurrentIdentity, task_id: str) -> None:
        with store_failures("Server error while deleting task."):
            task = await self._owned_task(identity, task_id, "delete")
            await self.store.delete(task)
        logger.info("task.deleted", task_id=task_id)

    # ─── Helpers ─────────────────────────────────────────

    async def _owned_task(self, identity: CurrentIdentity, task_id: str, action: str) -> Task:
        """Steps 1-3: id shape, existence, ownership."""
        tid = parse_task_id(task_id)
        task = await self.store.get(tid)
        if task is None:
            raise NotFound("Task not found.")

        if authorize(task.owner_id, identity.user_id) is Decision.DENY:
            logger.warning(
                "task.forbidden",
                task_id=str(tid),
                owner_id=str(task.owner_id),
                user_id=str(identity.user_id),
                action=action,
            )
            raise Forbidden(f"Access denied. You can only {action} your own tasks.")
        return task
