"""Store layer — the only code that talks to the ORM session.

Learn: Two small repositories, UserStore (the credential store) and
TaskStore. Each exposes create/find/update/delete keyed by identifier and
nothing else. SQLAlchemy errors never escape: they are re-raised as
StoreError (or DuplicateKeyError for unique-constraint violations), so
callers match on a type they own instead of poking at driver exceptions.

Each write method commits exactly one logical change.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo.db.models import Task, User


class StoreError(Exception):
    """Raised when the storage backend fails."""


class DuplicateKeyError(StoreError):
    """Raised when a write violates a unique constraint."""


class UserStore:
    """Persistence for user records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        try:
            return await self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreError(f"user lookup failed: {e}") from e

    async def get_by_username(self, username: str) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.username == username))
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreError(f"user lookup failed: {e}") from e

    async def create(self, username: str, password_hash: str) -> User:
        user = User(username=username, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateKeyError(f"username {username!r} already exists") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(f"user insert failed: {e}") from e
        return user


class TaskStore:
    """Persistence for task records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        owner_id: uuid.UUID,
        title: str,
        description: str,
        status: str,
    ) -> Task:
        task = Task(
            owner_id=owner_id,
            title=title,
            description=description,
            status=status,
        )
        self.db.add(task)
        await self._commit("task insert failed", refresh=task)
        return task

    async def get(self, task_id: uuid.UUID) -> Optional[Task]:
        try:
            return await self.db.get(Task, task_id)
        except SQLAlchemyError as e:
            raise StoreError(f"task lookup failed: {e}") from e

    async def list_for_owner(self, owner_id: uuid.UUID) -> list[Task]:
        """All tasks owned by owner_id, newest first."""
        q = (
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.created_at.desc())
        )
        try:
            result = await self.db.execute(q)
        except SQLAlchemyError as e:
            raise StoreError(f"task listing failed: {e}") from e
        return list(result.scalars().all())

    async def save(self, task: Task) -> Task:
        await self._commit("task update failed", refresh=task)
        return task

    async def delete(self, task: Task) -> None:
        try:
            await self.db.delete(task)
        except SQLAlchemyError as e:
            raise StoreError(f"task delete failed: {e}") from e
        await self._commit("task delete failed")

    async def _commit(self, what: str, refresh: Optional[Task] = None) -> None:
        try:
            await self.db.commit()
            if refresh is not None:
                await self.db.refresh(refresh)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(f"{what}: {e}") from e
