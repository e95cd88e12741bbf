"""Task service — owner-scoped CRUD with a read-through response cache.

Learn: Every query carries `user_email == owner`, so a task that belongs
to someone else behaves exactly like one that does not exist (NotFound,
never a permission error).

Caching rules:
1. Reads check the cache first, then query and populate it.
2. Reads capture the cache generation before querying and store with
   set_if_current(), so a write that lands mid-read wins.
3. Writes invalidate the owner's list key, plus the per-task key for
   update/delete, after the commit succeeds.

Cached values are TaskRead dicts, never ORM instances.
"""

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.cache import ResponseCache, task_key, task_list_key
from taskmanager.db.models import MAX_TASK_ID, Task
from taskmanager.errors import NotFound
from taskmanager.schemas.task import TaskRead

logger = structlog.get_logger()


def _serialize(task: Task) -> dict:
    return TaskRead.model_validate(task).model_dump()


class TaskService:
    """Business logic for one user's tasks."""

    def __init__(self, db: AsyncSession, cache: ResponseCache, owner: str):
        self.db = db
        self.cache = cache
        self.owner = owner

    # ─── Create ──────────────────────────────────────────

    async def add_task(
        self,
        title: str,
        description: str = "",
        completed: bool = False,
    ) -> Task:
        task = Task(
            title=title,
            description=description,
            completed=completed,
            user_email=self.owner,
        )
        self.db.add(task)
        await self.db.commit()

        self.cache.invalidate(task_list_key(self.owner))
        logger.info("tasks.created", task_id=task.id, owner=self.owner)
        return task

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self) -> list[dict]:
        key = task_list_key(self.owner)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("tasks.cache_hit", key=key)
            return cached

        generation = self.cache.generation()
        result = await self.db.execute(
            select(Task).where(Task.user_email == self.owner).order_by(Task.id)
        )
        tasks = [_serialize(t) for t in result.scalars().all()]
        self.cache.set_if_current(key, tasks, generation)
        return tasks

    async def get_task(self, task_id: int) -> dict:
        """Return one task, or raise NotFound if (id, owner) has no row."""
        self._require_storable(task_id)
        key = task_key(self.owner, task_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("tasks.cache_hit", key=key)
            return cached

        generation = self.cache.generation()
        result = await self.db.execute(
            select(Task).where(Task.id == task_id, Task.user_email == self.owner)
        )
        task = result.scalars().first()
        if not task:
            raise NotFound("Task not found")

        data = _serialize(task)
        self.cache.set_if_current(key, data, generation)
        return data

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        task_id: int,
        title: str,
        description: str = "",
        completed: bool = False,
    ) -> None:
        self._require_storable(task_id)
        result = await self.db.execute(
            update(Task)
            .where(Task.id == task_id, Task.user_email == self.owner)
            .values(title=title, description=description, completed=completed)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Task not found")
        await self.db.commit()

        self._invalidate(task_id)
        logger.info("tasks.updated", task_id=task_id, owner=self.owner)

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: int) -> None:
        self._require_storable(task_id)
        result = await self.db.execute(
            delete(Task).where(Task.id == task_id, Task.user_email == self.owner)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Task not found")
        await self.db.commit()

        self._invalidate(task_id)
        logger.info("tasks.deleted", task_id=task_id, owner=self.owner)

    @staticmethod
    def _require_storable(task_id: int) -> None:
        # Ids the column cannot hold would make the driver raise
        if not 1 <= task_id <= MAX_TASK_ID:
            raise NotFound("Task not found")

    def _invalidate(self, task_id: int) -> None:
        self.cache.invalidate(
            task_list_key(self.owner),
            task_key(self.owner, task_id),
        )
