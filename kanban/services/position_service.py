"""
Task ordering within board columns.

Every (project_id, status) pair is a partition whose task orders must be
exactly 0..n-1. All writers lock the owning project row first, so two
requests touching the same board serialize on that lock.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    is_conflict_error,
)
from kanban.models.project import Project
from kanban.models.task import Task, TaskStatus

logger = logging.getLogger(__name__)


def clamp_order(order: int | None, upper: int) -> int:
    """Clamp a requested position to [0, upper]; None means the end."""
    if order is None:
        return upper
    return max(0, min(order, upper))


def coerce_status(value: Any) -> TaskStatus | None:
    """Accept a TaskStatus, its string value or None."""
    if value is None or isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise InvalidArgumentError(
            code="INVALID_STATUS",
            message=f"Status must be one of: {allowed}",
        ) from None


class TaskPositionManager:
    """
    Maintains dense task orders across create, move and delete.

    Runs inside the caller's transaction and only flushes; the session
    owner commits or rolls back.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # Create
    # -----------------------------------------------------------------------

    async def create_task(
        self,
        project_id: UUID,
        status: TaskStatus | str | None,
        title: str,
        description: str | None = None,
        assigned_to_id: UUID | None = None,
    ) -> Task:
        """Append a new task at the end of its column."""
        status = coerce_status(status)
        with self._translate_conflicts("create", project_id):
            await self.lock_project(project_id)
            size = await self.partition_size(project_id, status)

            task = Task(
                project_id=project_id,
                title=title,
                description=description,
                status=status,
                order=size,
                assigned_to_id=assigned_to_id,
            )
            self.db.add(task)
            await self.db.flush()
            await self.db.refresh(task)

        logger.info(
            "Task created: id=%s project_id=%s status=%s order=%s",
            task.id, project_id, _label(status), task.order,
        )
        return task

    # -----------------------------------------------------------------------
    # Move
    # -----------------------------------------------------------------------

    async def move_task(
        self,
        task_id: UUID,
        status: TaskStatus | str | None,
        order: int | None = None,
    ) -> Task:
        """
        Move a task to position `order` of column `status`.

        Cross-column: the destination opens a slot at the new position and
        the source closes the gap. Same column: the tasks between the old
        and new position shift by one towards the vacated slot.

        `order` is clamped to the destination's bounds; None appends.
        """
        status = coerce_status(status)
        task = await self.get_task(task_id)

        with self._translate_conflicts("move", task.project_id):
            await self.lock_project(task.project_id)
            # Re-read under the lock; a concurrent move may have shifted it.
            task = await self.get_task(task_id)
            project_id = task.project_id
            old_status, old_order = task.status, task.order

            if status != old_status:
                new_order = clamp_order(order, await self.partition_size(project_id, status))
                await self._shift(project_id, status, Task.order >= new_order, 1, task.id)
                await self._shift(project_id, old_status, Task.order > old_order, -1, task.id)
            else:
                upper = await self.partition_size(project_id, status) - 1
                new_order = clamp_order(order, upper)
                if old_order == new_order:
                    return task
                if old_order < new_order:
                    await self._shift(
                        project_id,
                        status,
                        (Task.order > old_order) & (Task.order <= new_order),
                        -1,
                        task.id,
                    )
                else:
                    await self._shift(
                        project_id,
                        status,
                        (Task.order >= new_order) & (Task.order < old_order),
                        1,
                        task.id,
                    )

            task.status = status
            task.order = new_order
            await self.db.flush()
            await self.db.refresh(task)

        logger.debug(
            "Task moved: id=%s %s[%s] -> %s[%s]",
            task.id, _label(old_status), old_order, _label(status), new_order,
        )
        return task

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------

    async def delete_task(self, task_id: UUID) -> None:
        """Delete a task and close the gap it leaves in its column."""
        task = await self.get_task(task_id)

        with self._translate_conflicts("delete", task.project_id):
            await self.lock_project(task.project_id)
            task = await self.get_task(task_id)
            await self._shift(
                task.project_id, task.status, Task.order > task.order, -1, task.id
            )
            await self.db.delete(task)
            await self.db.flush()

        logger.info(
            "Task deleted: id=%s project_id=%s status=%s",
            task_id, task.project_id, _label(task.status),
        )

    # -----------------------------------------------------------------------
    # Repair
    # -----------------------------------------------------------------------

    async def normalize_partition(
        self, project_id: UUID, status: TaskStatus | str | None
    ) -> int:
        """
        Rewrite a column's orders to 0..n-1, keeping relative order.

        Ties are broken by creation time. Returns the number of tasks whose
        order changed.
        """
        status = coerce_status(status)
        changed = 0
        with self._translate_conflicts("normalize", project_id):
            await self.lock_project(project_id)
            tasks = await self.partition(project_id, status)
            for index, task in enumerate(tasks):
                if task.order != index:
                    task.order = index
                    changed += 1
            await self.db.flush()

        if changed:
            logger.warning(
                "Partition normalized: project_id=%s status=%s changed=%s",
                project_id, _label(status), changed,
            )
        return changed

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def get_task(self, task_id: UUID) -> Task:
        result = await self.db.execute(
            select(Task)
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError(code="TASK_NOT_FOUND", message="Task not found")
        return task

    async def partition(self, project_id: UUID, status: TaskStatus | None) -> list[Task]:
        """Tasks of one column sorted by order."""
        result = await self.db.execute(
            select(Task)
            .where(Task.project_id == project_id, _status_is(status))
            .order_by(Task.order, Task.created_at, Task.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def partition_size(self, project_id: UUID, status: TaskStatus | None) -> int:
        result = await self.db.execute(
            select(func.count(Task.id)).where(
                Task.project_id == project_id, _status_is(status)
            )
        )
        return result.scalar_one()

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def lock_project(self, project_id: UUID) -> None:
        """SELECT ... FOR UPDATE on the project row; no-op lock on SQLite."""
        result = await self.db.execute(
            select(Project.id).where(Project.id == project_id).with_for_update()
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError(code="PROJECT_NOT_FOUND", message="Project not found")

    async def _shift(
        self,
        project_id: UUID,
        status: TaskStatus | None,
        condition: ColumnElement[bool],
        delta: int,
        exclude_id: UUID,
    ) -> None:
        await self.db.execute(
            update(Task)
            .where(
                Task.project_id == project_id,
                _status_is(status),
                condition,
                Task.id != exclude_id,
            )
            .values(order=Task.order + delta)
        )

    @contextmanager
    def _translate_conflicts(self, operation: str, project_id: UUID) -> Iterator[None]:
        try:
            yield
        except DBAPIError as exc:
            if not is_conflict_error(exc):
                raise
            logger.warning(
                "Task %s aborted by concurrent writer: project_id=%s error=%s",
                operation, project_id, exc.orig,
            )
            raise ConflictError() from exc


def _status_is(status: TaskStatus | None) -> ColumnElement[bool]:
    if status is None:
        return Task.status.is_(None)
    return Task.status == status


def _label(status: TaskStatus | None) -> str:
    return status.value if status is not None else "backlog"
