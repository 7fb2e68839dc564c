"""
Task business logic.

Handles task CRUD and board views. Every write that affects a task's
column or position goes through TaskPositionManager.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.models.member import ProjectMember
from kanban.models.task import Task, TaskStatus
from kanban.models.user import User
from kanban.schemas.task import (
    BoardResponse,
    PartitionNormalizeResponse,
    TaskCreateRequest,
    TaskListResponse,
    TaskMoveRequest,
    TaskResponse,
    TaskUpdateRequest,
    UserSummaryResponse,
)
from kanban.services.position_service import TaskPositionManager

logger = logging.getLogger(__name__)

BACKLOG = "backlog"


class TaskService:
    """Handles all task operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.positions = TaskPositionManager(db)

    # -----------------------------------------------------------------------
    # List Tasks
    # -----------------------------------------------------------------------

    async def list_tasks(
        self,
        project_id: UUID,
        status_filter: str | None = None,
        assigned_to_id: UUID | None = None,
    ) -> TaskListResponse:
        """List tasks of a project sorted by column then order."""
        stmt = select(Task).where(Task.project_id == project_id)

        if status_filter == BACKLOG:
            stmt = stmt.where(Task.status.is_(None))
        elif status_filter is not None:
            stmt = stmt.where(Task.status == TaskStatus(status_filter))
        if assigned_to_id is not None:
            stmt = stmt.where(Task.assigned_to_id == assigned_to_id)

        stmt = stmt.order_by(Task.status, Task.order, Task.created_at).execution_options(
            populate_existing=True
        )
        result = await self.db.execute(stmt)
        tasks = await self._to_responses(list(result.scalars().all()))
        return TaskListResponse(tasks=tasks, total=len(tasks))

    async def get_board(self, project_id: UUID) -> BoardResponse:
        """Group all tasks of a project into columns sorted by order."""
        result = await self.db.execute(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.order, Task.created_at)
            .execution_options(populate_existing=True)
        )

        tasks = list(result.scalars().all())

        columns: dict[str, list[TaskResponse]] = {s.value: [] for s in TaskStatus}
        backlog: list[TaskResponse] = []
        for task, item in zip(tasks, await self._to_responses(tasks)):
            if task.status is None:
                backlog.append(item)
            else:
                columns[task.status.value].append(item)

        return BoardResponse(project_id=project_id, columns=columns, backlog=backlog)

    # -----------------------------------------------------------------------
    # Create / Get
    # -----------------------------------------------------------------------

    async def create_task(self, project_id: UUID, data: TaskCreateRequest) -> TaskResponse:
        """Create a task at the end of its column."""
        if data.assigned_to_id is not None:
            await self._verify_member(project_id, data.assigned_to_id)

        task = await self.positions.create_task(
            project_id=project_id,
            status=data.status,
            title=data.title,
            description=data.description,
            assigned_to_id=data.assigned_to_id,
        )
        return await self._to_response(task)

    async def get_task(self, task_id: UUID) -> TaskResponse:
        task = await self.positions.get_task(task_id)
        return await self._to_response(task)

    # -----------------------------------------------------------------------
    # Update Task
    # -----------------------------------------------------------------------

    async def update_task(self, task_id: UUID, data: TaskUpdateRequest) -> TaskResponse:
        """
        Partially update a task.

        Fields explicitly sent as null clear the value. A status change
        appends the task to the end of the new column.

        The project row is locked before any write so this path takes locks
        in the same order as the position manager.
        """
        task = await self.positions.get_task(task_id)
        await self.positions.lock_project(task.project_id)
        task = await self.positions.get_task(task_id)
        fields_set = data.model_fields_set

        if data.title is not None:
            task.title = data.title

        if "description" in fields_set:
            task.description = data.description

        if "assigned_to_id" in fields_set:
            if data.assigned_to_id is not None:
                await self._verify_member(task.project_id, data.assigned_to_id)
            task.assigned_to_id = data.assigned_to_id

        await self.db.flush()

        if "status" in fields_set and data.status != task.status:
            task = await self.positions.move_task(task.id, data.status)
        else:
            await self.db.refresh(task)

        return await self._to_response(task)

    # -----------------------------------------------------------------------
    # Move / Delete
    # -----------------------------------------------------------------------

    async def move_task(self, task_id: UUID, command: TaskMoveRequest) -> TaskResponse:
        task = await self.positions.move_task(task_id, command.status, command.order)
        return await self._to_response(task)

    async def delete_task(self, task_id: UUID) -> None:
        await self.positions.delete_task(task_id)

    async def normalize_column(
        self, project_id: UUID, column: TaskStatus | None
    ) -> PartitionNormalizeResponse:
        changed = await self.positions.normalize_partition(project_id, column)
        return PartitionNormalizeResponse(status=column, changed=changed)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _verify_member(self, project_id: UUID, user_id: UUID) -> None:
        """Verify a user belongs to the project before assigning them."""
        result = await self.db.execute(
            select(ProjectMember.id).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        )
        if result.scalar_one_or_none() is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "code": "USER_NOT_A_MEMBER",
                    "message": "Assignee is not a member of this project",
                },
            )

    async def _to_response(self, task: Task) -> TaskResponse:
        return (await self._to_responses([task]))[0]

    async def _to_responses(self, tasks: list[Task]) -> list[TaskResponse]:
        """Build responses, loading all assignees in one query."""
        user_ids = {t.assigned_to_id for t in tasks if t.assigned_to_id is not None}
        users: dict[UUID, User] = {}
        if user_ids:
            result = await self.db.execute(select(User).where(User.id.in_(user_ids)))
            users = {u.id: u for u in result.scalars().all()}

        responses = []
        for task in tasks:
            assignee = users.get(task.assigned_to_id) if task.assigned_to_id else None
            responses.append(
                TaskResponse(
                    id=task.id,
                    project_id=task.project_id,
                    title=task.title,
                    description=task.description,
                    status=task.status,
                    order=task.order,
                    assigned_to_id=task.assigned_to_id,
                    assignee=(
                        UserSummaryResponse.model_validate(assignee)
                        if assignee is not None
                        else None
                    ),
                    created_at=task.created_at,
                    updated_at=task.updated_at,
                )
            )
        return responses
