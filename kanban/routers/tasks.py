"""
Task management endpoints.

CRUD operations for tasks plus the board view and drag-and-drop move.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.core.database import get_db
from kanban.core.dependencies import (
    get_project_for_member,
    get_project_for_owner,
    get_task_for_member,
)
from kanban.models.project import Project
from kanban.models.task import Task
from kanban.schemas.task import (
    BoardResponse,
    PartitionNormalizeRequest,
    PartitionNormalizeResponse,
    TaskCreateRequest,
    TaskListResponse,
    TaskMoveRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from kanban.services.task_service import TaskService

router = APIRouter()


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db=db)


# ---------------------------------------------------------------------------
# Project-scoped
# ---------------------------------------------------------------------------

@router.get(
    "/projects/{project_id}/tasks",
    response_model=TaskListResponse,
    summary="List tasks in a project",
)
async def list_tasks(
    status_filter: str | None = Query(
        default=None, alias="status", pattern="^(todo|in-progress|done|backlog)$"
    ),
    assigned_to_id: UUID | None = Query(default=None),
    project: Project = Depends(get_project_for_member),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    return await service.list_tasks(
        project_id=project.id,
        status_filter=status_filter,
        assigned_to_id=assigned_to_id,
    )


@router.get(
    "/projects/{project_id}/board",
    response_model=BoardResponse,
    summary="Get the project board grouped by column",
)
async def get_board(
    project: Project = Depends(get_project_for_member),
    service: TaskService = Depends(get_task_service),
) -> BoardResponse:
    return await service.get_board(project.id)


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task at the end of its column",
)
async def create_task(
    data: TaskCreateRequest,
    project: Project = Depends(get_project_for_member),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.create_task(project.id, data)


@router.post(
    "/projects/{project_id}/tasks/normalize",
    response_model=PartitionNormalizeResponse,
    summary="Rewrite a column's task orders to 0..n-1",
)
async def normalize_column(
    data: PartitionNormalizeRequest,
    project: Project = Depends(get_project_for_owner),
    service: TaskService = Depends(get_task_service),
) -> PartitionNormalizeResponse:
    return await service.normalize_column(project.id, data.status)


# ---------------------------------------------------------------------------
# Task-scoped
# ---------------------------------------------------------------------------

@router.get(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Get task detail",
)
async def get_task(
    task: Task = Depends(get_task_for_member),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.get_task(task.id)


@router.patch(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Update a task",
)
async def update_task(
    data: TaskUpdateRequest,
    task: Task = Depends(get_task_for_member),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.update_task(task.id, data)


@router.put(
    "/tasks/{task_id}/move",
    response_model=TaskResponse,
    summary="Move a task to a column and position (drag and drop)",
)
async def move_task(
    data: TaskMoveRequest,
    task: Task = Depends(get_task_for_member),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.move_task(task.id, data)


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a task",
)
async def delete_task(
    task: Task = Depends(get_task_for_member),
    service: TaskService = Depends(get_task_service),
) -> dict:
    await service.delete_task(task.id)
    return {"message": "Task deleted"}
