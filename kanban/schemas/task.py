"""
Task schemas.

Request/response models for task CRUD and board drag-and-drop endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from kanban.models.task import TaskStatus


def _strip_title(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Title must not be blank")
    return v


# ---------------------------------------------------------------------------
# Task Create
# ---------------------------------------------------------------------------

class TaskCreateRequest(BaseModel):
    """Request body for POST /projects/{project_id}/tasks."""

    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = TaskStatus.todo
    assigned_to_id: UUID | None = None

    strip_title = field_validator("title")(_strip_title)


# ---------------------------------------------------------------------------
# Task Update
# ---------------------------------------------------------------------------

class TaskUpdateRequest(BaseModel):
    """
    Request body for PATCH /tasks/{task_id}.

    A status change appends the task to the end of the new column; use the
    move endpoint to choose a position.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    assigned_to_id: UUID | None = None

    strip_title = field_validator("title")(_strip_title)


# ---------------------------------------------------------------------------
# Task Move (board drag-and-drop)
# ---------------------------------------------------------------------------

class TaskMoveRequest(BaseModel):
    """
    Request body for PUT /tasks/{task_id}/move.

    status is required but may be null (backlog). order is clamped by the
    position manager to the destination column's bounds.
    """

    status: TaskStatus | None
    order: int


class PartitionNormalizeRequest(BaseModel):
    """Request body for POST /projects/{project_id}/tasks/normalize."""

    status: TaskStatus | None


class PartitionNormalizeResponse(BaseModel):
    status: TaskStatus | None
    changed: int


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class UserSummaryResponse(BaseModel):
    """Compact user info embedded in task responses."""

    id: UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class TaskResponse(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    description: str | None
    status: TaskStatus | None
    order: int
    assigned_to_id: UUID | None
    assignee: UserSummaryResponse | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    total: int


class BoardResponse(BaseModel):
    """All tasks of a project grouped by column, each column sorted by order."""

    project_id: UUID
    columns: dict[str, list[TaskResponse]]
    backlog: list[TaskResponse] = Field(default_factory=list)
