"""
Task ORM model.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kanban.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from kanban.models.project import Project
    from kanban.models.user import User


class TaskStatus(str, enum.Enum):
    """Board columns. A task with no status sits in the backlog."""

    todo = "todo"
    in_progress = "in-progress"
    done = "done"


class Task(Base, UUIDMixin, TimestampMixin):
    """
    A card on a project board.

    order is dense within its (project_id, status) partition; only
    TaskPositionManager writes it.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_project_status_order", "project_id", "status", "order"),
        CheckConstraint('"order" >= 0', name="ck_tasks_order_non_negative"),
    )

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus | None] = mapped_column(
        Enum(
            TaskStatus,
            name="task_status",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=True,
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    assigned_to_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    project: Mapped[Project] = relationship("Project", back_populates="tasks")
    assigned_to: Mapped[User | None] = relationship(
        "User", back_populates="assigned_tasks"
    )

    def __repr__(self) -> str:
        status = self.status.value if self.status else None
        return f"<Task id={self.id} status={status} order={self.order} project_id={self.project_id}>"
