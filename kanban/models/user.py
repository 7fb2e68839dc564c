"""
User ORM model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kanban.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from kanban.models.member import ProjectMember
    from kanban.models.project import Project
    from kanban.models.task import Task


class User(Base, UUIDMixin, TimestampMixin):
    """An account known to the board. Credentials live with the identity provider."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    projects_owned: Mapped[list[Project]] = relationship(
        "Project", back_populates="owner"
    )
    memberships: Mapped[list[ProjectMember]] = relationship(
        "ProjectMember", back_populates="user", cascade="all, delete-orphan"
    )
    assigned_tasks: Mapped[list[Task]] = relationship(
        "Task", back_populates="assigned_to"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
