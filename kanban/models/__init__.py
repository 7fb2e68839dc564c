"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from kanban.models.base import Base, TimestampMixin, UUIDMixin
from kanban.models.user import User
from kanban.models.project import DEFAULT_PROJECT_COLOR, Project
from kanban.models.member import ProjectMember
from kanban.models.task import Task, TaskStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "User",
    "Project",
    "DEFAULT_PROJECT_COLOR",
    "ProjectMember",
    "Task",
    "TaskStatus",
]
