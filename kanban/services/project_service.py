"""
Project business logic.

Handles project CRUD and member listing. Access checks happen in the
dependencies that resolve the project before these methods run.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.models.member import ProjectMember
from kanban.models.project import DEFAULT_PROJECT_COLOR, Project
from kanban.models.task import Task
from kanban.models.user import User
from kanban.schemas.project import (
    MemberListResponse,
    MemberResponse,
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdateRequest,
)
from kanban.services.position_service import TaskPositionManager

logger = logging.getLogger(__name__)


class ProjectService:

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_projects(self, user: User) -> ProjectListResponse:
        """Projects the user owns or was added to, newest first."""
        result = await self.db.execute(
            select(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .where(ProjectMember.user_id == user.id)
            .order_by(Project.created_at.desc())
        )
        projects = list(result.scalars().all())
        return ProjectListResponse(
            projects=[ProjectResponse.model_validate(p) for p in projects],
            total=len(projects),
        )

    async def create_project(
        self, data: ProjectCreateRequest, owner: User
    ) -> ProjectResponse:
        project = Project(
            name=data.name,
            description=data.description,
            color=data.color or DEFAULT_PROJECT_COLOR,
            owner_id=owner.id,
        )
        self.db.add(project)
        await self.db.flush()

        self.db.add(ProjectMember(project_id=project.id, user_id=owner.id))
        await self.db.flush()
        await self.db.refresh(project)

        logger.info("Project created: id=%s owner_id=%s", project.id, owner.id)
        return ProjectResponse.model_validate(project)

    async def get_project(self, project: Project) -> ProjectResponse:
        return ProjectResponse.model_validate(project)

    async def update_project(
        self, project: Project, data: ProjectUpdateRequest
    ) -> ProjectResponse:
        if data.name is not None:
            project.name = data.name
        if "description" in data.model_fields_set:
            project.description = data.description
        if data.color is not None:
            project.color = data.color

        await self.db.flush()
        await self.db.refresh(project)
        return ProjectResponse.model_validate(project)

    async def delete_project(self, project: Project) -> None:
        """
        Delete a project together with its tasks and memberships.

        Takes the project row lock before touching any task row, the same
        order every task writer uses.
        """
        project_id = project.id
        await TaskPositionManager(self.db).lock_project(project_id)
        await self.db.execute(delete(Task).where(Task.project_id == project_id))
        await self.db.execute(
            delete(ProjectMember).where(ProjectMember.project_id == project_id)
        )
        await self.db.delete(project)
        await self.db.flush()
        logger.info("Project deleted: id=%s", project_id)

    async def list_members(self, project: Project) -> MemberListResponse:
        result = await self.db.execute(
            select(ProjectMember, User)
            .join(User, ProjectMember.user_id == User.id)
            .where(ProjectMember.project_id == project.id)
            .order_by(ProjectMember.joined_at)
            .execution_options(populate_existing=True)
        )
        members = [
            MemberResponse(
                user_id=user.id,
                name=user.name,
                email=user.email,
                is_owner=user.id == project.owner_id,
                joined_at=member.joined_at,
            )
            for member, user in result.all()
        ]
        return MemberListResponse(members=members, total=len(members))
