"""
Project management endpoints.

CRUD operations for projects and member listing.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.core.database import get_db
from kanban.core.dependencies import (
    get_current_user,
    get_project_for_member,
    get_project_for_owner,
)
from kanban.models.project import Project
from kanban.models.user import User
from kanban.schemas.project import (
    MemberListResponse,
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdateRequest,
)
from kanban.services.project_service import ProjectService

router = APIRouter()


def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db=db)


@router.get(
    "/projects",
    response_model=ProjectListResponse,
    summary="List projects the current user can access",
)
async def list_projects(
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectListResponse:
    return await service.list_projects(current_user)


@router.post(
    "/projects",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new project",
)
async def create_project(
    data: ProjectCreateRequest,
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return await service.create_project(data, current_user)


@router.get(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    summary="Get project detail",
)
async def get_project(
    project: Project = Depends(get_project_for_member),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return await service.get_project(project)


@router.patch(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    summary="Update project",
)
async def update_project(
    data: ProjectUpdateRequest,
    project: Project = Depends(get_project_for_owner),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return await service.update_project(project, data)


@router.delete(
    "/projects/{project_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a project and all of its tasks",
)
async def delete_project(
    project: Project = Depends(get_project_for_owner),
    service: ProjectService = Depends(get_project_service),
) -> dict:
    await service.delete_project(project)
    return {}


@router.get(
    "/projects/{project_id}/members",
    response_model=MemberListResponse,
    summary="List project members",
)
async def list_members(
    project: Project = Depends(get_project_for_member),
    service: ProjectService = Depends(get_project_service),
) -> MemberListResponse:
    return await service.list_members(project)
