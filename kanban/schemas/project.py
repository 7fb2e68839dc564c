from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def _strip_name(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Project name must not be blank")
    return v


class ProjectCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    color: str | None = Field(default=None, pattern="^#[0-9a-fA-F]{6}$")

    name_must_not_be_blank = field_validator("name")(_strip_name)


class ProjectUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    color: str | None = Field(default=None, pattern="^#[0-9a-fA-F]{6}$")

    name_must_not_be_blank = field_validator("name")(_strip_name)


class ProjectResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    color: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int


class MemberResponse(BaseModel):
    user_id: UUID
    name: str
    email: str
    is_owner: bool
    joined_at: datetime


class MemberListResponse(BaseModel):
    members: list[MemberResponse]
    total: int
