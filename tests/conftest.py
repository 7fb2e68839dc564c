"""
Pytest configuration for Kanban API tests.

Tests run against an in-memory SQLite database shared through a single
connection. Environment is set before any kanban module is imported.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-0123456789-abcdefghij")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"

import uuid
from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kanban.core.database import get_db
from kanban.core.security import create_access_token
from kanban.main import app
from kanban.models import Base, Project, ProjectMember, User


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncIterator[AsyncClient]:
    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


async def make_user(db: AsyncSession, name: str = "Test User") -> User:
    user = User(email=unique_email(name.split()[0].lower()), name=name)
    db.add(user)
    await db.flush()
    return user


async def make_project(
    db: AsyncSession, owner: User, *members: User, name: str = "Board"
) -> Project:
    project = Project(name=name, owner_id=owner.id)
    db.add(project)
    await db.flush()
    for user in (owner, *members):
        db.add(ProjectMember(project_id=project.id, user_id=user.id))
    await db.flush()
    return project


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}
