"""
Project endpoint tests.

Verifies that:
- Creating a project makes the creator its owner and first member
- Users only see projects they belong to
- Only the owner can update or delete a project
- Project names are trimmed and may not be blank
- Deleting a project removes its tasks
"""

import pytest

from conftest import auth_headers, make_project, make_user


@pytest.fixture
async def users(db):
    owner = await make_user(db, "Owner")
    member = await make_user(db, "Member")
    outsider = await make_user(db, "Outsider")
    await db.commit()
    return owner, member, outsider


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_create_project_adds_owner_as_member(client, users):
    owner, _, _ = users
    resp = await client.post(
        "/api/v1/projects",
        json={"name": "Roadmap", "description": "Q4"},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 201, resp.text
    project = resp.json()
    assert project["owner_id"] == str(owner.id)
    assert project["color"] == "#6366f1"

    resp = await client.get(
        f"/api/v1/projects/{project['id']}/members", headers=auth_headers(owner)
    )
    assert resp.status_code == 200
    members = resp.json()["members"]
    assert [m["user_id"] for m in members] == [str(owner.id)]
    assert members[0]["is_owner"] is True


async def test_create_project_validates_color(client, users):
    owner, _, _ = users
    resp = await client.post(
        "/api/v1/projects",
        json={"name": "Roadmap", "color": "red"},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 422


async def test_list_only_shows_accessible_projects(client, db, users):
    owner, member, outsider = users
    await make_project(db, owner, member, name="Shared")
    await make_project(db, outsider, name="Private")
    await db.commit()

    resp = await client.get("/api/v1/projects", headers=auth_headers(member))
    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()["projects"]] == ["Shared"]

    resp = await client.get("/api/v1/projects", headers=auth_headers(outsider))
    assert [p["name"] for p in resp.json()["projects"]] == ["Private"]


async def test_outsider_cannot_get_project(client, db, users):
    owner, _, outsider = users
    project = await make_project(db, owner)
    await db.commit()

    resp = await client.get(f"/api/v1/projects/{project.id}", headers=auth_headers(outsider))
    assert resp.status_code == 403


async def test_member_cannot_update_or_delete(client, db, users):
    owner, member, _ = users
    project = await make_project(db, owner, member)
    await db.commit()

    resp = await client.patch(
        f"/api/v1/projects/{project.id}",
        json={"name": "Hacked"},
        headers=auth_headers(member),
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_PROJECT_OWNER"

    resp = await client.delete(f"/api/v1/projects/{project.id}", headers=auth_headers(member))
    assert resp.status_code == 403


async def test_owner_updates_project(client, db, users):
    owner, _, _ = users
    project = await make_project(db, owner)
    await db.commit()

    resp = await client.patch(
        f"/api/v1/projects/{project.id}",
        json={"name": "Renamed", "color": "#112233"},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"
    assert resp.json()["color"] == "#112233"


async def test_delete_project_removes_tasks(client, db, users):
    owner, _, _ = users
    project = await make_project(db, owner)
    await db.commit()

    resp = await client.post(
        f"/api/v1/projects/{project.id}/tasks",
        json={"title": "A"},
        headers=auth_headers(owner),
    )
    task_id = resp.json()["id"]

    resp = await client.delete(f"/api/v1/projects/{project.id}", headers=auth_headers(owner))
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers(owner))
    assert resp.status_code == 404

    resp = await client.get(f"/api/v1/projects/{project.id}", headers=auth_headers(owner))
    assert resp.status_code == 404


async def test_update_rejects_blank_name(client, db, users):
    owner, _, _ = users
    project = await make_project(db, owner, name="Roadmap")
    await db.commit()

    resp = await client.patch(
        f"/api/v1/projects/{project.id}",
        json={"name": "   "},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 422

    resp = await client.patch(
        f"/api/v1/projects/{project.id}",
        json={"name": "  Launch  "},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Launch"
