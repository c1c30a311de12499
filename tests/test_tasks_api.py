"""Task API tests — CRUD, ownership, and the fixed check order.

Learn: These tests verify the owner-scoping rules, which are the most
important business logic in the system. We test:
1. Create: owner always comes from the token, title/status validation
2. List: newest first, only the caller's own tasks
3. Update: partial semantics, status validation, 400 → 404 → 403 order
4. Delete: owner-only, second delete is a 404
5. The full register → login → create → complete → delete scenario

Pattern: Every request carries a real bearer token from register+login.
"""

import uuid

import pytest

from conftest import register_and_login


async def _create(client, headers, **body):
    r = await client.post("/api/tasks", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]["task"]


async def _user_id(client, headers) -> str:
    r = await client.get("/api/auth/me", headers=headers)
    return r.json()["data"]["user"]["id"]


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task(client, ann):
    r = await client.post("/api/tasks", json={"title": "Buy milk"}, headers=ann)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Task created successfully."
    task = body["data"]["task"]
    assert task["title"] == "Buy milk"
    assert task["description"] == ""
    assert task["status"] == "pending"
    assert task["owner_id"] == await _user_id(client, ann)


@pytest.mark.asyncio
async def test_create_trims_title_and_description(client, ann):
    task = await _create(client, ann, title="  Water plants ", description="  ferns first  ")
    assert task["title"] == "Water plants"
    assert task["description"] == "ferns first"


@pytest.mark.asyncio
async def test_create_ignores_supplied_owner(client, ann, bob):
    bob_id = await _user_id(client, bob)
    task = await _create(client, ann, title="Mine", owner_id=bob_id, user=bob_id)
    assert task["owner_id"] == await _user_id(client, ann)

    r = await client.get("/api/tasks", headers=bob)
    assert r.json()["data"]["count"] == 0


@pytest.mark.asyncio
async def test_create_with_completed_status(client, ann):
    task = await _create(client, ann, title="Already done", status="completed")
    assert task["status"] == "completed"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"title": ""}, {"title": "   "}, {"title": None}])
async def test_create_requires_title(client, ann, body):
    r = await client.post("/api/tasks", json=body, headers=ann)
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Title is required."}


@pytest.mark.asyncio
async def test_create_rejects_unknown_status(client, ann):
    r = await client.post("/api/tasks", json={"title": "x", "status": "done"}, headers=ann)
    assert r.status_code == 400
    assert r.json()["message"] == 'Status must be either "pending" or "completed".'


@pytest.mark.asyncio
async def test_title_length_checked_after_trimming(client, ann):
    task = await _create(client, ann, title="  " + "a" * 200 + "  ")
    assert task["title"] == "a" * 200

    r = await client.post("/api/tasks", json={"title": "a" * 201}, headers=ann)
    assert r.status_code == 400
    assert r.json()["message"] == "Title must be at most 200 characters."

    r = await client.put(f"/api/tasks/{task['id']}", json={"title": "b" * 201}, headers=ann)
    assert r.status_code == 400
    assert r.json()["message"] == "Title must be at most 200 characters."


@pytest.mark.asyncio
async def test_create_rejects_wrong_types(client, ann):
    r = await client.post("/api/tasks", json={"title": 42}, headers=ann)
    assert r.status_code == 400
    assert r.json()["message"] == "Validation error."
    assert r.json()["errors"]


@pytest.mark.asyncio
async def test_create_requires_auth(client):
    r = await client.post("/api/tasks", json={"title": "x"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# List
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_newest_first(client, ann):
    for title in ("first", "second", "third"):
        await _create(client, ann, title=title)

    r = await client.get("/api/tasks", headers=ann)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["count"] == 3
    assert [t["title"] for t in data["tasks"]] == ["third", "second", "first"]


@pytest.mark.asyncio
async def test_list_only_own_tasks(client, ann, bob):
    await _create(client, ann, title="ann's")
    await _create(client, bob, title="bob's")

    r = await client.get("/api/tasks", headers=ann)
    titles = [t["title"] for t in r.json()["data"]["tasks"]]
    assert titles == ["ann's"]


@pytest.mark.asyncio
async def test_create_then_list_round_trip(client, ann):
    created = await _create(
        client, ann, title="Call mom", description="Sunday", status="completed"
    )

    r = await client.get("/api/tasks", headers=ann)
    listed = r.json()["data"]["tasks"]
    assert len(listed) == 1
    assert listed[0]["id"] == created["id"]
    assert (listed[0]["title"], listed[0]["description"], listed[0]["status"]) == (
        "Call mom", "Sunday", "completed",
    )


@pytest.mark.asyncio
async def test_list_empty(client, ann):
    r = await client.get("/api/tasks", headers=ann)
    assert r.json()["data"] == {"tasks": [], "count": 0}


# ═══════════════════════════════════════════════════════════
# Get one
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_get_own_task(client, ann):
    task = await _create(client, ann, title="Read")
    r = await client.get(f"/api/tasks/{task['id']}", headers=ann)
    assert r.status_code == 200
    assert r.json()["data"]["task"]["title"] == "Read"


@pytest.mark.asyncio
async def test_get_other_users_task_forbidden(client, ann, bob):
    task = await _create(client, ann, title="Private")
    r = await client.get(f"/api/tasks/{task['id']}", headers=bob)
    assert r.status_code == 403
    assert r.json()["message"] == "Access denied. You can only view your own tasks."


# ═══════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_partial_update_status_only(client, ann):
    task = await _create(client, ann, title="Buy milk", description="2 liters")

    r = await client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=ann)
    assert r.status_code == 200
    updated = r.json()["data"]["task"]
    assert updated["status"] == "completed"
    assert updated["title"] == "Buy milk"
    assert updated["description"] == "2 liters"


@pytest.mark.asyncio
async def test_update_title_and_description_trimmed(client, ann):
    task = await _create(client, ann, title="old")
    r = await client.put(
        f"/api/tasks/{task['id']}",
        json={"title": "  new  ", "description": " details "},
        headers=ann,
    )
    updated = r.json()["data"]["task"]
    assert updated["title"] == "new"
    assert updated["description"] == "details"
    assert updated["status"] == "pending"


@pytest.mark.asyncio
async def test_update_by_non_owner_forbidden(client, ann, bob):
    task = await _create(client, ann, title="ann's")

    r = await client.put(f"/api/tasks/{task['id']}", json={"title": "hijacked"}, headers=bob)
    assert r.status_code == 403
    assert r.json()["message"] == "Access denied. You can only update your own tasks."

    r = await client.get(f"/api/tasks/{task['id']}", headers=ann)
    assert r.json()["data"]["task"]["title"] == "ann's"


@pytest.mark.asyncio
async def test_update_invalid_status_rejected(client, ann):
    task = await _create(client, ann, title="x")
    r = await client.put(
        f"/api/tasks/{task['id']}", json={"title": "y", "status": "archived"}, headers=ann
    )
    assert r.status_code == 400
    assert r.json()["message"] == 'Status must be either "pending" or "completed".'

    r = await client.get(f"/api/tasks/{task['id']}", headers=ann)
    assert r.json()["data"]["task"]["title"] == "x"


@pytest.mark.asyncio
async def test_update_blank_title_rejected(client, ann):
    task = await _create(client, ann, title="x")
    r = await client.put(f"/api/tasks/{task['id']}", json={"title": "  "}, headers=ann)
    assert r.status_code == 400
    assert r.json()["message"] == "Title is required."


@pytest.mark.asyncio
async def test_update_empty_body_is_noop(client, ann):
    task = await _create(client, ann, title="x", description="d")
    r = await client.put(f"/api/tasks/{task['id']}", json={}, headers=ann)
    assert r.status_code == 200
    updated = r.json()["data"]["task"]
    assert (updated["title"], updated["description"], updated["status"]) == ("x", "d", "pending")


@pytest.mark.asyncio
async def test_update_missing_task(client, ann):
    r = await client.put(f"/api/tasks/{uuid.uuid4()}", json={"title": "x"}, headers=ann)
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Task not found."}


@pytest.mark.asyncio
async def test_update_malformed_id(client, ann):
    r = await client.put("/api/tasks/not-an-id", json={"title": "x"}, headers=ann)
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Invalid task ID format."}


@pytest.mark.asyncio
async def test_not_found_reported_before_ownership(client, bob):
    r = await client.put(f"/api/tasks/{uuid.uuid4()}", json={"status": "completed"}, headers=bob)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_auth_checked_before_id_shape(client):
    r = await client.put("/api/tasks/not-an-id", json={"title": "x"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_own_task(client, ann):
    task = await _create(client, ann, title="x")
    r = await client.delete(f"/api/tasks/{task['id']}", headers=ann)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Task deleted successfully."}


@pytest.mark.asyncio
async def test_delete_twice_is_not_found(client, ann):
    task = await _create(client, ann, title="x")
    r1 = await client.delete(f"/api/tasks/{task['id']}", headers=ann)
    assert r1.status_code == 200

    r2 = await client.delete(f"/api/tasks/{task['id']}", headers=ann)
    assert r2.status_code == 404


@pytest.mark.asyncio
async def test_delete_by_non_owner_forbidden(client, ann, bob):
    task = await _create(client, ann, title="x")

    r = await client.delete(f"/api/tasks/{task['id']}", headers=bob)
    assert r.status_code == 403
    assert r.json()["message"] == "Access denied. You can only delete your own tasks."

    r = await client.get("/api/tasks", headers=ann)
    assert r.json()["data"]["count"] == 1


@pytest.mark.asyncio
async def test_delete_malformed_id(client, ann):
    r = await client.delete("/api/tasks/12345", headers=ann)
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# End-to-end scenario
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_full_lifecycle(client):
    headers = await register_and_login(client, "ann", "pw123")

    r = await client.post("/api/tasks", json={"title": "Buy milk"}, headers=headers)
    assert r.status_code == 201
    task = r.json()["data"]["task"]
    assert task["status"] == "pending"

    r = await client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["task"]["status"] == "completed"

    r = await client.delete(f"/api/tasks/{task['id']}", headers=headers)
    assert r.status_code == 200

    r = await client.get("/api/tasks", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["tasks"] == []
