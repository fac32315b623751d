from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi import status
from httpx import AsyncClient
from jose import jwt

from tasktracker.core.security import create_access_token

pytestmark = pytest.mark.asyncio


async def test_create_task_applies_defaults_and_caller_ownership(
    client: AsyncClient,
    register_user,
) -> None:
    user = await register_user()
    other = await register_user()

    response = await client.post(
        "/tasks",
        json={"title": "  Write report ", "owner_id": other.id},
        headers=user.headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    task = response.json()
    assert task["title"] == "Write report"
    assert task["description"] is None
    assert task["priority"] == "Medium"
    assert task["status"] == "Pending"
    assert task["owner_id"] == user.id
    assert set(task) == {
        "id",
        "title",
        "description",
        "priority",
        "status",
        "owner_id",
        "created_at",
        "updated_at",
    }


async def test_create_task_validates_body(client: AsyncClient, register_user) -> None:
    user = await register_user()

    response = await client.post(
        "/tasks",
        json={"title": " ", "priority": "Urgent", "status": "Blocked"},
        headers=user.headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    messages = [error["message"] for error in response.json()["details"]["errors"]]
    assert messages == [
        "Title is required",
        "Priority must be Low, Medium, or High",
        "Status must be Pending, In Progress, or Done",
    ]

    listing = await client.get("/tasks", headers=user.headers)
    assert listing.json()["total"] == 0


async def test_create_task_accepts_null_description(client: AsyncClient, register_user) -> None:
    user = await register_user()

    response = await client.post(
        "/tasks",
        json={"title": "No details", "description": None},
        headers=user.headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["description"] is None


async def test_task_routes_require_a_bearer_token(client: AsyncClient) -> None:
    responses = [
        await client.post("/tasks", json={"title": "Nope"}),
        await client.get("/tasks"),
        await client.get("/tasks/1"),
        await client.put("/tasks/1", json={"title": "Nope"}),
        await client.delete("/tasks/1"),
        await client.get("/tasks", headers={"Authorization": "Basic dXNlcjpwYXNz"}),
    ]

    for response in responses:
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Not authorized, no token"
        assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_invalid_tokens_are_rejected(client: AsyncClient, register_user, settings) -> None:
    user = await register_user()
    expired = create_access_token(
        subject=user.id,
        settings=settings,
        expires_delta=timedelta(seconds=-5),
    ).token
    forged = jwt.encode({"sub": str(user.id)}, "not-the-secret", algorithm="HS256")
    orphaned = create_access_token(subject=999_999, settings=settings).token

    for token in (expired, forged, orphaned, "not-a-jwt"):
        response = await client.get("/tasks", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Not authorized, token failed"


async def test_owner_isolation(client: AsyncClient, register_user, create_task) -> None:
    alice = await register_user(name="Alice")
    bob = await register_user(name="Bob")
    task = await create_task(alice, title="Alice only")
    await create_task(bob, title="Bob only")

    read = await client.get(f"/tasks/{task['id']}", headers=bob.headers)
    update = await client.put(f"/tasks/{task['id']}", json={"title": "Hijacked"}, headers=bob.headers)
    delete = await client.delete(f"/tasks/{task['id']}", headers=bob.headers)
    listing = await client.get("/tasks", headers=bob.headers)

    for response in (read, update, delete):
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Task not found"
    assert [item["title"] for item in listing.json()["tasks"]] == ["Bob only"]

    unchanged = await client.get(f"/tasks/{task['id']}", headers=alice.headers)
    assert unchanged.status_code == status.HTTP_200_OK
    assert unchanged.json()["title"] == "Alice only"


async def test_missing_task_and_non_integer_id(client: AsyncClient, register_user) -> None:
    user = await register_user()

    missing = await client.get("/tasks/4242", headers=user.headers)
    malformed = await client.get("/tasks/not-a-number", headers=user.headers)

    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json()["code"] == "not_found"
    assert malformed.status_code == status.HTTP_400_BAD_REQUEST
    assert malformed.json()["code"] == "validation_error"


async def test_update_is_a_merge_patch(client: AsyncClient, register_user, create_task) -> None:
    user = await register_user()
    task = await create_task(user, title="Original", description="Keep me", priority="High")

    response = await client.put(
        f"/tasks/{task['id']}",
        json={"status": "In Progress"},
        headers=user.headers,
    )

    assert response.status_code == status.HTTP_200_OK
    updated = response.json()
    assert updated["status"] == "In Progress"
    assert updated["title"] == "Original"
    assert updated["description"] == "Keep me"
    assert updated["priority"] == "High"
    assert updated["id"] == task["id"]
    assert updated["owner_id"] == user.id


async def test_update_can_clear_description_and_move_status_backwards(
    client: AsyncClient,
    register_user,
    create_task,
) -> None:
    user = await register_user()
    task = await create_task(user, description="Temporary", status="Done")

    response = await client.put(
        f"/tasks/{task['id']}",
        json={"description": None, "status": "Pending"},
        headers=user.headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["description"] is None
    assert response.json()["status"] == "Pending"


async def test_empty_update_is_a_no_op(client: AsyncClient, register_user, create_task) -> None:
    user = await register_user()
    task = await create_task(user, title="Stable")

    response = await client.put(f"/tasks/{task['id']}", json={}, headers=user.headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == "Stable"
    assert response.json()["updated_at"] == task["updated_at"]


async def test_update_validates_body(client: AsyncClient, register_user, create_task) -> None:
    user = await register_user()
    task = await create_task(user)

    response = await client.put(
        f"/tasks/{task['id']}",
        json={"title": "", "priority": "Urgent"},
        headers=user.headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    messages = [error["message"] for error in response.json()["details"]["errors"]]
    assert messages == ["Title cannot be empty", "Priority must be Low, Medium, or High"]


async def test_delete_is_permanent(client: AsyncClient, register_user, create_task) -> None:
    user = await register_user()
    task = await create_task(user)

    deleted = await client.delete(f"/tasks/{task['id']}", headers=user.headers)
    again = await client.delete(f"/tasks/{task['id']}", headers=user.headers)
    fetched = await client.get(f"/tasks/{task['id']}", headers=user.headers)

    assert deleted.status_code == status.HTTP_200_OK
    assert deleted.json() == {"message": "Task deleted successfully"}
    assert again.status_code == status.HTTP_404_NOT_FOUND
    assert fetched.status_code == status.HTTP_404_NOT_FOUND


async def test_list_defaults_to_newest_first(client: AsyncClient, register_user, create_task) -> None:
    user = await register_user()
    for title in ("first", "second", "third"):
        await create_task(user, title=title)

    response = await client.get("/tasks", headers=user.headers)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total"] == 3
    assert body["page"] == 1
    assert body["limit"] == 10
    assert [task["title"] for task in body["tasks"]] == ["third", "second", "first"]


async def test_list_pagination_reports_filtered_total(
    client: AsyncClient,
    register_user,
    create_task,
) -> None:
    user = await register_user()
    for index in range(15):
        await create_task(user, title=f"task-{index}")

    response = await client.get(
        "/tasks",
        params={"page": 2, "limit": 10, "order": "asc"},
        headers=user.headers,
    )

    body = response.json()
    assert body["total"] == 15
    assert body["page"] == 2
    assert body["limit"] == 10
    assert [task["title"] for task in body["tasks"]] == [f"task-{index}" for index in range(10, 15)]


async def test_list_filters_by_status_and_priority(
    client: AsyncClient,
    register_user,
    create_task,
) -> None:
    user = await register_user()
    await create_task(user, title="a", status="Done", priority="High")
    await create_task(user, title="b", status="Done", priority="Low")
    await create_task(user, title="c", status="In Progress", priority="High")

    done = await client.get("/tasks", params={"status": "Done"}, headers=user.headers)
    done_high = await client.get(
        "/tasks",
        params={"status": "Done", "priority": "High"},
        headers=user.headers,
    )

    assert done.json()["total"] == 2
    assert {task["title"] for task in done.json()["tasks"]} == {"a", "b"}
    assert done_high.json()["total"] == 1
    assert done_high.json()["tasks"][0]["title"] == "a"


async def test_unknown_filter_value_matches_nothing(
    client: AsyncClient,
    register_user,
    create_task,
) -> None:
    user = await register_user()
    await create_task(user)

    response = await client.get("/tasks", params={"status": "Archived"}, headers=user.headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["total"] == 0
    assert response.json()["tasks"] == []


async def test_list_sorts_by_priority_rank(client: AsyncClient, register_user, create_task) -> None:
    user = await register_user()
    for title, priority in (("mid", "Medium"), ("high", "High"), ("low", "Low")):
        await create_task(user, title=title, priority=priority)

    ascending = await client.get(
        "/tasks",
        params={"sortBy": "priority", "order": "asc"},
        headers=user.headers,
    )
    descending = await client.get("/tasks", params={"sortBy": "priority"}, headers=user.headers)

    assert [task["title"] for task in ascending.json()["tasks"]] == ["low", "mid", "high"]
    assert [task["title"] for task in descending.json()["tasks"]] == ["high", "mid", "low"]


async def test_unknown_sort_field_and_order_fall_back_to_newest_first(
    client: AsyncClient,
    register_user,
    create_task,
) -> None:
    user = await register_user()
    for title in ("older", "newer"):
        await create_task(user, title=title)

    response = await client.get(
        "/tasks",
        params={"sortBy": "title", "order": "sideways"},
        headers=user.headers,
    )

    assert [task["title"] for task in response.json()["tasks"]] == ["newer", "older"]


async def test_list_rejects_non_positive_paging(client: AsyncClient, register_user) -> None:
    user = await register_user()

    zero_page = await client.get("/tasks", params={"page": 0}, headers=user.headers)
    bad_limit = await client.get("/tasks", params={"limit": "ten"}, headers=user.headers)

    assert zero_page.status_code == status.HTTP_400_BAD_REQUEST
    assert bad_limit.status_code == status.HTTP_400_BAD_REQUEST
    assert zero_page.json()["details"]["errors"][0]["field"] == "page"
    assert bad_limit.json()["details"]["errors"][0]["location"] == "query"


async def test_limit_is_capped_at_configured_maximum(
    client: AsyncClient,
    register_user,
    create_task,
    settings,
) -> None:
    settings.task_page_size_max = 2
    user = await register_user()
    for index in range(3):
        await create_task(user, title=f"task-{index}")

    response = await client.get("/tasks", params={"limit": 50}, headers=user.headers)

    body = response.json()
    assert body["limit"] == 2
    assert body["total"] == 3
    assert len(body["tasks"]) == 2
