"""
Test Web integration with database.

Run with: pytest tests/test_web_integration.py

Drives the FastAPI app end to end (lifespan, auth, routers, error mapping)
against a temporary SQLite file.
"""

from conftest import register

from taskboard.web.limiter import RateLimitSettings, limiter, rate_limits
from taskboard.web.main import create_app


# ==================== Auth ====================

def test_register_login_logout(client):
    response = client.post(
        "/api/register",
        json={
            "name": "Alice",
            "email": "alice@example.com",
            "password": "password123",
            "password_confirmation": "password123",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "alice@example.com"
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]
    headers = {"Authorization": f"Bearer {body['token']}"}

    me = client.get("/api/user", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]

    login = client.post("/api/login", json={"email": "alice@example.com", "password": "password123"})
    assert login.status_code == 201
    assert login.json()["token"] != body["token"]

    logout = client.post("/api/logout", headers=headers)
    assert logout.status_code == 200
    assert logout.json() == {"message": "Logged out"}

    # Logout revokes every token of the user
    assert client.get("/api/user", headers=headers).status_code == 401
    relogin_headers = {"Authorization": f"Bearer {login.json()['token']}"}
    assert client.get("/api/user", headers=relogin_headers).status_code == 401


def test_register_errors(client):
    register(client, "Alice", "alice@example.com")

    duplicate = client.post(
        "/api/register",
        json={
            "name": "Alice",
            "email": "alice@example.com",
            "password": "password123",
            "password_confirmation": "password123",
        },
    )
    assert duplicate.status_code == 409

    mismatch = client.post(
        "/api/register",
        json={
            "name": "Bob",
            "email": "bob@example.com",
            "password": "password123",
            "password_confirmation": "password124",
        },
    )
    assert mismatch.status_code == 422
    assert mismatch.json()["detail"] == "Validation error"

    short = client.post(
        "/api/register",
        json={
            "name": "Bob",
            "email": "bob@example.com",
            "password": "short",
            "password_confirmation": "short",
        },
    )
    assert short.status_code == 422
    assert short.json()["errors"][0]["field"] == "password"


def test_bad_login(client):
    register(client, "Alice", "alice@example.com")

    response = client.post("/api/login", json={"email": "alice@example.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Bad Creds"}
    assert response.headers["www-authenticate"] == "Bearer"


def test_requires_authentication(client):
    assert client.get("/api/tasks").status_code == 401
    assert client.post("/api/tasks", json={"taskName": "x", "dueDate": "2024-01-01"}).status_code == 401
    assert client.get("/api/categories").status_code == 401
    assert client.post("/api/comments", json={"description": "x", "task_id": 1}).status_code == 401

    bogus = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/tasks", headers=bogus).status_code == 401


# ==================== Tasks ====================

def test_task_lifecycle(client):
    alice = register(client, "Alice", "alice@example.com")

    created = client.post(
        "/api/tasks",
        headers=alice,
        json={"taskName": "Write report", "dueDate": "2024-03-15T10:30:00", "description": "Q1"},
    )
    assert created.status_code == 201
    task = created.json()
    assert task["taskName"] == "Write report"
    assert task["dueDate"] == "2024-03-15"
    assert task["is_completed"] is False
    assert task["categories"] == []
    assert len(task["share_token"]) == 32

    fetched = client.get(f"/api/tasks/{task['id']}", headers=alice)
    assert fetched.status_code == 200
    assert fetched.json() == task

    updated = client.put(f"/api/tasks/{task['id']}", headers=alice, json={"isCompleted": True})
    assert updated.status_code == 200
    assert updated.json()["is_completed"] is True
    assert updated.json()["taskName"] == "Write report"
    assert updated.json()["description"] == "Q1"

    renamed = client.put(f"/api/tasks/{task['id']}", headers=alice, json={"taskName": "Final report"})
    assert renamed.json()["taskName"] == "Final report"
    assert renamed.json()["is_completed"] is True

    deleted = client.delete(f"/api/tasks/{task['id']}", headers=alice)
    assert deleted.status_code == 204
    assert deleted.content == b""

    assert client.delete(f"/api/tasks/{task['id']}", headers=alice).status_code == 404
    assert client.get(f"/api/tasks/{task['id']}", headers=alice).status_code == 404


def test_task_validation(client):
    alice = register(client, "Alice", "alice@example.com")

    bad_date = client.post("/api/tasks", headers=alice, json={"taskName": "x", "dueDate": "someday"})
    assert bad_date.status_code == 422
    assert bad_date.json()["errors"][0]["field"] == "dueDate"

    missing_name = client.post("/api/tasks", headers=alice, json={"dueDate": "2024-01-01"})
    assert missing_name.status_code == 422

    task = client.post("/api/tasks", headers=alice, json={"taskName": "x", "dueDate": "2024-01-01"}).json()
    null_name = client.put(f"/api/tasks/{task['id']}", headers=alice, json={"taskName": None})
    assert null_name.status_code == 422


def test_other_users_task_is_forbidden(client):
    alice = register(client, "Alice", "alice@example.com")
    bob = register(client, "Bob", "bob@example.com")

    task = client.post("/api/tasks", headers=alice, json={"taskName": "Mine", "dueDate": "2024-01-01"}).json()

    assert client.get(f"/api/tasks/{task['id']}", headers=bob).status_code == 403
    assert client.put(f"/api/tasks/{task['id']}", headers=bob, json={"taskName": "Ours"}).status_code == 403
    assert client.delete(f"/api/tasks/{task['id']}", headers=bob).status_code == 403

    assert client.get(f"/api/tasks/{task['id']}", headers=alice).json()["taskName"] == "Mine"
    assert client.get("/api/tasks/9999", headers=bob).status_code == 404


def test_list_filters_and_pagination(client):
    alice = register(client, "Alice", "alice@example.com")
    bob = register(client, "Bob", "bob@example.com")

    for i in range(7):
        client.post(
            "/api/tasks",
            headers=alice,
            json={"taskName": f"done {i}", "dueDate": "2024-01-01", "is_completed": True},
        )
    client.post("/api/tasks", headers=alice, json={"taskName": "open", "dueDate": "2024-01-01"})
    client.post(
        "/api/tasks", headers=bob, json={"taskName": "bob", "dueDate": "2024-01-01", "isCompleted": True}
    )

    first = client.get(
        "/api/tasks", headers=alice, params={"completed": "true", "due_date": "2024-01-01"}
    ).json()
    assert first["total"] == 7
    assert first["per_page"] == 5
    assert first["last_page"] == 2
    assert len(first["data"]) == 5

    second = client.get(
        "/api/tasks", headers=alice, params={"completed": "true", "due_date": "2024-01-01", "page": 2}
    ).json()
    assert len(second["data"]) == 2
    assert all(t["is_completed"] and t["dueDate"] == "2024-01-01" for t in first["data"] + second["data"])

    everything = client.get("/api/tasks", headers=alice).json()
    assert everything["total"] == 8

    assert client.get("/api/tasks", headers=alice, params={"page": 0}).status_code == 422
    assert client.get("/api/tasks", headers=alice, params={"due_date": "whenever"}).status_code == 422


def test_share_token_access(client):
    alice = register(client, "Alice", "alice@example.com")
    bob = register(client, "Bob", "bob@example.com")

    task = client.post("/api/tasks", headers=alice, json={"taskName": "Shared", "dueDate": "2024-01-01"}).json()
    owner_view = client.get(f"/api/tasks/{task['id']}", headers=alice).json()

    anonymous = client.get(f"/api/tasks/share/{task['share_token']}")
    assert anonymous.status_code == 200
    assert anonymous.json() == owner_view

    as_bob = client.get(f"/api/tasks/share/{task['share_token']}", headers=bob)
    assert as_bob.json() == owner_view

    assert client.get("/api/tasks/share/does-not-exist").status_code == 404


# ==================== Categories ====================

def test_categories(client):
    alice = register(client, "Alice", "alice@example.com")
    bob = register(client, "Bob", "bob@example.com")

    work = client.post("/api/categories", headers=alice, json={"name": "Work"})
    assert work.status_code == 201
    work = work.json()

    assert client.post("/api/categories", headers=bob, json={"name": "Work"}).status_code == 409

    listed = client.get("/api/categories", headers=bob).json()
    assert [c["name"] for c in listed] == ["Work"]

    mine = client.post(
        "/api/tasks",
        headers=alice,
        json={"taskName": "Tagged", "dueDate": "2024-01-01", "category_ids": [work["id"]]},
    ).json()
    assert [c["name"] for c in mine["categories"]] == ["Work"]
    client.post(
        "/api/tasks",
        headers=bob,
        json={"taskName": "Bob tagged", "dueDate": "2024-01-01", "category_ids": [work["id"]]},
    )

    by_category = client.get(f"/api/categories/{work['id']}/tasks", headers=alice)
    assert by_category.status_code == 200
    assert [t["id"] for t in by_category.json()] == [mine["id"]]

    assert client.get("/api/categories/999/tasks", headers=alice).status_code == 404


def test_create_with_missing_category_writes_nothing(client):
    alice = register(client, "Alice", "alice@example.com")
    work = client.post("/api/categories", headers=alice, json={"name": "Work"}).json()

    response = client.post(
        "/api/tasks",
        headers=alice,
        json={"taskName": "Half", "dueDate": "2024-01-01", "category_ids": [work["id"], 999]},
    )
    assert response.status_code == 404
    assert client.get("/api/tasks", headers=alice).json()["total"] == 0


# ==================== Comments ====================

def test_comments(client):
    alice = register(client, "Alice", "alice@example.com")
    bob = register(client, "Bob", "bob@example.com")

    task = client.post("/api/tasks", headers=alice, json={"taskName": "Review", "dueDate": "2024-01-01"}).json()

    comment = client.post("/api/comments", headers=bob, json={"description": "LGTM", "task_id": task["id"]})
    assert comment.status_code == 201
    assert comment.json()["task_id"] == task["id"]
    assert comment.json()["description"] == "LGTM"

    missing = client.post("/api/comments", headers=bob, json={"description": "Hi", "task_id": 999})
    assert missing.status_code == 404

    blank = client.post("/api/comments", headers=bob, json={"description": "", "task_id": task["id"]})
    assert blank.status_code == 422


# ==================== Health ====================

def test_health(client):
    assert client.get("/api/health/live").json() == {"status": "live"}

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    assert ready.json() == {"status": "ready", "database": True}


# ==================== Input bounds ====================

def test_ids_beyond_sqlite_integer_range(client):
    alice = register(client, "Alice", "alice@example.com")
    too_big = 2**63

    assert client.get(f"/api/tasks/{too_big}", headers=alice).status_code == 422
    assert client.put(f"/api/tasks/{too_big}", headers=alice, json={"isCompleted": True}).status_code == 422
    assert client.delete(f"/api/tasks/{too_big}", headers=alice).status_code == 422
    assert client.get(f"/api/categories/{too_big}/tasks", headers=alice).status_code == 422
    assert client.post(f"/api/notifications/{too_big}/read", headers=alice).status_code == 422

    created = client.post(
        "/api/tasks",
        headers=alice,
        json={"taskName": "x", "dueDate": "2024-01-01", "category_ids": [too_big]},
    )
    assert created.status_code == 422
    assert client.get("/api/tasks", headers=alice).json()["total"] == 0

    comment = client.post("/api/comments", headers=alice, json={"description": "hi", "task_id": too_big})
    assert comment.status_code == 422

    # Largest bindable id is simply not found
    assert client.get(f"/api/tasks/{too_big - 1}", headers=alice).status_code == 404


def test_page_beyond_offset_range(client):
    alice = register(client, "Alice", "alice@example.com")

    response = client.get("/api/tasks", headers=alice, params={"page": 2**62})
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "page"

    assert client.get("/api/tasks", headers=alice, params={"page": 2**63}).status_code == 422


# ==================== Notifications ====================

def test_mark_unknown_notification_read(client):
    alice = register(client, "Alice", "alice@example.com")
    assert client.post("/api/notifications/12345/read", headers=alice).status_code == 404


# ==================== Rate limiting ====================

def test_create_app_leaves_shared_limiter_alone(app_config):
    before = limiter.enabled
    app = create_app(app_config)

    assert app.state.limiter is limiter
    assert limiter.enabled is before
    assert limiter.enabled is rate_limits.enabled


def test_rate_limit_settings_from_env(monkeypatch):
    monkeypatch.setenv("TASKBOARD_RATE_LIMIT_ENABLED", "off")
    monkeypatch.setenv("TASKBOARD_RATE_LIMIT_AUTH", "3/minute")
    monkeypatch.delenv("TASKBOARD_RATE_LIMIT_DEFAULT", raising=False)

    settings = RateLimitSettings.from_env()
    assert settings.enabled is False
    assert settings.auth == "3/minute"
    assert settings.default == "60/minute"
