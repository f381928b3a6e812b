"""
Shared fixtures: a temporary SQLite database, wired services and an HTTP client.
"""

import os

# Must be set before taskboard.web.config is imported
os.environ.setdefault("TASKBOARD_RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("TASKBOARD_JWT_SECRET", "test-secret")

from types import SimpleNamespace

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from taskboard.db import (
    CategoryRepository,
    CommentRepository,
    DatabaseManager,
    NotificationRepository,
    TaskRepository,
    TokenRepository,
    UserRepository,
)
from taskboard.services import (
    AuthService,
    CategoryService,
    CommentService,
    NotificationDispatcher,
    TaskService,
)
from taskboard.web.config import AppConfig
from taskboard.web.main import create_app


class RecordingNotifier:
    """Notifier that remembers every delivery."""

    def __init__(self):
        self.calls = []

    async def notify(self, user_id, event):
        self.calls.append((user_id, event))


@pytest_asyncio.fixture
async def db(tmp_path):
    manager = DatabaseManager(tmp_path / "taskboard.db")
    await manager.init()
    yield manager
    await manager.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
async def services(db, notifier):
    task_repository = TaskRepository(db)
    category_repository = CategoryRepository(db)
    dispatcher = NotificationDispatcher(notifier)
    wired = SimpleNamespace(
        db=db,
        users=UserRepository(db),
        task_repository=task_repository,
        category_repository=category_repository,
        notifications=NotificationRepository(db),
        dispatcher=dispatcher,
        notifier=notifier,
        auth=AuthService(UserRepository(db), TokenRepository(db), jwt_secret="test-secret"),
        tasks=TaskService(task_repository, category_repository, dispatcher=dispatcher),
        categories=CategoryService(category_repository),
        comments=CommentService(CommentRepository(db), task_repository),
    )
    yield wired
    await dispatcher.drain()


@pytest_asyncio.fixture
async def alice(services):
    return await services.users.create_user("Alice", "alice@example.com", "not-a-real-hash")


@pytest_asyncio.fixture
async def bob(services):
    return await services.users.create_user("Bob", "bob@example.com", "not-a-real-hash")


# ==================== HTTP ====================

@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        jwt_secret="test-secret",
    )


@pytest.fixture
def client(app_config):
    app = create_app(app_config)
    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient, name: str, email: str, password: str = "password123") -> dict:
    """Register a user and return Authorization headers for them."""
    response = client.post(
        "/api/register",
        json={
            "name": name,
            "email": email,
            "password": password,
            "password_confirmation": password,
        },
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
