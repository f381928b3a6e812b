"""
Database module for taskboard persistence.

Provides SQLite-based storage for:
- Users and issued access tokens
- Tasks and their category links
- Categories, comments and notifications

Usage:
    from taskboard.db import DatabaseManager, TaskRepository

    db = DatabaseManager(path)
    await db.init()

    tasks = TaskRepository(db)
    task = await tasks.get_task(1)
"""

from .base import DatabaseSettings, parse_database_url
from .connection import DatabaseManager
from .crud import (
    CategoryRepository,
    CommentRepository,
    ForeignKeyViolation,
    IntegrityViolation,
    NotificationRepository,
    TaskRepository,
    TokenRepository,
    UniqueViolation,
    UserRepository,
)
from .schema import (
    CategoryRecord,
    CommentRecord,
    NotificationRecord,
    NotificationType,
    TaskRecord,
    UserRecord,
)

__all__ = [
    # Settings / connection
    "DatabaseSettings",
    "parse_database_url",
    "DatabaseManager",
    # Repositories
    "CategoryRepository",
    "CommentRepository",
    "NotificationRepository",
    "TaskRepository",
    "TokenRepository",
    "UserRepository",
    # Errors
    "IntegrityViolation",
    "UniqueViolation",
    "ForeignKeyViolation",
    # Models
    "CategoryRecord",
    "CommentRecord",
    "NotificationRecord",
    "NotificationType",
    "TaskRecord",
    "UserRecord",
]
