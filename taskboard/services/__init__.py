"""
Services module - Business logic layer.

This module provides:
- auth_service: identity provider (register, login, logout, authenticate)
- task_service: task ownership, lifecycle and share tokens
- category_service: category listing and creation
- comment_service: task comments
- notifications: fire-and-forget task reminders
"""

from .auth_service import AuthResult, AuthService
from .category_service import CategoryService
from .comment_service import CommentService
from .errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TaskboardError,
    ValidationError,
)
from .notifications import (
    DatabaseNotifier,
    NotificationDispatcher,
    Notifier,
    TaskCreatedEvent,
)
from .pagination import Page
from .task_service import TaskService, normalize_due_date

__all__ = [
    # Services
    "AuthResult",
    "AuthService",
    "CategoryService",
    "CommentService",
    "TaskService",
    "normalize_due_date",
    # Notifications
    "DatabaseNotifier",
    "NotificationDispatcher",
    "Notifier",
    "TaskCreatedEvent",
    # Pagination
    "Page",
    # Errors
    "AuthenticationError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "TaskboardError",
    "ValidationError",
]
