"""
Authentication and service dependencies.

Services are built once in the application lifespan and stored on
app.state; routes receive them (and the caller id) through Depends.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..services import (
    AuthenticationError,
    AuthService,
    CategoryService,
    CommentService,
    TaskService,
)
from ..db.crud import NotificationRepository

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service


def get_comment_service(request: Request) -> CommentService:
    return request.app.state.comment_service


def get_notification_repository(request: Request) -> NotificationRepository:
    return request.app.state.notification_repository


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> int:
    """
    Authenticate the caller from the Authorization: Bearer header.

    Returns:
        The caller's user id
    """
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError("Not authenticated")
    return await auth.authenticate(credentials.credentials.strip())


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[int]:
    """Like get_current_user, but anonymous callers (and bad tokens) yield None."""
    if credentials is None or not credentials.credentials.strip():
        return None
    try:
        return await auth.authenticate(credentials.credentials.strip())
    except AuthenticationError:
        return None
