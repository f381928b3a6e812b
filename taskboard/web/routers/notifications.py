"""
Notifications Router - the caller's task reminders
"""
from typing import List

from fastapi import APIRouter, Depends, Path, Query

from ...db.crud import NotificationRepository
from ...db.schema import SQLITE_MAX_INTEGER, NotificationRecord
from ...services import NotFoundError
from ..dependencies import get_current_user, get_notification_repository

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationRecord])
async def list_notifications(
    limit: int = Query(default=50, ge=1, le=200),
    current_user: int = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
):
    """Newest first"""
    return await repository.list_for_user(current_user, limit=limit)


@router.post("/{notification_id}/read", response_model=NotificationRecord)
async def mark_notification_read(
    notification_id: int = Path(ge=1, le=SQLITE_MAX_INTEGER),
    current_user: int = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
):
    """Mark one of the caller's notifications as read (404 for anyone else's)"""
    notification = await repository.mark_read(notification_id, current_user)
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification
