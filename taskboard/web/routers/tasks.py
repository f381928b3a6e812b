"""
Tasks Router - API endpoints for task management and sharing
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ...db.schema import SQLITE_MAX_INTEGER, TaskRecord
from ...services import Page, TaskService
from ..dependencies import get_current_user, get_optional_user, get_task_service
from ..schemas import TaskCreateRequest, TaskUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=Page[TaskRecord])
async def list_tasks(
    completed: Optional[bool] = None,
    due_date: Optional[str] = None,
    page: int = Query(default=1, ge=1, le=SQLITE_MAX_INTEGER),
    current_user: int = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """
    List the caller's tasks.

    Query params:
    - completed: only completed (true) or open (false) tasks
    - due_date: exact due date match
    - page: 1-based page number
    """
    return await service.list_tasks(
        current_user, completed=completed, due_date=due_date, page=page
    )


@router.post("", response_model=TaskRecord, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreateRequest,
    current_user: int = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a task owned by the caller"""
    return await service.create_task(
        current_user,
        task_name=payload.task_name,
        due_date=payload.due_date,
        description=payload.description,
        is_completed=payload.is_completed,
        category_ids=payload.category_ids,
    )


@router.get("/share/{share_token}", response_model=TaskRecord)
async def get_shared_task(
    share_token: str,
    current_user: Optional[int] = Depends(get_optional_user),
    service: TaskService = Depends(get_task_service),
):
    """Resolve a task by its share token (no authentication required)"""
    return await service.get_by_share_token(share_token, caller_id=current_user)


@router.get("/{task_id}", response_model=TaskRecord)
async def get_task(
    task_id: int = Path(ge=1, le=SQLITE_MAX_INTEGER),
    current_user: int = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.get_task(task_id, current_user)


@router.put("/{task_id}", response_model=TaskRecord)
async def update_task(
    payload: TaskUpdateRequest,
    task_id: int = Path(ge=1, le=SQLITE_MAX_INTEGER),
    current_user: int = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Update the supplied fields of one of the caller's tasks"""
    return await service.update_task(
        task_id, current_user, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int = Path(ge=1, le=SQLITE_MAX_INTEGER),
    current_user: int = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    await service.delete_task(task_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
