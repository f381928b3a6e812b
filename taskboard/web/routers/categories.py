"""
Categories Router - category listing/creation and tasks by category
"""
from typing import List

from fastapi import APIRouter, Depends, Path, status

from ...db.schema import SQLITE_MAX_INTEGER, CategoryRecord, TaskRecord
from ...services import CategoryService, TaskService
from ..dependencies import get_category_service, get_current_user, get_task_service
from ..schemas import CategoryCreateRequest

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryRecord])
async def list_categories(
    current_user: int = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    return await service.list_categories()


@router.post("", response_model=CategoryRecord, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreateRequest,
    current_user: int = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    """Create a category (409 if the name is taken)"""
    return await service.create_category(payload.name)


@router.get("/{category_id}/tasks", response_model=List[TaskRecord])
async def list_category_tasks(
    category_id: int = Path(ge=1, le=SQLITE_MAX_INTEGER),
    current_user: int = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Tasks linked to a category"""
    return await service.list_by_category(category_id, current_user)
