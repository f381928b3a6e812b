"""
Comments Router - add comments to tasks
"""
from fastapi import APIRouter, Depends, status

from ...db.schema import CommentRecord
from ...services import CommentService
from ..dependencies import get_comment_service, get_current_user
from ..schemas import CommentCreateRequest

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("", response_model=CommentRecord, status_code=status.HTTP_201_CREATED)
async def add_comment(
    payload: CommentCreateRequest,
    current_user: int = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    return await service.add_comment(current_user, payload.task_id, payload.description)
