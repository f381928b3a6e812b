"""
Comment Service - notes attached to a task

Any authenticated user may comment on an existing task; there is no
ownership or membership check on the task.
"""
from ..db.crud import CommentRepository, ForeignKeyViolation, TaskRepository
from ..db.schema import CommentRecord
from .errors import NotFoundError, ValidationError


class CommentService:
    def __init__(self, comments: CommentRepository, tasks: TaskRepository):
        self.comments = comments
        self.tasks = tasks

    async def add_comment(self, caller_id: int, task_id: int, description: str) -> CommentRecord:
        if not isinstance(description, str) or not description.strip():
            raise ValidationError("The description field is required.", field="description")
        if await self.tasks.get_task(task_id) is None:
            raise NotFoundError("Task not found")
        try:
            return await self.comments.create_comment(task_id, caller_id, description.strip())
        except ForeignKeyViolation as e:
            # Task deleted between the check and the insert
            raise NotFoundError("Task not found") from e
