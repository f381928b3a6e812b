"""
Task Service - task ownership, lifecycle and sharing

Every operation receives the caller id explicitly. Existence is checked
before ownership so "not found" and "forbidden" stay distinguishable, and
all checks run before anything is written.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..db.crud import (
    CategoryRepository,
    ForeignKeyViolation,
    TaskRepository,
    UniqueViolation,
)
from ..db.schema import SQLITE_MAX_INTEGER, TaskRecord
from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .notifications import NotificationDispatcher, TaskCreatedEvent
from .pagination import Page, page_offset

logger = logging.getLogger(__name__)

DEFAULT_TASKS_PER_PAGE = 5
SHARE_TOKEN_BYTES = 16  # 128 bits
SHARE_TOKEN_ATTEMPTS = 3

# Non-ISO formats accepted for due dates, tried in order
_DUE_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
)


def normalize_due_date(value: Union[str, date, None], field: str = "dueDate") -> date:
    """
    Parse a due date and drop any time-of-day component.

    Raises:
        ValidationError: If the value cannot be parsed as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("The due date is required.", field=field)

    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for fmt in _DUE_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise ValidationError(f"'{value}' is not a valid date.", field=field)


def new_share_token() -> str:
    return secrets.token_hex(SHARE_TOKEN_BYTES)


@dataclass(frozen=True)
class CategoryLookup:
    """Result of resolving one requested category id."""
    category_id: int
    found: bool


class TaskService:
    """Task operations scoped to the calling user."""

    def __init__(
        self,
        tasks: TaskRepository,
        categories: CategoryRepository,
        dispatcher: Optional[NotificationDispatcher] = None,
        per_page: int = DEFAULT_TASKS_PER_PAGE,
        category_tasks_all_owners: bool = False,
    ):
        if per_page < 1:
            raise ValueError("per_page must be >= 1")
        self.tasks = tasks
        self.categories = categories
        self.dispatcher = dispatcher
        self.per_page = per_page
        self.category_tasks_all_owners = category_tasks_all_owners

    # ==================== Helpers ====================

    async def _get_owned(self, task_id: int, caller_id: int) -> TaskRecord:
        task = await self.tasks.get_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if task.user_id != caller_id:
            logger.warning(
                "User %s denied access to task %s owned by %s",
                caller_id, task_id, task.user_id,
            )
            raise ForbiddenError("Unauthorized")
        return task

    async def _lookup_categories(self, category_ids: Sequence[int]) -> List[CategoryLookup]:
        existing = await self.categories.find_existing_ids(category_ids)
        return [
            CategoryLookup(category_id=cid, found=cid in existing)
            for cid in dict.fromkeys(category_ids)
        ]

    @staticmethod
    def _require_name(value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("The task name is required.", field="taskName")
        return value.strip()

    # ==================== Operations ====================

    async def create_task(
        self,
        caller_id: int,
        task_name: str,
        due_date: Union[str, date],
        description: Optional[str] = None,
        is_completed: bool = False,
        category_ids: Sequence[int] = (),
    ) -> TaskRecord:
        """
        Create a task owned by the caller and link it to categories.

        Task row and category links are written in one transaction: an unknown
        category id fails the whole creation with NotFoundError.
        """
        name = self._require_name(task_name)
        normalized = normalize_due_date(due_date)

        lookups = await self._lookup_categories(category_ids)
        missing = [lookup.category_id for lookup in lookups if not lookup.found]
        if missing:
            raise NotFoundError(
                f"Category not found: {', '.join(str(cid) for cid in missing)}"
            )

        task: Optional[TaskRecord] = None
        for attempt in range(1, SHARE_TOKEN_ATTEMPTS + 1):
            try:
                task = await self.tasks.create_task(
                    user_id=caller_id,
                    task_name=name,
                    due_date=normalized.isoformat(),
                    share_token=new_share_token(),
                    description=description,
                    is_completed=is_completed,
                    category_ids=[lookup.category_id for lookup in lookups],
                )
                break
            except UniqueViolation as e:
                if e.column != "tasks.share_token":
                    raise ConflictError(str(e)) from e
                logger.warning("Share token collision (attempt %d), regenerating", attempt)
            except ForeignKeyViolation as e:
                # A category vanished between lookup and insert
                raise NotFoundError("Category not found") from e

        if task is None:
            raise ConflictError("Could not allocate a unique share token")

        logger.info("User %s created task %s", caller_id, task.id)

        if self.dispatcher is not None:
            self.dispatcher.dispatch(
                caller_id,
                TaskCreatedEvent(
                    task_id=task.id,
                    task_name=task.task_name,
                    due_date=task.due_date,
                    share_token=task.share_token,
                ),
            )

        return task

    async def list_tasks(
        self,
        caller_id: int,
        completed: Optional[bool] = None,
        due_date: Union[str, date, None] = None,
        page: int = 1,
    ) -> Page[TaskRecord]:
        """List the caller's tasks, filters AND-ed, one page at a time."""
        if page < 1:
            raise ValidationError("The page must be at least 1.", field="page")
        offset = page_offset(page, self.per_page)
        if offset > SQLITE_MAX_INTEGER:
            raise ValidationError("The page is out of range.", field="page")

        normalized = None
        if due_date is not None:
            normalized = normalize_due_date(due_date, field="due_date").isoformat()

        items, total = await self.tasks.list_tasks(
            caller_id,
            is_completed=completed,
            due_date=normalized,
            limit=self.per_page,
            offset=offset,
        )
        return Page[TaskRecord].build(items, total, page, self.per_page)

    async def get_task(self, task_id: int, caller_id: int) -> TaskRecord:
        return await self._get_owned(task_id, caller_id)

    async def update_task(
        self,
        task_id: int,
        caller_id: int,
        changes: Mapping[str, Any],
    ) -> TaskRecord:
        """
        Apply a partial update to one of the caller's tasks.

        Args:
            task_id: Task identifier
            caller_id: Calling user id
            changes: Supplied fields only; keys among task_name, description,
                due_date, is_completed
        """
        await self._get_owned(task_id, caller_id)

        unknown = set(changes) - {"task_name", "description", "due_date", "is_completed"}
        if unknown:
            raise ValidationError(
                f"Unknown fields: {', '.join(sorted(unknown))}", field=sorted(unknown)[0]
            )

        columns: Dict[str, Any] = {}
        if "task_name" in changes:
            columns["task_name"] = self._require_name(changes["task_name"])
        if "description" in changes:
            columns["description"] = changes["description"]
        if "due_date" in changes:
            columns["due_date"] = normalize_due_date(changes["due_date"]).isoformat()
        if "is_completed" in changes:
            if changes["is_completed"] is None:
                raise ValidationError("The completed flag cannot be null.", field="is_completed")
            columns["is_completed"] = bool(changes["is_completed"])

        task = await self.tasks.update_task(task_id, columns)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def delete_task(self, task_id: int, caller_id: int) -> None:
        await self._get_owned(task_id, caller_id)
        if not await self.tasks.delete_task(task_id):
            raise NotFoundError("Task not found")
        logger.info("User %s deleted task %s", caller_id, task_id)

    async def get_by_share_token(
        self,
        share_token: str,
        caller_id: Optional[int] = None,
    ) -> TaskRecord:
        """
        Resolve a shared task. Any holder of the token may read the task;
        the caller (possibly anonymous) is only used for logging.
        """
        task = await self.tasks.get_by_share_token(share_token)
        if task is None:
            raise NotFoundError("Task not found")
        logger.debug(
            "Task %s resolved by share token (caller=%s, owner=%s)",
            task.id, caller_id, caller_id is not None and caller_id == task.user_id,
        )
        return task

    async def list_by_category(self, category_id: int, caller_id: int) -> List[TaskRecord]:
        """
        Tasks linked to a category. Restricted to the caller's own tasks
        unless the service was configured to list across all owners.
        """
        if await self.categories.get_category(category_id) is None:
            raise NotFoundError("Category not found")
        owner = None if self.category_tasks_all_owners else caller_id
        return await self.tasks.list_by_category(category_id, user_id=owner)
