"""
CRUD operations for taskboard persistence.

Provides repositories for:
- Users and their issued access tokens
- Categories
- Tasks and their category links
- Comments
- Notifications

Every public repository method runs inside exactly one transaction.
"""

import json
import sqlite3
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .connection import DatabaseManager
from .schema import (
    CategoryRecord,
    CommentRecord,
    NotificationRecord,
    TaskRecord,
    UserRecord,
    now_iso8601,
)


# ==================== Integrity Errors ====================

class IntegrityViolation(Exception):
    """A constraint of the SQLite schema rejected a write."""

    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.column = column


class UniqueViolation(IntegrityViolation):
    """A UNIQUE constraint failed (column is 'table.column')."""


class ForeignKeyViolation(IntegrityViolation):
    """A FOREIGN KEY constraint failed."""


def _translate_integrity_error(exc: sqlite3.IntegrityError) -> IntegrityViolation:
    """Map an sqlite3.IntegrityError onto the repository error types."""
    message = str(exc)
    if message.startswith("UNIQUE constraint failed:"):
        column = message.split(":", 1)[1].strip().split(",")[0].strip()
        return UniqueViolation(message, column=column)
    if "FOREIGN KEY constraint failed" in message:
        return ForeignKeyViolation(message)
    return IntegrityViolation(message)


# Columns a task update may touch
UPDATABLE_TASK_COLUMNS = ("task_name", "description", "due_date", "is_completed")


class _Repository:
    def __init__(self, db: DatabaseManager):
        """
        Initialize repository.

        Args:
            db: DatabaseManager instance
        """
        self.db = db


# ==================== Users ====================

class UserRepository(_Repository):
    """Repository for user accounts."""

    async def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        """
        Insert a user.

        Raises:
            UniqueViolation: If the email is already registered
        """
        now = now_iso8601()
        async with self.db.transaction():
            try:
                cursor = await self.db.execute(
                    """
                    INSERT INTO users (name, email, password_hash, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (name, email, password_hash, now, now),
                )
            except sqlite3.IntegrityError as e:
                raise _translate_integrity_error(e) from e
            row = await self.db.fetch_one(
                "SELECT id, name, email, created_at, updated_at FROM users WHERE id = ?",
                (cursor.lastrowid,),
            )
        return UserRecord(**dict(row))

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        async with self.db.transaction():
            row = await self.db.fetch_one(
                "SELECT id, name, email, created_at, updated_at FROM users WHERE id = ?",
                (user_id,),
            )
        return UserRecord(**dict(row)) if row else None

    async def get_credentials(self, email: str) -> Optional[Tuple[UserRecord, str]]:
        """
        Get a user and their password hash by email.

        Returns:
            (user, password_hash) or None
        """
        async with self.db.transaction():
            row = await self.db.fetch_one("SELECT * FROM users WHERE email = ?", (email,))
        if not row:
            return None
        data = dict(row)
        password_hash = data.pop("password_hash")
        return UserRecord(**data), password_hash


class TokenRepository(_Repository):
    """Repository for issued access tokens (one row per JWT id)."""

    async def add_token(self, user_id: int, jti: str, name: str = "api") -> None:
        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO personal_access_tokens (user_id, jti, name, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, jti, name, now_iso8601()),
            )

    async def is_active(self, user_id: int, jti: str) -> bool:
        """Check whether a token id is still issued to the given user."""
        async with self.db.transaction():
            row = await self.db.fetch_one(
                "SELECT 1 FROM personal_access_tokens WHERE jti = ? AND user_id = ?",
                (jti, user_id),
            )
        return row is not None

    async def revoke_all(self, user_id: int) -> int:
        """
        Delete every token of a user.

        Returns:
            Number of revoked tokens
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                "DELETE FROM personal_access_tokens WHERE user_id = ?",
                (user_id,),
            )
        return cursor.rowcount


# ==================== Categories ====================

class CategoryRepository(_Repository):
    """Repository for the flat category set."""

    async def list_categories(self) -> List[CategoryRecord]:
        async with self.db.transaction():
            rows = await self.db.fetch_all("SELECT * FROM categories ORDER BY id")
        return [CategoryRecord(**dict(row)) for row in rows]

    async def get_category(self, category_id: int) -> Optional[CategoryRecord]:
        async with self.db.transaction():
            row = await self.db.fetch_one(
                "SELECT * FROM categories WHERE id = ?", (category_id,)
            )
        return CategoryRecord(**dict(row)) if row else None

    async def create_category(self, name: str) -> CategoryRecord:
        """
        Insert a category.

        Raises:
            UniqueViolation: If a category with this name exists
        """
        now = now_iso8601()
        async with self.db.transaction():
            try:
                cursor = await self.db.execute(
                    "INSERT INTO categories (name, created_at, updated_at) VALUES (?, ?, ?)",
                    (name, now, now),
                )
            except sqlite3.IntegrityError as e:
                raise _translate_integrity_error(e) from e
            row = await self.db.fetch_one(
                "SELECT * FROM categories WHERE id = ?", (cursor.lastrowid,)
            )
        return CategoryRecord(**dict(row))

    async def find_existing_ids(self, category_ids: Iterable[int]) -> Set[int]:
        """Return the subset of the given ids that exist."""
        ids = sorted(set(category_ids))
        if not ids:
            return set()
        placeholders = ", ".join("?" for _ in ids)
        async with self.db.transaction():
            rows = await self.db.fetch_all(
                f"SELECT id FROM categories WHERE id IN ({placeholders})",
                tuple(ids),
            )
        return {int(row["id"]) for row in rows}


# ==================== Tasks ====================

class TaskRepository(_Repository):
    """
    Repository for task persistence operations.

    Encapsulates all database interactions for tasks and their category links.
    """

    async def _categories_for(self, task_ids: Sequence[int]) -> Dict[int, List[CategoryRecord]]:
        """Fetch linked categories for several tasks (caller holds the transaction)."""
        result: Dict[int, List[CategoryRecord]] = {task_id: [] for task_id in task_ids}
        if not task_ids:
            return result
        placeholders = ", ".join("?" for _ in task_ids)
        rows = await self.db.fetch_all(
            f"""
            SELECT ct.task_id, c.*
            FROM category_task ct
            INNER JOIN categories c ON c.id = ct.category_id
            WHERE ct.task_id IN ({placeholders})
            ORDER BY c.id
            """,
            tuple(task_ids),
        )
        for row in rows:
            data = dict(row)
            task_id = data.pop("task_id")
            result[task_id].append(CategoryRecord(**data))
        return result

    async def _hydrate(self, rows: Sequence[Any]) -> List[TaskRecord]:
        """Build task records with their categories (caller holds the transaction)."""
        task_ids = [int(row["id"]) for row in rows]
        categories = await self._categories_for(task_ids)
        return [
            TaskRecord(**dict(row), categories=categories[int(row["id"])])
            for row in rows
        ]

    async def create_task(
        self,
        user_id: int,
        task_name: str,
        due_date: str,
        share_token: str,
        description: Optional[str] = None,
        is_completed: bool = False,
        category_ids: Sequence[int] = (),
    ) -> TaskRecord:
        """
        Create a task and link it to categories in one transaction.

        Args:
            user_id: Owner id
            task_name: Task name
            due_date: Normalized date string (YYYY-MM-DD)
            share_token: Pre-generated share token
            description: Optional description
            is_completed: Completion flag
            category_ids: Categories to link (duplicates ignored)

        Returns:
            Created task record

        Raises:
            UniqueViolation: On a share token collision
            ForeignKeyViolation: If a category does not exist
        """
        now = now_iso8601()

        async with self.db.transaction():
            try:
                cursor = await self.db.execute(
                    """
                    INSERT INTO tasks (
                        user_id, task_name, description, due_date,
                        is_completed, share_token, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (user_id, task_name, description, due_date,
                     int(is_completed), share_token, now, now),
                )
                task_id = cursor.lastrowid

                links = [(task_id, category_id, now) for category_id in dict.fromkeys(category_ids)]
                if links:
                    await self.db.execute_many(
                        """
                        INSERT INTO category_task (task_id, category_id, created_at)
                        VALUES (?, ?, ?)
                        """,
                        links,
                    )
            except sqlite3.IntegrityError as e:
                raise _translate_integrity_error(e) from e

            row = await self.db.fetch_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
            return (await self._hydrate([row]))[0]

    async def get_task(self, task_id: int) -> Optional[TaskRecord]:
        async with self.db.transaction():
            row = await self.db.fetch_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
            if not row:
                return None
            return (await self._hydrate([row]))[0]

    async def get_by_share_token(self, share_token: str) -> Optional[TaskRecord]:
        async with self.db.transaction():
            row = await self.db.fetch_one(
                "SELECT * FROM tasks WHERE share_token = ?", (share_token,)
            )
            if not row:
                return None
            return (await self._hydrate([row]))[0]

    async def list_tasks(
        self,
        user_id: int,
        is_completed: Optional[bool] = None,
        due_date: Optional[str] = None,
        limit: int = 5,
        offset: int = 0,
    ) -> Tuple[List[TaskRecord], int]:
        """
        List an owner's tasks with optional filters.

        Args:
            user_id: Owner id
            is_completed: Completion filter (None = any)
            due_date: Exact due date filter (None = any)
            limit: Page size
            offset: Pagination offset

        Returns:
            (tasks, total matching count)
        """
        conditions = ["user_id = ?"]
        params: List[Any] = [user_id]

        if is_completed is not None:
            conditions.append("is_completed = ?")
            params.append(int(is_completed))

        if due_date is not None:
            conditions.append("due_date = ?")
            params.append(due_date)

        where_clause = " AND ".join(conditions)

        async with self.db.transaction():
            count_row = await self.db.fetch_one(
                f"SELECT COUNT(*) AS total FROM tasks WHERE {where_clause}",
                tuple(params),
            )
            total = count_row["total"] if count_row else 0

            rows = await self.db.fetch_all(
                f"""
                SELECT * FROM tasks
                WHERE {where_clause}
                ORDER BY id
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            return await self._hydrate(rows), total

    async def update_task(self, task_id: int, changes: Mapping[str, Any]) -> Optional[TaskRecord]:
        """
        Apply a partial update.

        Args:
            task_id: Task identifier
            changes: Column -> value, limited to UPDATABLE_TASK_COLUMNS

        Returns:
            Updated task, or None if the task no longer exists
        """
        unknown = set(changes) - set(UPDATABLE_TASK_COLUMNS)
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")

        updates = []
        params: List[Any] = []
        for column in UPDATABLE_TASK_COLUMNS:
            if column in changes:
                value = changes[column]
                if column == "is_completed":
                    value = int(value)
                updates.append(f"{column} = ?")
                params.append(value)

        async with self.db.transaction():
            if updates:
                updates.append("updated_at = ?")
                params.append(now_iso8601())
                params.append(task_id)
                await self.db.execute(
                    f"UPDATE tasks SET {', '.join(updates)} WHERE id = ?",
                    tuple(params),
                )

            row = await self.db.fetch_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
            if not row:
                return None
            return (await self._hydrate([row]))[0]

    async def delete_task(self, task_id: int) -> bool:
        """
        Hard delete a task (links and comments cascade via FK).

        Returns:
            True if a row was deleted
        """
        async with self.db.transaction():
            cursor = await self.db.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        return cursor.rowcount > 0

    async def list_by_category(
        self,
        category_id: int,
        user_id: Optional[int] = None,
    ) -> List[TaskRecord]:
        """
        List tasks linked to a category through category_task.

        Args:
            category_id: Category identifier
            user_id: Restrict to this owner (None = all owners)
        """
        sql = """
            SELECT t.*
            FROM tasks t
            INNER JOIN category_task ct ON ct.task_id = t.id
            WHERE ct.category_id = ?
        """
        params: List[Any] = [category_id]
        if user_id is not None:
            sql += " AND t.user_id = ?"
            params.append(user_id)
        sql += " ORDER BY t.id"

        async with self.db.transaction():
            rows = await self.db.fetch_all(sql, tuple(params))
            return await self._hydrate(rows)


# ==================== Comments ====================

class CommentRepository(_Repository):
    """Repository for task comments."""

    async def create_comment(self, task_id: int, user_id: int, description: str) -> CommentRecord:
        """
        Insert a comment.

        Raises:
            ForeignKeyViolation: If the task (or user) does not exist
        """
        now = now_iso8601()
        async with self.db.transaction():
            try:
                cursor = await self.db.execute(
                    """
                    INSERT INTO comments (task_id, user_id, description, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (task_id, user_id, description, now),
                )
            except sqlite3.IntegrityError as e:
                raise _translate_integrity_error(e) from e
            row = await self.db.fetch_one(
                "SELECT * FROM comments WHERE id = ?", (cursor.lastrowid,)
            )
        return CommentRecord(**dict(row))


# ==================== Notifications ====================

class NotificationRepository(_Repository):
    """Repository for stored user notifications."""

    async def add_notification(
        self,
        user_id: int,
        notification_type: str,
        data: Mapping[str, Any],
    ) -> int:
        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                INSERT INTO notifications (user_id, type, data_json, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, notification_type, json.dumps(dict(data), ensure_ascii=False), now_iso8601()),
            )
        return cursor.lastrowid

    async def list_for_user(self, user_id: int, limit: int = 50) -> List[NotificationRecord]:
        async with self.db.transaction():
            rows = await self.db.fetch_all(
                """
                SELECT * FROM notifications
                WHERE user_id = ?
                ORDER BY id DESC
                LIMIT ?
                """,
                (user_id, limit),
            )

        return [self._to_record(row) for row in rows]

    async def mark_read(self, notification_id: int, user_id: int) -> Optional[NotificationRecord]:
        """
        Stamp read_at on one of the user's notifications (first read wins).

        Returns:
            The notification, or None if the user has no such notification
        """
        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE notifications SET read_at = COALESCE(read_at, ?)
                WHERE id = ? AND user_id = ?
                """,
                (now_iso8601(), notification_id, user_id),
            )
            row = await self.db.fetch_one(
                "SELECT * FROM notifications WHERE id = ? AND user_id = ?",
                (notification_id, user_id),
            )
        return self._to_record(row) if row else None

    @staticmethod
    def _to_record(row: Any) -> NotificationRecord:
        data = dict(row)
        data["data"] = json.loads(data.pop("data_json"))
        return NotificationRecord(**data)
