"""
Database schema definitions for taskboard persistence.

Uses SQLite with:
- TEXT timestamps (ISO8601 format, UTC)
- TEXT due dates (YYYY-MM-DD, no time component)
- CHECK constraints and triggers for data integrity
- Foreign key cascades for cleanup
- Indexes for the owner/completion/due-date queries
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ==================== Enums ====================

class NotificationType(str, Enum):
    """Notification kind."""
    TASK_REMINDER = "task_reminder"


# ==================== Pydantic Models ====================

class UserRecord(BaseModel):
    """User database record (password hash is never exposed)."""
    id: int
    name: str
    email: str
    created_at: str  # ISO8601 timestamp
    updated_at: str  # ISO8601 timestamp

    class Config:
        from_attributes = True


class CategoryRecord(BaseModel):
    """Category database record."""
    id: int
    name: str
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class TaskRecord(BaseModel):
    """
    Task database record.

    Field names follow the table columns; the wire names used by the API
    (taskName, dueDate) are aliases; populate_by_name keeps column names usable.
    """
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    user_id: int
    task_name: str = Field(alias="taskName")
    description: Optional[str] = None
    due_date: date = Field(alias="dueDate")
    is_completed: bool = False
    share_token: str
    created_at: str
    updated_at: str
    categories: List[CategoryRecord] = Field(default_factory=list)


class CommentRecord(BaseModel):
    """Comment database record."""
    id: int
    task_id: int
    user_id: int
    description: str
    created_at: str

    class Config:
        from_attributes = True


class NotificationRecord(BaseModel):
    """Notification database record."""
    id: int
    user_id: int
    type: str  # NotificationType enum value
    data: dict
    created_at: str
    read_at: Optional[str] = None

    class Config:
        from_attributes = True


# ==================== SQL DDL ====================

# Largest value SQLite can bind as INTEGER (ids, offsets)
SQLITE_MAX_INTEGER = 2**63 - 1

SCHEMA_SQL = """
-- Enable foreign keys and optimize for web app workload
PRAGMA foreign_keys = ON;
PRAGMA journal_mode = WAL;
PRAGMA synchronous = NORMAL;
PRAGMA busy_timeout = 5000;

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

-- Issued bearer tokens; a JWT is only accepted while its jti row exists
CREATE TABLE IF NOT EXISTS personal_access_tokens (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    jti TEXT UNIQUE NOT NULL,
    name TEXT NOT NULL DEFAULT 'api',
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_tokens_user_id ON personal_access_tokens(user_id);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL CHECK (length(trim(name)) > 0),
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    task_name TEXT NOT NULL CHECK (length(trim(task_name)) > 0),
    description TEXT,
    due_date TEXT NOT NULL CHECK (due_date GLOB '[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]'),
    is_completed INTEGER NOT NULL DEFAULT 0 CHECK (is_completed IN (0, 1)),
    share_token TEXT UNIQUE NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_tasks_user_id ON tasks(user_id, id);
CREATE INDEX IF NOT EXISTS idx_tasks_user_completed ON tasks(user_id, is_completed);
CREATE INDEX IF NOT EXISTS idx_tasks_user_due_date ON tasks(user_id, due_date);

-- Owner and share token are fixed at creation
CREATE TRIGGER IF NOT EXISTS trg_tasks_owner_immutable
BEFORE UPDATE OF user_id ON tasks
WHEN NEW.user_id IS NOT OLD.user_id
BEGIN
    SELECT RAISE(ABORT, 'task owner is immutable');
END;

CREATE TRIGGER IF NOT EXISTS trg_tasks_share_token_immutable
BEFORE UPDATE OF share_token ON tasks
WHEN NEW.share_token IS NOT OLD.share_token
BEGIN
    SELECT RAISE(ABORT, 'task share token is immutable');
END;

-- Task to category association table (many-to-many)
CREATE TABLE IF NOT EXISTS category_task (
    task_id INTEGER NOT NULL,
    category_id INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    PRIMARY KEY (task_id, category_id),
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE,
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE CASCADE
) WITHOUT ROWID;

CREATE INDEX IF NOT EXISTS idx_category_task_category ON category_task(category_id, task_id);

CREATE TABLE IF NOT EXISTS comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    description TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_comments_task_id ON comments(task_id, id);

CREATE TABLE IF NOT EXISTS notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    type TEXT NOT NULL CHECK (type IN ('task_reminder')),
    data_json TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    read_at TEXT,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_notifications_user_id ON notifications(user_id, id DESC);
"""


# ==================== Helpers ====================

def now_iso8601() -> str:
    """Get current UTC timestamp in ISO8601 format."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
