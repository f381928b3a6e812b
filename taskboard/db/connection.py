"""
SQLite connection for the taskboard store.

One aiosqlite connection is shared by the whole process. Repositories talk to
it only inside ``transaction()``, which serializes request handlers on an
asyncio lock and commits or rolls back as a unit.
"""

import asyncio
import logging
import warnings
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Iterable, List, Optional

import aiosqlite

from .schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Owns the shared connection and the transaction lock.

    Statements issued outside a transaction, or from a task that does not own
    the running transaction, are rejected with RuntimeError. Transactions do
    not nest: repository methods open exactly one and never call each other.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._connection: Optional[aiosqlite.Connection] = None
        self._initialized = False

        self._lock = asyncio.Lock()
        self._init_lock = asyncio.Lock()
        self._transaction_owner: Optional[asyncio.Task] = None

    # ==================== Lifecycle ====================

    async def init(self) -> None:
        """Open the connection and apply SCHEMA_SQL (safe to call repeatedly)."""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            connection = await aiosqlite.connect(str(self.db_path), timeout=5.0)
            try:
                connection.row_factory = aiosqlite.Row
                await connection.executescript(SCHEMA_SQL)
                await connection.commit()

                # Cascades and link integrity depend on this pragma
                async with connection.execute("PRAGMA foreign_keys") as cursor:
                    row = await cursor.fetchone()
                if not row or row[0] != 1:
                    raise RuntimeError("SQLite foreign key enforcement is unavailable")
            except Exception:
                await connection.close()
                raise

            self._connection = connection
            self._initialized = True
            logger.debug("Taskboard schema ready at %s", self.db_path)

    async def close(self) -> None:
        """Close the connection once any running transaction has finished."""
        async with self._lock:
            if self._connection:
                await self._connection.close()
                self._connection = None
                self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def connection(self) -> aiosqlite.Connection:
        if not self._initialized or not self._connection:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._connection

    # ==================== Transaction guard ====================

    def _reject(self, operation: str, reason: str) -> None:
        message = f"{operation} rejected: {reason}. Use 'async with db.transaction()'."
        warnings.warn(message, RuntimeWarning, stacklevel=3)
        logger.warning(message)
        raise RuntimeError(message)

    def _check_owner(self, operation: str) -> None:
        owner = self._transaction_owner
        if owner is None:
            self._reject(operation, "no active transaction")
        if owner is not asyncio.current_task():
            self._reject(operation, "transaction owned by a different task")

    @asynccontextmanager
    async def transaction(self):
        """
        Run the enclosed statements as one SQLite transaction.

        Commits when the block exits normally and rolls back on any exception
        (including cancellation), which is then re-raised.
        """
        if self._transaction_owner is not None and self._transaction_owner is asyncio.current_task():
            self._reject("transaction()", "nested transaction in the same task")

        async with self._lock:
            self._transaction_owner = asyncio.current_task()
            try:
                await self.connection.execute("BEGIN")
                try:
                    yield self
                except BaseException:
                    await self.connection.rollback()
                    raise
                await self.connection.commit()
            finally:
                self._transaction_owner = None

    # ==================== Statements ====================

    async def execute(self, sql: str, parameters: Any = None) -> aiosqlite.Cursor:
        self._check_owner("execute")
        return await self.connection.execute(sql, parameters or ())

    async def execute_many(self, sql: str, parameters_list: Iterable[Any]) -> None:
        self._check_owner("execute_many")
        await self.connection.executemany(sql, parameters_list)

    async def fetch_one(self, sql: str, parameters: Any = None) -> Optional[aiosqlite.Row]:
        self._check_owner("fetch_one")
        async with self.connection.execute(sql, parameters or ()) as cursor:
            return await cursor.fetchone()

    async def fetch_all(self, sql: str, parameters: Any = None) -> List[aiosqlite.Row]:
        self._check_owner("fetch_all")
        async with self.connection.execute(sql, parameters or ()) as cursor:
            return list(await cursor.fetchall())

    async def ping(self) -> bool:
        """Run a trivial query to check the connection is usable."""
        async with self.transaction():
            row = await self.fetch_one("SELECT 1 AS ok")
        return bool(row and row["ok"] == 1)
