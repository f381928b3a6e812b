"""
Task notifications - fire-and-forget delivery after task creation.

Provides:
- TaskCreatedEvent: payload handed to notifiers
- Notifier: collaborator protocol (notify(user_id, event))
- DatabaseNotifier: stores a task reminder for the owner
- NotificationDispatcher: schedules deliveries as background tasks

Design decisions:
- Delivery never blocks the response path
- Delivery failures are logged, never propagated to the caller
- Pending deliveries are tracked so shutdown can drain them
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Protocol, Set, runtime_checkable

from ..db.crud import NotificationRepository
from ..db.schema import NotificationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskCreatedEvent:
    """A task was created for its owner."""
    task_id: int
    task_name: str
    due_date: date
    share_token: str

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["due_date"] = self.due_date.isoformat()
        return payload


@runtime_checkable
class Notifier(Protocol):
    """Notification collaborator."""

    async def notify(self, user_id: int, event: TaskCreatedEvent) -> None:
        ...


class DatabaseNotifier:
    """Store a task reminder notification for the task owner."""

    def __init__(self, repository: NotificationRepository):
        self.repository = repository

    async def notify(self, user_id: int, event: TaskCreatedEvent) -> None:
        notification_id = await self.repository.add_notification(
            user_id,
            NotificationType.TASK_REMINDER.value,
            event.to_payload(),
        )
        logger.debug(
            "Stored task reminder %s for user %s (task %s)",
            notification_id, user_id, event.task_id,
        )


class NotificationDispatcher:
    """Run notifier deliveries in the background."""

    def __init__(self, notifier: Notifier) -> None:
        self.notifier = notifier
        # Strong references keep scheduled deliveries alive until done
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, user_id: int, event: TaskCreatedEvent) -> None:
        """Schedule delivery and return immediately."""
        task = asyncio.create_task(
            self._deliver(user_id, event),
            name=f"notify-task-{event.task_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, user_id: int, event: TaskCreatedEvent) -> None:
        try:
            await self.notifier.notify(user_id, event)
        except Exception:
            logger.exception(
                "Notification delivery failed for user %s (task %s)",
                user_id, event.task_id,
            )

    async def drain(self) -> None:
        """Wait for every pending delivery to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
