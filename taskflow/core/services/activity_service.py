from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from enum import Enum
import logging
import uuid

from taskflow.database.models.task import Task, ActivityLog
from taskflow.database.models.enums import ActivityAction

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class ActivityService:
    """Per-task history. Entries are added to the session; callers commit."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def record(
        self,
        task: Task,
        user_id: uuid.UUID,
        action: ActivityAction,
        field: Optional[str] = None,
        old_value: Any = None,
        new_value: Any = None
    ) -> ActivityLog:
        entry = ActivityLog(
            task_id=task.id,
            user_id=user_id,
            action=action,
            field=field,
            old_value=_as_text(old_value),
            new_value=_as_text(new_value)
        )
        self.session.add(entry)
        logger.debug("Task %s: %s %s", task.id, action.value, field or "")
        return entry

    def apply_changes(self, task: Task, user_id: uuid.UUID, changes: dict) -> int:
        """Set each changed attribute on ``task`` and log one entry per field."""
        recorded = 0
        for field, value in changes.items():
            old = getattr(task, field)
            if value is None or value == old:
                continue
            setattr(task, field, value)
            action = (
                ActivityAction.STATUS_CHANGED if field == "status"
                else ActivityAction.UPDATED
            )
            self.record(task, user_id, action, field, old, value)
            recorded += 1
        return recorded

    async def for_task(self, task_id: int) -> list[ActivityLog]:
        entries = await self.session.scalars(
            select(ActivityLog)
            .where(ActivityLog.task_id == task_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        )
        return list(entries)
