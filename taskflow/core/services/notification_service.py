from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update
from datetime import datetime
import logging
import uuid

from taskflow.database.models.notification import Notification
from taskflow.database.models.enums import (
    NotificationType, NotificationPriority, TaskPriority
)

logger = logging.getLogger(__name__)


PRIORITY_RANK = {
    NotificationPriority.URGENT: 1,
    NotificationPriority.HIGH: 2,
    NotificationPriority.NORMAL: 3,
    NotificationPriority.LOW: 4,
}

TASK_PRIORITY_LEVELS = {
    TaskPriority.URGENT: NotificationPriority.URGENT,
    TaskPriority.HIGH: NotificationPriority.HIGH,
    TaskPriority.MEDIUM: NotificationPriority.NORMAL,
    TaskPriority.LOW: NotificationPriority.LOW,
}


class NotificationService:
    """Notifications of a single recipient.

    Every read and write is filtered by ``user_id``, so a caller can never
    see or change somebody else's notifications.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def notify(
        self,
        user_id: Optional[uuid.UUID],
        type: NotificationType,
        title: str,
        message: Optional[str] = None,
        task_id: Optional[int] = None,
        project_id: Optional[int] = None,
        related_user_id: Optional[uuid.UUID] = None,
        priority: NotificationPriority = NotificationPriority.NORMAL
    ) -> Optional[Notification]:
        # Nobody is told about their own actions
        if user_id is None or user_id == related_user_id:
            return None

        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            task_id=task_id,
            project_id=project_id,
            related_user_id=related_user_id,
            priority=priority
        )
        self.session.add(notification)
        logger.debug("Notification %s queued for %s", type.value, user_id)
        return notification

    def task_assigned(self, task, actor_id: uuid.UUID) -> Optional[Notification]:
        return self.notify(
            task.assignee_id,
            NotificationType.TASK_ASSIGNED,
            f'You were assigned to "{task.title}"',
            task_id=task.id,
            project_id=task.project_id,
            related_user_id=actor_id,
            priority=TASK_PRIORITY_LEVELS.get(task.priority, NotificationPriority.NORMAL)
        )

    async def inbox(
        self,
        user_id: uuid.UUID,
        type: Optional[NotificationType] = None,
        is_read: Optional[bool] = None,
        priority: Optional[NotificationPriority] = None
    ) -> list[Notification]:
        """Unarchived notifications, most urgent first, newest first within a level."""
        query = (
            select(Notification)
            .where(Notification.user_id == user_id, Notification.is_archived.is_(False))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        if type is not None:
            query = query.where(Notification.type == type)
        if is_read is not None:
            query = query.where(Notification.is_read.is_(is_read))
        if priority is not None:
            query = query.where(Notification.priority == priority)

        notifications = await self.session.scalars(query)
        return sorted(notifications, key=lambda n: PRIORITY_RANK[n.priority])

    async def archived(self, user_id: uuid.UUID) -> list[Notification]:
        notifications = await self.session.scalars(
            select(Notification)
            .where(Notification.user_id == user_id, Notification.is_archived.is_(True))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(notifications)

    async def unread_count(self, user_id: uuid.UUID) -> int:
        count = await self.session.scalar(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
                Notification.is_archived.is_(False)
            )
        )
        return count or 0

    async def get(self, user_id: uuid.UUID, notification_id: int) -> Optional[Notification]:
        return await self.session.scalar(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id
            )
        )

    async def mark_all_read(self, user_id: uuid.UUID):
        await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, updated_at=datetime.utcnow())
        )

    async def archive_all(self, user_id: uuid.UUID):
        await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_archived.is_(False))
            .values(is_archived=True, updated_at=datetime.utcnow())
        )
