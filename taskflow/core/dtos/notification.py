from pydantic import BaseModel
from typing import Optional
from datetime import datetime
import uuid

from taskflow.database.models.enums import NotificationType, NotificationPriority


class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: Optional[str]
    task_id: Optional[int]
    project_id: Optional[int]
    related_user_id: Optional[uuid.UUID]
    is_read: bool
    is_archived: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread_count: int
