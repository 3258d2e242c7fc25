from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.notification import Notification
from taskflow.database.models.enums import NotificationType, NotificationPriority
from taskflow.core.dependencies import get_current_user
from taskflow.core.services.notification_service import NotificationService
from taskflow.core.dtos.notification import NotificationResponse, UnreadCountResponse
from taskflow.core.dtos.common import MessageResponse

# Every route works on the caller's own notifications only
router = APIRouter(prefix="/notifications", tags=["Notifications"])


async def _get_own_or_404(
    service: NotificationService,
    user: User,
    notification_id: int
) -> Notification:
    notification = await service.get(user.id, notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    type: Optional[NotificationType] = None,
    is_read: Optional[bool] = None,
    priority: Optional[NotificationPriority] = None,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notifications = await NotificationService(session).inbox(
        current_user.id, type=type, is_read=is_read, priority=priority
    )
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/unread/count", response_model=UnreadCountResponse)
async def unread_count(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    count = await NotificationService(session).unread_count(current_user.id)
    return UnreadCountResponse(unread_count=count)


@router.get("/archived", response_model=list[NotificationResponse])
async def list_archived(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notifications = await NotificationService(session).archived(current_user.id)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.put("/read/all", response_model=MessageResponse)
async def mark_all_read(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await NotificationService(session).mark_all_read(current_user.id)
    await session.commit()

    return MessageResponse(success=True, message="All notifications marked as read")


@router.put("/clear/all", response_model=MessageResponse)
async def clear_all(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await NotificationService(session).archive_all(current_user.id)
    await session.commit()

    return MessageResponse(success=True, message="All notifications cleared")


async def _set_flag(session, user, notification_id, **values) -> NotificationResponse:
    notification = await _get_own_or_404(NotificationService(session), user, notification_id)

    for field, value in values.items():
        setattr(notification, field, value)

    await session.commit()
    await session.refresh(notification)

    return NotificationResponse.model_validate(notification)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await _set_flag(session, current_user, notification_id, is_read=True)


@router.put("/{notification_id}/archive", response_model=NotificationResponse)
async def archive_notification(
    notification_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await _set_flag(session, current_user, notification_id, is_archived=True)


@router.put("/{notification_id}/restore", response_model=NotificationResponse)
async def restore_notification(
    notification_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await _set_flag(session, current_user, notification_id, is_archived=False)
