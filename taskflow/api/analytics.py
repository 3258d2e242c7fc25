from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.enums import Resource, AnalyticsAction
from taskflow.core.dependencies import require_any_permission
from taskflow.core.services.analytics_service import AnalyticsService
from taskflow.core.dtos.analytics import TaskAnalyticsResponse

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/tasks", response_model=TaskAnalyticsResponse)
async def task_analytics(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_permission(
        (Resource.ANALYTICS, AnalyticsAction.VIEW_ALL),
        (Resource.ANALYTICS, AnalyticsAction.VIEW_TEAM),
        (Resource.ANALYTICS, AnalyticsAction.VIEW_OWN)
    ))
):
    service = AnalyticsService(session)

    scope = service.resolve_scope(current_user)
    if scope is None:
        raise HTTPException(status_code=403, detail="No analytics access")

    return await service.task_summary(current_user, scope)
