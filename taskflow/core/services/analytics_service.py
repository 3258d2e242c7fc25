from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from datetime import date

from taskflow.core.permissions import has_permission
from taskflow.database.models.user import User
from taskflow.database.models.project import Project, ProjectMember
from taskflow.database.models.task import Task
from taskflow.database.models.enums import (
    AnalyticsAction, Resource, TaskStatus, TaskPriority
)


# Widest scope first
SCOPE_ORDER = (
    AnalyticsAction.VIEW_ALL,
    AnalyticsAction.VIEW_TEAM,
    AnalyticsAction.VIEW_OWN,
)


class AnalyticsService:

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def resolve_scope(user: User) -> Optional[AnalyticsAction]:
        for scope in SCOPE_ORDER:
            if has_permission(user.role, Resource.ANALYTICS, scope):
                return scope
        return None

    def _scoped(self, query, user: User, scope: AnalyticsAction):
        if scope == AnalyticsAction.VIEW_ALL:
            return query

        if scope == AnalyticsAction.VIEW_TEAM:
            member_projects = select(ProjectMember.project_id).where(
                ProjectMember.user_id == user.id
            )
            owned_projects = select(Project.id).where(Project.owner_id == user.id)
            return query.where(
                or_(
                    Task.project_id.in_(member_projects),
                    Task.project_id.in_(owned_projects)
                )
            )

        return query.where(Task.assignee_id == user.id)

    async def task_summary(self, user: User, scope: AnalyticsAction) -> dict:

        by_status = {s.value: 0 for s in TaskStatus}
        rows = await self.session.execute(
            self._scoped(
                select(Task.status, func.count(Task.id)).group_by(Task.status),
                user, scope
            )
        )
        for status, count in rows:
            by_status[status.value] = count

        by_priority = {p.value: 0 for p in TaskPriority}
        rows = await self.session.execute(
            self._scoped(
                select(Task.priority, func.count(Task.id)).group_by(Task.priority),
                user, scope
            )
        )
        for priority, count in rows:
            by_priority[priority.value] = count

        overdue = await self.session.scalar(
            self._scoped(
                select(func.count(Task.id)).where(
                    Task.due_date.is_not(None),
                    Task.due_date < date.today(),
                    Task.status != TaskStatus.DONE
                ),
                user, scope
            )
        )

        return {
            "scope": scope.value,
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_priority": by_priority,
            "overdue": overdue or 0,
        }
