from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import logging
import uuid

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.project import Project
from taskflow.database.models.task import Task
from taskflow.database.models.enums import (
    Resource, TaskAction, TaskStatus, ActivityAction, NotificationType
)
from taskflow.core.dependencies import (
    ensure_permission,
    require_permission,
    require_any_permission
)
from taskflow.core.permissions import has_permission
from taskflow.core.services.activity_service import ActivityService
from taskflow.core.services.notification_service import NotificationService
from taskflow.core.dtos.task import (
    TaskCreate,
    TaskUpdate,
    TaskAssign,
    TaskStatusUpdate,
    TaskResponse,
    TaskListResponse,
    ActivityResponse
)
from taskflow.core.dtos.common import MessageResponse

router = APIRouter(prefix="/tasks", tags=["Tasks"])

logger = logging.getLogger(__name__)


async def get_task_or_404(session: AsyncSession, task_id: int) -> Task:
    task = await session.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


async def check_assignee(session: AsyncSession, assignee_id: Optional[uuid.UUID]):
    if assignee_id is None:
        return
    assignee = await session.get(User, assignee_id)
    if not assignee or not assignee.is_active:
        raise HTTPException(status_code=404, detail="Assignee not found")


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    project_id: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    assignee_id: Optional[uuid.UUID] = None,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.READ))
):
    query = select(Task).order_by(Task.created_at.desc())

    if project_id is not None:
        query = query.where(Task.project_id == project_id)
    if status is not None:
        query = query.where(Task.status == status)
    if assignee_id is not None:
        query = query.where(Task.assignee_id == assignee_id)

    items = [TaskResponse.model_validate(task) for task in await session.scalars(query)]

    return TaskListResponse(total=len(items), items=items)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.READ))
):
    return TaskResponse.model_validate(await get_task_or_404(session, task_id))


@router.get("/{task_id}/activity", response_model=list[ActivityResponse])
async def get_task_activity(
    task_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.READ))
):
    await get_task_or_404(session, task_id)

    entries = await ActivityService(session).for_task(task_id)
    return [ActivityResponse.model_validate(entry) for entry in entries]


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    task_data: TaskCreate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.CREATE))
):
    project = await session.get(Project, task_data.project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    if task_data.assignee_id is not None:
        # Choosing an assignee at creation is an assignment
        ensure_permission(current_user, Resource.TASKS, TaskAction.ASSIGN)
        await check_assignee(session, task_data.assignee_id)

    task = Task(
        project_id=project.id,
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
        priority=task_data.priority,
        assignee_id=task_data.assignee_id,
        created_by=current_user.id,
        due_date=task_data.due_date
    )
    session.add(task)
    await session.flush()

    ActivityService(session).record(
        task, current_user.id, ActivityAction.CREATED, new_value=task.title
    )
    NotificationService(session).task_assigned(task, current_user.id)

    await session.commit()
    await session.refresh(task)

    return TaskResponse.model_validate(task)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    task_data: TaskUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.UPDATE))
):
    task = await get_task_or_404(session, task_id)

    ActivityService(session).apply_changes(
        task, current_user.id, task_data.model_dump(exclude_unset=True)
    )

    await session.commit()
    await session.refresh(task)

    return TaskResponse.model_validate(task)


@router.put("/{task_id}/assign", response_model=TaskResponse)
async def assign_task(
    task_id: int,
    assign_data: TaskAssign = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.ASSIGN))
):
    task = await get_task_or_404(session, task_id)
    await check_assignee(session, assign_data.assignee_id)

    previous = task.assignee_id
    task.assignee_id = assign_data.assignee_id

    if previous != task.assignee_id:
        ActivityService(session).record(
            task, current_user.id, ActivityAction.ASSIGNED,
            field="assignee_id", old_value=previous, new_value=task.assignee_id
        )
        NotificationService(session).task_assigned(task, current_user.id)

    await session.commit()
    await session.refresh(task)

    logger.info("Task %s assigned to %s by %s", task.id, task.assignee_id, current_user.id)

    return TaskResponse.model_validate(task)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: int,
    status_data: TaskStatusUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_permission(
        (Resource.TASKS, TaskAction.UPDATE),
        (Resource.TASKS, TaskAction.UPDATE_STATUS)
    ))
):
    task = await get_task_or_404(session, task_id)

    can_update_any = has_permission(current_user.role, Resource.TASKS, TaskAction.UPDATE)
    if not can_update_any and task.assignee_id != current_user.id:
        raise HTTPException(
            status_code=403,
            detail="Only the assignee can change the status of this task"
        )

    if ActivityService(session).apply_changes(
        task, current_user.id, {"status": status_data.status}
    ):
        NotificationService(session).notify(
            task.created_by,
            NotificationType.STATUS_CHANGED,
            f'"{task.title}" moved to {task.status.value}',
            task_id=task.id,
            project_id=task.project_id,
            related_user_id=current_user.id
        )

    await session.commit()
    await session.refresh(task)

    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.DELETE))
):
    task = await get_task_or_404(session, task_id)

    await session.delete(task)
    await session.commit()

    return MessageResponse(
        success=True,
        message="Task deleted successfully"
    )
