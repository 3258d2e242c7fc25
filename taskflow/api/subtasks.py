from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.task import Task
from taskflow.database.models.enums import Resource, TaskAction, TaskStatus, ActivityAction
from taskflow.core.dependencies import ensure_permission, require_permission
from taskflow.core.services.activity_service import ActivityService
from taskflow.core.services.notification_service import NotificationService
from taskflow.core.dtos.task import (
    SubtaskCreate,
    SubtaskProgressResponse,
    TaskUpdate,
    TaskResponse
)
from taskflow.core.dtos.common import MessageResponse
from taskflow.api.tasks import get_task_or_404, check_assignee

router = APIRouter(prefix="/tasks", tags=["Subtasks"])


async def _get_subtask_or_404(session: AsyncSession, task_id: int, subtask_id: int) -> Task:
    subtask = await session.get(Task, subtask_id)
    if not subtask or subtask.parent_task_id != task_id:
        raise HTTPException(status_code=404, detail="Subtask not found")
    return subtask


def subtask_progress(total: int, completed: int) -> dict:
    return {
        "total": total,
        "completed": completed,
        "percentage": round(completed * 100 / total) if total else 0,
    }


@router.get("/{task_id}/subtasks/progress", response_model=SubtaskProgressResponse)
async def get_subtask_progress(
    task_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.READ))
):
    await get_task_or_404(session, task_id)

    row = (await session.execute(
        select(
            func.count(Task.id),
            func.sum(case((Task.status == TaskStatus.DONE, 1), else_=0))
        ).where(Task.parent_task_id == task_id)
    )).one()

    return subtask_progress(row[0] or 0, row[1] or 0)


@router.get("/{task_id}/subtasks", response_model=list[TaskResponse])
async def list_subtasks(
    task_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.READ))
):
    await get_task_or_404(session, task_id)

    subtasks = await session.scalars(
        select(Task)
        .where(Task.parent_task_id == task_id)
        .order_by(Task.created_at, Task.id)
    )
    return [TaskResponse.model_validate(subtask) for subtask in subtasks]


@router.post("/{task_id}/subtasks", response_model=TaskResponse, status_code=201)
async def create_subtask(
    task_id: int,
    subtask_data: SubtaskCreate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.CREATE))
):
    parent = await get_task_or_404(session, task_id)
    if parent.parent_task_id is not None:
        raise HTTPException(status_code=400, detail="Subtasks cannot have subtasks")

    if subtask_data.assignee_id is not None:
        ensure_permission(current_user, Resource.TASKS, TaskAction.ASSIGN)
        await check_assignee(session, subtask_data.assignee_id)

    subtask = Task(
        project_id=parent.project_id,
        parent_task_id=parent.id,
        title=subtask_data.title,
        description=subtask_data.description,
        status=TaskStatus.TODO,
        priority=subtask_data.priority,
        assignee_id=subtask_data.assignee_id,
        created_by=current_user.id,
        due_date=subtask_data.due_date
    )
    session.add(subtask)
    await session.flush()

    ActivityService(session).record(
        subtask, current_user.id, ActivityAction.CREATED, new_value=subtask.title
    )
    NotificationService(session).task_assigned(subtask, current_user.id)

    await session.commit()
    await session.refresh(subtask)

    return TaskResponse.model_validate(subtask)


@router.put("/{task_id}/subtasks/{subtask_id}", response_model=TaskResponse)
async def update_subtask(
    task_id: int,
    subtask_id: int,
    subtask_data: TaskUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.UPDATE))
):
    subtask = await _get_subtask_or_404(session, task_id, subtask_id)

    ActivityService(session).apply_changes(
        subtask, current_user.id, subtask_data.model_dump(exclude_unset=True)
    )

    await session.commit()
    await session.refresh(subtask)

    return TaskResponse.model_validate(subtask)


@router.delete("/{task_id}/subtasks/{subtask_id}", response_model=MessageResponse)
async def delete_subtask(
    task_id: int,
    subtask_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.DELETE))
):
    subtask = await _get_subtask_or_404(session, task_id, subtask_id)

    await session.delete(subtask)
    await session.commit()

    return MessageResponse(
        success=True,
        message="Subtask deleted successfully"
    )
