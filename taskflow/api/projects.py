from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
import uuid

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.project import Project, ProjectMember
from taskflow.database.models.task import Task
from taskflow.database.models.enums import Resource, ProjectAction, TaskAction, NotificationType
from taskflow.core.dependencies import require_permission
from taskflow.core.services.notification_service import NotificationService
from taskflow.core.dtos.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectMemberAdd,
    ProjectResponse,
    ProjectListResponse
)
from taskflow.core.dtos.task import TaskResponse, TaskListResponse
from taskflow.core.dtos.common import MessageResponse

router = APIRouter(prefix="/projects", tags=["Projects"])


def _project_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        status=project.status,
        owner_id=project.owner_id,
        start_date=project.start_date,
        end_date=project.end_date,
        member_ids=[member.user_id for member in project.members],
        created_at=project.created_at,
        updated_at=project.updated_at
    )


async def _get_project_or_404(session: AsyncSession, project_id: int) -> Project:
    project = await session.scalar(
        select(Project)
        .options(selectinload(Project.members))
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.PROJECTS, ProjectAction.READ))
):
    projects = await session.scalars(
        select(Project)
        .options(selectinload(Project.members))
        .order_by(Project.created_at.desc())
    )
    items = [_project_response(project) for project in projects]

    return ProjectListResponse(total=len(items), items=items)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.PROJECTS, ProjectAction.READ))
):
    return _project_response(await _get_project_or_404(session, project_id))


@router.get("/{project_id}/tasks", response_model=TaskListResponse)
async def list_project_tasks(
    project_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.TASKS, TaskAction.READ))
):
    await _get_project_or_404(session, project_id)

    tasks = await session.scalars(
        select(Task)
        .where(Task.project_id == project_id)
        .order_by(Task.created_at.desc())
    )
    items = [TaskResponse.model_validate(task) for task in tasks]

    return TaskListResponse(total=len(items), items=items)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.PROJECTS, ProjectAction.CREATE))
):
    if (
        project_data.start_date and project_data.end_date
        and project_data.end_date < project_data.start_date
    ):
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    project = Project(
        name=project_data.name,
        description=project_data.description,
        status=project_data.status,
        owner_id=current_user.id,
        start_date=project_data.start_date,
        end_date=project_data.end_date
    )
    session.add(project)
    await session.flush()

    session.add(ProjectMember(
        project_id=project.id,
        user_id=current_user.id,
        added_by=current_user.id
    ))
    await session.commit()

    return _project_response(await _get_project_or_404(session, project.id))


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    project_data: ProjectUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.PROJECTS, ProjectAction.UPDATE))
):
    project = await _get_project_or_404(session, project_id)

    for field, value in project_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(project, field, value)

    if project.start_date and project.end_date and project.end_date < project.start_date:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    await session.commit()

    return _project_response(await _get_project_or_404(session, project_id))


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.PROJECTS, ProjectAction.DELETE))
):
    project = await _get_project_or_404(session, project_id)

    await session.delete(project)
    await session.commit()

    return MessageResponse(
        success=True,
        message="Project deleted successfully"
    )


@router.post("/{project_id}/members", response_model=ProjectResponse, status_code=201)
async def add_project_member(
    project_id: int,
    member_data: ProjectMemberAdd = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_permission(Resource.PROJECTS, ProjectAction.MANAGE_MEMBERS)
    )
):
    project = await _get_project_or_404(session, project_id)

    user = await session.get(User, member_data.user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=404, detail="User not found")

    if any(member.user_id == user.id for member in project.members):
        raise HTTPException(status_code=409, detail="User is already a project member")

    session.add(ProjectMember(
        project_id=project.id,
        user_id=user.id,
        added_by=current_user.id
    ))
    NotificationService(session).notify(
        user.id,
        NotificationType.PROJECT_ADDED,
        f'You were added to "{project.name}"',
        project_id=project.id,
        related_user_id=current_user.id
    )
    await session.commit()

    return _project_response(await _get_project_or_404(session, project_id))


@router.delete("/{project_id}/members/{user_id}", response_model=ProjectResponse)
async def remove_project_member(
    project_id: int,
    user_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_permission(Resource.PROJECTS, ProjectAction.MANAGE_MEMBERS)
    )
):
    project = await _get_project_or_404(session, project_id)

    membership = await session.get(ProjectMember, (project_id, user_id))
    if not membership:
        raise HTTPException(status_code=404, detail="User is not a project member")

    if user_id == project.owner_id:
        raise HTTPException(status_code=400, detail="The project owner cannot be removed")

    await session.delete(membership)
    await session.commit()

    return _project_response(await _get_project_or_404(session, project_id))
