from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.task import Task
from taskflow.database.models.comment import Comment
from taskflow.database.models.enums import Resource, CommentAction, NotificationType
from taskflow.core.dependencies import require_permission, require_any_permission
from taskflow.core.permissions import has_permission
from taskflow.core.services.notification_service import NotificationService
from taskflow.core.dtos.comment import CommentCreate, CommentUpdate, CommentResponse
from taskflow.core.dtos.common import MessageResponse

router = APIRouter(tags=["Comments"])


async def _get_comment_or_404(session: AsyncSession, comment_id: int) -> Comment:
    comment = await session.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


def _check_author(user: User, comment: Comment, unrestricted: CommentAction):
    """Holders of only the *_own action may touch their own comments."""
    if has_permission(user.role, Resource.COMMENTS, unrestricted):
        return
    if comment.user_id != user.id:
        raise HTTPException(
            status_code=403,
            detail="You can only modify your own comments"
        )


@router.get("/tasks/{task_id}/comments", response_model=list[CommentResponse])
async def list_task_comments(
    task_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.COMMENTS, CommentAction.READ))
):
    if not await session.get(Task, task_id):
        raise HTTPException(status_code=404, detail="Task not found")

    comments = await session.scalars(
        select(Comment)
        .where(Comment.task_id == task_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )

    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post(
    "/tasks/{task_id}/comments",
    response_model=CommentResponse,
    status_code=201
)
async def add_comment(
    task_id: int,
    comment_data: CommentCreate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.COMMENTS, CommentAction.CREATE))
):
    task = await session.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    comment = Comment(
        task_id=task_id,
        user_id=current_user.id,
        content=comment_data.content
    )
    session.add(comment)

    NotificationService(session).notify(
        task.assignee_id,
        NotificationType.COMMENT_ADDED,
        f'New comment on "{task.title}"',
        message=comment_data.content[:200],
        task_id=task.id,
        project_id=task.project_id,
        related_user_id=current_user.id
    )

    await session.commit()
    await session.refresh(comment)

    return CommentResponse.model_validate(comment)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    comment_data: CommentUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_permission(
        (Resource.COMMENTS, CommentAction.UPDATE),
        (Resource.COMMENTS, CommentAction.UPDATE_OWN)
    ))
):
    comment = await _get_comment_or_404(session, comment_id)
    _check_author(current_user, comment, CommentAction.UPDATE)

    comment.content = comment_data.content
    await session.commit()
    await session.refresh(comment)

    return CommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_permission(
        (Resource.COMMENTS, CommentAction.DELETE),
        (Resource.COMMENTS, CommentAction.DELETE_OWN)
    ))
):
    comment = await _get_comment_or_404(session, comment_id)
    _check_author(current_user, comment, CommentAction.DELETE)

    await session.delete(comment)
    await session.commit()

    return MessageResponse(
        success=True,
        message="Comment deleted successfully"
    )
