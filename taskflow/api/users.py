from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
import logging
import uuid

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.enums import Resource, UserAction
from taskflow.core.dependencies import require_permission
from taskflow.core.security import hash_password
from taskflow.core.dtos.user import (
    AdminUserCreate,
    UserUpdate,
    RoleUpdate,
    UserResponse
)
from taskflow.core.dtos.common import MessageResponse

router = APIRouter(prefix="/users", tags=["Users"])

logger = logging.getLogger(__name__)


async def _get_user_or_404(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=list[UserResponse])
async def list_users(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.USERS, UserAction.READ))
):
    users = await session.scalars(select(User).order_by(User.created_at))
    return [UserResponse.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.USERS, UserAction.READ))
):
    return UserResponse.model_validate(await _get_user_or_404(session, user_id))


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    user_data: AdminUserCreate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.USERS, UserAction.CREATE))
):
    existing_user = await session.scalar(
        select(User).where(
            or_(User.email == user_data.email, User.username == user_data.username)
        )
    )
    if existing_user:
        raise HTTPException(
            status_code=409,
            detail="User with this email or username already exists"
        )

    new_user = User(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        full_name=user_data.full_name,
        department=user_data.department or "General",
        role=user_data.role
    )
    session.add(new_user)
    await session.commit()
    await session.refresh(new_user)

    logger.info("User %s created by %s", new_user.id, current_user.id)

    return UserResponse.model_validate(new_user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    user_data: UserUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.USERS, UserAction.UPDATE))
):
    user = await _get_user_or_404(session, user_id)

    if user_data.email is not None and user_data.email != user.email:
        taken = await session.scalar(
            select(User).where(User.email == user_data.email, User.id != user.id)
        )
        if taken:
            raise HTTPException(status_code=409, detail="Email already in use")
        user.email = user_data.email

    if user_data.full_name is not None:
        user.full_name = user_data.full_name
    if user_data.department is not None:
        user.department = user_data.department

    await session.commit()
    await session.refresh(user)

    return UserResponse.model_validate(user)


@router.put("/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: uuid.UUID,
    role_data: RoleUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_permission(Resource.USERS, UserAction.CHANGE_ROLE)
    )
):
    user = await _get_user_or_404(session, user_id)

    if user.id == current_user.id and role_data.role != user.role:
        raise HTTPException(status_code=400, detail="You cannot change your own role")

    previous = user.role
    user.role = role_data.role
    await session.commit()
    await session.refresh(user)

    logger.info(
        "Role of user %s changed from %s to %s by %s",
        user.id, previous.value, user.role.value, current_user.id
    )

    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.USERS, UserAction.DELETE))
):
    user = await _get_user_or_404(session, user_id)

    if user.id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user.is_active = False
    await session.commit()

    return MessageResponse(
        success=True,
        message="User deactivated successfully"
    )
