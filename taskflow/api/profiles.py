from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.enums import Resource, UserAction
from taskflow.core.dependencies import get_current_user, require_permission
from taskflow.core.dtos.user import OwnProfileUpdate, ProfileUpdate, ProfileResponse

router = APIRouter(prefix="/profile", tags=["Profiles"])

logger = logging.getLogger(__name__)


async def _get_user_or_404(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _apply(session: AsyncSession, user: User, changes: dict) -> ProfileResponse:
    for field, value in changes.items():
        setattr(user, field, value)

    await session.commit()
    await session.refresh(user)

    return ProfileResponse.model_validate(user)


@router.get("", response_model=ProfileResponse)
async def get_own_profile(
    current_user: User = Depends(get_current_user)
):
    return ProfileResponse.model_validate(current_user)


@router.put("", response_model=ProfileResponse)
async def update_own_profile(
    profile_data: OwnProfileUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Only contact details; name, department and verification stay with users:update
    return await _apply(session, current_user, profile_data.model_dump(exclude_unset=True))


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_user_profile(
    user_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.USERS, UserAction.READ))
):
    return ProfileResponse.model_validate(await _get_user_or_404(session, user_id))


@router.put("/{user_id}", response_model=ProfileResponse)
async def update_user_profile(
    user_id: uuid.UUID,
    profile_data: ProfileUpdate = Body(...),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Resource.USERS, UserAction.UPDATE))
):
    user = await _get_user_or_404(session, user_id)

    changes = {
        field: value
        for field, value in profile_data.model_dump(exclude_unset=True).items()
        if value is not None or field in ("phone", "address", "bio")
    }
    logger.info("Profile of %s updated by %s", user.id, current_user.id)

    return await _apply(session, user, changes)
