from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from datetime import datetime
import logging
import time

from taskflow.database.database import get_db
from taskflow.database.models.user import User
from taskflow.database.models.enums import Role
from taskflow.core.dependencies import get_current_user, get_token
from taskflow.core.guard import PermissionGuard
from taskflow.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
    blacklist_token
)
from taskflow.core.dtos.user import UserCreate, UserLogin, UserResponse
from taskflow.core.dtos.common import AuthResponse
from taskflow.core.dtos.permission import PermissionsResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = logging.getLogger(__name__)


def _issue_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role.value})


@router.post("/register", response_model=AuthResponse)
async def register_user(
    user_data: UserCreate = Body(...),
    session: AsyncSession = Depends(get_db)
):

    if user_data.password != user_data.again_password:
        return AuthResponse(
            success=False,
            error="Passwords do not match"
        )

    existing_user = await session.scalar(
        select(User).where(
            or_(User.email == user_data.email, User.username == user_data.username)
        )
    )
    if existing_user:
        return AuthResponse(
            success=False,
            error="User with this email or username already exists"
        )

    # Self-registration never grants more than the base role
    new_user = User(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        full_name=user_data.full_name,
        department=user_data.department or "General",
        role=Role.USER
    )
    session.add(new_user)
    await session.commit()

    logger.info("Registered user %s", new_user.id)

    return AuthResponse(
        success=True,
        message="User registered successfully",
        token=_issue_token(new_user)
    )


@router.post("/login", response_model=AuthResponse)
async def login_user(
    credentials: UserLogin = Body(...),
    session: AsyncSession = Depends(get_db)
):

    user = await session.scalar(
        select(User).where(User.email == credentials.email)
    )

    if not user or not user.is_active:
        return AuthResponse(
            success=False,
            error="Invalid credentials"
        )

    if not verify_password(credentials.password, user.password_hash):
        return AuthResponse(
            success=False,
            error="Invalid credentials"
        )

    user.last_login = datetime.utcnow()
    await session.commit()

    return AuthResponse(
        success=True,
        message="Login successful",
        token=_issue_token(user)
    )


@router.post("/logout", response_model=AuthResponse)
async def logout_user(token: str = Depends(get_token)):
    try:
        payload = decode_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")

    jti = payload.get("jti")
    exp = payload.get("exp")

    if not jti or not exp:
        raise HTTPException(status_code=400, detail="Invalid token payload")

    ttl = int(exp - time.time())
    if ttl <= 0:
        return AuthResponse(
            success=True,
            message="Token already expired"
        )

    await blacklist_token(jti, ttl)

    return AuthResponse(
        success=True,
        message="Logout successful"
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    return UserResponse.model_validate(current_user)


@router.get("/permissions", response_model=PermissionsResponse)
async def get_current_user_permissions(
    current_user: User = Depends(get_current_user)
):
    """Grants of the caller's role, for hiding controls in the UI.

    Advisory only; the routes enforce the same matrix on every request.
    """
    return PermissionGuard(current_user.role).describe()


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    current_user: User = Depends(get_current_user)
):

    return AuthResponse(
        success=True,
        message="Token refreshed",
        token=_issue_token(current_user)
    )
