from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging
import uuid
import jwt

from taskflow.core.permissions import Permission, has_permission
from taskflow.core.security import decode_token, is_token_blacklisted
from taskflow.database.database import get_db
from taskflow.database.models.enums import Role
from taskflow.database.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _credentials(authorization: HTTPAuthorizationCredentials | None) -> str:
    if authorization is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided"
        )
    return authorization.credentials


async def get_current_user(
    authorization: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:

    token = _credentials(authorization)

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired"
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    user_id = payload.get("sub")
    jti = payload.get("jti")

    if not user_id or not jti:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    if await is_token_blacklisted(jti):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked"
        )

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identifier"
        )

    user = await db.scalar(select(User).where(User.id == user_uuid))

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User inactive or not found"
        )

    return user


def _role_of(user: User):
    role = user.role
    if not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "User role not found"}
        )
    return role.value if isinstance(role, Role) else role


def _deny(user: User, role: str, required: list[Permission], missing: Permission):
    logger.warning(
        "Permission denied: user=%s role=%s required=%s",
        user.id, role, ",".join(str(p) for p in required)
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": "Insufficient permissions",
            "required": str(missing) if len(required) == 1 else [str(p) for p in required],
            "resource": missing.resource.value,
            "action": missing.action.value,
            "role": role
        }
    )


def ensure_permission(user: User, resource, action) -> None:
    """Inline form of ``require_permission`` for checks that depend on the payload."""
    required = Permission.of(resource, action)
    role = _role_of(user)

    if not has_permission(role, required.resource, required.action):
        _deny(user, role, [required], required)


def require_permission(resource, action):
    """Dependency that lets the request through only for ``resource:action``.

    The pair is validated when the route is declared, so a typo fails at
    import time instead of silently denying every request. Returns the
    current user so handlers can take it from this dependency directly.
    """
    required = Permission.of(resource, action)

    async def permission_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        role = _role_of(current_user)

        if not has_permission(role, required.resource, required.action):
            _deny(current_user, role, [required], required)

        return current_user

    return permission_checker


def require_any_permission(*permissions: tuple):
    required = [Permission.of(resource, action) for resource, action in permissions]

    async def permission_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        role = _role_of(current_user)

        for permission in required:
            if has_permission(role, permission.resource, permission.action):
                return current_user

        if not required:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"error": "Insufficient permissions", "required": [], "role": role}
            )
        _deny(current_user, role, required, required[0])

    return permission_checker


def require_all_permissions(*permissions: tuple):
    required = [Permission.of(resource, action) for resource, action in permissions]

    async def permission_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        role = _role_of(current_user)

        for permission in required:
            if not has_permission(role, permission.resource, permission.action):
                _deny(current_user, role, required, permission)

        return current_user

    return permission_checker


async def get_token(
    authorization: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    return _credentials(authorization)
