"""Role-based permission matrix.

This module is the only place the permission matrix is declared. The
server-side dependencies in ``taskflow.core.dependencies`` and the advisory
guard in ``taskflow.core.guard`` both evaluate against it, and
``permission_matrix()`` serializes it for clients.

Lookups are fail-closed: an unknown or empty role, an unknown resource, an
action that does not belong to the resource, or a grant that simply is not
listed all evaluate to ``False``. Nothing in here raises on bad input except
``Permission.of``, which is meant for code that declares permissions.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, NamedTuple, Optional

from taskflow.database.models.enums import (
    Role,
    Resource,
    RESOURCE_ACTIONS,
    ProjectAction,
    TaskAction,
    UserAction,
    AnalyticsAction,
    CommentAction,
)


_GRANTS = {
    Role.ADMIN: {
        Resource.PROJECTS: {
            ProjectAction.CREATE,
            ProjectAction.READ,
            ProjectAction.UPDATE,
            ProjectAction.DELETE,
            ProjectAction.MANAGE_MEMBERS,
        },
        Resource.TASKS: {
            TaskAction.CREATE,
            TaskAction.READ,
            TaskAction.UPDATE,
            TaskAction.DELETE,
            TaskAction.ASSIGN,
        },
        Resource.USERS: {
            UserAction.CREATE,
            UserAction.READ,
            UserAction.UPDATE,
            UserAction.DELETE,
            UserAction.CHANGE_ROLE,
        },
        Resource.ANALYTICS: {AnalyticsAction.VIEW_ALL},
        Resource.COMMENTS: {
            CommentAction.CREATE,
            CommentAction.READ,
            CommentAction.UPDATE,
            CommentAction.DELETE,
        },
    },
    Role.MANAGER: {
        Resource.PROJECTS: {
            ProjectAction.CREATE,
            ProjectAction.READ,
            ProjectAction.UPDATE,
            ProjectAction.MANAGE_MEMBERS,
        },
        Resource.TASKS: {
            TaskAction.CREATE,
            TaskAction.READ,
            TaskAction.UPDATE,
            TaskAction.ASSIGN,
        },
        Resource.USERS: {UserAction.READ},
        Resource.ANALYTICS: {AnalyticsAction.VIEW_TEAM},
        Resource.COMMENTS: {
            CommentAction.CREATE,
            CommentAction.READ,
            CommentAction.UPDATE,
            CommentAction.DELETE,
        },
    },
    Role.USER: {
        Resource.PROJECTS: {ProjectAction.READ},
        Resource.TASKS: {TaskAction.READ, TaskAction.UPDATE_STATUS},
        Resource.USERS: set(),
        Resource.ANALYTICS: {AnalyticsAction.VIEW_OWN},
        Resource.COMMENTS: {
            CommentAction.CREATE,
            CommentAction.READ,
            CommentAction.UPDATE_OWN,
            CommentAction.DELETE_OWN,
        },
    },
}

# Read-only view of the grants, role -> resource -> frozenset of actions
PERMISSIONS: Mapping[Role, Mapping[Resource, frozenset]] = MappingProxyType({
    role: MappingProxyType({
        resource: frozenset(actions) for resource, actions in grants.items()
    })
    for role, grants in _GRANTS.items()
})

ROLE_DISPLAY_NAMES = {
    Role.ADMIN: "Administrator",
    Role.MANAGER: "Manager",
    Role.USER: "Team Member",
}

ROLE_BADGE_COLORS = {
    Role.ADMIN: "#e74c3c",
    Role.MANAGER: "#f39c12",
    Role.USER: "#3498db",
}

DEFAULT_BADGE_COLOR = "#95a5a6"


class Permission(NamedTuple):
    resource: Resource
    action: Enum

    @classmethod
    def of(cls, resource, action) -> "Permission":
        """Build a validated permission.

        Raises:
            ValueError: if the resource is unknown or the action is not
                part of that resource's vocabulary.
        """
        resource = Resource(_raw(resource))
        action = RESOURCE_ACTIONS[resource](_raw(action))
        return cls(resource, action)

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"


def _raw(value: Any) -> Any:
    # Enum members from another vocabulary still compare by their value
    return value.value if isinstance(value, Enum) else value


def _to_role(role: Any) -> Optional[Role]:
    if not role:
        return None
    try:
        return Role(_raw(role))
    except (ValueError, TypeError):
        return None


def _to_resource(resource: Any) -> Optional[Resource]:
    try:
        return Resource(_raw(resource))
    except (ValueError, TypeError):
        return None


def _to_action(resource: Resource, action: Any) -> Optional[Enum]:
    try:
        return RESOURCE_ACTIONS[resource](_raw(action))
    except (ValueError, TypeError):
        return None


def _unpack(permission: Any) -> tuple:
    if isinstance(permission, Mapping):
        return permission.get("resource"), permission.get("action")
    try:
        resource, action = permission
    except (TypeError, ValueError):
        return None, None
    return resource, action


def has_permission(role, resource, action) -> bool:
    """Return True only when ``role`` is explicitly granted ``resource:action``."""
    role = _to_role(role)
    if role is None:
        return False

    resource = _to_resource(resource)
    if resource is None:
        return False

    action = _to_action(resource, action)
    if action is None:
        return False

    granted = PERMISSIONS.get(role, {}).get(resource)
    return bool(granted) and action in granted


def has_all_permissions(role, permissions: Iterable) -> bool:
    return all(has_permission(role, *_unpack(p)) for p in permissions)


def has_any_permission(role, permissions: Iterable) -> bool:
    return any(has_permission(role, *_unpack(p)) for p in permissions)


def get_role_permissions(role) -> dict:
    """Grants of a single role as plain strings, ``{}`` for an unknown role."""
    role = _to_role(role)
    if role is None:
        return {}

    return {
        resource.value: [
            action.value
            for action in RESOURCE_ACTIONS[resource]
            if action in actions
        ]
        for resource, actions in PERMISSIONS[role].items()
    }


def permission_matrix() -> dict:
    return {role.value: get_role_permissions(role) for role in PERMISSIONS}


def get_role_display_name(role) -> Optional[str]:
    """Human readable role name; unknown roles fall back to their own value."""
    known = _to_role(role)
    if known is not None:
        return ROLE_DISPLAY_NAMES[known]
    if not role:
        return None
    return str(_raw(role))


def get_role_badge_color(role) -> str:
    known = _to_role(role)
    return ROLE_BADGE_COLORS.get(known, DEFAULT_BADGE_COLOR)
