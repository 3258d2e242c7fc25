"""Advisory permission checks for UI consumers.

``PermissionGuard`` answers "should this control be shown/enabled?" for a
role the client already holds. The role and the matrix copy on a client are
both under the client's control, so nothing here is a security boundary:
every mutating route re-checks through ``taskflow.core.dependencies``.
"""

from typing import Any, Iterable, Optional

from taskflow.core.permissions import (
    has_permission,
    has_all_permissions,
    has_any_permission,
    get_role_permissions,
    get_role_display_name,
    get_role_badge_color,
    permission_matrix,
)
from taskflow.database.models.enums import Role


class PermissionGuard:

    def __init__(self, role: Optional[str]):
        self.role = role.value if isinstance(role, Role) else role

    def can(self, resource, action) -> bool:
        return has_permission(self.role, resource, action)

    def can_all(self, permissions: Iterable) -> bool:
        return has_all_permissions(self.role, permissions)

    def can_any(self, permissions: Iterable) -> bool:
        return has_any_permission(self.role, permissions)

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def is_manager(self) -> bool:
        return self.role == Role.MANAGER.value

    def is_user(self) -> bool:
        return self.role == Role.USER.value

    def allows(
        self,
        resource=None,
        action=None,
        permissions: Iterable = (),
        require_all: bool = False
    ) -> bool:
        permissions = list(permissions)

        if permissions:
            if require_all:
                return self.can_all(permissions)
            return self.can_any(permissions)

        if resource and action:
            return self.can(resource, action)

        return False

    def render_if(self, content: Any, fallback: Any = None, **check) -> Any:
        return content if self.allows(**check) else fallback

    def describe(self) -> dict:
        """Payload a UI needs to drive its own checks."""
        return {
            "role": self.role,
            "display_name": get_role_display_name(self.role),
            "badge_color": get_role_badge_color(self.role),
            "permissions": get_role_permissions(self.role),
            "matrix": permission_matrix(),
        }
