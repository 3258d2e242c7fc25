from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class Resource(str, Enum):
    PROJECTS = "projects"
    TASKS = "tasks"
    USERS = "users"
    ANALYTICS = "analytics"
    COMMENTS = "comments"


class ProjectAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE_MEMBERS = "manage_members"


class TaskAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"
    UPDATE_STATUS = "update_status"


class UserAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    CHANGE_ROLE = "change_role"


class AnalyticsAction(str, Enum):
    VIEW_ALL = "view_all"
    VIEW_TEAM = "view_team"
    VIEW_OWN = "view_own"


class CommentAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    UPDATE_OWN = "update_own"
    DELETE_OWN = "delete_own"


# Each resource owns its own action vocabulary
RESOURCE_ACTIONS = {
    Resource.PROJECTS: ProjectAction,
    Resource.TASKS: TaskAction,
    Resource.USERS: UserAction,
    Resource.ANALYTICS: AnalyticsAction,
    Resource.COMMENTS: CommentAction,
}


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NotificationType(str, Enum):
    TASK_ASSIGNED = "task_assigned"
    STATUS_CHANGED = "status_changed"
    COMMENT_ADDED = "comment_added"
    PROJECT_ADDED = "project_added"


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class ActivityAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    ASSIGNED = "assigned"
    STATUS_CHANGED = "status_changed"
