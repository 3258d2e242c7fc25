from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from sqlalchemy import select, func

from taskflow.config import get_settings
from taskflow.database.database import engine, AsyncSessionLocal, init_db
from taskflow.database.models.user import User
from taskflow.database.models.project import Project, ProjectMember
from taskflow.database.models.task import Task
from taskflow.database.models.comment import Comment  # noqa: F401  registers the table
from taskflow.database.models.notification import Notification  # noqa: F401
from taskflow.database.models.enums import Role, ProjectStatus, TaskStatus, TaskPriority
from taskflow.core.security import hash_password

from taskflow.api import (
    auth, users, profiles, projects, tasks, subtasks,
    comments, analytics, notifications
)

settings = get_settings()
logger = logging.getLogger(__name__)

logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):

    logger.info("Starting application...")

    await init_db()

    if settings.SEED_DEFAULT_DATA:
        async with AsyncSessionLocal() as session:
            user_count = await session.scalar(select(func.count(User.id)))

            if user_count == 0:
                logger.info("Initializing database with default data...")
                await initialize_default_data(session)

    logger.info("Application started successfully")

    yield

    logger.info("Shutting down application...")
    await engine.dispose()


async def initialize_default_data(session):

    admin_user = User(
        username="admin",
        email="admin@example.com",
        password_hash=hash_password("admin123"),
        full_name="Admin User",
        department="IT",
        role=Role.ADMIN
    )
    manager_user = User(
        username="manager",
        email="manager@example.com",
        password_hash=hash_password("manager123"),
        full_name="Manager User",
        department="IT",
        role=Role.MANAGER
    )
    regular_user = User(
        username="user",
        email="user@example.com",
        password_hash=hash_password("user123"),
        full_name="Regular User",
        department="IT",
        role=Role.USER
    )

    session.add_all([admin_user, manager_user, regular_user])
    await session.flush()

    project = Project(
        name="Website Redesign",
        description="Refresh the public website",
        status=ProjectStatus.ACTIVE,
        owner_id=manager_user.id
    )
    session.add(project)
    await session.flush()

    session.add_all([
        ProjectMember(project_id=project.id, user_id=manager_user.id, added_by=admin_user.id),
        ProjectMember(project_id=project.id, user_id=regular_user.id, added_by=manager_user.id),
    ])

    session.add_all([
        Task(
            project_id=project.id,
            title="Draft new landing page",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.HIGH,
            assignee_id=regular_user.id,
            created_by=manager_user.id
        ),
        Task(
            project_id=project.id,
            title="Review brand guidelines",
            status=TaskStatus.TODO,
            priority=TaskPriority.MEDIUM,
            assignee_id=manager_user.id,
            created_by=manager_user.id
        ),
    ])

    await session.commit()
    logger.info("Database initialized with default data")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


ROUTERS = (
    auth.router,
    users.router,
    profiles.router,
    projects.router,
    tasks.router,
    subtasks.router,
    comments.router,
    analytics.router,
    notifications.router,
)

for router in ROUTERS:
    app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Taskflow API",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
