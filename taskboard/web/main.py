"""
Main Application - FastAPI app factory and lifespan management
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .. import __version__
from ..db.connection import DatabaseManager
from ..db.crud import (
    CategoryRepository,
    CommentRepository,
    NotificationRepository,
    TaskRepository,
    TokenRepository,
    UserRepository,
)
from ..services import (
    AuthService,
    CategoryService,
    CommentService,
    DatabaseNotifier,
    NotificationDispatcher,
    TaskboardError,
    TaskService,
)
from .config import AppConfig, config as default_config
from .limiter import limiter
from .routers import auth, categories, comments, health, notifications, tasks


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    app_config: AppConfig = app.state.config
    logger.info("Starting Taskboard API server...")

    db_path = app_config.database_path
    logger.info(f"Database path: {db_path}")

    # Initialize DatabaseManager and create schema (idempotent)
    db = DatabaseManager(db_path)
    try:
        await db.init()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.exception("Failed to initialize database")
        raise RuntimeError(f"Database initialization failed: {e}") from e

    task_repository = TaskRepository(db)
    category_repository = CategoryRepository(db)
    notification_repository = NotificationRepository(db)
    dispatcher = NotificationDispatcher(DatabaseNotifier(notification_repository))

    app.state.db = db
    app.state.dispatcher = dispatcher
    app.state.notification_repository = notification_repository
    app.state.auth_service = AuthService(
        UserRepository(db),
        TokenRepository(db),
        jwt_secret=app_config.jwt_secret,
        jwt_algorithm=app_config.jwt_algorithm,
        jwt_expires_in=app_config.jwt_expires_in,
    )
    app.state.task_service = TaskService(
        task_repository,
        category_repository,
        dispatcher=dispatcher,
        per_page=app_config.tasks_per_page,
        category_tasks_all_owners=app_config.category_tasks_all_owners,
    )
    app.state.category_service = CategoryService(category_repository)
    app.state.comment_service = CommentService(CommentRepository(db), task_repository)

    yield

    logger.info("Shutting down...")

    # Let in-flight notifications finish before the connection goes away
    try:
        await dispatcher.drain()
    except Exception:
        logger.exception("Failed to drain pending notifications")

    try:
        await db.close()
        logger.info("Database connection closed")
    except Exception:
        logger.exception("Failed to close database cleanly")


def create_app(app_config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app_config = app_config or default_config

    app = FastAPI(
        title="Taskboard API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = app_config

    # Rate limiting (shared limiter, configured from the environment)
    app.state.limiter = limiter
    if limiter.enabled:
        app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        """Handle rate limit exceeded with JSON response."""
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded", "retry_after": exc.detail},
        )

    @app.exception_handler(TaskboardError)
    async def domain_exception_handler(request: Request, exc: TaskboardError):
        """Map domain errors onto their HTTP status."""
        if exc.status_code >= 500:
            logger.error("Domain error: %s", exc)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_payload(),
            headers=headers,
        )

    # Global exception handlers
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle FastAPI request validation errors with clean response."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            errors.append({"field": loc, "message": error["msg"]})
        logger.warning("Validation error: %s", errors)
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with logging."""
        logger.exception("Unexpected error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    prefix = app_config.api_prefix.rstrip("/")
    app.include_router(health.router, prefix=prefix)
    app.include_router(auth.router, prefix=prefix)
    app.include_router(tasks.router, prefix=prefix)
    app.include_router(categories.router, prefix=prefix)
    app.include_router(comments.router, prefix=prefix)
    app.include_router(notifications.router, prefix=prefix)

    return app


# Create app instance
app = create_app()
