"""todo-backend - task lists with session-based authentication."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from todo_backend.core.config import constants
from todo_backend.core.db_client import close_connection
from todo_backend.core.errors import AppError, ErrorCode, ErrorResponse, server_error_response
from todo_backend.core.logging import configure_logfire, instrument_fastapi
from todo_backend.core.ports import CredentialStore, PasswordHasher, TaskStore
from todo_backend.core.scheduler import start_scheduler, stop_scheduler
from todo_backend.core.schema import init_db
from todo_backend.core.security import BcryptPasswordHasher
from todo_backend.core.sqlite_stores import SqliteCredentialStore, SqliteTaskStore
from todo_backend.interface.auth_router import router as auth_router
from todo_backend.interface.dependencies import AppServices
from todo_backend.interface.task_router import router as task_router
from todo_backend.interface.user_router import router as user_router
from todo_backend.services.authorization import AuthorizationGate
from todo_backend.services.session_registry import SessionRegistry
from todo_backend.services.task_service import TaskService
from todo_backend.services.user_service import UserService


logger = logging.getLogger(__name__)


def build_services(
    *,
    task_store: TaskStore,
    credential_store: CredentialStore,
    hasher: PasswordHasher,
    registry: SessionRegistry | None = None,
) -> AppServices:
    """Wire the services around one shared session registry."""
    registry = registry or SessionRegistry()
    return AppServices(
        registry=registry,
        gate=AuthorizationGate(registry),
        task_service=TaskService(task_store),
        user_service=UserService(credential_store, hasher),
    )


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    logger.info(
        "request_failed",
        extra={"path": request.url.path, "kind": exc.kind.value, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed", extra={"path": request.url.path, "errors": len(exc.errors())})
    body = ErrorResponse(error="Invalid request body", code=ErrorCode.ERR_INVALID_INPUT)
    return JSONResponse(status_code=constants.HTTP_BAD_REQUEST, content=body.model_dump())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("request_unexpected_error", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=constants.HTTP_SERVER_ERROR, content=server_error_response().model_dump())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    await init_db()
    logger.info("Database initialized")

    start_scheduler(app.state.services.registry)
    yield
    # Shutdown
    stop_scheduler()
    app.state.services.registry.clear()
    await close_connection()


def create_app(services: AppServices | None = None, *, with_lifespan: bool = True) -> FastAPI:
    """Build the FastAPI application, using SQLite-backed services unless others are given."""
    app = FastAPI(
        title="todo-backend",
        description="To-do lists with session-based authentication",
        version="0.1.0",
        lifespan=lifespan if with_lifespan else None,
    )
    app.state.services = services or build_services(
        task_store=SqliteTaskStore(),
        credential_store=SqliteCredentialStore(),
        hasher=BcryptPasswordHasher(),
    )

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(auth_router)
    app.include_router(task_router)
    app.include_router(user_router)

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(
            content={"status": "healthy", "active_sessions": app.state.services.registry.active_count()},
            status_code=constants.HTTP_OK,
        )

    return app


app = create_app()

# Instrument FastAPI with Logfire
instrument_fastapi(app)
