from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import Database
from .errors import register_exception_handlers
from .logging_config import configure_logging
from .repositories import SQLiteTaskRepository
from .routers import tasks as tasks_router
from .settings import MIN_JWT_SECRET_LENGTH, Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Per-user task CRUD with filtering, overdue views and pagination.",
    },
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Settings default to the environment; the store handle defaults to a new
    Database at settings.sqlite_db_path. Tests pass their own ':memory:' handle.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    database = database or Database(settings.sqlite_db_path)

    application = FastAPI(
        title="Task API",
        description="Per-user task list backed by SQLite, with bearer-token identity.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    application.state.settings = settings
    application.state.database = database
    application.state.repository = SQLiteTaskRepository(database)

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    @application.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """Health check endpoint."""
        return {"message": "Healthy"}

    application.include_router(tasks_router.router)
    return application


def run() -> None:
    """Serve the application with uvicorn using environment settings."""
    settings = get_settings()
    if not settings.jwt_secret or len(settings.jwt_secret) < MIN_JWT_SECRET_LENGTH:
        raise RuntimeError(f"JWT_SECRET must be set and at least {MIN_JWT_SECRET_LENGTH} characters")
    logger.info("Starting Task API on %s:%s", settings.app_host, settings.app_port)
    uvicorn.run(
        create_app(settings),
        host=settings.app_host,
        port=settings.app_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
