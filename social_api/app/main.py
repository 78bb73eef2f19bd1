"""
Main entrypoint for the Social API.

``create_app`` configures logging, wires stores and services, installs
the error handlers and mounts the routers under ``/api``.  The module
level ``app`` is what uvicorn serves::

    uvicorn social_api.app.main:app --reload
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.router import router as api_router
from .core.config import Settings, settings
from .core.container import build_services
from .core.db import get_database_path, init_db
from .core.errors import ServiceError
from .core.logging_config import setup_logging
from .core.security import Hasher, PBKDF2Hasher
from .schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None, hasher: Optional[Hasher] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to use instead of the environment-derived module
        default.
    hasher : Optional[Hasher]
        Password hasher; defaults to ``PBKDF2Hasher`` with the
        configured iteration count.

    Returns
    -------
    FastAPI
        A configured application instance.
    """
    app_settings = app_settings or settings
    setup_logging(app_settings.log_level, app_settings.log_file)

    database_path = get_database_path(app_settings.database_url)
    app = FastAPI(title=app_settings.project_name, version=app_settings.api_version, debug=app_settings.debug)
    app.state.services = build_services(
        database_path,
        hasher or PBKDF2Hasher(app_settings.password_hash_iterations),
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=ErrorResponse(error="Bad Request").model_dump())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="Internal server error.").model_dump(),
        )

    @app.get("/")
    async def root() -> dict:
        return {"message": f"Welcome to {app_settings.project_name}", "docs": "/docs"}

    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event() -> None:
        init_db(database_path)
        logger.info("Database ready at %s", database_path)

    return app


app = create_app()
