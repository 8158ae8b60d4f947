"""
Main entrypoint for the PetMinder API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds
and configures the app, which is then instantiated at module
import time as ``app``.  Run it with uvicorn or another ASGI server,
e.g.::

    uvicorn pet_minder_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.exceptions import ServiceError
from .core.logging_config import setup_logging


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a service error with the status it maps to."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Configures logging, mounts the versioned API routers, registers
    the service error handler and applies database migrations on
    startup.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(
        settings.log_level,
        settings.log_file or None,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.include_router(v1_router, prefix="/api/v1")

    # NotFound -> 404, Forbidden -> 403, InvalidRequest/InvalidSchedule -> 400
    app.add_exception_handler(ServiceError, service_error_handler)

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and brings the schema up
        # to date.
        init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
