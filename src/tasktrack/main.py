"""FastAPI application factory.

create_app() returns a configured FastAPI instance: logging, error
handlers, middleware, and routers. Lifespan logs startup and disposes
of the database engine on shutdown.

Run with: uvicorn tasktrack.main:app
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasktrack import __version__
from tasktrack.api import api_router
from tasktrack.api.errors import register_error_handlers
from tasktrack.config import settings
from tasktrack.logging_setup import configure_logging
from tasktrack.middleware.request_id import RequestIdMiddleware
from tasktrack.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "tasktrack.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("tasktrack.shutdown")
    from tasktrack.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="tasktrack",
        description="Multi-user project and task tracker",
        version=__version__,
        lifespan=lifespan,
    )

    register_error_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette runs middleware in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app


# Default app instance (used by uvicorn: tasktrack.main:app)
app = create_app()
