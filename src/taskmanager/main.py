"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (logging, database engine).
Middleware, CORS, exception handlers and routers all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskmanager import __version__
from taskmanager.api import api_router
from taskmanager.cache import response_cache
from taskmanager.config import settings
from taskmanager.errors import TaskManagerError, ValidationError
from taskmanager.logging_setup import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at
    shutdown. Settings were already validated at import time, so a
    missing JWT secret never gets this far.
    """
    logger.info(
        "taskmanager.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("taskmanager.shutdown")
    response_cache.clear()

    from taskmanager.db.engine import engine
    await engine.dispose()


# ─── Exception handlers ──────────────────────────────────


async def _domain_error_handler(request: Request, exc: TaskManagerError):
    if exc.status_code >= 500:
        logger.error(
            "taskmanager.request_failed",
            path=request.url.path,
            error=type(exc).__name__,
            detail=exc.message,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a 400, not FastAPI's default 422."""
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return await _domain_error_handler(request, ValidationError(errors=errors))


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Task Manager API",
        description="Authenticated task tracking with cached reads",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → UnhandledError → handler

    from taskmanager.middleware.errors import UnhandledErrorMiddleware
    from taskmanager.middleware.request_id import RequestIdMiddleware
    from taskmanager.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(TaskManagerError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskmanager.main:app)
app = create_app()
