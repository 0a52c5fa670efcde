import logging
from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from repocache.application.api.v1.errors import from_request_validation, map_error
from repocache.application.api.v1.routes import health, repositories
from repocache.application.di import create_container
from repocache.config import Config, configure_logging
from repocache.domain.shared.error import RepoCacheError
from repocache.infrastructure.persistence.migrate import run_migrations
from repocache.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    yield
    await container.close()


def create_app(
    config: Config | None = None,
    container: AsyncContainer | None = None,
) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    if config.database.auto_migrate and config.database.url.startswith("sqlite"):
        run_migrations(config.database.url)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    setup_dishka(container or create_container(config), app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(repositories.router, prefix="/api/v1")

    # Maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(RepoCacheError)
    async def repocache_error_handler(request: Request, exc: RepoCacheError):
        http_exc = map_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    # Same {code, message} body for malformed paths and parameters
    @app_instance.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return await repocache_error_handler(request, from_request_validation(exc))

    # Logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
