import logging
from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dcatbridge.application.api.v1.errors import map_dcat_error
from dcatbridge.application.api.v1.routes import catalog, health
from dcatbridge.application.di import create_container
from dcatbridge.config import Config, configure_logging
from dcatbridge.domain.shared.error import DcatError
from dcatbridge.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    yield
    await container.close()


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Used as a uvicorn factory: ``uvicorn --factory dcatbridge.application.api.rest.app:create_app``.
    """
    # Pydantic Settings populates from env vars at runtime
    config = Config()  # type: ignore[call-arg]

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Catalogs are fetched cross-origin by open-data portals
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
    )

    # Setup dependency injection
    setup_dishka(container or create_container(config), app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(catalog.router)

    # Global error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(DcatError)
    async def dcat_error_handler(request: Request, exc: DcatError):
        http_exc = map_dcat_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
        )

    # Global exception handler - logs all unhandled exceptions
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
