import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from courier_registry.application.api.v1.errors import map_registry_error
from courier_registry.application.api.v1.routes import health, instances, registrations
from courier_registry.application.di import create_container
from courier_registry.config import RegistryConfig, configure_logging
from courier_registry.domain.shared.error import RegistryError
from courier_registry.infrastructure.refresh.worker import RefreshPool
from courier_registry.util.di.base import Provider
from courier_registry.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


def _log_endpoints(app: FastAPI) -> None:
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = ",".join(sorted(route.methods))
            logger.info("  %-7s %s", methods, route.path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config = await container.get(RegistryConfig)

    logger.info("Listening on %s:%s", config.server.host, config.server.port)
    logger.info("Available endpoints:")
    _log_endpoints(app)

    # Detached refreshes drain (or are cancelled) before the container closes
    refresh_pool = await container.get(RefreshPool)
    try:
        async with refresh_pool:
            yield
    finally:
        await container.close()


def create_app(config: RegistryConfig | None = None, *providers: Provider) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Settings to run with. Read from env and YAML when omitted.
        providers: Extra DI providers that override the defaults.
    """
    # Pydantic Settings populates from env vars at runtime
    if config is None:
        config = RegistryConfig()

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

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup dependency injection
    container = create_container(config, *providers)
    setup_dishka(container, app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(registrations.router)
    app_instance.include_router(instances.router)

    # Global registry error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        http_exc = map_registry_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
        )

    # Malformed bodies and query strings are client errors, reported as 400
    @app_instance.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [str(err["loc"][-1]) for err in exc.errors() if err.get("loc")]
        return JSONResponse(
            status_code=400,
            content={
                "code": "VALIDATION_ERROR",
                "message": "Malformed request",
                "fields": fields,
            },
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
            content={"code": "InternalError", "message": "Internal server error"},
        )

    return app_instance
