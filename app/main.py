"""FastAPI application entry point.

This module assembles all components and creates the main application.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app import __version__
from app.api import assets, health, media, metrics
from app.core.config import Config, ConfigService, StorageConfig
from app.core.errors import DOMAIN_EXCEPTIONS, APIError, global_exception_handler
from app.core.logging import configure_logging
from app.core.metrics import MetricsCollector, initialize_metrics
from app.middleware.auth import configure_auth
from app.middleware.request_context import RequestContextMiddleware
from app.resolvers.manager import ResolverManager, create_resolver_manager
from app.services.materializer import AssetMaterializer
from app.services.storage import configure_storage

logger = structlog.get_logger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics.

    Records request count and duration for all endpoints,
    using FastAPI route templates to normalize paths.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request and record metrics."""
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        # Fixed label for unmatched routes keeps cardinality bounded
        route = request.scope.get("route")
        endpoint = route.path if route else "/unmatched"

        MetricsCollector.record_request(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
            duration=duration,
        )

        return response


# Global service instances
_config: Config | None = None
_resolver_manager: ResolverManager | None = None
_materializer: AssetMaterializer | None = None


def get_config() -> Config:
    """Get the loaded application configuration."""
    if _config is None:
        raise RuntimeError("Configuration not loaded")
    return _config


def get_storage_config() -> StorageConfig:
    """Get the storage section of the loaded configuration."""
    return get_config().storage


def get_resolver_manager() -> ResolverManager:
    """Get the global resolver manager instance."""
    if _resolver_manager is None:
        raise RuntimeError("Resolver manager not configured")
    return _resolver_manager


def get_materializer() -> AssetMaterializer:
    """Get the global asset materializer instance."""
    if _materializer is None:
        raise RuntimeError("Asset materializer not configured")
    return _materializer


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown."""
    global _config, _resolver_manager, _materializer

    logger.info("Application starting", version=__version__)

    initialize_metrics(__version__)

    config_service: ConfigService = app.state.config_service
    config = config_service.config
    config_service.validate()
    _config = config

    configure_logging(config.logging.level, config.logging.format)

    logger.info(
        "Configuration loaded",
        server_port=config.server.port,
        storage_backend=config.storage.backend,
        embed_strict=config.embed.strict,
    )

    configure_auth(api_keys=config.security.api_keys)

    storage = configure_storage(config.storage)
    logger.info("Object storage configured", backend=storage.name)

    _resolver_manager = create_resolver_manager(config.embed)
    logger.info("Resolver manager configured", resolvers=_resolver_manager.list_resolvers())

    _materializer = AssetMaterializer(storage)
    logger.info("Asset materializer configured")

    logger.info("Application startup complete", version=__version__)

    yield

    logger.info("Application shutting down")

    await storage.close()

    _resolver_manager = None
    _materializer = None

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Media Embedding API",
        description="Resolves media URLs into embeddable players and materializes uploaded assets",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Routes, mounts and middleware follow the same YAML + env config as the lifespan
    config_service = ConfigService()
    config = config_service.load()
    app.state.config_service = config_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(MetricsMiddleware)

    # Added last so it wraps the others and every log line carries the request ID
    app.add_middleware(RequestContextMiddleware)

    # Register global exception handlers
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(APIError, global_exception_handler)
    app.add_exception_handler(HTTPException, global_exception_handler)
    for exc_type in DOMAIN_EXCEPTIONS:
        app.add_exception_handler(exc_type, global_exception_handler)

    # Media router dependencies
    app.dependency_overrides[media.get_resolver_manager] = get_resolver_manager

    # Assets router dependencies
    app.dependency_overrides[assets.get_materializer] = get_materializer
    app.dependency_overrides[assets.get_storage_config] = get_storage_config

    app.include_router(health.router)
    app.include_router(media.router)
    app.include_router(assets.router)

    if config.monitoring.metrics_enabled:
        app.include_router(metrics.router)

    # Local backend objects are served by this process
    if config.storage.backend == "local":
        app.mount(
            "/uploads",
            StaticFiles(directory=config.storage.local_root, check_dir=False),
            name="uploads",
        )

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)  # nosec B104
