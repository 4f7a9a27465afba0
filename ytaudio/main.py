"""FastAPI application entry point.

This module assembles all components and creates the main application.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ytaudio import __version__
from ytaudio.api import download, health, info, metrics
from ytaudio.core.checks import check_ffmpeg, check_ytdlp
from ytaudio.core.config import Config, ConfigService
from ytaudio.core.errors import (
    extractor_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from ytaudio.core.logging import (
    REQUEST_ID_HEADER,
    clear_request_id,
    configure_logging,
    set_request_id,
)
from ytaudio.core.metrics import MetricsCollector, initialize_metrics
from ytaudio.extractor.download import DownloadOrchestrator
from ytaudio.extractor.exceptions import ExtractorError
from ytaudio.extractor.info import InfoResolver
from ytaudio.extractor.runner import ToolRunner

logger = structlog.get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds a request id to the logging context and echoes it back.

    Unexpected exceptions are rendered here, while the id is still bound, so
    500 responses and their log lines carry it too.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await global_exception_handler(request, exc)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request count and duration per FastAPI route template."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
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


class Services:
    """Request handlers built from configuration, shared by every request.

    Neither handler keeps per-request state, so sharing them is safe.
    """

    def __init__(self, config: Config):
        self.config = config
        self.runner = ToolRunner(
            binary=config.extractor.binary,
            kill_on_cancel=config.extractor.kill_on_cancel,
        )
        self.info_resolver = InfoResolver(self.runner)
        self.download_orchestrator = DownloadOrchestrator(
            self.runner,
            scratch_root=config.extractor.scratch_root,
            scratch_namespace=config.extractor.scratch_namespace,
        )


def get_services(request: Request) -> Services:
    """Get the service instances configured for the running application."""
    services: Optional[Services] = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not configured")
    return services


def get_info_resolver(request: Request) -> InfoResolver:
    return get_services(request).info_resolver


def get_download_orchestrator(request: Request) -> DownloadOrchestrator:
    return get_services(request).download_orchestrator


def get_tool_binary(request: Request) -> str:
    return get_services(request).config.extractor.binary


async def _log_tool_versions(binary: str) -> None:
    """Log which external binaries are usable. Missing ones do not block startup."""
    for result in (await check_ytdlp(binary), await check_ffmpeg()):
        if result.available:
            logger.info("component_available", component=result.name, version=result.version)
        else:
            logger.warning("component_unavailable", component=result.name, error=result.error)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown."""
    config: Config = app.state.config

    configure_logging(config.logging.level, config.logging.format)
    logger.info("Application starting", version=__version__)

    initialize_metrics(__version__)
    health.reset_start_time()
    services = Services(config)
    app.state.services = services

    logger.info(
        "Configuration loaded",
        server_port=config.server.port,
        ytdlp_binary=services.runner.binary,
        scratch_root=config.extractor.scratch_root,
        scratch_namespace=config.extractor.scratch_namespace,
    )

    await _log_tool_versions(config.extractor.binary)

    logger.info("Application startup complete", version=__version__)

    yield

    await services.download_orchestrator.wait_for_pending()
    logger.info("Application shutdown complete")


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if config is None:
        config = ConfigService().load()

    app = FastAPI(
        title="YouTube Audio API",
        description="Preview videos and extract their audio with yt-dlp",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", REQUEST_ID_HEADER],
    )

    if config.monitoring.metrics_enabled:
        app.add_middleware(MetricsMiddleware)

    # Added last so it wraps everything and the request id covers all logging
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(ExtractorError, extractor_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.dependency_overrides[info.get_info_resolver] = get_info_resolver
    app.dependency_overrides[download.get_download_orchestrator] = get_download_orchestrator
    app.dependency_overrides[health.get_tool_binary] = get_tool_binary

    app.include_router(health.router)
    app.include_router(info.router)
    app.include_router(download.router)
    if config.monitoring.metrics_enabled:
        app.include_router(metrics.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _server = app.state.config.server
    uvicorn.run(app, host=_server.host, port=_server.port)
