"""Health check endpoints.

- /health: yt-dlp and ffmpeg availability with versions
- /liveness: process is up
- /readiness: yt-dlp can be executed
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Literal

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ytaudio import __version__
from ytaudio.api.schemas import (
    ComponentHealth,
    HealthResponse,
    LivenessResponse,
    ReadinessResponse,
)
from ytaudio.core.checks import CheckResult, check_ffmpeg, check_ytdlp

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])

# Track application start time for uptime calculation
_start_time: float = time.time()


def reset_start_time() -> None:
    """Start counting uptime from now."""
    global _start_time
    _start_time = time.time()


async def get_tool_binary() -> str:
    """yt-dlp executable used by the checks; overridden from configuration."""
    return "yt-dlp"


def _to_component(result: CheckResult, label: str) -> ComponentHealth:
    if result.available:
        return ComponentHealth(status="healthy", version=result.version)
    return ComponentHealth(
        status="unhealthy",
        details={"error": result.error or f"{label} not available"},
    )


async def _check_ytdlp(binary: str) -> ComponentHealth:
    """Check yt-dlp availability and version."""
    return _to_component(await check_ytdlp(binary), "yt-dlp")


async def _check_ffmpeg() -> ComponentHealth:
    """Check ffmpeg availability and version."""
    return _to_component(await check_ffmpeg(), "ffmpeg")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "All components healthy"},
        503: {"description": "One or more components unhealthy"},
    },
)
async def health_check(binary: str = Depends(get_tool_binary)) -> JSONResponse:  # noqa: B008
    """
    Detailed health check endpoint.

    Returns HTTP 200 if yt-dlp and ffmpeg are both usable, HTTP 503 otherwise.
    """
    ytdlp_health, ffmpeg_health = await asyncio.gather(_check_ytdlp(binary), _check_ffmpeg())

    components = {"ytdlp": ytdlp_health, "ffmpeg": ffmpeg_health}

    all_healthy = all(c.status == "healthy" for c in components.values())
    overall_status: Literal["healthy", "unhealthy"] = "healthy" if all_healthy else "unhealthy"

    response = HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        components=components,
    )

    logger.info(
        "health_check_completed",
        status=overall_status,
        components={k: v.status for k, v in components.items()},
    )

    status_code = status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=status_code)


@router.get("/liveness", response_model=LivenessResponse)
async def liveness_check() -> LivenessResponse:
    """Liveness probe: HTTP 200 while the process is alive."""
    return LivenessResponse(status="alive")


@router.get(
    "/readiness",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Service is ready to accept traffic"},
        503: {"description": "Service is not ready"},
    },
)
async def readiness_check(binary: str = Depends(get_tool_binary)) -> JSONResponse:  # noqa: B008
    """Readiness probe: HTTP 200 once yt-dlp can be executed."""
    ytdlp_health = await _check_ytdlp(binary)
    if ytdlp_health.status != "healthy":
        response = ReadinessResponse(status="not_ready", ready=False, message="yt-dlp not available")
        return JSONResponse(
            content=response.model_dump(),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return JSONResponse(
        content=ReadinessResponse(status="ready", ready=True).model_dump(),
        status_code=status.HTTP_200_OK,
    )
