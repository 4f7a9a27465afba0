"""Video info endpoint.

POST /api/info resolves a URL to its title, thumbnail, duration, uploader
and audio-only formats.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from ytaudio.api.schemas import (
    AudioFormatResponse,
    ErrorResponse,
    VideoInfoRequest,
    VideoInfoResponse,
)
from ytaudio.extractor.info import InfoResolver

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["video"])


# Dependency placeholder for the info resolver
async def get_info_resolver() -> InfoResolver:
    """Get info resolver instance."""
    raise NotImplementedError("Info resolver dependency not configured")


@router.post(
    "/info",
    response_model=VideoInfoResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Missing or invalid URL", "model": ErrorResponse},
        500: {"description": "yt-dlp failure or unparseable output", "model": ErrorResponse},
    },
)
async def get_video_info(
    request: VideoInfoRequest,
    resolver: InfoResolver = Depends(get_info_resolver),  # noqa: B008
) -> Any:
    """
    Preview a video.

    Runs yt-dlp in metadata-only mode and returns the audio-only formats in
    the order yt-dlp reports them. Errors propagate to the global handlers.
    """
    logger.info("video_info_requested", url=request.url)

    summary = await resolver.resolve(request.url)

    return VideoInfoResponse(
        title=summary.title,
        thumbnail=summary.thumbnail,
        duration=summary.duration,
        uploader=summary.uploader,
        formats=[
            AudioFormatResponse(
                format_id=f.format_id,
                ext=f.ext,
                acodec=f.acodec,
                abr=f.abr,
                filesize=f.filesize,
                format_note=f.format_note,
            )
            for f in summary.formats
        ],
    )
