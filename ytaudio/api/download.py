"""Audio download endpoint.

POST /api/download runs yt-dlp and answers with the extracted audio bytes.
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ytaudio.api.schemas import DownloadRequest, ErrorResponse
from ytaudio.extractor.download import DownloadOrchestrator
from ytaudio.models.audio import ExtractionRequest

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["download"])


# Dependency placeholder (configured in main app)
async def get_download_orchestrator() -> DownloadOrchestrator:
    """Get download orchestrator instance."""
    raise NotImplementedError("Download orchestrator dependency not configured")


@router.post(
    "/download",
    response_class=Response,
    responses={
        200: {
            "description": "Extracted audio file",
            "content": {"audio/mpeg": {}, "application/octet-stream": {}},
        },
        400: {"description": "Invalid URL or unsupported format", "model": ErrorResponse},
        500: {"description": "yt-dlp failure or no audio produced", "model": ErrorResponse},
    },
)
async def download_audio(
    request: DownloadRequest,
    orchestrator: DownloadOrchestrator = Depends(get_download_orchestrator),  # noqa: B008
) -> Response:
    """
    Download audio for a video.

    With ``original`` set the best source audio is kept as opus; otherwise it
    is converted to ``format`` (mp3 by default). The scratch directory is gone
    by the time the response is built.
    """
    logger.info(
        "download_requested",
        url=request.url,
        original=request.original,
        audio_format=request.audio_format,
    )

    audio_file = await orchestrator.download(
        ExtractionRequest(
            url=request.url or "",
            desired_format=request.audio_format,
            use_original=request.original,
        )
    )

    return Response(
        content=audio_file.content,
        media_type=audio_file.content_type,
        headers={
            "Content-Disposition": audio_file.content_disposition,
            "Content-Length": str(audio_file.size),
        },
    )
