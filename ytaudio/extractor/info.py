"""Video metadata preview."""

import json
import time
from typing import Any, Dict, List, Optional

import structlog

from ytaudio.core import validation
from ytaudio.core.metrics import MetricsCollector
from ytaudio.core.validation import URLValidator
from ytaudio.extractor.arguments import ArgumentBuilder
from ytaudio.extractor.exceptions import (
    ExtractorError,
    InvalidInputError,
    MalformedResponseError,
)
from ytaudio.extractor.runner import ToolRunner
from ytaudio.models.audio import AudioFormatDescriptor, VideoSummary

logger = structlog.get_logger(__name__)

# yt-dlp reports a missing stream codec as the literal string "none"
NO_CODEC = "none"


class InfoResolver:
    """Resolves a URL to a VideoSummary with its audio-only formats."""

    def __init__(self, runner: ToolRunner, url_validator: Optional[URLValidator] = None):
        self.runner = runner
        self.url_validator = url_validator or validation.url_validator

    async def resolve(self, url: Optional[str]) -> VideoSummary:
        """
        Fetch metadata for a video without downloading it.

        Args:
            url: Source video URL

        Returns:
            VideoSummary with audio-only formats in yt-dlp's order

        Raises:
            InvalidInputError: If the URL is missing or not recognized
            ToolNotFoundError: If yt-dlp is not installed
            ExternalToolError: If yt-dlp exits with an error
            MalformedResponseError: If the JSON output cannot be parsed
        """
        checked = self.url_validator.validate(url)
        if not checked.is_valid:
            raise InvalidInputError(checked.error_message)
        url = checked.sanitized_value or ""

        logger.info("resolving_video_info", url=url)
        start_time = time.monotonic()
        try:
            result = await self.runner.run(ArgumentBuilder.for_info(url), capture_stdout=True)
            summary = self.parse(result.stdout)
        except ExtractorError:
            MetricsCollector.record_extraction("info", "failed", time.monotonic() - start_time)
            raise

        MetricsCollector.record_extraction("info", "success", time.monotonic() - start_time)
        logger.info(
            "video_info_resolved",
            url=url,
            title=summary.title,
            audio_formats=len(summary.formats),
        )
        return summary

    @classmethod
    def parse(cls, payload: str) -> VideoSummary:
        """Parse one yt-dlp JSON record into a VideoSummary."""
        try:
            data = json.loads(payload)
        except ValueError as e:
            logger.error("video_info_parse_failed", error=str(e))
            raise MalformedResponseError("Failed to parse video info") from e

        if not isinstance(data, dict):
            logger.error("video_info_parse_failed", error="top-level value is not an object")
            raise MalformedResponseError("Failed to parse video info")

        formats = data.get("formats") or []
        if not isinstance(formats, list):
            raise MalformedResponseError("Failed to parse video info")

        return VideoSummary(
            title=data.get("title") or "",
            thumbnail=data.get("thumbnail"),
            duration=data.get("duration"),
            uploader=data.get("uploader"),
            formats=cls.audio_formats(formats),
        )

    @staticmethod
    def audio_formats(formats: List[Dict[str, Any]]) -> List[AudioFormatDescriptor]:
        """
        Keep formats with no video stream and an audio stream.

        A format only counts as audio-only when its video codec is exactly
        "none"; an unknown video codec is excluded.
        """
        audio_only = []
        for fmt in formats:
            if not isinstance(fmt, dict):
                continue
            if fmt.get("vcodec") != NO_CODEC or fmt.get("acodec") == NO_CODEC:
                continue

            audio_ext = fmt.get("audio_ext")
            ext = audio_ext if audio_ext and audio_ext != NO_CODEC else fmt.get("ext")

            audio_only.append(
                AudioFormatDescriptor(
                    format_id=str(fmt.get("format_id", "")),
                    ext=ext or "",
                    acodec=fmt.get("acodec"),
                    abr=fmt.get("abr"),
                    filesize=fmt.get("filesize"),
                    format_note=fmt.get("format_note"),
                )
            )
        return audio_only
