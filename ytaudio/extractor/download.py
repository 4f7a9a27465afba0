"""Audio download orchestration.

A download runs yt-dlp into a fresh scratch workspace, picks the audio file
it produced, loads it into memory and removes the workspace, whether the
download succeeded or not.
"""

import asyncio
import time
from typing import Optional, Set

import structlog

from ytaudio.core import validation
from ytaudio.core.media import content_type_for, is_sidecar_image
from ytaudio.core.metrics import MetricsCollector
from ytaudio.core.validation import FormatValidator, URLValidator
from ytaudio.extractor.arguments import ArgumentBuilder
from ytaudio.extractor.exceptions import (
    ExtractorError,
    InvalidInputError,
    NoAudioProducedError,
    NoOutputProducedError,
)
from ytaudio.extractor.runner import ToolRunner
from ytaudio.extractor.workspace import DEFAULT_NAMESPACE, ScratchWorkspace
from ytaudio.models.audio import AudioFile, ExtractionRequest

logger = structlog.get_logger(__name__)


class DownloadOrchestrator:
    """Runs one audio extraction per call in an isolated scratch workspace."""

    def __init__(
        self,
        runner: ToolRunner,
        scratch_root: Optional[str] = None,
        scratch_namespace: str = DEFAULT_NAMESPACE,
        url_validator: Optional[URLValidator] = None,
        format_validator: Optional[FormatValidator] = None,
    ):
        self.runner = runner
        self.scratch_root = scratch_root
        self.scratch_namespace = scratch_namespace
        self.url_validator = url_validator or validation.url_validator
        self.format_validator = format_validator or validation.format_validator
        self._pending: Set["asyncio.Task[AudioFile]"] = set()

    def validate(self, request: ExtractionRequest) -> ExtractionRequest:
        """
        Check the request and return a normalized copy.

        Raises:
            InvalidInputError: If the URL or the conversion format is not accepted
        """
        url_result = self.url_validator.validate(request.url)
        if not url_result.is_valid:
            raise InvalidInputError(url_result.error_message)

        format_result = self.format_validator.validate_audio_format(
            request.desired_format, use_original=request.use_original
        )
        if not format_result.is_valid:
            raise InvalidInputError(format_result.error_message)

        return ExtractionRequest(
            url=url_result.sanitized_value or request.url,
            desired_format=format_result.sanitized_value,
            use_original=request.use_original,
        )

    def new_workspace(self) -> ScratchWorkspace:
        return ScratchWorkspace(root=self.scratch_root, namespace=self.scratch_namespace)

    async def download(self, request: ExtractionRequest) -> AudioFile:
        """
        Fetch, convert and tag the audio for a video.

        If the caller is cancelled mid-download, the extraction keeps running
        until yt-dlp exits and only then removes its workspace, unless the
        runner is configured to kill the child on cancel.

        Args:
            request: URL plus either original-quality mode or a target format

        Returns:
            AudioFile with the file contents and response metadata

        Raises:
            InvalidInputError: If the request is invalid (nothing is spawned)
            ToolNotFoundError: If yt-dlp is not installed
            ExternalToolError: If yt-dlp exits with an error
            NoOutputProducedError: If yt-dlp wrote nothing
            NoAudioProducedError: If yt-dlp wrote only thumbnail images
        """
        request = self.validate(request)

        if self.runner.kill_on_cancel:
            return await self._extract(request)

        extraction = asyncio.ensure_future(self._extract(request))
        self._pending.add(extraction)
        extraction.add_done_callback(self._release)
        try:
            return await asyncio.shield(extraction)
        except asyncio.CancelledError:
            logger.info("download_abandoned", url=request.url)
            raise

    async def wait_for_pending(self) -> None:
        """Wait for abandoned downloads to finish and remove their workspaces."""
        if self._pending:
            logger.info("waiting_for_abandoned_downloads", count=len(self._pending))
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _release(self, extraction: "asyncio.Task[AudioFile]") -> None:
        self._pending.discard(extraction)
        # Abandoned extractions have no awaiting caller; their errors are already logged
        if not extraction.cancelled():
            extraction.exception()

    async def _extract(self, request: ExtractionRequest) -> AudioFile:
        """Run yt-dlp into a fresh workspace and load the produced audio file."""
        audio_format = request.audio_format

        logger.info(
            "download_started",
            url=request.url,
            audio_format=audio_format,
            original=request.use_original,
        )
        start_time = time.monotonic()

        try:
            with self.new_workspace() as workspace:
                args = ArgumentBuilder.for_download(request, str(workspace.path))
                await self.runner.run(args)
                audio_file = self._collect(workspace)
        except ExtractorError as e:
            MetricsCollector.record_extraction("download", "failed", time.monotonic() - start_time)
            logger.warning(
                "download_failed",
                url=request.url,
                error_type=type(e).__name__,
                error=str(e)[:500],
            )
            raise

        duration = time.monotonic() - start_time
        MetricsCollector.record_extraction("download", "success", duration)
        MetricsCollector.record_download_size(audio_format, audio_file.size)

        logger.info(
            "download_completed",
            url=request.url,
            filename=audio_file.filename,
            file_size=audio_file.size,
            content_type=audio_file.content_type,
            duration=round(duration, 3),
        )
        return audio_file

    def _collect(self, workspace: ScratchWorkspace) -> AudioFile:
        """Locate the produced audio file and load it."""
        files = workspace.list_files()
        if not files:
            raise NoOutputProducedError("Download failed - no file created")

        audio_files = [name for name in files if not is_sidecar_image(name)]
        if not audio_files:
            logger.warning("only_sidecar_images_produced", files=files)
            raise NoAudioProducedError("Download failed - no audio file created")

        if len(audio_files) > 1:
            logger.warning("multiple_audio_files_produced", files=audio_files)

        filename = audio_files[0]
        path = workspace.path / filename
        size = path.stat().st_size
        content = path.read_bytes()

        return AudioFile(
            filename=filename,
            content=content,
            size=size,
            content_type=content_type_for(filename),
        )
