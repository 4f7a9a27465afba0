"""yt-dlp backed audio extraction."""

from ytaudio.extractor.arguments import ArgumentBuilder, FlagGroup
from ytaudio.extractor.download import DownloadOrchestrator
from ytaudio.extractor.exceptions import (
    ExternalToolError,
    ExtractorError,
    InvalidInputError,
    MalformedResponseError,
    NoAudioProducedError,
    NoOutputProducedError,
    ToolNotFoundError,
)
from ytaudio.extractor.info import InfoResolver
from ytaudio.extractor.runner import ToolResult, ToolRunner
from ytaudio.extractor.workspace import ScratchWorkspace

__all__ = [
    "ArgumentBuilder",
    "FlagGroup",
    "DownloadOrchestrator",
    "InfoResolver",
    "ScratchWorkspace",
    "ToolResult",
    "ToolRunner",
    "ExtractorError",
    "InvalidInputError",
    "ToolNotFoundError",
    "ExternalToolError",
    "MalformedResponseError",
    "NoOutputProducedError",
    "NoAudioProducedError",
]
