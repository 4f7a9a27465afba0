"""Audio extraction data models."""

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import quote

from ytaudio.core.media import DEFAULT_AUDIO_FORMAT, ORIGINAL_AUDIO_FORMAT

# Characters encodeURIComponent leaves alone on top of quote()'s defaults
_DISPOSITION_SAFE_CHARS = "!*'()"


@dataclass
class ExtractionRequest:
    """A single download request as received from the client."""

    url: str
    desired_format: Optional[str] = None
    use_original: bool = False

    @property
    def audio_format(self) -> str:
        """Format handed to ``--audio-format``."""
        if self.use_original:
            return ORIGINAL_AUDIO_FORMAT
        return (self.desired_format or DEFAULT_AUDIO_FORMAT).lower()


@dataclass
class AudioFormatDescriptor:
    """Audio-only stream reported by the extraction tool."""

    format_id: str
    ext: str
    acodec: Optional[str]
    abr: Optional[float] = None  # kbps
    filesize: Optional[int] = None  # bytes
    format_note: Optional[str] = None


@dataclass
class VideoSummary:
    """Preview information for a source video."""

    title: str
    thumbnail: Optional[str]
    duration: Optional[float]  # seconds
    uploader: Optional[str]
    formats: List[AudioFormatDescriptor] = field(default_factory=list)


@dataclass
class AudioFile:
    """Extracted audio file loaded into memory."""

    filename: str
    content: bytes
    size: int
    content_type: str

    @property
    def content_disposition(self) -> str:
        """Attachment header value with a percent-encoded filename."""
        encoded = quote(self.filename, safe=_DISPOSITION_SAFE_CHARS)
        return f'attachment; filename="{encoded}"'
