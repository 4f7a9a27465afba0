"""Static audio format tables.

Allowed conversion targets, containers that can carry an embedded cover image,
the extension to MIME type lookup, and the image extensions yt-dlp leaves
behind when thumbnail embedding fails.
"""

from enum import Enum
from pathlib import PurePath
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional


class AudioFormat(str, Enum):
    """Audio formats accepted by ``--audio-format``."""

    BEST = "best"
    AAC = "aac"
    ALAC = "alac"
    FLAC = "flac"
    M4A = "m4a"
    MP3 = "mp3"
    OPUS = "opus"
    VORBIS = "vorbis"
    WAV = "wav"


ALLOWED_AUDIO_FORMATS: FrozenSet[str] = frozenset(f.value for f in AudioFormat)

DEFAULT_AUDIO_FORMAT = AudioFormat.MP3.value

# Original-quality mode keeps the source stream in a container that takes tags and artwork
ORIGINAL_AUDIO_FORMAT = AudioFormat.OPUS.value

THUMBNAIL_CAPABLE_FORMATS: FrozenSet[str] = frozenset(
    {"mp3", "mkv", "mka", "ogg", "opus", "flac", "m4a", "mp4", "m4v", "mov"}
)

SIDECAR_IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({"jpg", "jpeg", "png", "webp"})

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "mp3": "audio/mpeg",
        "m4a": "audio/mp4",
        "alac": "audio/mp4",
        "aac": "audio/aac",
        "opus": "audio/ogg",
        "ogg": "audio/ogg",
        "vorbis": "audio/ogg",
        "webm": "audio/webm",
        "flac": "audio/flac",
        "wav": "audio/wav",
    }
)


def file_extension(filename: str) -> Optional[str]:
    """Return the lower-cased extension of a filename without the dot, or None."""
    suffix = PurePath(filename).suffix
    if not suffix:
        return None
    return suffix[1:].lower()


def content_type_for(filename: str) -> str:
    """Map a filename to its MIME type, falling back to a generic binary type."""
    ext = file_extension(filename)
    if ext is None:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def supports_thumbnail(audio_format: str) -> bool:
    """Check whether an output format can carry an attached picture."""
    return audio_format.lower() in THUMBNAIL_CAPABLE_FORMATS


def is_sidecar_image(filename: str) -> bool:
    """Check whether a file is a leftover thumbnail image."""
    return file_extension(filename) in SIDECAR_IMAGE_EXTENSIONS
