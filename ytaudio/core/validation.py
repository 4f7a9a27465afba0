"""Input validation utilities for the API layer.

This module validates source URLs and requested audio formats before any
external process is started.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional, Pattern

import structlog

from ytaudio.core.media import ALLOWED_AUDIO_FORMATS, DEFAULT_AUDIO_FORMAT

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    error_message: Optional[str] = None
    sanitized_value: Optional[str] = None


class URLValidator:
    """Validates URLs against the recognized video host pattern."""

    # Optional scheme and www. prefix, a known host, then any non-empty path
    DEFAULT_PATTERN: Pattern[str] = re.compile(
        r"^(?:https?://)?(?:www\.)?(?:youtube\.com|youtu\.be)/.+",
        re.IGNORECASE,
    )

    def __init__(self, pattern: Optional[Pattern[str]] = None):
        self.pattern = pattern or self.DEFAULT_PATTERN

    def validate(self, url: Optional[str]) -> ValidationResult:
        """Validate a URL.

        Args:
            url: URL to validate

        Returns:
            ValidationResult with validation status and any error message
        """
        if not url or not isinstance(url, str):
            return ValidationResult(is_valid=False, error_message="URL is required")

        url = url.strip()
        if not url:
            return ValidationResult(is_valid=False, error_message="URL is required")

        if not self.pattern.match(url):
            logger.debug("url_rejected", url=url)
            return ValidationResult(is_valid=False, error_message="Invalid YouTube URL")

        return ValidationResult(is_valid=True, sanitized_value=url)


class FormatValidator:
    """Validates requested conversion formats."""

    def __init__(self, allowed_formats: FrozenSet[str] = ALLOWED_AUDIO_FORMATS):
        self.allowed_formats = allowed_formats

    def validate_audio_format(
        self, audio_format: Optional[str], use_original: bool = False
    ) -> ValidationResult:
        """
        Validate the audio format for a download.

        Original-quality downloads ignore the requested format. Otherwise a
        missing format falls back to the default conversion target.

        Args:
            audio_format: Requested format, may be None
            use_original: Whether the original-quality mode was requested

        Returns:
            ValidationResult whose sanitized_value is the normalized format
        """
        if use_original:
            return ValidationResult(is_valid=True)

        if audio_format is None or (isinstance(audio_format, str) and not audio_format.strip()):
            return ValidationResult(is_valid=True, sanitized_value=DEFAULT_AUDIO_FORMAT)

        if not isinstance(audio_format, str):
            return ValidationResult(is_valid=False, error_message="Invalid audio format")

        normalized = audio_format.strip().lower()
        if normalized not in self.allowed_formats:
            return ValidationResult(
                is_valid=False,
                error_message=(
                    "Invalid audio format. Valid options: "
                    f"{', '.join(sorted(self.allowed_formats))}"
                ),
            )

        return ValidationResult(is_valid=True, sanitized_value=normalized)


# Singleton instances for convenience
url_validator = URLValidator()
format_validator = FormatValidator()
