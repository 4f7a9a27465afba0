"""Extractor exceptions."""


class ExtractorError(Exception):
    """Base exception for extraction errors."""

    pass


class InvalidInputError(ExtractorError):
    """Raised when the URL or requested format is invalid."""

    pass


class ToolNotFoundError(ExtractorError):
    """Raised when the yt-dlp executable cannot be spawned."""

    pass


class ExternalToolError(ExtractorError):
    """Raised when yt-dlp exits with a nonzero status."""

    def __init__(self, message: str, returncode: int = 1):
        self.returncode = returncode
        super().__init__(message)


class MalformedResponseError(ExtractorError):
    """Raised when yt-dlp output cannot be parsed."""

    pass


class NoOutputProducedError(ExtractorError):
    """Raised when yt-dlp exits cleanly but writes no file."""

    pass


class NoAudioProducedError(ExtractorError):
    """Raised when yt-dlp leaves only thumbnail images behind."""

    pass
