"""YouTube audio extraction API built on yt-dlp."""

__version__ = "1.0.0"
