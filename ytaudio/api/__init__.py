"""API endpoints."""

from ytaudio.api import download, health, info, metrics

__all__ = [
    "download",
    "health",
    "info",
    "metrics",
]
