"""Data models for the application."""

from ytaudio.models.audio import AudioFile, AudioFormatDescriptor, ExtractionRequest, VideoSummary

__all__ = [
    "AudioFile",
    "AudioFormatDescriptor",
    "ExtractionRequest",
    "VideoSummary",
]
