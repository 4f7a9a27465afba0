"""Request and response schemas for API endpoints.

Pydantic models for request validation and response serialization with
OpenAPI examples.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ytaudio.core.media import AudioFormat


class VideoInfoRequest(BaseModel):
    """Request body for the info endpoint."""

    url: Optional[str] = Field(
        None, description="Video URL", examples=["https://www.youtube.com/watch?v=dQw4w9WgXcQ"]
    )


class AudioFormatResponse(BaseModel):
    """Audio-only stream offered by the source."""

    format_id: str = Field(..., examples=["251"])
    ext: str = Field(..., examples=["webm"])
    acodec: Optional[str] = Field(None, examples=["opus"])
    abr: Optional[float] = Field(None, description="Average bitrate in kbps", examples=[129.5])
    filesize: Optional[int] = Field(None, description="Size in bytes", examples=[3437123])
    format_note: Optional[str] = Field(None, examples=["medium"])


class VideoInfoResponse(BaseModel):
    """Video preview response."""

    title: str = Field(..., examples=["Rick Astley - Never Gonna Give You Up"])
    thumbnail: Optional[str] = Field(
        None, examples=["https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"]
    )
    duration: Optional[float] = Field(None, description="Duration in seconds", examples=[212])
    uploader: Optional[str] = Field(None, examples=["Rick Astley"])
    formats: List[AudioFormatResponse] = Field(default_factory=list)


class DownloadRequest(BaseModel):
    """Request body for the download endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = Field(
        None,
        description="Video URL to extract audio from",
        examples=["https://www.youtube.com/watch?v=dQw4w9WgXcQ"],
    )
    original: bool = Field(
        False, description="Keep the best source audio as opus instead of converting"
    )
    audio_format: Optional[str] = Field(
        None,
        alias="format",
        description="Target audio format when original is false (default mp3)",
        examples=[f.value for f in AudioFormat],
    )


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str = Field(..., examples=["Invalid YouTube URL"])
    error_code: str = Field(..., examples=["INVALID_INPUT", "EXTERNAL_TOOL_ERROR"])
    request_id: Optional[str] = Field(None, examples=["req_3f9a1c2b7d4e"])


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    version: Optional[str] = Field(default=None, examples=["2024.12.01"])
    details: Optional[Dict[str, Any]] = Field(default=None, examples=[{"error": "not found"}])


class HealthResponse(BaseModel):
    """Detailed health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    timestamp: str = Field(..., examples=["2025-12-25T10:30:00Z"])
    version: str = Field(..., examples=["1.0.0"])
    uptime_seconds: float = Field(..., examples=[3600.5])
    components: Dict[str, ComponentHealth]


class LivenessResponse(BaseModel):
    """Simple liveness check response for container orchestration."""

    status: Literal["alive"] = Field(..., examples=["alive"])


class ReadinessResponse(BaseModel):
    """Readiness check response for load balancer integration."""

    status: Literal["ready", "not_ready"] = Field(..., examples=["ready"])
    ready: bool = Field(..., examples=[True])
    message: Optional[str] = Field(default=None, examples=["yt-dlp not available"])
