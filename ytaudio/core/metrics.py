"""Prometheus metrics collection for the API.

Request rates, extraction outcomes, scratch workspace usage and errors.
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
app_info = Info("ytaudio_api", "Audio extraction API application information")

# HTTP request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 120.0],
)

# Extraction metrics
extractions_total = Counter(
    "extractions_total",
    "Total yt-dlp invocations by operation and outcome",
    ["operation", "status"],
)

extraction_duration_seconds = Histogram(
    "extraction_duration_seconds",
    "yt-dlp invocation duration in seconds",
    ["operation"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
)

download_size_bytes = Histogram(
    "download_size_bytes",
    "Extracted audio file size in bytes",
    ["format"],
    buckets=[1e5, 1e6, 5e6, 10e6, 25e6, 50e6, 100e6, 250e6],
)

active_workspaces = Gauge(
    "active_workspaces",
    "Scratch directories currently on disk",
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors by error code and endpoint",
    ["error_code", "endpoint"],
)


class MetricsCollector:
    """Static helpers for recording metrics consistently."""

    @staticmethod
    def record_request(
        method: str,
        endpoint: str,
        status: int,
        duration: float,
    ) -> None:
        """Record HTTP request metrics.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: Normalized endpoint path.
            status: HTTP response status code.
            duration: Request duration in seconds.
        """
        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()
        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration)

    @staticmethod
    def record_extraction(operation: str, status: str, duration: float) -> None:
        """Record one yt-dlp invocation.

        Args:
            operation: 'info' or 'download'.
            status: 'success' or 'failed'.
            duration: Wall time in seconds.
        """
        extractions_total.labels(operation=operation, status=status).inc()
        extraction_duration_seconds.labels(operation=operation).observe(duration)

    @staticmethod
    def record_download_size(audio_format: str, size: int) -> None:
        if size > 0:
            download_size_bytes.labels(format=audio_format).observe(size)

    @staticmethod
    def workspace_opened() -> None:
        active_workspaces.inc()

    @staticmethod
    def workspace_closed() -> None:
        active_workspaces.dec()

    @staticmethod
    def record_error(error_code: str, endpoint: str) -> None:
        """Record an error occurrence.

        Args:
            error_code: Error code from ErrorCode class.
            endpoint: Endpoint where the error occurred.
        """
        errors_total.labels(error_code=error_code, endpoint=endpoint).inc()


def initialize_metrics(version: str) -> None:
    """Publish the application version. Called during startup."""
    app_info.info({"version": version})
