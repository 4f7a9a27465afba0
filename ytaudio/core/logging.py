"""Structured logging with per-request correlation ids.

Every log line emitted while a request is in flight carries its
``request_id``. Long string values (yt-dlp stderr, video descriptions) are
capped so a single failing download cannot flood the log.
"""

import contextvars
import logging
import re
import sys
from typing import Any, Dict, List, Optional
from uuid import uuid4

import structlog

REQUEST_ID_HEADER = "X-Request-ID"

# Client supplied ids are echoed into logs and headers, so keep them plain
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._\-]{1,64}$")

MAX_LOG_VALUE_LENGTH = 2000

request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def add_request_id(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor copying the current request_id into the event."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def truncate_long_values(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor capping string values at MAX_LOG_VALUE_LENGTH characters.

    Rendered tracebacks are left whole.
    """
    for key, value in event_dict.items():
        if key == "exception":
            continue
        if isinstance(value, str) and len(value) > MAX_LOG_VALUE_LENGTH:
            omitted = len(value) - MAX_LOG_VALUE_LENGTH
            event_dict[key] = f"{value[:MAX_LOG_VALUE_LENGTH]}... [{omitted} chars truncated]"
    return event_dict


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Route structlog through the standard library logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: "json" for production, "console" for development
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        truncate_long_values,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request id to the current context.

    A missing or unsafe id (anything outside ``[A-Za-z0-9._-]``, or longer
    than 64 characters) is replaced by a generated ``req_<12 hex>`` id.

    Returns:
        The id now in effect
    """
    if not request_id or not _REQUEST_ID_PATTERN.match(request_id):
        request_id = f"req_{uuid4().hex[:12]}"
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def clear_request_id() -> None:
    request_id_var.set(None)
