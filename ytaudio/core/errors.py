"""Centralized error handling for the API.

This module provides standardized error codes, exception-to-response mapping,
and the global exception handlers for FastAPI. Every error reaches the client
as ``{"error": <message>, "error_code": <code>}``.
"""

from typing import Any, Dict, Optional, Type

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from ytaudio.core.logging import get_request_id
from ytaudio.core.metrics import MetricsCollector
from ytaudio.extractor.exceptions import (
    ExternalToolError,
    ExtractorError,
    InvalidInputError,
    MalformedResponseError,
    NoAudioProducedError,
    NoOutputProducedError,
    ToolNotFoundError,
)

logger = structlog.get_logger(__name__)


class ErrorCode:
    """Machine-readable error identifiers."""

    # Client Errors (4xx)
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Server Errors (5xx)
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    EXTERNAL_TOOL_ERROR = "EXTERNAL_TOOL_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    NO_OUTPUT_PRODUCED = "NO_OUTPUT_PRODUCED"
    NO_AUDIO_PRODUCED = "NO_AUDIO_PRODUCED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_CODE_TO_STATUS: Dict[str, int] = {
    ErrorCode.INVALID_INPUT: HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.METHOD_NOT_ALLOWED: HTTP_405_METHOD_NOT_ALLOWED,
    ErrorCode.TOOL_NOT_FOUND: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.EXTERNAL_TOOL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.MALFORMED_RESPONSE: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.NO_OUTPUT_PRODUCED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.NO_AUDIO_PRODUCED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}

# Order matters: subclasses must come before their base classes
EXCEPTION_TO_ERROR_CODE: Dict[Type[Exception], str] = {
    InvalidInputError: ErrorCode.INVALID_INPUT,
    ToolNotFoundError: ErrorCode.TOOL_NOT_FOUND,
    ExternalToolError: ErrorCode.EXTERNAL_TOOL_ERROR,
    MalformedResponseError: ErrorCode.MALFORMED_RESPONSE,
    NoOutputProducedError: ErrorCode.NO_OUTPUT_PRODUCED,
    NoAudioProducedError: ErrorCode.NO_AUDIO_PRODUCED,
    # ExtractorError must be last (after its subclasses)
    ExtractorError: ErrorCode.INTERNAL_ERROR,
}

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def error_code_for(exc: Exception) -> str:
    """Map an exception to its error code."""
    for exc_type, error_code in EXCEPTION_TO_ERROR_CODE.items():
        if isinstance(exc, exc_type):
            return error_code
    return ErrorCode.INTERNAL_ERROR


def _build_error_response(error_code: str, message: str) -> Dict[str, Any]:
    """Build the error body returned to clients."""
    response: Dict[str, Any] = {
        "error": message,
        "error_code": error_code,
    }
    request_id = get_request_id()
    if request_id:
        response["request_id"] = request_id
    return response


def _error_response(
    request: Request, error_code: str, message: str, status_code: int
) -> JSONResponse:
    MetricsCollector.record_error(error_code, _endpoint(request))
    return JSONResponse(
        status_code=status_code,
        content=_build_error_response(error_code, message),
    )


def _endpoint(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", "/unmatched")


async def extractor_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert extractor exceptions to error responses.

    Tool failures keep their message so yt-dlp's stderr reaches the client.
    """
    error_code = error_code_for(exc)
    status_code = ERROR_CODE_TO_STATUS.get(error_code, HTTP_500_INTERNAL_SERVER_ERROR)
    message = str(exc) or GENERIC_ERROR_MESSAGE

    log = logger.warning if status_code < HTTP_500_INTERNAL_SERVER_ERROR else logger.error
    log(
        "extractor_error",
        error_code=error_code,
        error_type=type(exc).__name__,
        message=message,
        path=request.url.path,
    )
    return _error_response(request, error_code, message, status_code)


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render malformed request bodies as 400 errors."""
    message = "Invalid request body"
    if isinstance(exc, RequestValidationError) and exc.errors():
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = first.get("msg", "")
        message = f"Invalid request body: {location} {detail}".strip() if location else message

    logger.warning("request_validation_failed", path=request.url.path, message=message)
    return _error_response(request, ErrorCode.INVALID_INPUT, message, HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Keep the status of framework HTTP errors but use the common body."""
    status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)
    detail: Optional[Any] = getattr(exc, "detail", None)
    error_code = _status_to_error_code(status_code)
    message = str(detail) if detail else GENERIC_ERROR_MESSAGE

    logger.warning(
        "http_exception", status_code=status_code, error_code=error_code, path=request.url.path
    )
    return _error_response(request, error_code, message, status_code)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log with traceback, answer with a generic message."""
    if isinstance(exc, ExtractorError):
        return await extractor_exception_handler(request, exc)
    if isinstance(exc, HTTPException):
        return await http_exception_handler(request, exc)

    logger.error(
        "unhandled_exception",
        error_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
        exc_info=exc,
    )
    return _error_response(
        request, ErrorCode.INTERNAL_ERROR, GENERIC_ERROR_MESSAGE, HTTP_500_INTERNAL_SERVER_ERROR
    )


def _status_to_error_code(status_code: int) -> str:
    """Infer an error code from an HTTP status code."""
    if status_code == HTTP_400_BAD_REQUEST:
        return ErrorCode.INVALID_INPUT
    elif status_code == HTTP_404_NOT_FOUND:
        return ErrorCode.NOT_FOUND
    elif status_code == HTTP_405_METHOD_NOT_ALLOWED:
        return ErrorCode.METHOD_NOT_ALLOWED
    else:
        return ErrorCode.INTERNAL_ERROR
