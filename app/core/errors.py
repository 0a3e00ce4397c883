"""Error codes and the JSON error body shared by every endpoint.

Resolver, storage and materializer exceptions are translated here so the
services themselves never deal with HTTP statuses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from app.core.logging import get_request_id
from app.core.metrics import MetricsCollector
from app.resolvers.exceptions import (
    ResolverError,
    UnresolvableMediaUrlError,
    UnsupportedMediaKindError,
)
from app.services.downloads import InvalidDataUriError
from app.services.materializer import AssetReadError, MaterializationError
from app.services.storage import StorageError

# Starlette renamed these constants; plain values work across versions
HTTP_413_CONTENT_TOO_LARGE = 413
HTTP_422_UNPROCESSABLE_CONTENT = 422

logger = structlog.get_logger(__name__)


class ErrorCode:
    """Machine-readable codes returned in the error_code field."""

    # Client Errors (4xx)
    INVALID_URL = "INVALID_URL"
    INVALID_MEDIA_KIND = "INVALID_MEDIA_KIND"
    UNRESOLVABLE_MEDIA_URL = "UNRESOLVABLE_MEDIA_URL"
    INVALID_DATA_URI = "INVALID_DATA_URI"
    FILE_UNREADABLE = "FILE_UNREADABLE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    AUTH_FAILED = "AUTH_FAILED"
    NOT_FOUND = "NOT_FOUND"

    # Server Errors (5xx)
    STORAGE_ERROR = "STORAGE_ERROR"
    RESOLVER_ERROR = "RESOLVER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Service Unavailable (503)
    COMPONENT_UNAVAILABLE = "COMPONENT_UNAVAILABLE"


# Error code to HTTP status code mapping
ERROR_CODE_TO_STATUS: Dict[str, int] = {
    # 400 Bad Request
    ErrorCode.INVALID_URL: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_MEDIA_KIND: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_DATA_URI: HTTP_400_BAD_REQUEST,
    # 401 Unauthorized
    ErrorCode.AUTH_FAILED: HTTP_401_UNAUTHORIZED,
    # 404 Not Found
    ErrorCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    # 413 Payload Too Large
    ErrorCode.FILE_TOO_LARGE: HTTP_413_CONTENT_TOO_LARGE,
    # 422 Unprocessable Entity
    ErrorCode.UNRESOLVABLE_MEDIA_URL: HTTP_422_UNPROCESSABLE_CONTENT,
    ErrorCode.FILE_UNREADABLE: HTTP_422_UNPROCESSABLE_CONTENT,
    # 500 Internal Server Error
    ErrorCode.STORAGE_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.RESOLVER_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    # 503 Service Unavailable
    ErrorCode.COMPONENT_UNAVAILABLE: HTTP_503_SERVICE_UNAVAILABLE,
}


# User-friendly suggestions for error resolution
ERROR_SUGGESTIONS: Dict[str, str] = {
    ErrorCode.INVALID_URL: "Provide a non-empty http(s) URL",
    ErrorCode.INVALID_MEDIA_KIND: "Use kind=video or kind=audio",
    ErrorCode.UNRESOLVABLE_MEDIA_URL: (
        "The URL points at a supported platform but no media ID was found. "
        "Copy the share link of a specific video, track, album, playlist or song"
    ),
    ErrorCode.INVALID_DATA_URI: "Provide a file_url of the form data:<mime>;base64,<payload>",
    ErrorCode.FILE_UNREADABLE: "The image could not be processed. Re-select the file and try again",
    ErrorCode.FILE_TOO_LARGE: "The file exceeds the maximum allowed upload size",
    ErrorCode.AUTH_FAILED: "Provide a valid API key in the X-API-Key header",
    ErrorCode.NOT_FOUND: "The requested resource does not exist",
    ErrorCode.STORAGE_ERROR: "Object storage is unavailable. Check server logs for details",
    ErrorCode.RESOLVER_ERROR: "An error occurred while resolving the media URL",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Contact administrator if the issue persists",
    ErrorCode.COMPONENT_UNAVAILABLE: "A required system component is unavailable. Check /health for status",
}


# Exception type to error code mapping
# Order matters: subclasses must come before their base classes
EXCEPTION_TO_ERROR_CODE: Dict[Type[Exception], str] = {
    UnresolvableMediaUrlError: ErrorCode.UNRESOLVABLE_MEDIA_URL,
    UnsupportedMediaKindError: ErrorCode.INVALID_MEDIA_KIND,
    AssetReadError: ErrorCode.FILE_UNREADABLE,
    InvalidDataUriError: ErrorCode.INVALID_DATA_URI,
    StorageError: ErrorCode.STORAGE_ERROR,
    # Base classes last
    ResolverError: ErrorCode.RESOLVER_ERROR,
    MaterializationError: ErrorCode.INTERNAL_ERROR,
}

DOMAIN_EXCEPTIONS = (ResolverError, MaterializationError, StorageError, InvalidDataUriError)

# Fallback codes for HTTPExceptions raised without a structured detail
STATUS_TO_ERROR_CODE: Dict[int, str] = {
    HTTP_400_BAD_REQUEST: ErrorCode.INVALID_URL,
    HTTP_401_UNAUTHORIZED: ErrorCode.AUTH_FAILED,
    HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    HTTP_413_CONTENT_TOO_LARGE: ErrorCode.FILE_TOO_LARGE,
    HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.COMPONENT_UNAVAILABLE,
}


class APIError(Exception):
    """Error raised by endpoints with a machine-readable code.

    The suggestion defaults to the one registered for the code.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details
        self.suggestion = suggestion or ERROR_SUGGESTIONS.get(error_code)
        super().__init__(message)


def map_exception_to_api_error(exc: Exception) -> APIError:
    """Translate a resolver, storage or materializer exception into an APIError.

    Unknown exceptions become INTERNAL_ERROR with a generic message so
    internal details never reach the client.
    """
    for exc_type, error_code in EXCEPTION_TO_ERROR_CODE.items():
        if isinstance(exc, exc_type):
            return APIError(error_code, str(exc))
    return APIError(ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


def _from_http_exception(exc: HTTPException) -> APIError:
    if isinstance(exc.detail, dict) and "error_code" in exc.detail:
        return APIError(
            exc.detail["error_code"],
            exc.detail.get("message", str(exc.detail)),
            details=exc.detail.get("details"),
        )
    error_code = STATUS_TO_ERROR_CODE.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return APIError(error_code, str(exc.detail) if exc.detail else "An error occurred")


def _error_body(error: APIError) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "error_code": error.error_code,
        "message": error.message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    request_id = get_request_id()
    if error.details:
        body["details"] = error.details
    if request_id:
        body["request_id"] = request_id
    if error.suggestion:
        body["suggestion"] = error.suggestion
    return body


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any exception as an ErrorResponse body.

    APIError and HTTPException keep their own status. Domain exceptions are
    mapped through EXCEPTION_TO_ERROR_CODE. Anything else is logged with its
    traceback and reported as a generic 500.
    """
    path = request.url.path
    headers = None

    if isinstance(exc, APIError):
        error = exc
        status_code = ERROR_CODE_TO_STATUS.get(error.error_code, HTTP_500_INTERNAL_SERVER_ERROR)
        logger.warning("api_error", error_code=error.error_code, message=error.message, path=path)
    elif isinstance(exc, HTTPException):
        error = _from_http_exception(exc)
        status_code = exc.status_code
        headers = exc.headers
        logger.warning(
            "http_exception", status_code=status_code, error_code=error.error_code, path=path
        )
    elif isinstance(exc, DOMAIN_EXCEPTIONS):
        error = map_exception_to_api_error(exc)
        status_code = ERROR_CODE_TO_STATUS.get(error.error_code, HTTP_500_INTERNAL_SERVER_ERROR)
        logger.warning(
            "domain_error",
            error_code=error.error_code,
            error_type=type(exc).__name__,
            message=str(exc),
            path=path,
        )
    else:
        error = map_exception_to_api_error(exc)
        status_code = HTTP_500_INTERNAL_SERVER_ERROR
        logger.error(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error=str(exc),
            path=path,
            exc_info=True,
        )

    MetricsCollector.record_error(error.error_code, path)
    return JSONResponse(status_code=status_code, content=_error_body(error), headers=headers)
