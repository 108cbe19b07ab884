# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized error taxonomy for both request handlers. Every failure is
# converted into a JSON body of the shape:
#
#   {"success": false, "error": "<message>", "code": "<CODE>", "details": {...}}
#
# Nothing here retries; callers decide whether to try again.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AnimatorException(Exception):
    """
    Base exception for the animator API.

    All custom exceptions inherit from this class and carry the HTTP
    status they surface as.
    """

    def __init__(
        self,
        message: str,
        code: str = "ANIMATOR_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationError(AnimatorException):
    """Raised when a request is missing fields or has the wrong shape."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details,
        )


class NotFoundError(AnimatorException):
    """Raised when a photo or animation row doesn't exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found",
            code=f"{resource.upper()}_NOT_FOUND",
            status_code=404,
            details={f"{resource}_id": resource_id},
        )


# =============================================================================
# Storage / Database Exceptions
# =============================================================================

class SigningError(AnimatorException):
    """Raised when a signed URL can't be produced for a stored photo."""

    def __init__(self, path: str, error: str | None = None):
        super().__init__(
            message="failed to sign url",
            code="SIGNING_ERROR",
            details={"path": path, "error": error} if error else {"path": path},
        )


class StorageError(AnimatorException):
    """Raised when writing an object to storage fails."""

    def __init__(self, error: str, path: str | None = None):
        super().__init__(
            message=error,
            code="STORAGE_ERROR",
            details={"path": path} if path else None,
        )


class PersistenceError(AnimatorException):
    """Raised when a database insert or update fails."""

    def __init__(self, error: str, table: str | None = None):
        super().__init__(
            message=error,
            code="PERSISTENCE_ERROR",
            details={"table": table} if table else None,
        )


# =============================================================================
# Provider Exceptions
# =============================================================================

class SubmissionError(AnimatorException):
    """Raised when the provider rejects a job or omits its request id."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="SUBMISSION_ERROR",
            details=details,
        )


class ProviderJobFailedError(AnimatorException):
    """Raised when the provider reports the job as FAILED."""

    def __init__(self, request_id: str, detail: Any):
        super().__init__(
            message="Fal failed",
            code="PROVIDER_JOB_FAILED",
            details={"request_id": request_id, "detail": detail},
        )
        self.request_id = request_id
        self.detail = detail


class MissingOutputError(AnimatorException):
    """Raised when a completed job carries no video URL."""

    def __init__(self, request_id: str, detail: Any):
        super().__init__(
            message="no output url",
            code="MISSING_OUTPUT",
            details={"request_id": request_id, "detail": detail},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def animator_exception_handler(
    request: Request,
    exc: AnimatorException
) -> JSONResponse:
    """Convert AnimatorException to its JSON response."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request body validation errors.

    Missing fields and malformed JSON are client errors (400), matching
    the explicit checks done for multipart uploads.
    """
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        if first.get("type") == "missing" and field:
            message = f"{field} missing"
        elif first.get("type") == "json_invalid":
            message = "Expected a JSON body"
        elif field:
            message = f"{field}: {first.get('msg', 'invalid')}"

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": message,
            "code": "VALIDATION_ERROR",
        }
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Shape framework errors (404 route, 405 method) like our own."""
    headers = getattr(exc, "headers", None)
    allowed = (headers or {}).get("Allow")
    if exc.status_code == 405 and allowed:
        message = f"Only {allowed} allowed"
    else:
        message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": message,
            "code": f"HTTP_{exc.status_code}",
        },
        headers=headers,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Last-resort handler: log and return a 500 with the message."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) or "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )
