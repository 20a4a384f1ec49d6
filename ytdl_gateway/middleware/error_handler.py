"""Global error hierarchy and FastAPI exception handlers.

All gateway-specific errors extend GatewayError. The FastAPI exception handlers
catch these errors (plus Pydantic's RequestValidationError and unhandled exceptions)
and return a consistent JSON envelope: { success, data, error, meta }.
"""

from __future__ import annotations

import logging
import math
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ytdl_gateway.models.responses import ApiResponse, ErrorMeta

logger = logging.getLogger(__name__)

# Substrings in a failure message that make a retry worthwhile
_RETRYABLE_MARKERS = ("rate limit", "blocked")


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class GatewayError(Exception):
    """Base error for all gateway-specific errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ValidationError(GatewayError):
    """Request payload failed validation; details carry the offending fields."""

    status_code = 422
    message = "Validation error"


class AuthenticationError(GatewayError):
    """Invalid or missing service key."""

    status_code = 401
    message = "Invalid or missing service key"


class MissingVideoUrlError(GatewayError):
    """Request body carried no video URL."""

    status_code = 400
    message = "Video URL is required"


class InvalidVideoUrlError(GatewayError):
    """URL is not a recognizable YouTube video link."""

    status_code = 400
    message = "Invalid YouTube URL"


class RateLimitExceededError(GatewayError):
    """Too many failed attempts for this video within the window."""

    status_code = 429
    message = "Rate limit exceeded. Please try again later."

    def __init__(
        self,
        message: str | None = None,
        *,
        retry_after_seconds: float = 60.0,
        **kwargs: object,
    ) -> None:
        super().__init__(
            message,
            retry_suggested=True,
            retry_after_seconds=retry_after_seconds,
            **kwargs,
        )
        self.retry_after_seconds = retry_after_seconds

    @property
    def headers(self) -> dict[str, str]:
        return {"Retry-After": str(math.ceil(self.retry_after_seconds))}


class VideoInfoError(GatewayError):
    """The extraction library could not fetch video metadata."""

    status_code = 500
    message = "Failed to get video info"


class DownloadFailedError(GatewayError):
    """The extraction library or transcoder failed to produce a file."""

    status_code = 500
    message = "Download failed"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        super().__init__(message, **kwargs)
        text = self.message.lower()
        self.details.setdefault(
            "retry_suggested", any(marker in text for marker in _RETRYABLE_MARKERS)
        )


class DownloadTimeoutError(DownloadFailedError):
    """The external download call did not finish in time."""

    status_code = 504
    message = "Download timed out"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(
    status_code: int,
    error: str,
    meta: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a JSON envelope error response."""
    envelope = ApiResponse(
        success=False,
        error=error,
        meta=ErrorMeta(**meta) if meta else None,
    )
    return JSONResponse(
        status_code=status_code,
        content=envelope.to_payload(),
        headers=headers,
    )


async def _gateway_error_handler(_request: Request, exc: GatewayError) -> JSONResponse:
    """Handle GatewayError subclasses."""
    meta = exc.details if exc.details else None
    return _envelope(exc.status_code, exc.message, meta=meta, headers=exc.headers)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return await _gateway_error_handler(request, ValidationError(fields=field_errors))


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log traceback, return generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return _envelope(status_code=500, error="Internal server error")


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(GatewayError, _gateway_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
