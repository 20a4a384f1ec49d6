"""Middleware package — error hierarchy, auth, and request ID."""

from ytdl_gateway.middleware.auth import ServiceKeyAuthMiddleware
from ytdl_gateway.middleware.error_handler import (
    AuthenticationError,
    DownloadFailedError,
    DownloadTimeoutError,
    GatewayError,
    InvalidVideoUrlError,
    MissingVideoUrlError,
    RateLimitExceededError,
    ValidationError,
    VideoInfoError,
    register_error_handlers,
)
from ytdl_gateway.middleware.request_id import RequestIdMiddleware

__all__ = [
    "AuthenticationError",
    "DownloadFailedError",
    "DownloadTimeoutError",
    "GatewayError",
    "InvalidVideoUrlError",
    "MissingVideoUrlError",
    "RateLimitExceededError",
    "RequestIdMiddleware",
    "ServiceKeyAuthMiddleware",
    "ValidationError",
    "VideoInfoError",
    "register_error_handlers",
]
