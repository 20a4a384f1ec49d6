"""Structured JSON logging configuration.

Configures Python logging to emit JSON-formatted log entries with required
fields: request_id, level, timestamp. Download-specific fields are added
contextually (video_id, proxy_used, error_reason for failures;
media_format, duration_ms, file_size for completions).

SECURITY: Never logs service keys or proxy credentials.
"""

from __future__ import annotations

import json
import logging
import re
from contextvars import ContextVar
from datetime import datetime, timezone
from urllib.parse import urlparse, urlunparse


# Patterns that should be redacted from log output
_SENSITIVE_PATTERNS = re.compile(
    r"(service.key|api.key|secret|password|token|authorization)"
    r"[\s]*[=:]\s*\S+",
    re.IGNORECASE,
)

# user:pass@ inside any URL embedded in a message
_URL_CREDENTIALS = re.compile(
    r"(?P<scheme>[a-z][a-z0-9+.-]*://)[^/\s:@]+(:[^/\s@]*)?@",
    re.IGNORECASE,
)

# Set by RequestIdMiddleware for the duration of each request
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_CONTEXT_FIELDS = (
    "video_id",
    "video_url",
    "media_format",
    "duration_ms",
    "file_size",
    "attempts",
)


def mask_proxy(proxy: str | None) -> str | None:
    """Return the proxy URL with any user-info component removed."""
    if not proxy:
        return proxy
    parsed = urlparse(proxy)
    if not parsed.hostname:
        return proxy
    netloc = parsed.hostname
    if parsed.port:
        netloc = f"{netloc}:{parsed.port}"
    return urlunparse(parsed._replace(netloc=netloc))


class RequestIdFilter(logging.Filter):
    """Attach the current request ID to every record passing through."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields.

    Each entry contains at minimum: request_id, level, timestamp, message.
    Additional fields can be attached via the ``extra`` dict on log calls.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)

        if hasattr(record, "proxy_used"):
            entry["proxy_used"] = mask_proxy(getattr(record, "proxy_used"))
        if hasattr(record, "error_reason"):
            entry["error_reason"] = self._sanitize(
                str(getattr(record, "error_reason"))
            )

        # Exception info
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(
                self.formatException(record.exc_info)
            )

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Remove sensitive values from log text."""
        text = _URL_CREDENTIALS.sub(r"\g<scheme>", text)
        return _SENSITIVE_PATTERNS.sub("[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)
