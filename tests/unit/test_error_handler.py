"""Unit tests for the error hierarchy and FastAPI exception handlers."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

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


# ---------------------------------------------------------------------------
# Test app fixture
# ---------------------------------------------------------------------------


class Payload(BaseModel):
    name: str


def _make_app() -> FastAPI:
    """Build a minimal FastAPI app with error handlers registered."""
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/raise-gateway")
    async def _raise_gateway():
        raise GatewayError()

    @app.get("/raise-rate-limit")
    async def _raise_rate_limit():
        raise RateLimitExceededError(retry_after_seconds=60)

    @app.get("/raise-download-blocked")
    async def _raise_blocked():
        raise DownloadFailedError("HTTP Error 429: blocked by upstream")

    @app.get("/raise-download-unavailable")
    async def _raise_unavailable():
        raise DownloadFailedError("Video unavailable")

    @app.get("/raise-unhandled")
    async def _raise_unhandled():
        raise RuntimeError("something unexpected")

    @app.post("/validate")
    async def _validate(body: Payload):
        return {"ok": True}

    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(_make_app(), raise_server_exceptions=False)


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "error_cls, status",
    [
        (GatewayError, 500),
        (ValidationError, 422),
        (AuthenticationError, 401),
        (MissingVideoUrlError, 400),
        (InvalidVideoUrlError, 400),
        (RateLimitExceededError, 429),
        (VideoInfoError, 500),
        (DownloadFailedError, 500),
        (DownloadTimeoutError, 504),
    ],
)
def test_status_codes(error_cls, status):
    err = error_cls()
    assert err.status_code == status
    assert isinstance(err, GatewayError)
    assert str(err) == err.message


def test_custom_message_overrides_default():
    err = VideoInfoError("Failed to get video info: Private video")
    assert err.message == "Failed to get video info: Private video"


def test_default_message_used_when_none():
    assert MissingVideoUrlError().message == "Video URL is required"
    assert InvalidVideoUrlError().message == "Invalid YouTube URL"


def test_rate_limit_details_and_header():
    err = RateLimitExceededError(retry_after_seconds=59.2)
    assert err.details == {"retry_suggested": True, "retry_after_seconds": 59.2}
    assert err.headers == {"Retry-After": "60"}


@pytest.mark.parametrize(
    "message, retry",
    [
        ("Rate limit exceeded upstream", True),
        ("Sign in: you have been BLOCKED", True),
        ("Video unavailable", False),
    ],
)
def test_download_failed_retry_hint(message, retry):
    assert DownloadFailedError(message).details["retry_suggested"] is retry


def test_timeout_is_download_failure():
    err = DownloadTimeoutError()
    assert isinstance(err, DownloadFailedError)
    assert err.details["retry_suggested"] is False


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def test_gateway_error_envelope(client: TestClient):
    response = client.get("/raise-gateway")
    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "data": None,
        "error": "Internal server error",
        "meta": None,
    }


def test_rate_limit_response(client: TestClient):
    response = client.get("/raise-rate-limit")
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Rate limit exceeded. Please try again later."
    assert body["meta"] == {"retry_suggested": True, "retry_after_seconds": 60}


def test_blocked_download_suggests_retry(client: TestClient):
    body = client.get("/raise-download-blocked").json()
    assert body["meta"] == {"retry_suggested": True}


def test_unavailable_download_does_not_suggest_retry(client: TestClient):
    response = client.get("/raise-download-unavailable")
    assert response.status_code == 500
    assert response.json()["meta"] == {"retry_suggested": False}


def test_request_validation_envelope(client: TestClient):
    response = client.post("/validate", json={})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "Validation error"
    assert body["meta"]["fields"][0]["field"] == "body -> name"


def test_unhandled_error_is_generic(client: TestClient):
    response = client.get("/raise-unhandled")
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal server error"
    assert "something unexpected" not in response.text
