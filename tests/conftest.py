"""Shared test fixtures for the gateway test suite."""

from __future__ import annotations

import os

import pytest

from ytdl_gateway.config.settings import GatewaySettings
from ytdl_gateway.proxy.manager import ProxyManager
from ytdl_gateway.resilience.admission_gate import AdmissionGate
from ytdl_gateway.resilience.rate_limiter import AttemptRateLimiter


# ---------------------------------------------------------------------------
# Keep the developer's environment out of GatewaySettings
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove proxy and YTDL_ variables so settings start from defaults."""
    for key in list(os.environ):
        if key.upper().startswith("YTDL_") or key.upper() in {"PROXY_1", "PROXY_2", "PROXY_3"}:
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Simulated time
# ---------------------------------------------------------------------------

class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def set_ms(self, milliseconds: float) -> None:
        self.now = milliseconds / 1000.0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path) -> GatewaySettings:
    """Test settings with a temporary download directory and two proxies."""
    return GatewaySettings(
        download_dir=str(tmp_path / "downloads"),
        download_timeout_seconds=5,
        proxy_1="http://proxy1:8080",
        proxy_2="http://proxy2:8080",
    )


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def rate_limiter(clock: FakeClock) -> AttemptRateLimiter:
    return AttemptRateLimiter(max_attempts=5, window_seconds=60, clock=clock)


@pytest.fixture
def proxy_manager(settings: GatewaySettings) -> ProxyManager:
    return ProxyManager(settings.proxy_pool)


@pytest.fixture
def gate(rate_limiter: AttemptRateLimiter, proxy_manager: ProxyManager) -> AdmissionGate:
    return AdmissionGate(rate_limiter, proxy_manager)

