"""Admission gate in front of every external download call.

Combines the per-video attempt limiter with proxy rotation behind the three
calls a download handler needs: ``is_rate_limited`` before starting,
``get_next_proxy`` for each outbound library call, and ``record_attempt``
when the call fails. The gate never raises; its signals are a boolean and
an optional proxy URL.

One gate is built at startup and injected into the downloader, so its state
lives exactly as long as the application.
"""

from __future__ import annotations

import asyncio
import logging

from ytdl_gateway.proxy.manager import ProxyManager
from ytdl_gateway.resilience.rate_limiter import AttemptRateLimiter

logger = logging.getLogger(__name__)


class AdmissionGate:
    """Per-video admission control plus egress proxy rotation."""

    def __init__(self, rate_limiter: AttemptRateLimiter, proxy_manager: ProxyManager) -> None:
        self._rate_limiter = rate_limiter
        self._proxy_manager = proxy_manager

    @property
    def window_seconds(self) -> float:
        return self._rate_limiter.window_seconds

    def is_rate_limited(self, identifier: str) -> bool:
        return self._rate_limiter.is_rate_limited(identifier)

    def record_attempt(self, identifier: str) -> None:
        self._rate_limiter.record_attempt(identifier)

    def get_next_proxy(self) -> str | None:
        return self._proxy_manager.get_next_proxy()

    def sweep(self) -> int:
        return self._rate_limiter.sweep()

    async def sweep_loop(self, interval_seconds: float) -> None:
        """Periodically forget identifiers whose attempts have all expired."""
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.info("Attempt sweep removed %d identifiers", removed)

    def get_stats(self) -> dict:
        return {
            "rate_limiter": self._rate_limiter.get_stats(),
            "proxy_pool": self._proxy_manager.get_stats(),
        }
