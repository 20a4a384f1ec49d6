"""Pydantic Settings for the download gateway.

Service variables use the YTDL_ prefix.
Example: YTDL_PORT=8000, YTDL_RATE_LIMIT_MAX_ATTEMPTS=5

Proxy endpoints are read from the un-prefixed PROXY_1, PROXY_2 and PROXY_3
variables. Any of them may be unset; an empty pool means "no proxy".
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class GatewaySettings(BaseSettings):
    """Gateway service configuration validated from environment variables."""

    # Service
    port: int = 8000
    log_level: str = "INFO"
    service_key: str | None = None  # X-Service-Key; auth disabled when unset

    # Admission control
    rate_limit_max_attempts: int = Field(default=5, ge=1)
    rate_limit_window_seconds: float = Field(default=60.0, gt=0)
    attempt_sweep_interval_seconds: int = Field(default=300, ge=1)

    # Downloads
    download_dir: str = "downloads"
    download_timeout_seconds: float = Field(default=300.0, gt=0)
    audio_bitrate_kbps: int = Field(default=128, ge=32, le=320)
    user_agent: str = DEFAULT_USER_AGENT

    # Proxy
    proxy_1: str | None = Field(default=None, validation_alias="PROXY_1")
    proxy_2: str | None = Field(default=None, validation_alias="PROXY_2")
    proxy_3: str | None = Field(default=None, validation_alias="PROXY_3")

    model_config = {"env_prefix": "YTDL_", "populate_by_name": True}

    @property
    def proxy_pool(self) -> list[str]:
        """Configured proxy endpoints in order, skipping unset or blank values."""
        candidates = [self.proxy_1, self.proxy_2, self.proxy_3]
        return [value.strip() for value in candidates if value and value.strip()]
