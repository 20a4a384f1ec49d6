"""FastAPI application entry point with lifespan management.

Startup: configure logging, build the admission gate (attempt limiter + proxy
rotation) and the downloader, start the attempt sweep task, mount routers.
Shutdown: cancel the sweep task.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ytdl_gateway.config.settings import GatewaySettings
from ytdl_gateway.logging_config import configure_logging
from ytdl_gateway.middleware.auth import ServiceKeyAuthMiddleware
from ytdl_gateway.middleware.error_handler import register_error_handlers
from ytdl_gateway.middleware.request_id import RequestIdMiddleware
from ytdl_gateway.proxy.manager import ProxyManager
from ytdl_gateway.resilience.admission_gate import AdmissionGate
from ytdl_gateway.resilience.rate_limiter import AttemptRateLimiter
from ytdl_gateway.routers.download import create_download_router
from ytdl_gateway.routers.health import create_health_router
from ytdl_gateway.services.downloader import VideoDownloader

logger = logging.getLogger(__name__)


def build_admission_gate(settings: GatewaySettings) -> AdmissionGate:
    """Build the process-wide admission gate from settings."""
    rate_limiter = AttemptRateLimiter(
        max_attempts=settings.rate_limit_max_attempts,
        window_seconds=settings.rate_limit_window_seconds,
    )
    proxy_manager = ProxyManager(settings.proxy_pool)
    return AdmissionGate(rate_limiter, proxy_manager)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings: GatewaySettings = app.state.settings

    configure_logging(settings.log_level)
    logger.info("Starting download gateway on port %d", settings.port)

    gate = build_admission_gate(settings)
    downloader = VideoDownloader(gate, settings)

    sweep_task = asyncio.create_task(
        gate.sweep_loop(settings.attempt_sweep_interval_seconds)
    )

    app.include_router(create_health_router(admission_gate=gate))
    app.include_router(create_download_router(downloader=downloader))

    app.state.admission_gate = gate
    app.state.downloader = downloader

    logger.info("Download gateway started successfully")

    yield

    # --- Shutdown ---
    logger.info("Shutting down download gateway…")

    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        pass

    logger.info("Download gateway shut down")


def create_app(settings: GatewaySettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are loaded eagerly so invalid environment values fail at
    startup. Service-key auth is enabled only when ``YTDL_SERVICE_KEY`` is set.
    """
    settings = settings or GatewaySettings()

    app = FastAPI(
        title="YouTube Download Gateway",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_error_handlers(app)

    # Starlette applies middleware in reverse order of add_middleware calls
    if settings.service_key:
        app.add_middleware(ServiceKeyAuthMiddleware, service_key=settings.service_key)
    app.add_middleware(RequestIdMiddleware)

    return app


app = create_app()
