"""Health and metrics endpoints.

These endpoints do NOT require X-Service-Key authentication.
- GET /health — liveness with service name and timestamp
- GET /metrics — admission gate statistics
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from ytdl_gateway.models.responses import ApiResponse

SERVICE_NAME = "YouTube Downloader"


def create_health_router(*, admission_gate: Any = None) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "service": SERVICE_NAME,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        ).to_payload()

    @health_router.get("/metrics")
    async def metrics() -> dict:
        """Operational metrics endpoint."""
        gate_stats = admission_gate.get_stats() if admission_gate else {}

        return ApiResponse(
            success=True,
            data={"admission_gate": gate_stats},
        ).to_payload()

    return health_router
