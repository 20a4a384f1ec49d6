"""Resilience components for the download gateway."""

from ytdl_gateway.resilience.admission_gate import AdmissionGate
from ytdl_gateway.resilience.rate_limiter import AttemptHistory, AttemptRateLimiter

__all__ = [
    "AdmissionGate",
    "AttemptHistory",
    "AttemptRateLimiter",
]
