"""Response envelope shared by every gateway endpoint.

Successful calls fill ``data``. Failures fill ``error`` and, when the client
can act on it, ``meta``:
{ success, data, error, meta: { retry_suggested?, retry_after_seconds?, fields? } }
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ErrorMeta(BaseModel):
    """Failure hints for the client. Keys that were never set are omitted.

    Request validation failures add a ``fields`` list as an extra key.
    """

    model_config = ConfigDict(extra="allow")

    retry_suggested: bool | None = None
    retry_after_seconds: float | None = None


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for gateway responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: ErrorMeta | None = None

    def to_payload(self) -> dict[str, Any]:
        """Dump the envelope, dropping unset ``meta`` keys."""
        payload = self.model_dump(exclude={"meta"})
        payload["meta"] = self.meta.model_dump(exclude_none=True) if self.meta else None
        return payload
