"""Request ID middleware.

Generates (or propagates) a UUID request ID for every incoming request,
stores it in ``request.state.request_id``, exposes it to log records through
``request_id_var``, and adds an ``X-Request-ID`` response header.
"""

from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ytdl_gateway.logging_config import request_id_var


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that assigns a unique request ID to each request.

    If the incoming request already carries an ``X-Request-ID`` header the
    provided value is reused; otherwise a new UUID4 is generated.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Reuse caller-provided ID or generate a fresh one.
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response
