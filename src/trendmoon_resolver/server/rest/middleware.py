"""Request logging middleware."""

from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger(__name__)

CACHE_SOURCE_HEADER = "X-Entity-Cache-Source"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request and tag the response with the entity cache source.

    Rejections (4xx) and cache outages (5xx) are logged at WARNING.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed = (time.monotonic() - start) * 1000

        resolver = getattr(request.app.state, "entity_resolver", None)
        source = resolver.cache.state.source if resolver is not None else None
        response.headers[CACHE_SOURCE_HEADER] = source or "none"

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%.1fms, cache=%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            source,
        )
        return response
