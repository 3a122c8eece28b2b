"""Error types and exception-to-HTTP mapping for the server."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from trendmoon_resolver.core.exceptions import CacheUnavailableError
from trendmoon_resolver.entities.types import Rejection


class EntityRejectedError(Exception):
    """A request argument could not be resolved to a canonical value."""

    def __init__(self, rejection: Rejection) -> None:
        self.rejection = rejection
        super().__init__(rejection.message)


async def entity_rejected_handler(request: Request, exc: EntityRejectedError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "unresolved_entity",
            "detail": exc.rejection.message,
            "field": exc.rejection.field,
            "value": exc.rejection.value,
        },
    )


async def cache_unavailable_handler(request: Request, exc: CacheUnavailableError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"error": "cache_unavailable", "detail": str(exc)},
    )


EXCEPTION_HANDLERS = {
    EntityRejectedError: entity_rejected_handler,
    CacheUnavailableError: cache_unavailable_handler,
}
