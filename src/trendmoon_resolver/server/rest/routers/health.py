"""Health and status endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request

from trendmoon_resolver import __version__
from trendmoon_resolver.entities.resolver import EntityResolver
from trendmoon_resolver.server.dependencies import get_resolver
from trendmoon_resolver.server.schemas import CacheInfoResponse, HealthResponse, StatusResponse

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> HealthResponse:
    elapsed = time.monotonic() - request.app.state.start_time
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(elapsed, 1),
    )


@router.get("/status")
async def status(
    request: Request,
    resolver: EntityResolver = Depends(get_resolver),
) -> StatusResponse:
    elapsed = time.monotonic() - request.app.state.start_time
    info = resolver.cache_info()
    return StatusResponse(
        status="ok" if info.is_initialized else "degraded",
        version=__version__,
        uptime_seconds=round(elapsed, 1),
        mode=request.app.state.config.mode,
        cache=CacheInfoResponse.from_info(info),
    )
