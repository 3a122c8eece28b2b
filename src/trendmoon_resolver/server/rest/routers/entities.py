"""Entity resolution REST endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query

from trendmoon_resolver.entities.resolver import BAD_TIMEFRAME_MESSAGE, EntityResolver
from trendmoon_resolver.entities.types import Rejection
from trendmoon_resolver.server.dependencies import get_fresh_resolver, get_resolver
from trendmoon_resolver.server.errors import EntityRejectedError
from trendmoon_resolver.server.schemas import (
    CacheInfoResponse,
    OptionsResponse,
    RefreshResponse,
    ResolveArgumentsRequest,
    ResolveArgumentsResponse,
    TimeframeResponse,
)
from trendmoon_resolver.temporal.timeframe import parse_timeframe

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/entities/resolve")
async def resolve_arguments(
    body: ResolveArgumentsRequest,
    resolver: EntityResolver = Depends(get_resolver),
) -> ResolveArgumentsResponse:
    """Canonicalize category, chain, token and timeframe arguments."""
    outcome = await resolver.resolve_arguments(body.model_dump(exclude_none=True))
    if outcome.rejection is not None:
        raise EntityRejectedError(outcome.rejection)
    return ResolveArgumentsResponse(arguments=outcome.arguments)


@router.get("/entities/options")
async def available_options(
    option_type: Literal["categories", "platforms", "both"] = "both",
    resolver: EntityResolver = Depends(get_fresh_resolver),
) -> OptionsResponse:
    """List the categories and platforms the resolver currently knows."""
    response = OptionsResponse(
        option_type=option_type,
        cache=CacheInfoResponse.from_info(resolver.cache_info()),
    )
    if option_type in ("categories", "both"):
        response.categories = resolver.available_categories()
    if option_type in ("platforms", "both"):
        response.platforms = resolver.available_platforms()
    return response


@router.post("/entities/refresh")
async def refresh(
    resolver: EntityResolver = Depends(get_resolver),
) -> RefreshResponse:
    """Drop memory freshness and run the refresh chain again."""
    resolver.cache.invalidate()
    await resolver.ensure_fresh()
    return RefreshResponse(cache=CacheInfoResponse.from_info(resolver.cache_info()))


@router.get("/timeframe")
async def timeframe(
    expr: str = Query(description="Shorthand such as 7d, 2w, 1m, 24h or 'last week'"),
) -> TimeframeResponse:
    """Turn a shorthand timeframe into absolute dates."""
    result = parse_timeframe(expr)
    if result is None:
        raise EntityRejectedError(
            Rejection(
                field="timeframe",
                value=expr,
                message=BAD_TIMEFRAME_MESSAGE.format(value=expr),
            )
        )
    return TimeframeResponse(
        expr=expr,
        start_date=result.start_date,
        end_date=result.end_date,
        span_seconds=result.span.total_seconds(),
    )
