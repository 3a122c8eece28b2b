"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from trendmoon_resolver.entities.types import CacheInfo


# ========== Common ==========

class ErrorResponse(BaseModel):
    error: str
    detail: str


class CacheInfoResponse(BaseModel):
    is_initialized: bool
    categories_count: int
    platforms_count: int
    tokens_count: int
    last_refresh: datetime | None = None
    cache_age_seconds: float | None = None
    source: str | None = None

    @classmethod
    def from_info(cls, info: CacheInfo) -> CacheInfoResponse:
        return cls(
            is_initialized=info.is_initialized,
            categories_count=info.categories_count,
            platforms_count=info.platforms_count,
            tokens_count=info.tokens_count,
            last_refresh=info.last_refresh,
            cache_age_seconds=info.cache_age_seconds,
            source=info.source,
        )


# ========== Resolution ==========

class ResolveArgumentsRequest(BaseModel):
    """Raw tool arguments. Unknown keys are passed through untouched."""

    model_config = ConfigDict(extra="allow")

    category: str | None = None
    narrative: str | None = None
    category_name: str | None = None
    chain: str | None = None
    platform: str | None = None
    token: str | None = None
    token_name: str | None = None
    time_period: str | None = None
    timeframe: str | None = None


class ResolveArgumentsResponse(BaseModel):
    arguments: dict[str, Any]


class OptionsResponse(BaseModel):
    option_type: Literal["categories", "platforms", "both"]
    categories: list[str] | None = None
    platforms: list[str] | None = None
    cache: CacheInfoResponse


class RefreshResponse(BaseModel):
    cache: CacheInfoResponse


class TimeframeResponse(BaseModel):
    expr: str
    start_date: datetime
    end_date: datetime
    span_seconds: float = Field(description="end_date - start_date in seconds")


# ========== Health ==========

class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float


class StatusResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float
    mode: str
    cache: CacheInfoResponse
