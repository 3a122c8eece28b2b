"""Protocols (interfaces) for resolver collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from trendmoon_resolver.entities.types import TokenMatch


@runtime_checkable
class LookupService(Protocol):
    """Remote source of authoritative category, platform and token data.

    Implementations raise ``SourceUnavailableError`` for any fetch failure
    (network, malformed payload, service-side error).
    """

    async def list_categories(self) -> list[str]:
        """Return every category name known to the service."""
        ...

    async def list_platforms(self) -> list[str]:
        """Return every platform slug known to the service."""
        ...

    async def search_tokens(
        self,
        query: str,
        limit: int = 1,
        order_by: str = "market_cap",
    ) -> list[TokenMatch]:
        """Search tokens by free text, best match first."""
        ...
