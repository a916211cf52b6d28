"""
Pricing fetcher.

Looks up per-extension price tables, serving repeated lookups from the
cache and collapsing concurrent lookups for the same extension into one
request. Failures are returned as None and are not cached, so the next
lookup retries.
"""

import asyncio
from typing import Iterable, Optional

from .api_client import RegistrarApiClient
from .cache import TTLCache
from .dedup import RequestDeduplicator
from .enums import LogLevel
from .exceptions import DomainSearchError
from .models import PricingRecord
from .search_logger import SearchLogger, quiet_logger

PRICING_TTL_SECONDS = 600.0


def pricing_cache_key(extension: str) -> str:
    return "pricing:" + extension.lstrip(".").lower()


class PricingFetcher:
    """Cached, deduplicated access to extension price tables."""

    COMPONENT = "pricing"

    def __init__(
        self,
        client: RegistrarApiClient,
        cache: TTLCache,
        deduplicator: RequestDeduplicator,
        ttl_seconds: float = PRICING_TTL_SECONDS,
        logger: Optional[SearchLogger] = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._deduplicator = deduplicator
        self._ttl = ttl_seconds
        self._logger = logger or quiet_logger()

    async def get_pricing(self, extension: str) -> Optional[PricingRecord]:
        """
        Price table for an extension, or None if it could not be fetched.

        Never raises for transport or payload problems.
        """
        key = pricing_cache_key(extension)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            record = await self._deduplicator.run(key, lambda: self._client.fetch_pricing(extension))
        except DomainSearchError as e:
            self._logger.log_error(
                self.COMPONENT,
                f"Pricing lookup failed for {extension}",
                error=e,
                request_url=e.details.get("url"),
                response_status_code=e.details.get("status_code"),
                level=LogLevel.WARN,
            )
            return None

        self._cache.set(key, record, self._ttl)
        return record

    async def get_many(self, extensions: Iterable[str]) -> dict[str, Optional[PricingRecord]]:
        """Fetch several extensions concurrently; keys are the extensions as given."""
        extensions = list(dict.fromkeys(extensions))
        records = await asyncio.gather(*(self.get_pricing(ext) for ext in extensions))
        return dict(zip(extensions, records))
