"""
Pipeline assembly.

A SearchPipeline owns one isolated set of shared state (cache,
in-flight registry, HTTP client) and the components built on it.
Separate pipelines never share cached values.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from .api_client import RegistrarApiClient
from .availability import AvailabilityChecker
from .cache import TTLCache
from .catalog import ExtensionCatalog
from .config import SystemConfig, create_default_config
from .dedup import RequestDeduplicator
from .orchestrator import SearchOrchestrator
from .pricing import PricingFetcher
from .search_logger import SearchLogger
from .suggestions import SuggestionGenerator


@dataclass
class SearchPipeline:
    """All components of one search pipeline."""

    config: SystemConfig
    logger: SearchLogger
    cache: TTLCache
    deduplicator: RequestDeduplicator
    client: RegistrarApiClient
    catalog: ExtensionCatalog
    pricing: PricingFetcher
    availability: AvailabilityChecker
    generator: SuggestionGenerator

    async def __aenter__(self) -> "SearchPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def create_orchestrator(self, clock: Callable[[], float] = time.monotonic) -> SearchOrchestrator:
        return SearchOrchestrator(
            generator=self.generator,
            config=self.config.search,
            logger=self.logger,
            language=self.config.language,
            results_ttl_seconds=self.config.cache.availability_ttl_seconds,
            clock=clock,
        )

    async def close(self) -> None:
        await self.client.close()


def build_pipeline(
    config: Optional[SystemConfig] = None,
    logger: Optional[SearchLogger] = None,
    catalog: Optional[ExtensionCatalog] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Callable[[], float] = time.monotonic,
) -> SearchPipeline:
    """
    Wire up a pipeline.

    Args:
        config: System configuration (defaults when None)
        logger: Logger; built from config.logging when None
        catalog: Extension catalog; the default .ke catalog when None
        transport: Optional httpx transport for the API client
        clock: Time source for the cache

    Returns:
        A ready-to-use SearchPipeline
    """
    config = (config or create_default_config()).validate()
    logger = logger or SearchLogger.from_config(config.logging)
    cache = TTLCache(default_ttl=config.cache.default_ttl_seconds, clock=clock)
    deduplicator = RequestDeduplicator()
    client = RegistrarApiClient(config.api, logger=logger, transport=transport)
    catalog = catalog if catalog is not None else ExtensionCatalog()

    pricing = PricingFetcher(
        client=client,
        cache=cache,
        deduplicator=deduplicator,
        ttl_seconds=config.cache.pricing_ttl_seconds,
        logger=logger,
    )
    availability = AvailabilityChecker(
        client=client,
        cache=cache,
        deduplicator=deduplicator,
        ttl_seconds=config.cache.availability_ttl_seconds,
        logger=logger,
    )
    generator = SuggestionGenerator(
        catalog=catalog,
        availability=availability,
        pricing=pricing,
        logger=logger,
        min_label_length=config.search.min_query_length,
    )

    return SearchPipeline(
        config=config,
        logger=logger,
        cache=cache,
        deduplicator=deduplicator,
        client=client,
        catalog=catalog,
        pricing=pricing,
        availability=availability,
        generator=generator,
    )
