"""
Suggestion generator.

Expands a search query into one candidate per catalog extension,
publishes placeholder ("skeleton") suggestions before any network I/O,
then resolves availability and pricing and returns the ranked list.

Ranking: available before unavailable, popular extensions before the
rest, then ascending one-year price (unpriced last). The sort is
stable, so remaining ties keep catalog order.
"""

import asyncio
import math
from dataclasses import replace
from typing import Callable, Optional

from .availability import AvailabilityChecker
from .catalog import ExtensionCatalog
from .domain_validator import MIN_LABEL_LENGTH, is_searchable, normalize_query
from .enums import AvailabilityStatus
from .models import ExtensionDescriptor, PricingRecord, Suggestion
from .pricing import PricingFetcher
from .search_logger import SearchLogger, quiet_logger

SuggestionPublisher = Callable[[list[Suggestion]], None]


def suggestion_sort_key(suggestion: Suggestion) -> tuple:
    price = suggestion.price
    return (
        suggestion.status is not AvailabilityStatus.AVAILABLE,
        not suggestion.extension.popular,
        price if price is not None else math.inf,
    )


def rank_suggestions(suggestions: list[Suggestion]) -> list[Suggestion]:
    return sorted(suggestions, key=suggestion_sort_key)


class SuggestionGenerator:
    """Builds ranked domain suggestions for a search query."""

    COMPONENT = "suggestions"

    def __init__(
        self,
        catalog: ExtensionCatalog,
        availability: AvailabilityChecker,
        pricing: PricingFetcher,
        logger: Optional[SearchLogger] = None,
        min_label_length: int = MIN_LABEL_LENGTH,
    ) -> None:
        self._catalog = catalog
        self._availability = availability
        self._pricing = pricing
        self._logger = logger or quiet_logger()
        self._min_label_length = min_label_length

    @property
    def catalog(self) -> ExtensionCatalog:
        return self._catalog

    def normalize(self, raw_query: str) -> str:
        return normalize_query(raw_query, self._catalog)

    def skeleton(self, label: str) -> list[Suggestion]:
        """Loading placeholders for every extension, popular first."""
        return [
            Suggestion(
                base_label=label,
                extension=descriptor,
                status=AvailabilityStatus.UNKNOWN,
                pricing=descriptor.pricing,
                is_loading=True,
            )
            for descriptor in self._catalog.ordered_for_search()
        ]

    async def generate(
        self,
        raw_query: str,
        publish: Optional[SuggestionPublisher] = None,
    ) -> list[Suggestion]:
        """
        Generate ranked suggestions for a query.

        Args:
            raw_query: Text as typed by the user
            publish: Called synchronously with a snapshot of the skeleton
                     list before any lookup is awaited

        Returns:
            Resolved suggestions, ranked; empty for queries shorter than
            the minimum label length
        """
        label = self.normalize(raw_query)
        if not is_searchable(label, self._min_label_length):
            return []

        suggestions = self.skeleton(label)
        if publish is not None:
            publish([replace(s) for s in suggestions])

        domains = [s.domain for s in suggestions]
        availability, extension_pricing = await asyncio.gather(
            self._availability.check_batch(domains),
            self._extension_pricing([s.extension for s in suggestions]),
        )

        for suggestion in suggestions:
            result = availability.get(suggestion.domain)
            status = result.status if result is not None else AvailabilityStatus.UNKNOWN
            pricing: Optional[PricingRecord] = None
            if result is not None and result.pricing is not None:
                pricing = result.pricing
            else:
                pricing = extension_pricing.get(suggestion.extension.ext) or suggestion.pricing
            suggestion.status = status
            suggestion.pricing = pricing
            suggestion.is_loading = False

        ranked = rank_suggestions(suggestions)
        self._logger.info(self.COMPONENT, f"Resolved {len(ranked)} suggestions for '{label}'", {
            "label": label,
            "available": sum(1 for s in ranked if s.status is AvailabilityStatus.AVAILABLE),
            "unknown": sum(1 for s in ranked if s.status is AvailabilityStatus.UNKNOWN),
        })
        return ranked

    async def _extension_pricing(
        self,
        extensions: list[ExtensionDescriptor],
    ) -> dict[str, Optional[PricingRecord]]:
        missing = [d.ext for d in extensions if d.pricing is None]
        if not missing:
            return {}
        return await self._pricing.get_many(missing)
