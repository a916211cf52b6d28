"""
Availability checker.

Answers "can this domain be registered?" for one domain or many. Batch
checks try the registrar's batch endpoint first and fall back to
individual checks when it fails. Results are cached per domain for a
short time because availability changes.

Failure policy: a domain whose check fails is reported with
status UNKNOWN and available=False (fails closed) and is not cached.
"""

import asyncio
from typing import Iterable, Optional

from .api_client import RegistrarApiClient
from .cache import TTLCache
from .dedup import RequestDeduplicator
from .domain_validator import DomainValidator
from .enums import LogLevel
from .exceptions import DomainSearchError
from .models import AvailabilityResult
from .search_logger import SearchLogger, quiet_logger

AVAILABILITY_TTL_SECONDS = 120.0


def availability_cache_key(domain: str) -> str:
    return "availability:" + domain


def batch_request_key(domains: Iterable[str]) -> str:
    return "availability-batch:" + ",".join(sorted(domains))


class AvailabilityChecker:
    """Cached, deduplicated single and batch availability checks."""

    COMPONENT = "availability"

    def __init__(
        self,
        client: RegistrarApiClient,
        cache: TTLCache,
        deduplicator: RequestDeduplicator,
        ttl_seconds: float = AVAILABILITY_TTL_SECONDS,
        logger: Optional[SearchLogger] = None,
        validator: Optional[DomainValidator] = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._deduplicator = deduplicator
        self._ttl = ttl_seconds
        self._logger = logger or quiet_logger()
        self._validator = validator or DomainValidator()

    def _canonical(self, domain: str) -> str:
        result = self._validator.validate(domain)
        if result.valid:
            return result.canonical_domain
        # Invalid names still get a (failing) entry under their lower-cased form.
        return domain.strip().lower()

    def _store(self, result: AvailabilityResult) -> None:
        self._cache.set(availability_cache_key(result.domain), result, self._ttl)

    async def _fetch_one(self, domain: str) -> AvailabilityResult:
        """Single check through the deduplicator; raises on failure."""
        result = await self._deduplicator.run(
            availability_cache_key(domain),
            lambda: self._client.fetch_availability(domain),
        )
        self._store(result)
        return result

    async def check_one(self, domain: str) -> AvailabilityResult:
        """
        Check one domain.

        Returns:
            Cached or fresh result; UNKNOWN / not available on failure
        """
        domain = self._canonical(domain)
        cached = self._cache.get(availability_cache_key(domain))
        if cached is not None:
            return cached

        if not self._validator.validate(domain).valid:
            self._logger.warn(self.COMPONENT, f"Refusing to check invalid domain {domain!r}")
            return AvailabilityResult.unknown(domain)

        try:
            return await self._fetch_one(domain)
        except DomainSearchError as e:
            self._log_failure(f"Availability check failed for {domain}", e)
            return AvailabilityResult.unknown(domain)

    async def check_batch(self, domains: Iterable[str]) -> dict[str, AvailabilityResult]:
        """
        Check many domains.

        Every input domain (canonicalized) has an entry in the result.

        Args:
            domains: Domain names; duplicates are checked once

        Returns:
            Mapping of canonical domain to result, in input order
        """
        ordered = list(dict.fromkeys(self._canonical(d) for d in domains))
        if not ordered:
            return {}

        results: dict[str, AvailabilityResult] = {}
        uncached = []
        for domain in ordered:
            cached = self._cache.get(availability_cache_key(domain))
            if cached is not None:
                results[domain] = cached
            elif not self._validator.validate(domain).valid:
                results[domain] = AvailabilityResult.unknown(domain)
            else:
                uncached.append(domain)

        if uncached:
            self._logger.debug(self.COMPONENT, "Batch availability lookup", {
                "requested": len(ordered),
                "cached": len(ordered) - len(uncached),
            })
            results.update(await self._resolve_uncached(uncached))

        return {domain: results[domain] for domain in ordered}

    async def _resolve_uncached(self, domains: list[str]) -> dict[str, AvailabilityResult]:
        try:
            batch = await self._deduplicator.run(
                batch_request_key(domains),
                lambda: self._client.fetch_batch_availability(domains),
            )
        except DomainSearchError as e:
            self._log_failure("Batch availability failed, falling back to individual checks", e)
            return await self._check_individually(domains)

        resolved = {}
        missing = []
        for domain in domains:
            result = batch.get(domain)
            if result is None:
                missing.append(domain)
            else:
                self._store(result)
                resolved[domain] = result

        if missing:
            self._logger.warn(self.COMPONENT, "Batch response omitted domains, checking individually", {
                "missing": missing,
            })
            resolved.update(await self._check_individually(missing))
        return resolved

    async def _check_individually(self, domains: list[str]) -> dict[str, AvailabilityResult]:
        outcomes = await asyncio.gather(
            *(self._fetch_one(domain) for domain in domains),
            return_exceptions=True,
        )
        results = {}
        for domain, outcome in zip(domains, outcomes):
            if isinstance(outcome, AvailabilityResult):
                results[domain] = outcome
            elif isinstance(outcome, DomainSearchError):
                self._log_failure(f"Fallback check failed for {domain}", outcome)
                results[domain] = AvailabilityResult.unknown(domain)
            else:
                raise outcome
        return results

    def _log_failure(self, message: str, error: DomainSearchError) -> None:
        self._logger.log_error(
            self.COMPONENT,
            message,
            error=error,
            request_url=error.details.get("url"),
            response_status_code=error.details.get("status_code"),
            level=LogLevel.WARN,
        )
