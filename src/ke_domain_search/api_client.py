"""
Registrar API client.

Async HTTP client for the registrar's pricing and availability
endpoints, with TLS enforcement and a fixed per-request timeout.

Endpoints:
- GET  /pricing/{extension}
- GET  /availability/check?domain=...&include_pricing=bool
- POST /availability/batch {"domains": [...]}

Every endpoint answers {"success": bool, "data": ...}. Transport
failures raise NetworkError, malformed or unsuccessful payloads raise
ProtocolError; callers decide how to absorb them.
"""

import time
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from .config import ApiConfig
from .enums import ApiErrorCode, LogLevel
from .exceptions import NetworkError, ProtocolError
from .models import AvailabilityResult, PricingRecord
from .search_logger import SearchLogger, quiet_logger


class RegistrarApiClient:
    """
    Async client for the registrar API.

    Can be used as an async context manager; otherwise the underlying
    httpx client is created lazily and must be released with close().
    """

    COMPONENT = "api_client"

    def __init__(
        self,
        config: ApiConfig,
        logger: Optional[SearchLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            config: API base URL, timeout and credentials
            logger: Logger for request diagnostics
            transport: Optional httpx transport (used to plug in mocks)

        Raises:
            NetworkError: If the base URL does not use HTTPS
        """
        self._validate_base_url(config.base_url)
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._logger = logger or quiet_logger()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._request_count = 0

    async def __aenter__(self) -> "RegistrarApiClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def request_count(self) -> int:
        """Number of HTTP requests issued so far."""
        return self._request_count

    @property
    def base_url(self) -> str:
        return self._base_url

    def _validate_base_url(self, base_url: str) -> None:
        parsed = urlparse(base_url)
        if parsed.scheme.lower() != "https":
            raise NetworkError(
                code=ApiErrorCode.TLS_ERROR.value,
                message=f"Registrar API must use HTTPS: {base_url}",
                details={"base_url": base_url, "scheme": parsed.scheme},
            )

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._config.api_key:
                headers["Authorization"] = f"Bearer {self._config.api_key}"
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                follow_redirects=True,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Issue a request and return the 'data' member of a successful envelope.

        Raises:
            NetworkError: On timeout, connection failure or non-2xx status
            ProtocolError: On invalid JSON or an unsuccessful envelope
        """
        client = self._ensure_client()
        url = f"{self._base_url}{path}"
        start_time = time.perf_counter()
        self._request_count += 1

        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(
                code=ApiErrorCode.TIMEOUT.value,
                message=f"Request timed out after {self._config.timeout_seconds}s",
                details={"url": url, "error": str(e)},
            )
        except httpx.ConnectError as e:
            error_msg = str(e)
            code = ApiErrorCode.NETWORK_ERROR
            if "ssl" in error_msg.lower() or "certificate" in error_msg.lower():
                code = ApiErrorCode.TLS_ERROR
            raise NetworkError(
                code=code.value,
                message=f"Connection error: {error_msg}",
                details={"url": url},
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                code=ApiErrorCode.NETWORK_ERROR.value,
                message=f"HTTP transport error: {e}",
                details={"url": url},
            )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._logger.debug(self.COMPONENT, f"{method} {path} -> {response.status_code}", {
            "url": url,
            "status_code": response.status_code,
            "response_time_ms": round(elapsed_ms, 1),
        })

        if not response.is_success:
            raise NetworkError(
                code=ApiErrorCode.HTTP_ERROR.value,
                message=f"Unexpected HTTP status: {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolError(
                code=ApiErrorCode.PARSE_ERROR.value,
                message=f"Failed to parse response JSON: {e}",
                details={"url": url},
            )

        if not isinstance(payload, dict) or payload.get("success") is not True:
            raise ProtocolError(
                code=ApiErrorCode.UNSUCCESSFUL.value,
                message="Registrar API reported an unsuccessful response",
                details={
                    "url": url,
                    "message": payload.get("message") if isinstance(payload, dict) else None,
                },
            )
        if "data" not in payload:
            raise ProtocolError(
                code=ApiErrorCode.PARSE_ERROR.value,
                message="Response envelope has no data member",
                details={"url": url},
            )
        return payload["data"]

    async def fetch_pricing(self, extension: str) -> PricingRecord:
        """
        Fetch the price table of one extension.

        Args:
            extension: Extension with or without leading dot ('co.ke' or '.co.ke')
        """
        name = extension.lstrip(".").lower()
        data = await self._request("GET", f"/pricing/{name}")
        return PricingRecord.from_api(data)

    async def fetch_availability(self, domain: str, include_pricing: Optional[bool] = None) -> AvailabilityResult:
        """Check one domain."""
        if include_pricing is None:
            include_pricing = self._config.include_pricing
        data = await self._request(
            "GET",
            "/availability/check",
            params={
                "domain": domain,
                "include_pricing": "true" if include_pricing else "false",
            },
        )
        return AvailabilityResult.from_api(domain, data)

    async def fetch_batch_availability(self, domains: list[str]) -> dict[str, AvailabilityResult]:
        """
        Check several domains in one request.

        Entries that cannot be parsed are left out of the result; the
        caller treats them like domains the batch did not answer.

        Raises:
            ProtocolError: If the data member is not a mapping
        """
        data = await self._request("POST", "/availability/batch", json={"domains": domains})
        if not isinstance(data, dict):
            raise ProtocolError(
                code=ApiErrorCode.PARSE_ERROR.value,
                message="Batch availability data must be an object",
                details={"data_type": type(data).__name__},
            )

        results = {}
        for raw_domain, entry in data.items():
            domain = str(raw_domain).lower()
            try:
                results[domain] = AvailabilityResult.from_api(domain, entry)
            except ProtocolError as e:
                self._logger.log_error(
                    self.COMPONENT,
                    f"Skipping malformed batch entry for {domain}",
                    error=e,
                    level=LogLevel.WARN,
                )
        return results

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
