"""
Tests for the registrar API client.

Network traffic is served by httpx.MockTransport; no real requests
are made.
"""

import asyncio
import json

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ke_domain_search.api_client import RegistrarApiClient
from ke_domain_search.config import ApiConfig
from ke_domain_search.enums import AvailabilityStatus, PricingSource
from ke_domain_search.exceptions import NetworkError, ProtocolError

from fake_registrar import BASE_URL, FakeRegistrar, make_logger, pricing_payload


def client_for(handler, api_key=None, logger=None) -> RegistrarApiClient:
    return RegistrarApiClient(
        ApiConfig(base_url=BASE_URL, api_key=api_key),
        logger=logger or make_logger(),
        transport=httpx.MockTransport(handler),
    )


async def call(client: RegistrarApiClient, method: str, *args):
    async with client:
        return await getattr(client, method)(*args)


class TestTlsEnforcement:
    """
    **Property 1: Only HTTPS base URLs are accepted**
    """

    @given(scheme=st.sampled_from(["http", "ftp", "ws"]))
    @settings(max_examples=10)
    def test_non_https_rejected(self, scheme: str) -> None:
        with pytest.raises(NetworkError) as exc_info:
            RegistrarApiClient(ApiConfig(base_url=f"{scheme}://api.example.co.ke/api/v1"))

        assert exc_info.value.code == "tls_error"


class TestEnvelopeHandling:
    """
    **Property 2: Failures map to NetworkError or ProtocolError with context**
    """

    @given(status=st.sampled_from([400, 401, 403, 404, 429, 500, 502, 503]))
    @settings(max_examples=20, deadline=None)
    def test_non_2xx_is_http_error(self, status: int) -> None:
        client = client_for(lambda request: httpx.Response(status, json={"success": False}))

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(call(client, "fetch_pricing", ".co.ke"))

        assert exc_info.value.code == "http_error"
        assert exc_info.value.details["status_code"] == status
        assert exc_info.value.details["url"] == f"{BASE_URL}/pricing/co.ke"

    def test_unsuccessful_envelope(self) -> None:
        client = client_for(lambda request: httpx.Response(
            200, json={"success": False, "message": "maintenance"},
        ))

        with pytest.raises(ProtocolError) as exc_info:
            asyncio.run(call(client, "fetch_pricing", "co.ke"))

        assert exc_info.value.code == "unsuccessful"
        assert exc_info.value.details["message"] == "maintenance"

    def test_invalid_json(self) -> None:
        client = client_for(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

        with pytest.raises(ProtocolError) as exc_info:
            asyncio.run(call(client, "fetch_pricing", "co.ke"))

        assert exc_info.value.code == "parse_error"

    def test_missing_data_member(self) -> None:
        client = client_for(lambda request: httpx.Response(200, json={"success": True}))

        with pytest.raises(ProtocolError) as exc_info:
            asyncio.run(call(client, "fetch_pricing", "co.ke"))

        assert exc_info.value.code == "parse_error"

    def test_timeout(self) -> None:
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(call(client_for(handler), "fetch_availability", "mybrand.co.ke"))

        assert exc_info.value.code == "timeout"

    def test_connection_refused(self) -> None:
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(call(client_for(handler), "fetch_availability", "mybrand.co.ke"))

        assert exc_info.value.code == "network_error"


class TestEndpoints:
    """Request shapes and payload parsing."""

    def test_pricing_request_and_parse(self) -> None:
        registrar = FakeRegistrar(pricing={
            ".co.ke": pricing_payload(1200.0, multi_year={"2_years": 2300.0}),
        })
        client = RegistrarApiClient(ApiConfig(base_url=BASE_URL), transport=registrar.transport())

        record = asyncio.run(call(client, "fetch_pricing", ".CO.KE"))

        assert registrar.calls()[0].url.path == "/api/v1/pricing/co.ke"
        assert record.currency == "KES"
        assert record.first_year_price == 1200.0
        assert record.registration_by_term[2] == 2300.0
        assert record.source is PricingSource.LIVE

    @given(include_pricing=st.booleans())
    @settings(max_examples=4, deadline=None)
    def test_availability_query_params(self, include_pricing: bool) -> None:
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": {"available": True}})

        client = RegistrarApiClient(
            ApiConfig(base_url=BASE_URL, include_pricing=include_pricing),
            transport=httpx.MockTransport(handler),
        )
        result = asyncio.run(call(client, "fetch_availability", "mybrand.co.ke"))

        params = seen[0].url.params
        assert params["domain"] == "mybrand.co.ke"
        assert params["include_pricing"] == ("true" if include_pricing else "false")
        assert result.available
        assert result.status is AvailabilityStatus.AVAILABLE

    def test_bearer_token_sent_when_configured(self) -> None:
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": {"status": "taken"}})

        result = asyncio.run(call(client_for(handler, api_key="s3cret"), "fetch_availability", "a.ke"))

        assert seen[0].headers["Authorization"] == "Bearer s3cret"
        assert result.status is AvailabilityStatus.TAKEN

    def test_batch_posts_domains_and_skips_malformed_entries(self) -> None:
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "data": {
                "A.CO.KE": {"status": "available"},
                "b.co.ke": {"available": False},
                "c.co.ke": {"weird": True},
            }})

        logger = make_logger()
        client = client_for(handler, logger=logger)
        results = asyncio.run(call(client, "fetch_batch_availability", ["a.co.ke", "b.co.ke", "c.co.ke"]))

        assert seen == [{"domains": ["a.co.ke", "b.co.ke", "c.co.ke"]}]
        assert set(results) == {"a.co.ke", "b.co.ke"}
        assert results["a.co.ke"].available
        assert not results["b.co.ke"].available
        assert any("c.co.ke" in e.message for e in logger.entries)

    def test_batch_data_must_be_mapping(self) -> None:
        client = client_for(lambda request: httpx.Response(200, json={"success": True, "data": []}))

        with pytest.raises(ProtocolError):
            asyncio.run(call(client, "fetch_batch_availability", ["a.co.ke"]))

    def test_request_count(self) -> None:
        registrar = FakeRegistrar()
        client = RegistrarApiClient(ApiConfig(base_url=BASE_URL), transport=registrar.transport())

        async def scenario():
            async with client:
                await client.fetch_availability("a.co.ke")
                await client.fetch_availability("b.co.ke")
            return client.request_count

        assert asyncio.run(scenario()) == 2
