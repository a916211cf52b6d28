"""
Property-based tests for the availability checker.

Covers batch-first lookups with individual fallback, complete
coverage of the input domains, per-domain caching and the
fail-closed handling of checks that cannot be completed.
"""

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from ke_domain_search.availability import availability_cache_key
from ke_domain_search.enums import AvailabilityStatus

from fake_registrar import FakeClock, FakeRegistrar, make_pipeline, pricing_payload


labels = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=2, max_size=12)
extensions = st.sampled_from([".ke", ".co.ke", ".or.ke", ".me.ke", ".ne.ke"])
domains = st.builds(lambda label, ext: label + ext, labels, extensions)
domain_lists = st.lists(domains, min_size=1, max_size=8)


def run_batch(registrar: FakeRegistrar, domains: list, clock=None):
    async def scenario():
        async with make_pipeline(registrar, clock=clock) as pipeline:
            return pipeline, await pipeline.availability.check_batch(domains)

    return asyncio.run(scenario())


class TestBatchCoverageProperty:
    """
    **Property 1: Every input domain has exactly one result**

    *For any* list of domains and any set of taken domains, with the
    batch endpoint up or down, the result has one entry per distinct
    input domain, in input order, with the correct availability.
    """

    @given(
        requested=domain_lists,
        taken_mask=st.lists(st.booleans(), min_size=8, max_size=8),
        batch_status=st.sampled_from([200, 500, 503]),
    )
    @settings(max_examples=60, deadline=None)
    def test_one_result_per_domain(self, requested: list, taken_mask: list, batch_status: int) -> None:
        taken = {d for d, is_taken in zip(requested, taken_mask) if is_taken}
        registrar = FakeRegistrar(taken=taken, batch_status=batch_status)

        _, results = run_batch(registrar, requested)

        assert list(results) == list(dict.fromkeys(requested))
        for domain, result in results.items():
            assert result.domain == domain
            assert result.available == (domain not in taken)
            expected = AvailabilityStatus.TAKEN if domain in taken else AvailabilityStatus.AVAILABLE
            assert result.status is expected

    def test_batch_500_falls_back_per_domain(self) -> None:
        registrar = FakeRegistrar(batch_status=500)

        _, results = run_batch(registrar, ["a.co.ke", "b.co.ke"])

        assert set(results) == {"a.co.ke", "b.co.ke"}
        checked = sorted(r.url.params["domain"] for r in registrar.calls("check"))
        assert checked == ["a.co.ke", "b.co.ke"]
        assert len(registrar.calls("batch")) == 1

    def test_batch_success_makes_no_individual_calls(self) -> None:
        registrar = FakeRegistrar(taken={"b.co.ke"})

        _, results = run_batch(registrar, ["a.co.ke", "b.co.ke", "c.co.ke"])

        assert len(registrar.calls("batch")) == 1
        assert registrar.calls("check") == []
        assert [r.available for r in results.values()] == [True, False, True]

    def test_empty_input_makes_no_calls(self) -> None:
        registrar = FakeRegistrar()

        _, results = run_batch(registrar, [])

        assert results == {}
        assert registrar.calls() == []

    def test_domains_omitted_by_batch_checked_individually(self) -> None:
        registrar = FakeRegistrar(omitted_from_batch={"b.co.ke"})

        _, results = run_batch(registrar, ["a.co.ke", "b.co.ke"])

        assert [r.url.params["domain"] for r in registrar.calls("check")] == ["b.co.ke"]
        assert results["b.co.ke"].status is AvailabilityStatus.AVAILABLE

    def test_inputs_are_canonicalized_and_deduplicated(self) -> None:
        registrar = FakeRegistrar()

        _, results = run_batch(registrar, ["MyBrand.CO.KE", "mybrand.co.ke ", "mybrand.co.ke"])

        assert list(results) == ["mybrand.co.ke"]


class TestFailClosedProperty:
    """
    **Property 2: Checks that cannot complete are UNKNOWN and not available**
    """

    @given(requested=st.lists(domains, min_size=2, max_size=6, unique=True), data=st.data())
    @settings(max_examples=40, deadline=None)
    def test_failed_fallback_reports_unknown(self, requested: list, data) -> None:
        failing = set(data.draw(st.lists(st.sampled_from(requested), min_size=1, unique=True)))
        registrar = FakeRegistrar(batch_status=500, failing_domains=failing)

        pipeline, results = run_batch(registrar, requested)

        assert list(results) == requested
        for domain in requested:
            result = results[domain]
            if domain in failing:
                assert result.status is AvailabilityStatus.UNKNOWN
                assert result.available is False
                assert pipeline.cache.get(availability_cache_key(domain)) is None
            else:
                assert result.status is AvailabilityStatus.AVAILABLE
                assert pipeline.cache.get(availability_cache_key(domain)) == result

    def test_check_one_failure_is_unknown_and_retried(self) -> None:
        registrar = FakeRegistrar(failing_domains={"mybrand.co.ke"})

        async def scenario():
            async with make_pipeline(registrar) as pipeline:
                first = await pipeline.availability.check_one("mybrand.co.ke")
                registrar.failing_domains.clear()
                second = await pipeline.availability.check_one("mybrand.co.ke")
                return first, second

        first, second = asyncio.run(scenario())

        assert first.status is AvailabilityStatus.UNKNOWN
        assert not first.available
        assert second.status is AvailabilityStatus.AVAILABLE
        assert len(registrar.calls("check")) == 2

    def test_invalid_domain_is_unknown_without_request(self) -> None:
        registrar = FakeRegistrar()

        _, results = run_batch(registrar, ["bad_name.co.ke", "nodot"])

        assert all(r.status is AvailabilityStatus.UNKNOWN for r in results.values())
        assert registrar.calls() == []


class TestAvailabilityCacheProperty:
    """
    **Property 3: Batch results are cached per domain for the availability TTL**
    """

    @given(requested=st.lists(domains, min_size=1, max_size=6, unique=True))
    @settings(max_examples=30, deadline=None)
    def test_batch_results_serve_single_checks(self, requested: list) -> None:
        registrar = FakeRegistrar()

        async def scenario():
            async with make_pipeline(registrar) as pipeline:
                await pipeline.availability.check_batch(requested)
                return [await pipeline.availability.check_one(d) for d in requested]

        singles = asyncio.run(scenario())

        assert len(registrar.calls()) == 1
        assert [r.domain for r in singles] == requested

    def test_cache_expires_after_availability_ttl(self) -> None:
        registrar = FakeRegistrar()
        clock = FakeClock()

        async def scenario():
            async with make_pipeline(registrar, clock=clock) as pipeline:
                await pipeline.availability.check_batch(["a.co.ke", "b.co.ke"])
                clock.advance(60.0)
                await pipeline.availability.check_batch(["a.co.ke", "b.co.ke"])
                clock.advance(61.0)
                await pipeline.availability.check_batch(["a.co.ke", "b.co.ke"])

        asyncio.run(scenario())

        assert len(registrar.calls("batch")) == 2

    def test_partially_cached_batch_requests_only_uncached(self) -> None:
        registrar = FakeRegistrar()

        async def scenario():
            async with make_pipeline(registrar) as pipeline:
                await pipeline.availability.check_one("a.co.ke")
                return await pipeline.availability.check_batch(["a.co.ke", "b.co.ke"])

        results = asyncio.run(scenario())

        batch_body = registrar.calls("batch")[0].content
        assert b"b.co.ke" in batch_body
        assert b"a.co.ke" not in batch_body
        assert list(results) == ["a.co.ke", "b.co.ke"]

    def test_concurrent_identical_batches_share_request(self) -> None:
        registrar = FakeRegistrar(delay=0.01)

        async def scenario():
            async with make_pipeline(registrar) as pipeline:
                return await asyncio.gather(
                    pipeline.availability.check_batch(["a.co.ke", "b.co.ke"]),
                    pipeline.availability.check_batch(["b.co.ke", "a.co.ke"]),
                )

        first, second = asyncio.run(scenario())

        assert len(registrar.calls("batch")) == 1
        assert set(first) == set(second)

    def test_batch_entry_pricing_is_attached(self) -> None:
        registrar = FakeRegistrar(pricing={".co.ke": pricing_payload(999.0)})

        _, results = run_batch(registrar, ["a.co.ke"])

        assert results["a.co.ke"].pricing.first_year_price == 999.0
