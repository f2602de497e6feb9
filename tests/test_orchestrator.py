"""
Unit tests for ReputationOrchestrator.
"""
import asyncio
import time

import httpx
import pytest

from conftest import FakeClock, FakeProvider
from unreplied.cache.score_store import ScoreStore
from unreplied.errors import InvalidFidError
from unreplied.reputation.mock_providers import MockOpenRankProvider, MockQuotientProvider
from unreplied.reputation.orchestrator import ReputationOrchestrator, build_orchestrator
from unreplied.reputation.providers import OpenRankProvider


def make_orchestrator(rank_provider, score_provider, clock=None, timeout=10):
    clock = clock or FakeClock()
    return ReputationOrchestrator(
        rank_store=ScoreStore("rank", ttl_seconds=300, clock=clock),
        score_store=ScoreStore("score", ttl_seconds=300, clock=clock),
        rank_provider=rank_provider,
        score_provider=score_provider,
        timeout=timeout,
    )


class TestReputationOrchestrator:

    @pytest.mark.asyncio
    async def test_partial_knowledge_per_provider(self):
        provider_a = FakeProvider("a", {10: 0.5})
        provider_b = FakeProvider("b", {10: 0.9, 20: 0.3})
        orchestrator = make_orchestrator(provider_a, provider_b)

        await orchestrator.fetch([10, 20])

        rank_hits = orchestrator.rank_store.get([10, 20]).hits
        score_hits = orchestrator.score_store.get([10, 20]).hits
        assert rank_hits[10].value == 0.5
        assert rank_hits[20] is None
        assert score_hits[10].value == 0.9
        assert score_hits[20].value == 0.3

    @pytest.mark.asyncio
    async def test_only_misses_are_fetched(self):
        provider_a = FakeProvider("a", {1: 0.1, 2: 0.2, 3: 0.3})
        provider_b = FakeProvider("b", {1: 0.1, 2: 0.2, 3: 0.3})
        orchestrator = make_orchestrator(provider_a, provider_b)

        await orchestrator.fetch([1, 2])
        await orchestrator.fetch([1, 2, 3])

        assert provider_a.calls == [[1, 2], [3]]
        assert provider_b.calls == [[1, 2], [3]]

    @pytest.mark.asyncio
    async def test_hit_in_one_store_miss_in_other(self):
        provider_a = FakeProvider("a", {1: 0.1})
        provider_b = FakeProvider("b", {1: 0.1})
        orchestrator = make_orchestrator(provider_a, provider_b)
        orchestrator.rank_store.put({1: None})

        await orchestrator.fetch([1])

        assert provider_a.calls == []
        assert provider_b.calls == [[1]]

    @pytest.mark.asyncio
    async def test_fully_cached_request_makes_no_calls(self):
        provider_a = FakeProvider("a", {1: 0.1})
        provider_b = FakeProvider("b", {1: 0.1})
        orchestrator = make_orchestrator(provider_a, provider_b)

        await orchestrator.fetch([1])
        await orchestrator.fetch([1, 1])

        assert provider_a.calls == [[1]]
        assert provider_b.calls == [[1]]

    @pytest.mark.asyncio
    async def test_duplicate_fids_are_fetched_once(self):
        provider_a = FakeProvider("a", {})
        provider_b = FakeProvider("b", {})
        orchestrator = make_orchestrator(provider_a, provider_b)

        await orchestrator.fetch([5, 5, 6, 5])

        assert provider_a.calls == [[5, 6]]

    @pytest.mark.asyncio
    async def test_empty_input_is_a_no_op(self):
        provider_a = FakeProvider("a", {})
        provider_b = FakeProvider("b", {})
        orchestrator = make_orchestrator(provider_a, provider_b)

        await orchestrator.fetch([])

        assert provider_a.calls == []
        assert provider_b.calls == []

    @pytest.mark.asyncio
    async def test_invalid_fid_rejected_before_io(self):
        provider_a = FakeProvider("a", {})
        provider_b = FakeProvider("b", {})
        orchestrator = make_orchestrator(provider_a, provider_b)

        with pytest.raises(InvalidFidError):
            await orchestrator.fetch([1, -2])
        with pytest.raises(InvalidFidError):
            await orchestrator.fetch(["7"])

        assert provider_a.calls == []

    @pytest.mark.asyncio
    async def test_providers_run_concurrently(self):
        provider_a = FakeProvider("a", {1: 0.1}, delay=0.3)
        provider_b = FakeProvider("b", {1: 0.1}, delay=0.3)
        orchestrator = make_orchestrator(provider_a, provider_b)

        started = time.monotonic()
        await orchestrator.fetch([1])
        elapsed = time.monotonic() - started

        assert elapsed < 0.5

    @pytest.mark.asyncio
    async def test_failed_provider_leaves_misses_and_other_commits(self):
        provider_a = FakeProvider("a", {1: 0.1}, fail=True)
        provider_b = FakeProvider("b", {1: 0.9})
        orchestrator = make_orchestrator(provider_a, provider_b)

        await orchestrator.fetch([1])

        assert orchestrator.rank_store.get([1]).misses == {1}
        assert orchestrator.score_store.get([1]).hits[1].value == 0.9
        assert len(orchestrator.rank_store) == 0

        # No automatic retry; the next call asks again
        await orchestrator.fetch([1])
        assert provider_a.calls == [[1], [1]]
        assert provider_b.calls == [[1]]

    @pytest.mark.asyncio
    async def test_malformed_provider_payload_is_contained(self):
        body = {"result": [{"fid": 10, "rank": "n/a", "score": 0.7}]}
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        async with httpx.AsyncClient(transport=transport) as client:
            rank_provider = OpenRankProvider(base_url="https://openrank.test", client=client)
            score_provider = FakeProvider("b", {10: 0.9})
            orchestrator = make_orchestrator(rank_provider, score_provider)

            await orchestrator.fetch([10])

        assert orchestrator.rank_store.get([10]).misses == {10}
        assert orchestrator.score_store.get([10]).hits[10].value == 0.9

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self):
        provider_a = FakeProvider("a", {1: 0.1}, delay=1)
        provider_b = FakeProvider("b", {1: 0.9})
        orchestrator = make_orchestrator(provider_a, provider_b, timeout=0.05)

        await orchestrator.fetch([1])

        assert orchestrator.rank_store.get([1]).misses == {1}
        assert orchestrator.score_store.get([1]).hits[1].value == 0.9

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_in_flight_batch(self):
        provider_a = FakeProvider("a", {1: 0.1, 2: 0.2}, delay=0.1)
        provider_b = FakeProvider("b", {1: 0.1, 2: 0.2}, delay=0.1)
        orchestrator = make_orchestrator(provider_a, provider_b)

        await asyncio.gather(orchestrator.fetch([1, 2]), orchestrator.fetch([1, 2]))

        assert provider_a.calls == [[1, 2]]
        assert provider_b.calls == [[1, 2]]
        assert orchestrator.lookup_ranks([1, 2])[2].value == 0.2

    @pytest.mark.asyncio
    async def test_concurrent_fetch_only_requests_new_fids(self):
        provider_a = FakeProvider("a", {}, delay=0.1)
        provider_b = FakeProvider("b", {}, delay=0.1)
        orchestrator = make_orchestrator(provider_a, provider_b)

        await asyncio.gather(orchestrator.fetch([1, 2]), orchestrator.fetch([2, 3]))

        assert sorted(provider_a.calls) == [[1, 2], [3]]

    @pytest.mark.asyncio
    async def test_expired_entries_are_refetched(self):
        clock = FakeClock()
        provider_a = FakeProvider("a", {1: 0.1})
        provider_b = FakeProvider("b", {1: 0.1})
        orchestrator = make_orchestrator(provider_a, provider_b, clock=clock)

        await orchestrator.fetch([1])
        clock.advance(300)
        await orchestrator.fetch([1])

        assert provider_a.calls == [[1], [1]]

    @pytest.mark.asyncio
    async def test_clear_empties_both_stores(self):
        provider_a = FakeProvider("a", {1: 0.1})
        provider_b = FakeProvider("b", {1: 0.1})
        orchestrator = make_orchestrator(provider_a, provider_b)
        await orchestrator.fetch([1])

        orchestrator.clear()

        status = orchestrator.status()
        assert status["rank"].cached_count == 0
        assert status["score"].cached_count == 0
        assert status["rank"].valid is False


class TestMockMode:

    def test_mock_mode_wires_fixture_providers(self):
        orchestrator = build_orchestrator(use_mocks=True)

        assert isinstance(orchestrator.providers["rank"], MockOpenRankProvider)
        assert isinstance(orchestrator.providers["score"], MockQuotientProvider)

    @pytest.mark.asyncio
    async def test_mock_mode_keeps_caching_contract(self):
        orchestrator = build_orchestrator(use_mocks=True)
        for provider in orchestrator.providers.values():
            provider.delay_ms = 0

        await orchestrator.fetch([123, 404])
        await orchestrator.fetch([123, 404, 456])

        assert orchestrator.providers["rank"].calls == [[123, 404], [456]]
        assert orchestrator.lookup_scores([404])[404] is None
        assert orchestrator.lookup_ranks([404])[404].rank == 1200
