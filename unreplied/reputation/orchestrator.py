"""
Coordinates the two reputation caches and their providers.
"""
import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from unreplied.cache.score_store import CacheStatus, ScoreStore
from unreplied.config import (
    CACHE_PER_ENTRY_TTL,
    PROVIDER_TIMEOUT,
    REPUTATION_CACHE_TTL,
    USE_MOCKS,
)
from unreplied.errors import ProviderError
from unreplied.models.reputation_models import ReputationScore
from unreplied.reputation.mock_providers import MockOpenRankProvider, MockQuotientProvider
from unreplied.reputation.providers import OpenRankProvider, QuotientProvider, ReputationProvider
from unreplied.utils.helpers import normalize_fids

logger = logging.getLogger(__name__)

RANK = "rank"
SCORE = "score"


class ReputationOrchestrator:
    """
    Fronts the rank-provider and the score-provider with one ScoreStore each.

    `fetch` splits the requested FIDs into hits and misses per store, asks each
    provider only for its own misses, and runs the two provider calls
    concurrently. A failed batch is logged and leaves its misses unresolved;
    the other provider's result is still committed.

    Concurrent `fetch` calls share in-flight batches: a FID that is already
    being fetched from a provider is awaited rather than requested again.
    """

    def __init__(
        self,
        rank_store: ScoreStore,
        score_store: ScoreStore,
        rank_provider: ReputationProvider,
        score_provider: ReputationProvider,
        timeout: float = PROVIDER_TIMEOUT,
    ):
        self.stores: Dict[str, ScoreStore] = {RANK: rank_store, SCORE: score_store}
        self.providers: Dict[str, ReputationProvider] = {RANK: rank_provider, SCORE: score_provider}
        self.timeout = timeout
        self._in_flight: Dict[str, Dict[int, asyncio.Future]] = {RANK: {}, SCORE: {}}

    @property
    def rank_store(self) -> ScoreStore:
        return self.stores[RANK]

    @property
    def score_store(self) -> ScoreStore:
        return self.stores[SCORE]

    async def fetch(self, fids: Iterable[int]) -> None:
        """Make sure both caches hold fresh data for `fids`, fetching only misses."""
        unique_fids = normalize_fids(fids)
        if not unique_fids:
            return

        await asyncio.gather(
            self._refresh(RANK, unique_fids),
            self._refresh(SCORE, unique_fids),
        )

    async def _refresh(self, kind: str, fids: List[int]) -> None:
        store = self.stores[kind]
        provider = self.providers[kind]
        pending = self._in_flight[kind]

        misses = store.get(fids).misses
        if not misses:
            return

        shared = {pending[fid] for fid in misses if fid in pending}
        to_fetch = sorted(fid for fid in misses if fid not in pending)

        if to_fetch:
            batch = asyncio.get_running_loop().create_future()
            for fid in to_fetch:
                pending[fid] = batch
            try:
                logger.info(f"Fetching {len(to_fetch)} uncached FIDs from {provider.name}")
                result = await provider.fetch_batch(to_fetch, self.timeout)
                store.put(result)
                batch.set_result(True)
            except ProviderError as e:
                logger.error(f"Failed to fetch {kind} data from {provider.name}: {e}")
                batch.set_result(False)
            finally:
                for fid in to_fetch:
                    if pending.get(fid) is batch:
                        del pending[fid]
                if not batch.done():
                    batch.cancel()

        if shared:
            logger.debug(f"Waiting on {len(shared)} in-flight {kind} batches")
            await asyncio.wait(shared)

    def lookup(self, kind: str, fids: Iterable[int]) -> Dict[int, Optional[ReputationScore]]:
        """Cached values for `fids` (valid hits only)."""
        return self.stores[kind].get(fids).hits

    def lookup_ranks(self, fids: Iterable[int]) -> Dict[int, Optional[ReputationScore]]:
        return self.lookup(RANK, fids)

    def lookup_scores(self, fids: Iterable[int]) -> Dict[int, Optional[ReputationScore]]:
        return self.lookup(SCORE, fids)

    def clear(self) -> None:
        for store in self.stores.values():
            store.clear()

    def status(self) -> Dict[str, CacheStatus]:
        return {kind: store.status() for kind, store in self.stores.items()}


def build_orchestrator(
    use_mocks: bool = USE_MOCKS,
    ttl_seconds: int = REPUTATION_CACHE_TTL,
    per_entry_ttl: bool = CACHE_PER_ENTRY_TTL,
    timeout: float = PROVIDER_TIMEOUT,
) -> ReputationOrchestrator:
    """Create an orchestrator wired to the network providers, or to fixtures in mock mode."""
    if use_mocks:
        logger.info("Mock mode enabled - using fixture reputation providers")
        rank_provider, score_provider = MockOpenRankProvider(), MockQuotientProvider()
    else:
        rank_provider, score_provider = OpenRankProvider(), QuotientProvider()

    return ReputationOrchestrator(
        rank_store=ScoreStore(RANK, ttl_seconds=ttl_seconds, per_entry_ttl=per_entry_ttl),
        score_store=ScoreStore(SCORE, ttl_seconds=ttl_seconds, per_entry_ttl=per_entry_ttl),
        rank_provider=rank_provider,
        score_provider=score_provider,
        timeout=timeout,
    )
