"""
In-memory reputation providers used when USE_MOCKS is enabled.

They honour the same fetch_batch contract as the network clients, so the
orchestrator batches and caches exactly as it does in production.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from unreplied.config import MOCK_DELAY_MS
from unreplied.models.reputation_models import ReputationScore
from unreplied.reputation.providers import ReputationProvider

logger = logging.getLogger(__name__)

MOCK_QUOTIENT_SCORES = {
    123: {"fid": 123, "username": "alice", "quotientScore": 0.95, "quotientScoreRaw": 0.95, "quotientRank": 50},
    456: {"fid": 456, "username": "bob", "quotientScore": 0.82, "quotientScoreRaw": 0.82, "quotientRank": 500},
    789: {"fid": 789, "username": "charlie", "quotientScore": 0.65, "quotientScoreRaw": 0.65, "quotientRank": 2500},
    101: {"fid": 101, "username": "diana", "quotientScore": 0.78, "quotientScoreRaw": 0.78, "quotientRank": 1200},
    202: {"fid": 202, "username": "eve", "quotientScore": 0.55, "quotientScoreRaw": 0.55, "quotientRank": 8000},
    303: {"fid": 303, "username": "frank", "quotientScore": 0.42, "quotientScoreRaw": 0.42, "quotientRank": 25000},
}

MOCK_OPENRANK_RANKS = {
    123: 1500,
    456: 5000,
    789: 15000,
    101: 8000,
    202: 2500,
    303: 25000,
    404: 1200,
    505: 3500,
}


class MockProvider(ReputationProvider):
    """Serves scores from a fixture dict after a simulated network delay."""

    def __init__(self, fixtures: Dict[int, ReputationScore], delay_ms: int = MOCK_DELAY_MS):
        super().__init__()
        self.fixtures = fixtures
        self.delay_ms = delay_ms
        self.calls: List[List[int]] = []

    async def _call(self, fids: List[int], timeout: float) -> Dict[int, ReputationScore]:
        self.calls.append(list(fids))
        if self.delay_ms:
            await asyncio.sleep(self.delay_ms / 1000)
        missing = [fid for fid in fids if fid not in self.fixtures]
        if missing:
            logger.info(f"Mock {self.name}: FIDs not found: {', '.join(map(str, missing))}")
        return {fid: self.fixtures[fid] for fid in fids if fid in self.fixtures}


class MockOpenRankProvider(MockProvider):
    name = "openrank-mock"

    def __init__(self, ranks: Optional[Dict[int, int]] = None, delay_ms: int = MOCK_DELAY_MS):
        ranks = MOCK_OPENRANK_RANKS if ranks is None else ranks
        fixtures = {
            fid: ReputationScore(fid=fid, rank=rank, raw={"fid": fid, "rank": rank})
            for fid, rank in ranks.items()
        }
        super().__init__(fixtures, delay_ms)


class MockQuotientProvider(MockProvider):
    name = "quotient-mock"

    def __init__(self, scores: Optional[Dict[int, dict]] = None, delay_ms: int = MOCK_DELAY_MS):
        scores = MOCK_QUOTIENT_SCORES if scores is None else scores
        fixtures = {
            fid: ReputationScore(
                fid=fid,
                value=item.get("quotientScore"),
                rank=item.get("quotientRank"),
                raw=dict(item, quotientProfileUrl=f"https://quotient.social/user/{fid}"),
            )
            for fid, item in scores.items()
        }
        super().__init__(fixtures, delay_ms)
