"""
Shared fixtures: a controllable clock, an in-memory cast store and scriptable providers.
"""
import asyncio
from datetime import datetime
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from unreplied.db.postgres import SimpleSQL
from unreplied.db.schema import casts, metadata
from unreplied.errors import ProviderError
from unreplied.models.reputation_models import ReputationScore
from unreplied.reputation.providers import ReputationProvider

NOW = datetime(2025, 6, 1, 12, 0, 0)


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(ReputationProvider):
    """Provider answering from a dict; records every batch it receives."""

    def __init__(self, name: str, known: Dict[int, float], delay: float = 0.0, fail: bool = False):
        super().__init__()
        self.name = name
        self.known = known
        self.delay = delay
        self.fail = fail
        self.calls: List[List[int]] = []

    async def _call(self, fids, timeout):
        self.calls.append(list(fids))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ProviderError(self.name, "HTTP 503")
        return {
            fid: ReputationScore(fid=fid, value=value, rank=int(value * 10), raw={"fid": fid})
            for fid, value in self.known.items()
            if fid in fids
        }


class CastStore:
    """SQLite fixture store sharing one in-memory database across threads."""

    def __init__(self):
        self.engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        metadata.create_all(self.engine)
        self.sql = SimpleSQL(self.engine)

    def add(self, fid: int, hash: str, timestamp: Optional[datetime], parent: Optional[str] = None,
            text: str = "", deleted_at: Optional[datetime] = None) -> None:
        with self.engine.begin() as conn:
            conn.execute(casts.insert().values(
                fid=fid,
                hash=hash,
                timestamp=timestamp,
                text=text or f"cast {hash}",
                parent_cast_hash=parent,
                deleted_at=deleted_at,
            ))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cast_store():
    store = CastStore()
    yield store
    store.engine.dispose()
