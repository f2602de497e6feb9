"""
TTL-bound score cache keyed by FID.
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Iterable, Set, TypeVar

from unreplied.config import CACHE_PER_ENTRY_TTL, REPUTATION_CACHE_TTL

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    written_at: float


@dataclass
class CacheLookup(Generic[V]):
    """Result of ScoreStore.get: every requested FID is in exactly one of the two."""
    hits: Dict[int, V] = field(default_factory=dict)
    misses: Set[int] = field(default_factory=set)


@dataclass(frozen=True)
class CacheStatus:
    valid: bool
    age_seconds: int
    cached_count: int
    ttl_seconds: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "valid": self.valid,
            "ageSeconds": self.age_seconds,
            "cachedCount": self.cached_count,
            "ttlSeconds": self.ttl_seconds,
        }


class ScoreStore(Generic[V]):
    """
    Keyed cache mapping a FID to a provider value.

    By default validity is decided by a single cache-wide epoch: every entry
    expires `ttl_seconds` after the most recent bulk write, regardless of when
    the entry itself was written. Pass `per_entry_ttl=True` to expire each
    entry on its own write time instead.

    A stored value of None means "the provider has no data for this FID" and
    is a hit like any other value.
    """

    def __init__(
        self,
        name: str = "scores",
        ttl_seconds: int = REPUTATION_CACHE_TTL,
        clock: Callable[[], float] = time.time,
        per_entry_ttl: bool = CACHE_PER_ENTRY_TTL,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.per_entry_ttl = per_entry_ttl
        self._clock = clock
        self._entries: Dict[int, CacheEntry[V]] = {}
        self._last_bulk_write_at = 0.0
        self._lock = threading.Lock()

    def _is_fresh(self, written_at: float, now: float) -> bool:
        return now - written_at < self.ttl_seconds

    def _entry_valid(self, entry: CacheEntry[V], now: float) -> bool:
        if self.per_entry_ttl:
            return self._is_fresh(entry.written_at, now)
        return self._is_fresh(self._last_bulk_write_at, now)

    def get(self, fids: Iterable[int]) -> CacheLookup[V]:
        """Split `fids` into cached values and FIDs that must be fetched."""
        lookup: CacheLookup[V] = CacheLookup()
        with self._lock:
            now = self._clock()
            for fid in set(fids):
                entry = self._entries.get(fid)
                if entry is not None and self._entry_valid(entry, now):
                    lookup.hits[fid] = entry.value
                else:
                    lookup.misses.add(fid)
        return lookup

    def put(self, entries: Dict[int, V]) -> None:
        """Merge `entries` into the cache and advance the epoch."""
        with self._lock:
            now = self._clock()
            for fid, value in entries.items():
                self._entries[fid] = CacheEntry(value=value, written_at=now)
            self._last_bulk_write_at = now
        logger.debug(f"{self.name} cache: stored {len(entries)} entries ({len(self._entries)} total)")

    def clear(self) -> None:
        with self._lock:
            self._entries = {}
            self._last_bulk_write_at = 0.0
        logger.info(f"{self.name} cache cleared")

    def snapshot(self) -> Dict[int, V]:
        """Copy of every currently valid entry."""
        with self._lock:
            now = self._clock()
            return {
                fid: entry.value
                for fid, entry in self._entries.items()
                if self._entry_valid(entry, now)
            }

    def status(self) -> CacheStatus:
        with self._lock:
            now = self._clock()
            return CacheStatus(
                valid=self._is_fresh(self._last_bulk_write_at, now),
                age_seconds=round(now - self._last_bulk_write_at),
                cached_count=len(self._entries),
                ttl_seconds=self.ttl_seconds,
            )

    def __len__(self) -> int:
        return len(self._entries)
