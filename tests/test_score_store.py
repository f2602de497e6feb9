"""
Unit tests for ScoreStore.
"""
from unreplied.cache.score_store import ScoreStore

TTL = 300


class TestScoreStore:
    """Test cases for the TTL-bound FID cache."""

    def test_get_partitions_requested_fids(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)
        store.put({1: "a", 2: None})

        lookup = store.get({1, 2, 3, 4})

        assert set(lookup.hits) | lookup.misses == {1, 2, 3, 4}
        assert set(lookup.hits) & lookup.misses == set()
        assert lookup.hits == {1: "a", 2: None}
        assert lookup.misses == {3, 4}

    def test_none_is_remembered_as_known_absent(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)
        store.put({20: None})

        assert store.get([20]).hits == {20: None}

    def test_hit_before_ttl_miss_at_ttl(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)
        store.put({1: "a"})

        clock.advance(TTL - 1)
        assert store.get([1]).hits == {1: "a"}

        clock.advance(1)
        lookup = store.get([1])
        assert lookup.hits == {}
        assert lookup.misses == {1}
        # Still physically present
        assert len(store) == 1

    def test_put_merges_without_dropping_other_entries(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)
        store.put({1: "a", 2: "b"})
        store.put({2: "B", 3: "c"})

        assert store.get([1, 2, 3]).hits == {1: "a", 2: "B", 3: "c"}

    def test_cache_wide_epoch_refreshes_older_entries(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)
        store.put({1: "a"})
        clock.advance(250)
        store.put({2: "b"})
        clock.advance(100)

        # 350s after entry 1 was written, but only 100s after the last bulk write
        assert store.get([1, 2]).hits == {1: "a", 2: "b"}

        clock.advance(200)
        assert store.get([1, 2]).misses == {1, 2}

    def test_per_entry_ttl_expires_entries_independently(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock, per_entry_ttl=True)
        store.put({1: "a"})
        clock.advance(250)
        store.put({2: "b"})
        clock.advance(100)

        lookup = store.get([1, 2])
        assert lookup.hits == {2: "b"}
        assert lookup.misses == {1}

    def test_clear_resets_entries_and_epoch(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)
        store.put({1: "a"})

        store.clear()

        assert store.get([1]).misses == {1}
        status = store.status()
        assert status.valid is False
        assert status.cached_count == 0

    def test_status_reports_age_and_does_not_mutate(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)
        store.put({1: "a", 2: "b"})
        clock.advance(42)

        first = store.status()
        second = store.status()

        assert first == second
        assert first.valid is True
        assert first.age_seconds == 42
        assert first.cached_count == 2
        assert first.ttl_seconds == TTL
        assert first.to_dict() == {"valid": True, "ageSeconds": 42, "cachedCount": 2, "ttlSeconds": TTL}
        assert store.get([1, 2]).hits == {1: "a", 2: "b"}

    def test_empty_store_is_invalid(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock)

        assert store.status().valid is False
        assert store.get([5]).misses == {5}

    def test_snapshot_contains_only_valid_entries(self, clock):
        store = ScoreStore(ttl_seconds=TTL, clock=clock, per_entry_ttl=True)
        store.put({1: "a"})
        clock.advance(TTL)
        store.put({2: "b"})

        assert store.snapshot() == {2: "b"}
