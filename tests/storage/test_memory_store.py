"""
Hangman - Persistence Store Tests

Tests for the envelope, expiry and pruning behavior shared by every
store, exercised through the in-memory backend.
"""

import pytest

from src.engine.errors import StorageError
from src.storage.base import STORE_VERSION
from src.storage.memory import MemoryStore


class FakeClock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def wall_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory(wall_clock) -> MemoryStore:
    return MemoryStore(clock=wall_clock)


class TestGetSet:
    def test_round_trip(self, memory):
        assert memory.set("statistics", {"games_played": 2})
        assert memory.get("statistics") == {"games_played": 2}
        assert memory.has("statistics")

    def test_keys_are_prefixed(self, memory):
        memory.set("words", ["cat"])
        assert list(memory._data) == ["hangman_words"]
        assert memory.keys() == ["words"]

    def test_custom_prefix(self, wall_clock):
        store = MemoryStore(prefix="test_", clock=wall_clock)
        store.set("a", 1)
        assert store.full_key("a") == "test_a"
        assert store.keys() == ["a"]

    def test_envelope_fields(self, memory, wall_clock):
        memory.set("words", [], expiration=500, metadata={"source": "http"})
        envelope = memory.get_envelope("words")
        assert envelope.version == STORE_VERSION
        assert envelope.timestamp == wall_clock.now
        assert envelope.expiration == wall_clock.now + 500
        assert envelope.metadata == {"source": "http"}

    def test_missing_key(self, memory):
        assert memory.get("nope") is None
        assert not memory.has("nope")
        assert not memory.delete("nope")

    def test_delete(self, memory):
        memory.set("a", 1)
        assert memory.delete("a")
        assert memory.get("a") is None


class TestExpiryAndCorruption:
    def test_expired_entry_is_absent_and_removed(self, memory, wall_clock):
        memory.set("words", ["cat"], expiration=100)
        wall_clock.now += 99
        assert memory.get("words") == ["cat"]
        wall_clock.now += 1
        assert memory.get("words") is None
        assert memory.keys() == []

    def test_unreadable_entry_discarded(self, memory, caplog):
        memory._data["hangman_statistics"] = "{not json"
        assert memory.get("statistics") is None
        assert "hangman_statistics" not in memory._data
        assert "Discarding unreadable entry statistics" in caplog.text

    def test_envelope_missing_fields_discarded(self, memory):
        memory._data["hangman_x"] = '{"value": 1}'
        assert memory.get("x") is None

    def test_cleanup_expired(self, memory, wall_clock):
        memory.set("old", 1, expiration=10)
        memory.set("keep", 2)
        memory._data["hangman_bad"] = "garbage"
        wall_clock.now += 10
        assert memory.cleanup_expired() == 2
        assert memory.keys() == ["keep"]


class TestQuotaAndPrune:
    def test_quota_exceeded(self):
        store = MemoryStore(max_bytes=50)
        with pytest.raises(StorageError, match="Quota exceeded"):
            store.set("statistics", {"games_played": 1})
        assert store.keys() == []

    def test_overwrite_counts_only_the_difference(self):
        store = MemoryStore(max_bytes=200)
        store.set("a", "x" * 50)
        first = store.used_bytes
        store.set("a", "y" * 50)
        assert store.used_bytes == first

    def test_prune_drops_oldest(self, memory, wall_clock):
        for key in ("first", "second", "third"):
            memory.set(key, key)
            wall_clock.now += 1
        assert memory.prune(2) == 2
        assert memory.keys() == ["third"]

    def test_prune_counts_expired(self, memory, wall_clock):
        memory.set("stale", 1, expiration=5)
        wall_clock.now += 1
        memory.set("fresh", 2)
        wall_clock.now += 10
        assert memory.prune(0) == 1
        assert memory.keys() == ["fresh"]
