"""
Hangman - Game Repository Tests

Tests for typed loading, corrupt-document repair and degraded saves.
"""

from unittest.mock import MagicMock

import pytest

from src.engine.achievements import default_achievements
from src.engine.base import Difficulty
from src.engine.challenges import ChallengeState
from src.engine.errors import DataError, StorageError
from src.engine.progression import ProgressionState
from src.engine.statistics import StatisticsRecord
from src.storage import create_store
from src.storage.file_store import JsonFileStore
from src.storage.memory import MemoryStore
from src.storage.models import StatisticsSnapshot
from src.storage.repository import DOCUMENT_KEYS, GameRepository, validate_snapshot


@pytest.fixture
def repo(store) -> GameRepository:
    return GameRepository(store)


class TestValidateSnapshot:
    def test_valid_document_normalized(self):
        data = validate_snapshot("statistics", StatisticsSnapshot, {"games_played": 0})
        assert data["games_won"] == 0
        assert data["performance_metrics"]["accuracy"] == 0

    def test_counts_must_add_up(self):
        raw = {"games_played": 3, "games_won": 1, "games_lost": 1}
        with pytest.raises(DataError) as exc_info:
            validate_snapshot("statistics", StatisticsSnapshot, raw)
        assert exc_info.value.key == "statistics"


class TestLoading:
    def test_defaults_when_missing(self, repo, store):
        assert repo.load_statistics() == StatisticsRecord()
        assert repo.load_achievements() == default_achievements()
        assert repo.load_best_times() == {}
        assert repo.load_progression() == ProgressionState()
        assert repo.load_practice_progress().per_category == {}
        assert repo.load_challenges() == ChallengeState()
        assert store.keys() == []

    def test_loads_stored_documents(self, repo, store):
        store.set("difficulty_progression", {"consecutive_wins": 2, "pending": "medium"})
        store.set("best_times", {"easy-animals": 4200})
        state = repo.load_progression()
        assert state.consecutive_wins == 2
        assert state.pending == Difficulty.MEDIUM
        assert repo.load_best_times() == {"easy-animals": 4200}

    def test_corrupt_document_reset(self, repo, store):
        store.set("achievements", {"firstWin": {"unlocked": True}})
        assert repo.load_achievements() == default_achievements()
        assert repo.repaired == ["achievements"]
        assert store.get("achievements") == default_achievements()

    def test_negative_best_time_repaired(self, repo, store):
        store.set("best_times", {"easy-animals": -1})
        assert repo.load_best_times() == {}
        assert repo.repaired == ["best_times"]

    def test_unknown_challenge_type_repaired(self, repo, store):
        current = {
            "day": "2026-03-14", "type": "marathon", "word": "cat",
            "difficulty": "easy", "category": "animals",
        }
        store.set("daily_challenges", {"current": current, "streak": 4})
        assert repo.load_challenges() == ChallengeState()
        assert repo.repaired == ["daily_challenges"]


class TestSaving:
    def test_save(self, repo, store):
        assert repo.save("best_times", {"easy-animals": 1})
        assert store.get("best_times") == {"easy-animals": 1}
        assert not repo.degraded

    def test_prunes_and_retries(self, caplog):
        store = MagicMock()
        store.set.side_effect = [StorageError("full"), True]
        repo = GameRepository(store)
        assert repo.save("statistics", {})
        store.prune.assert_called_once_with(5, protected=DOCUMENT_KEYS)
        assert not repo.degraded
        assert "pruning and retrying" in caplog.text

    def test_degrades_after_second_failure(self):
        repo = GameRepository(MemoryStore(max_bytes=10))
        assert not repo.save("statistics", StatisticsRecord().to_dict())
        assert repo.degraded

    def test_pruning_frees_room(self):
        store = MemoryStore(max_bytes=450)
        store.set("words", "x" * 250)
        repo = GameRepository(store)
        assert repo.save("best_times", {"easy-animals": 1.0, "hard-science": 2.0, "pad": 3.0})
        assert store.get("words") is None


class TestPruneKeepsGameDocuments:
    """A full store sheds cache entries, never the player's own documents."""

    @pytest.fixture
    def unlocked(self) -> dict:
        achievements = default_achievements()
        achievements["firstWin"] = {"unlocked": True, "unlocked_at": "2026-03-14T12:00:00+00:00"}
        return achievements

    def test_cache_evicted_documents_kept(self, unlocked):
        store = MemoryStore()
        repo = GameRepository(store)
        repo.save("achievements", unlocked)
        repo.save("best_times", {"easy-animals": 4200.0})
        store.set("words", "x" * 300)
        store.max_bytes = store.used_bytes + 200

        assert repo.save("statistics", {"pad": "y" * 150})
        assert not repo.degraded
        assert store.get("words") is None
        assert repo.load_achievements()["firstWin"]["unlocked"] is True
        assert repo.load_best_times() == {"easy-animals": 4200.0}

    def test_degrades_instead_of_evicting_documents(self, unlocked, caplog):
        store = MemoryStore()
        repo = GameRepository(store)
        repo.save("achievements", unlocked)
        repo.save("best_times", {"easy-animals": 4200.0})
        store.max_bytes = store.used_bytes + 200

        assert not repo.save("statistics", {"pad": "y" * 150})
        assert repo.degraded
        assert "Pruned cache entry" not in caplog.text
        assert repo.load_achievements()["firstWin"]["unlocked"] is True
        assert repo.load_best_times() == {"easy-animals": 4200.0}

    def test_store_prune_skips_protected(self):
        store = MemoryStore()
        store.set("achievements", {})
        store.set("words", [])
        assert store.prune(5, protected={"achievements"}) == 1
        assert store.keys() == ["achievements"]


class TestCreateStore:
    def test_memory_backend(self, settings):
        store = create_store(settings.model_copy(update={"storage_max_bytes": 1024}))
        assert isinstance(store, MemoryStore)
        assert store.max_bytes == 1024

    def test_file_backend(self, settings, tmp_path):
        store = create_store(settings.model_copy(
            update={"storage_backend": "file", "storage_dir": str(tmp_path)}
        ))
        assert isinstance(store, JsonFileStore)
        assert store.directory == tmp_path
