"""
Hangman - Achievement Tracker Tests
"""

from datetime import datetime, timezone

import pytest

from src.engine.achievements import (
    Achievement,
    AchievementContext,
    AchievementTracker,
    default_achievements,
)

WHEN = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def make_context(**overrides) -> AchievementContext:
    values = {
        "games_won": 1,
        "current_streak": 1,
        "incorrect_count": 2,
        "elapsed_ms": 20000,
        "difficulty": "easy",
        "categories_played": 1,
        "total_score": 150,
    }
    values.update(overrides)
    return AchievementContext(**values)


@pytest.fixture
def tracker() -> AchievementTracker:
    return AchievementTracker(now=lambda: WHEN)


class TestDefaults:
    def test_eight_locked_achievements(self):
        defaults = default_achievements()
        assert len(defaults) == 8
        assert all(entry == {"unlocked": False, "unlocked_at": None} for entry in defaults.values())

    def test_titles(self):
        assert Achievement.FIRST_WIN.title == "First Win"
        assert Achievement.STREAK_5.title == "5-Game Streak"


class TestEvaluate:
    """Tests for unlock predicates."""

    def test_first_win(self, tracker):
        assert tracker.evaluate(make_context()) == [Achievement.FIRST_WIN]
        assert tracker.snapshot()["firstWin"] == {
            "unlocked": True,
            "unlocked_at": WHEN.isoformat(),
        }

    @pytest.mark.parametrize("overrides,expected", [
        ({"current_streak": 5}, Achievement.STREAK_5),
        ({"current_streak": 10}, Achievement.STREAK_10),
        ({"incorrect_count": 0}, Achievement.PERFECT_GAME),
        ({"elapsed_ms": 14999}, Achievement.SPEED_DEMON),
        ({"difficulty": "hard"}, Achievement.DIFFICULTY_MASTER),
        ({"categories_played": 5}, Achievement.CATEGORY_EXPLORER),
        ({"total_score": 1000}, Achievement.SCORE_HUNTER),
    ])
    def test_each_predicate(self, tracker, overrides, expected):
        unlocked = tracker.evaluate(make_context(**overrides))
        assert expected in unlocked

    def test_speed_demon_boundary(self, tracker):
        unlocked = tracker.evaluate(make_context(elapsed_ms=15000))
        assert Achievement.SPEED_DEMON not in unlocked

    def test_unlock_is_reported_once(self, tracker):
        tracker.evaluate(make_context())
        assert tracker.evaluate(make_context()) == []

    def test_monotonic(self, tracker):
        tracker.evaluate(make_context(incorrect_count=0))
        tracker.evaluate(make_context(incorrect_count=5))
        assert tracker.is_unlocked(Achievement.PERFECT_GAME)


class TestPersistenceShape:
    def test_loads_existing_and_ignores_unknown(self):
        tracker = AchievementTracker({
            "firstWin": {"unlocked": True, "unlocked_at": "2025-01-01T00:00:00"},
            "bogus": {"unlocked": True},
        })
        assert tracker.is_unlocked(Achievement.FIRST_WIN)
        assert "bogus" not in tracker.snapshot()

    def test_snapshot_is_a_copy(self, tracker):
        snapshot = tracker.snapshot()
        snapshot["firstWin"]["unlocked"] = True
        assert not tracker.is_unlocked(Achievement.FIRST_WIN)

    def test_summary_and_reset(self, tracker):
        tracker.evaluate(make_context(incorrect_count=0))
        assert tracker.summary() == {
            "total_unlocked": 2,
            "total_available": 8,
            "unlocked_percentage": 25,
        }
        tracker.reset()
        assert tracker.summary()["total_unlocked"] == 0
