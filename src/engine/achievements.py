"""
Hangman - Achievement Tracker

Eight one-time achievements, evaluated after every won round outside
practice mode. Unlocks are monotonic; only reset() clears them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class Achievement(Enum):
    """Achievement keys with their display titles."""
    FIRST_WIN = "firstWin"
    STREAK_5 = "streak5"
    STREAK_10 = "streak10"
    PERFECT_GAME = "perfectGame"
    SPEED_DEMON = "speedDemon"
    DIFFICULTY_MASTER = "difficultyMaster"
    CATEGORY_EXPLORER = "categoryExplorer"
    SCORE_HUNTER = "scoreHunter"

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES = {
    Achievement.FIRST_WIN: "First Win",
    Achievement.STREAK_5: "5-Game Streak",
    Achievement.STREAK_10: "10-Game Streak",
    Achievement.PERFECT_GAME: "Perfect Game",
    Achievement.SPEED_DEMON: "Speed Demon",
    Achievement.DIFFICULTY_MASTER: "Difficulty Master",
    Achievement.CATEGORY_EXPLORER: "Category Explorer",
    Achievement.SCORE_HUNTER: "Score Hunter",
}

SPEED_DEMON_MS = 15000
CATEGORY_EXPLORER_COUNT = 5
SCORE_HUNTER_POINTS = 1000


@dataclass(frozen=True)
class AchievementContext:
    """
    Facts the predicates read.

    Attributes:
        games_won: Lifetime wins, including this round
        current_streak: Current win streak, including this round
        incorrect_count: Misses in the round just won
        elapsed_ms: Active play time of the round just won
        difficulty: Difficulty the round was played at (pre-promotion)
        categories_played: Distinct categories ever played
        total_score: Cumulative score, including this round
    """
    games_won: int
    current_streak: int
    incorrect_count: int
    elapsed_ms: float
    difficulty: str
    categories_played: int
    total_score: int


_PREDICATES: dict[Achievement, Callable[[AchievementContext], bool]] = {
    Achievement.FIRST_WIN: lambda c: c.games_won >= 1,
    Achievement.STREAK_5: lambda c: c.current_streak >= 5,
    Achievement.STREAK_10: lambda c: c.current_streak >= 10,
    Achievement.PERFECT_GAME: lambda c: c.incorrect_count == 0,
    Achievement.SPEED_DEMON: lambda c: c.elapsed_ms < SPEED_DEMON_MS,
    Achievement.DIFFICULTY_MASTER: lambda c: c.difficulty == "hard",
    Achievement.CATEGORY_EXPLORER: lambda c: c.categories_played >= CATEGORY_EXPLORER_COUNT,
    Achievement.SCORE_HUNTER: lambda c: c.total_score >= SCORE_HUNTER_POINTS,
}


def default_achievements() -> dict[str, dict]:
    """Fresh, fully locked achievement set."""
    return {a.value: {"unlocked": False, "unlocked_at": None} for a in Achievement}


class AchievementTracker:
    """Owns the achievement set and evaluates unlock predicates."""

    def __init__(
        self,
        achievements: dict[str, dict] | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._achievements = default_achievements()
        if achievements:
            for key, entry in achievements.items():
                if key in self._achievements:
                    self._achievements[key] = {
                        "unlocked": bool(entry.get("unlocked")),
                        "unlocked_at": entry.get("unlocked_at"),
                    }
        self._now = now or (lambda: datetime.now(timezone.utc))

    def is_unlocked(self, achievement: Achievement) -> bool:
        return self._achievements[achievement.value]["unlocked"]

    def evaluate(self, context: AchievementContext) -> list[Achievement]:
        """
        Unlock every achievement whose predicate now holds.

        Args:
            context: Facts about the round just won

        Returns:
            Newly unlocked achievements, in definition order
        """
        unlocked: list[Achievement] = []
        for achievement, predicate in _PREDICATES.items():
            if self.is_unlocked(achievement):
                continue
            if predicate(context):
                self._achievements[achievement.value] = {
                    "unlocked": True,
                    "unlocked_at": self._now().isoformat(),
                }
                unlocked.append(achievement)
        if unlocked:
            logger.info("Achievements unlocked: %s", ", ".join(a.title for a in unlocked))
        return unlocked

    def snapshot(self) -> dict[str, dict]:
        """Copy of the achievement set, safe to hand out."""
        return {key: dict(entry) for key, entry in self._achievements.items()}

    def summary(self) -> dict:
        unlocked = sum(1 for entry in self._achievements.values() if entry["unlocked"])
        total = len(self._achievements)
        return {
            "total_unlocked": unlocked,
            "total_available": total,
            "unlocked_percentage": round(unlocked / total * 100) if total else 0,
        }

    def reset(self) -> None:
        self._achievements = default_achievements()
