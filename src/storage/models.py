"""
Hangman - Storage Models

Pydantic models that mirror the persisted documents. Loaded values are
validated against these before the engine trusts them.
"""

from typing import Any

from pydantic import BaseModel, Field, RootModel, field_validator

from src.engine.achievements import Achievement
from src.engine.base import Difficulty


class StoreEnvelope(BaseModel):
    """Wrapper around every stored value."""

    value: Any
    version: str
    timestamp: int
    expiration: int | None = None
    metadata: dict = Field(default_factory=dict)


class BreakdownSnapshot(BaseModel):
    played: int = Field(default=0, ge=0)
    won: int = Field(default=0, ge=0)
    lost: int = Field(default=0, ge=0)
    total_time: float = Field(default=0, ge=0)
    average_time: int = Field(default=0, ge=0)
    best_time: float | None = None


class DailySnapshot(BaseModel):
    games_played: int = Field(default=0, ge=0)
    games_won: int = Field(default=0, ge=0)
    games_lost: int = Field(default=0, ge=0)
    total_time: float = Field(default=0, ge=0)
    total_score: int = Field(default=0, ge=0)
    average_time: int = Field(default=0, ge=0)


class GameRecordSnapshot(BaseModel):
    result: str
    difficulty: str
    category: str
    play_time: float = Field(ge=0)
    total_guesses: int = Field(ge=0)
    correct_guesses: int = Field(ge=0)
    incorrect_guesses: int = Field(ge=0)
    score: int = Field(ge=0)
    timestamp: str
    word: str
    mode: str = "normal"

    @field_validator("result")
    @classmethod
    def _known_result(cls, value: str) -> str:
        if value not in ("won", "lost"):
            raise ValueError(f"result must be 'won' or 'lost', got {value!r}")
        return value


class PerformanceSnapshot(BaseModel):
    accuracy: int = 0
    efficiency: int = 0
    consistency: int = 0
    improvement: int = 0


class StatisticsSnapshot(BaseModel):
    """Mirrors StatisticsRecord."""

    games_played: int = Field(default=0, ge=0)
    games_won: int = Field(default=0, ge=0)
    games_lost: int = Field(default=0, ge=0)
    win_percentage: int = Field(default=0, ge=0, le=100)
    total_guesses: int = Field(default=0, ge=0)
    total_correct_guesses: int = Field(default=0, ge=0)
    average_guesses_per_game: int = Field(default=0, ge=0)
    total_score: int = Field(default=0, ge=0)
    fastest_completion_time: float | None = None
    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    current_loss_streak: int = Field(default=0, ge=0)
    longest_loss_streak: int = Field(default=0, ge=0)
    total_play_time: float = Field(default=0, ge=0)
    average_play_time: int = Field(default=0, ge=0)
    difficulty_stats: dict[str, BreakdownSnapshot] = Field(default_factory=dict)
    category_stats: dict[str, BreakdownSnapshot] = Field(default_factory=dict)
    game_history: list[GameRecordSnapshot] = Field(default_factory=list)
    daily_stats: dict[str, DailySnapshot] = Field(default_factory=dict)
    performance_metrics: PerformanceSnapshot = Field(default_factory=PerformanceSnapshot)
    last_played: str | None = None

    @field_validator("games_lost")
    @classmethod
    def _counts_add_up(cls, value: int, info) -> int:
        played = info.data.get("games_played", 0)
        won = info.data.get("games_won", 0)
        if won + value != played:
            raise ValueError(f"games_won ({won}) + games_lost ({value}) != games_played ({played})")
        return value


class AchievementEntry(BaseModel):
    unlocked: bool = False
    unlocked_at: str | None = None


class AchievementsSnapshot(RootModel[dict[str, AchievementEntry]]):
    """All eight achievements must be present."""

    @field_validator("root")
    @classmethod
    def _complete(cls, value: dict[str, AchievementEntry]) -> dict[str, AchievementEntry]:
        missing = [a.value for a in Achievement if a.value not in value]
        if missing:
            raise ValueError(f"missing achievements: {', '.join(missing)}")
        return value


class BestTimesSnapshot(RootModel[dict[str, float]]):
    """Fastest timed-mode win per 'difficulty-category' key."""

    @field_validator("root")
    @classmethod
    def _positive(cls, value: dict[str, float]) -> dict[str, float]:
        for key, time_ms in value.items():
            if time_ms < 0:
                raise ValueError(f"negative best time for {key}")
        return value


class CategoryProgressSnapshot(BaseModel):
    played: int = Field(default=0, ge=0)
    correct: int = Field(default=0, ge=0)
    wrong: int = Field(default=0, ge=0)
    mastered_words: list[str] = Field(default_factory=list)


class PracticeProgressSnapshot(BaseModel):
    per_category: dict[str, CategoryProgressSnapshot] = Field(default_factory=dict)


class ProgressionSnapshot(BaseModel):
    consecutive_wins: int = Field(default=0, ge=0)
    pending: Difficulty | None = None


class CatalogSnapshot(RootModel[dict[str, dict[str, list[str]]]]):
    """Cached word catalog: difficulty -> category -> words."""


class DailyChallengeSnapshot(BaseModel):
    day: str
    type: str
    word: str
    difficulty: Difficulty
    category: str

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        if value not in ("speed", "accuracy", "difficulty", "category"):
            raise ValueError(f"unknown challenge type {value!r}")
        return value


class LeaderboardEntrySnapshot(BaseModel):
    player: str
    score: int = Field(ge=0)
    elapsed_ms: float = Field(ge=0)
    day: str


class ChallengeSnapshot(BaseModel):
    """Mirrors ChallengeState."""

    current: DailyChallengeSnapshot | None = None
    completed_today: bool = False
    streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    last_completed: str | None = None
    leaderboard: list[LeaderboardEntrySnapshot] = Field(default_factory=list)
