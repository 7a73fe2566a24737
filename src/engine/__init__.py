"""
Hangman Game Engine.

Pure Python game logic with zero UI/database dependencies.
Handles word selection, guessing, scoring, difficulty progression,
statistics, achievements, daily challenges and game modes. The
persistence-aware facade lives in src.engine.game and is imported from
there.
"""

from src.engine.achievements import Achievement, AchievementTracker
from src.engine.base import (
    Difficulty,
    GuessResult,
    GuessStatus,
    Round,
    RoundOutcome,
    RoundStatus,
)
from src.engine.challenges import ChallengeSystem, ChallengeType, DailyChallenge, LeaderboardPeriod
from src.engine.errors import (
    CatalogLoadError,
    DataError,
    HangmanError,
    InputError,
    InputErrorReason,
    SelectionError,
    StorageError,
)
from src.engine.events import EventPayload, GameEvent
from src.engine.modes import MultiplayerResult, PracticeConfig
from src.engine.scheduler import ManualClock, Scheduler
from src.engine.scoring import ScoreBreakdown, ScoringEngine
from src.engine.statistics import StatisticsAggregator, StatisticsRecord
from src.engine.word_selector import LengthFilter, WordSelector

__all__ = [
    # Data Classes
    "DailyChallenge",
    "GuessResult",
    "MultiplayerResult",
    "PracticeConfig",
    "LengthFilter",
    "Round",
    "RoundOutcome",
    "ScoreBreakdown",
    "StatisticsRecord",
    "EventPayload",
    # Enums
    "Achievement",
    "ChallengeType",
    "Difficulty",
    "GameEvent",
    "GuessStatus",
    "InputErrorReason",
    "LeaderboardPeriod",
    "RoundStatus",
    # Errors
    "CatalogLoadError",
    "DataError",
    "HangmanError",
    "InputError",
    "SelectionError",
    "StorageError",
    # Engines
    "AchievementTracker",
    "ChallengeSystem",
    "ManualClock",
    "Scheduler",
    "ScoringEngine",
    "StatisticsAggregator",
    "WordSelector",
]
