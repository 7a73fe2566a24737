"""
Hangman - Daily Challenges

One challenge per calendar day, generated deterministically from the date
and the loaded catalog. Completing a challenge pays its reward, extends
the completion streak and posts the round to the challenge leaderboard.
A day without a completion breaks the streak.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from src.engine.base import Difficulty, RoundOutcome
from src.engine.errors import SelectionError
from src.engine.statistics import week_key
from src.engine.word_selector import WordSelection, WordSelector

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 100


class ChallengeType(Enum):
    SPEED = "speed"
    ACCURACY = "accuracy"
    DIFFICULTY = "difficulty"
    CATEGORY = "category"

    @property
    def rule(self) -> "ChallengeRule":
        return _RULES[self]


class LeaderboardPeriod(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    ALL_TIME = "all_time"


@dataclass(frozen=True)
class ChallengeRule:
    """
    Fixed parameters of a challenge type.

    Attributes:
        time_limit_ms: Slowest qualifying win (speed challenges)
        target_score: Score a strong attempt should reach
        description: Player-facing summary
        reward_points: Bonus added to the session score on completion
        badge: Title awarded on completion
    """
    time_limit_ms: int
    target_score: int
    description: str
    reward_points: int
    badge: str


_RULES = {
    ChallengeType.SPEED: ChallengeRule(
        30000, 200, "Complete the word as quickly as possible!", 100, "Speed Demon"
    ),
    ChallengeType.ACCURACY: ChallengeRule(
        120000, 150, "Win with perfect accuracy, no wrong guesses!", 150, "Perfect Player"
    ),
    ChallengeType.DIFFICULTY: ChallengeRule(
        180000, 300, "Tackle this challenging word on hard difficulty!", 200, "Challenge Master"
    ),
    ChallengeType.CATEGORY: ChallengeRule(
        90000, 180, "Master this special themed category!", 120, "Category Expert"
    ),
}


@dataclass(frozen=True)
class DailyChallenge:
    """The challenge for one day."""
    day: str
    type: ChallengeType
    word: str
    difficulty: Difficulty
    category: str

    @property
    def rule(self) -> ChallengeRule:
        return self.type.rule

    @property
    def selection(self) -> WordSelection:
        return WordSelection(word=self.word, difficulty=self.difficulty, category=self.category)

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "type": self.type.value,
            "word": self.word,
            "difficulty": self.difficulty.value,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyChallenge":
        return cls(
            day=data["day"],
            type=ChallengeType(data["type"]),
            word=data["word"],
            difficulty=Difficulty(data["difficulty"]),
            category=data["category"],
        )


@dataclass(frozen=True)
class LeaderboardEntry:
    player: str
    score: int
    elapsed_ms: float
    day: str

    def to_dict(self) -> dict:
        return {
            "player": self.player,
            "score": self.score,
            "elapsed_ms": self.elapsed_ms,
            "day": self.day,
        }


@dataclass
class ChallengeState:
    """
    Persisted challenge progress.

    Attributes:
        current: Today's challenge once generated
        completed_today: Whether `current` has been completed
        streak: Consecutive days with a completed challenge
        best_streak: Longest streak ever reached
        last_completed: ISO date of the latest completion
        leaderboard: Best completions, highest score first
    """
    current: DailyChallenge | None = None
    completed_today: bool = False
    streak: int = 0
    best_streak: int = 0
    last_completed: str | None = None
    leaderboard: list[LeaderboardEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "current": self.current.to_dict() if self.current else None,
            "completed_today": self.completed_today,
            "streak": self.streak,
            "best_streak": self.best_streak,
            "last_completed": self.last_completed,
            "leaderboard": [entry.to_dict() for entry in self.leaderboard],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChallengeState":
        current = data.get("current")
        return cls(
            current=DailyChallenge.from_dict(current) if current else None,
            completed_today=bool(data.get("completed_today", False)),
            streak=int(data.get("streak", 0)),
            best_streak=int(data.get("best_streak", 0)),
            last_completed=data.get("last_completed"),
            leaderboard=[LeaderboardEntry(**entry) for entry in data.get("leaderboard", [])],
        )


def generate_challenge(day: date, selector: WordSelector) -> DailyChallenge:
    """
    Build the challenge for `day`. The same day and catalog always give
    the same challenge.

    Raises:
        SelectionError: If the catalog has no playable word
    """
    rng = random.Random(day.isoformat())
    kind = rng.choice(list(ChallengeType))
    tiers = [d for d in Difficulty if selector.categories(d)]
    if not tiers:
        raise SelectionError("No words available for a daily challenge.")
    if kind is ChallengeType.DIFFICULTY:
        difficulty = tiers[-1]
    else:
        difficulty = rng.choice(tiers)
    category = rng.choice(sorted(selector.categories(difficulty)))
    word = rng.choice(sorted(selector.catalog[difficulty.value][category])).lower()
    return DailyChallenge(
        day=day.isoformat(), type=kind, word=word, difficulty=difficulty, category=category
    )


class ChallengeSystem:
    """Tracks the daily challenge, its streak and the leaderboard."""

    def __init__(self, state: ChallengeState | None = None) -> None:
        self.state = state or ChallengeState()

    @property
    def completed_today(self) -> bool:
        return self.state.completed_today

    @property
    def streak(self) -> int:
        return self.state.streak

    @property
    def best_streak(self) -> int:
        return self.state.best_streak

    def challenge_for(self, day: date, selector: WordSelector) -> DailyChallenge:
        """Today's challenge, generating it on the first call of the day."""
        current = self.state.current
        if current is not None and current.day == day.isoformat():
            return current
        self._expire_streak(day)
        self.state.current = generate_challenge(day, selector)
        self.state.completed_today = False
        logger.info(
            "Daily challenge for %s: %s on %s/%s",
            day.isoformat(), self.state.current.type.value, self.state.current.difficulty.value,
            self.state.current.category,
        )
        return self.state.current

    def _expire_streak(self, day: date) -> None:
        last = self.state.last_completed
        if last is None or self.state.streak == 0:
            return
        if date.fromisoformat(last) < day - timedelta(days=1):
            logger.info("Daily challenge streak of %d broken", self.state.streak)
            self.state.streak = 0

    @staticmethod
    def evaluate(challenge: DailyChallenge, outcome: RoundOutcome) -> bool:
        """Whether a finished round meets the challenge. Losses never do."""
        if not outcome.won:
            return False
        rnd = outcome.round
        if challenge.type is ChallengeType.SPEED:
            return outcome.elapsed_ms <= challenge.rule.time_limit_ms
        if challenge.type is ChallengeType.ACCURACY:
            return not rnd.incorrect_guesses
        if challenge.type is ChallengeType.DIFFICULTY:
            return rnd.difficulty is challenge.difficulty
        return rnd.category == challenge.category

    def complete(self, outcome: RoundOutcome, day: date, player: str = "You") -> DailyChallenge | None:
        """
        Record a challenge attempt.

        Returns:
            The completed challenge, or None when the attempt did not count
            (wrong day, already completed, or the round fell short)
        """
        challenge = self.state.current
        if challenge is None or challenge.day != day.isoformat() or self.state.completed_today:
            return None
        if not self.evaluate(challenge, outcome):
            logger.debug("Daily challenge %s attempt did not qualify", challenge.type.value)
            return None

        self._expire_streak(day)
        self.state.completed_today = True
        self.state.streak += 1
        self.state.best_streak = max(self.state.best_streak, self.state.streak)
        self.state.last_completed = day.isoformat()

        board = self.state.leaderboard
        board.append(LeaderboardEntry(player, outcome.score, outcome.elapsed_ms, day.isoformat()))
        board.sort(key=lambda entry: (-entry.score, entry.elapsed_ms))
        del board[LEADERBOARD_SIZE:]
        return challenge

    def leaderboard(
        self, period: LeaderboardPeriod | str, day: date
    ) -> list[LeaderboardEntry]:
        """Leaderboard entries for the day, ISO week or all time around `day`."""
        period = LeaderboardPeriod(period)
        if period is LeaderboardPeriod.ALL_TIME:
            return list(self.state.leaderboard)
        if period is LeaderboardPeriod.DAILY:
            return [e for e in self.state.leaderboard if e.day == day.isoformat()]
        week = week_key(day)
        return [
            e for e in self.state.leaderboard if week_key(date.fromisoformat(e.day)) == week
        ]
