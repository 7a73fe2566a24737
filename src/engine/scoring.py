"""
Hangman - Scoring Engine

Pure scoring for a won round.

Scoring Rules:
    - Base: 100 points
    - Efficiency bonus: 10 points per unused mistake
    - Time bonus (normal): 2 points per second under 30 seconds
    - Time bonus (timed mode): percentage of the time limit remaining
    - Difficulty multiplier: easy x1, medium x2, hard x3
    - Practice mode: scaled by the hint penalty multiplier
    - Every win scores at least 50 points
"""

import math
from dataclasses import dataclass

from src.engine.base import Difficulty


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class ScoreInput:
    """
    Everything the score depends on.

    Attributes:
        difficulty: Tier of the finished round
        incorrect_count: Misses made this round
        max_incorrect: Misses allowed this round
        elapsed_ms: Active play time (ignored in timed mode)
        time_remaining_ms: Countdown left, timed mode only
        time_limit_ms: Countdown length, timed mode only
        penalty_multiplier: Practice hint penalty, None outside practice mode
    """
    difficulty: Difficulty
    incorrect_count: int
    max_incorrect: int
    elapsed_ms: float = 0.0
    time_remaining_ms: float | None = None
    time_limit_ms: float | None = None
    penalty_multiplier: float | None = None

    @property
    def is_timed(self) -> bool:
        return self.time_limit_ms is not None and self.time_remaining_ms is not None


@dataclass(frozen=True)
class ScoreBreakdown:
    """Score components and final total."""
    base: int
    efficiency_bonus: int
    time_bonus: int
    multiplier: int
    raw: int
    penalty_multiplier: float | None
    total: int

    def __str__(self) -> str:
        lines = [f"Total: {self.total} points"]
        lines.append(f"  - Base: {self.base}")
        lines.append(f"  - Efficiency bonus: {self.efficiency_bonus}")
        lines.append(f"  - Time bonus: {self.time_bonus}")
        lines.append(f"  - Difficulty multiplier: x{self.multiplier}")
        if self.penalty_multiplier is not None:
            lines.append(f"  - Hint penalty: x{self.penalty_multiplier:.2f}")
        return "\n".join(lines)


class ScoringEngine:
    """
    Stateless scoring engine.

    All methods are class methods operating on immutable data.
    """

    BASE_POINTS = 100
    EFFICIENCY_POINTS = 10
    PAR_TIME_MS = 30000
    POINTS_PER_SECOND = 2
    TIMED_BONUS_MAX = 100
    MINIMUM_SCORE = 50

    @classmethod
    def efficiency_bonus(cls, max_incorrect: int, incorrect_count: int) -> int:
        return max(0, (max_incorrect - incorrect_count) * cls.EFFICIENCY_POINTS)

    @classmethod
    def time_bonus(cls, elapsed_ms: float) -> int:
        """Bonus for finishing under par in normal play."""
        seconds_under_par = math.floor((cls.PAR_TIME_MS - elapsed_ms) / 1000)
        return max(0, seconds_under_par * cls.POINTS_PER_SECOND)

    @classmethod
    def timed_bonus(cls, time_remaining_ms: float, time_limit_ms: float) -> int:
        """Bonus proportional to the countdown left in timed mode."""
        if time_limit_ms <= 0:
            return 0
        return round_half_up(time_remaining_ms / time_limit_ms * cls.TIMED_BONUS_MAX)

    @classmethod
    def breakdown(cls, score_input: ScoreInput) -> ScoreBreakdown:
        """
        Calculate the score for a won round with every component.

        Args:
            score_input: Round facts

        Returns:
            ScoreBreakdown whose `total` is the awarded score
        """
        efficiency = cls.efficiency_bonus(score_input.max_incorrect, score_input.incorrect_count)
        if score_input.is_timed:
            time_bonus = cls.timed_bonus(score_input.time_remaining_ms, score_input.time_limit_ms)
        else:
            time_bonus = cls.time_bonus(score_input.elapsed_ms)

        multiplier = score_input.difficulty.multiplier
        raw = (cls.BASE_POINTS + efficiency + time_bonus) * multiplier

        total = raw
        if score_input.penalty_multiplier is not None:
            total = round_half_up(raw * score_input.penalty_multiplier)

        return ScoreBreakdown(
            base=cls.BASE_POINTS,
            efficiency_bonus=efficiency,
            time_bonus=time_bonus,
            multiplier=multiplier,
            raw=raw,
            penalty_multiplier=score_input.penalty_multiplier,
            total=max(cls.MINIMUM_SCORE, total),
        )

    @classmethod
    def calculate(cls, score_input: ScoreInput) -> int:
        """Calculate the awarded score for a won round."""
        return cls.breakdown(score_input).total
