"""
Hangman - Statistics Aggregator

Records every won or lost round and keeps cumulative counters,
per-difficulty and per-category breakdowns, a bounded game history,
daily buckets and derived performance metrics. Weekly and monthly
rollups are computed on demand from the daily buckets.
"""

import csv
import io
import json
import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone

from src.engine.base import Difficulty, RoundOutcome

logger = logging.getLogger(__name__)

HISTORY_CAPACITY = 100
DAILY_TREND_DAYS = 30
ROLLUP_PERIODS = 12
IMPROVEMENT_MIN_GAMES = 10
IMPROVEMENT_WINDOW = 5


@dataclass
class BreakdownStats:
    """Per-difficulty or per-category counters."""
    played: int = 0
    won: int = 0
    lost: int = 0
    total_time: float = 0
    average_time: int = 0
    best_time: float | None = None

    def record(self, won: bool, play_time: float) -> None:
        self.played += 1
        self.total_time += play_time
        self.average_time = round(self.total_time / self.played)
        if won:
            self.won += 1
            if self.best_time is None or play_time < self.best_time:
                self.best_time = play_time
        else:
            self.lost += 1


@dataclass
class DailyStats:
    """One calendar day of play."""
    games_played: int = 0
    games_won: int = 0
    games_lost: int = 0
    total_time: float = 0
    total_score: int = 0
    average_time: int = 0


@dataclass
class GameRecord:
    """One entry of the bounded game history."""
    result: str
    difficulty: str
    category: str
    play_time: float
    total_guesses: int
    correct_guesses: int
    incorrect_guesses: int
    score: int
    timestamp: str
    word: str
    mode: str = "normal"


@dataclass
class PerformanceMetrics:
    """Derived metrics, recomputed after every round."""
    accuracy: int = 0
    efficiency: int = 0
    consistency: int = 0
    improvement: int = 0


@dataclass
class StatisticsRecord:
    """Everything the aggregator persists."""
    games_played: int = 0
    games_won: int = 0
    games_lost: int = 0
    win_percentage: int = 0
    total_guesses: int = 0
    total_correct_guesses: int = 0
    average_guesses_per_game: int = 0
    total_score: int = 0
    fastest_completion_time: float | None = None
    current_streak: int = 0
    best_streak: int = 0
    current_loss_streak: int = 0
    longest_loss_streak: int = 0
    total_play_time: float = 0
    average_play_time: int = 0
    difficulty_stats: dict[str, BreakdownStats] = field(
        default_factory=lambda: {d.value: BreakdownStats() for d in Difficulty}
    )
    category_stats: dict[str, BreakdownStats] = field(default_factory=dict)
    game_history: list[GameRecord] = field(default_factory=list)
    daily_stats: dict[str, DailyStats] = field(default_factory=dict)
    performance_metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    last_played: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StatisticsRecord":
        """Build a record from an already-validated snapshot dict."""
        scalars = {
            k: v for k, v in data.items()
            if k not in (
                "difficulty_stats", "category_stats", "game_history",
                "daily_stats", "performance_metrics",
            )
        }
        record = cls(**scalars)
        difficulty_stats = {d.value: BreakdownStats() for d in Difficulty}
        for key, value in (data.get("difficulty_stats") or {}).items():
            difficulty_stats[key] = BreakdownStats(**value)
        record.difficulty_stats = difficulty_stats
        record.category_stats = {
            k: BreakdownStats(**v) for k, v in (data.get("category_stats") or {}).items()
        }
        record.game_history = [GameRecord(**g) for g in data.get("game_history") or []]
        record.daily_stats = {
            k: DailyStats(**v) for k, v in (data.get("daily_stats") or {}).items()
        }
        record.performance_metrics = PerformanceMetrics(**(data.get("performance_metrics") or {}))
        return record


def week_key(day: date) -> str:
    """ISO week key, e.g. 2026-W07."""
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def _win_rate(won: int, played: int) -> int:
    return round(won / played * 100) if played else 0


class StatisticsAggregator:
    """Records round outcomes and produces rollups and insights."""

    def __init__(
        self,
        record: StatisticsRecord | None = None,
        history_capacity: int = HISTORY_CAPACITY,
    ) -> None:
        self.record = record or StatisticsRecord()
        self.history_capacity = history_capacity
        self._trim_history()

    # -- Recording ---------------------------------------------------------

    def record_round(self, outcome: RoundOutcome, when: datetime | None = None) -> GameRecord:
        """
        Fold a finished round into every aggregate.

        Args:
            outcome: The won or lost round
            when: Wall-clock time of the outcome (defaults to now)

        Returns:
            The history entry that was appended
        """
        when = when or datetime.now(timezone.utc)
        stats = self.record
        rnd = outcome.round
        play_time = outcome.elapsed_ms
        total_guesses = len(rnd.guessed_letters)
        correct_guesses = rnd.correct_guesses

        entry = GameRecord(
            result="won" if outcome.won else "lost",
            difficulty=rnd.difficulty.value,
            category=rnd.category,
            play_time=play_time,
            total_guesses=total_guesses,
            correct_guesses=correct_guesses,
            incorrect_guesses=len(rnd.incorrect_guesses),
            score=outcome.score,
            timestamp=when.isoformat(),
            word=rnd.word,
            mode=outcome.mode,
        )
        stats.game_history.append(entry)
        self._trim_history()

        stats.games_played += 1
        if outcome.won:
            stats.games_won += 1
            stats.current_streak += 1
            stats.best_streak = max(stats.best_streak, stats.current_streak)
            stats.current_loss_streak = 0
            if stats.fastest_completion_time is None or play_time < stats.fastest_completion_time:
                stats.fastest_completion_time = play_time
        else:
            stats.games_lost += 1
            stats.current_streak = 0
            stats.current_loss_streak += 1
            stats.longest_loss_streak = max(stats.longest_loss_streak, stats.current_loss_streak)

        stats.win_percentage = _win_rate(stats.games_won, stats.games_played)
        stats.total_guesses += total_guesses
        stats.total_correct_guesses += correct_guesses
        stats.average_guesses_per_game = round(stats.total_guesses / stats.games_played)
        stats.total_score += outcome.score
        stats.total_play_time += play_time
        stats.average_play_time = round(stats.total_play_time / stats.games_played)

        stats.difficulty_stats.setdefault(rnd.difficulty.value, BreakdownStats()).record(
            outcome.won, play_time
        )
        stats.category_stats.setdefault(rnd.category, BreakdownStats()).record(
            outcome.won, play_time
        )

        day = stats.daily_stats.setdefault(when.date().isoformat(), DailyStats())
        day.games_played += 1
        day.total_time += play_time
        day.total_score += outcome.score
        day.average_time = round(day.total_time / day.games_played)
        if outcome.won:
            day.games_won += 1
        else:
            day.games_lost += 1

        self.update_performance_metrics()
        stats.last_played = when.isoformat()
        logger.debug(
            "Recorded %s round (%s/%s) in %.0f ms",
            entry.result, entry.difficulty, entry.category, play_time,
        )
        return entry

    def update_performance_metrics(self) -> PerformanceMetrics:
        """Recompute accuracy, efficiency, consistency and improvement."""
        stats = self.record
        metrics = stats.performance_metrics
        history = stats.game_history
        if not history:
            return metrics

        metrics.accuracy = (
            round(stats.total_correct_guesses / stats.total_guesses * 100)
            if stats.total_guesses else 0
        )

        total_minutes = stats.total_play_time / 60000
        metrics.efficiency = round(stats.total_score / total_minutes) if total_minutes > 0 else 0

        completion_times = [g.play_time for g in history if g.result == "won"]
        if len(completion_times) > 1:
            mean = sum(completion_times) / len(completion_times)
            variance = sum((t - mean) ** 2 for t in completion_times) / len(completion_times)
            metrics.consistency = round(math.sqrt(variance))

        if len(history) >= IMPROVEMENT_MIN_GAMES:
            recent = history[-IMPROVEMENT_WINDOW:]
            older = history[-2 * IMPROVEMENT_WINDOW:-IMPROVEMENT_WINDOW]
            recent_avg = sum(g.play_time for g in recent) / len(recent)
            older_avg = sum(g.play_time for g in older) / len(older)
            metrics.improvement = (
                round((older_avg - recent_avg) / older_avg * 100) if older_avg > 0 else 0
            )
        return metrics

    def _trim_history(self) -> None:
        history = self.record.game_history
        if len(history) > self.history_capacity:
            del history[: len(history) - self.history_capacity]

    # -- Queries -----------------------------------------------------------

    @property
    def categories_played(self) -> int:
        return sum(1 for s in self.record.category_stats.values() if s.played > 0)

    def snapshot(self) -> StatisticsRecord:
        """Deep copy of the record, safe to hand out."""
        return StatisticsRecord.from_dict(self.record.to_dict())

    def daily_trend(self) -> list[dict]:
        """The last 30 days with play, oldest first."""
        days = sorted(self.record.daily_stats.items())[-DAILY_TREND_DAYS:]
        return [
            {
                "date": key,
                "games_played": d.games_played,
                "games_won": d.games_won,
                "win_rate": _win_rate(d.games_won, d.games_played),
                "average_time": d.average_time,
                "total_score": d.total_score,
            }
            for key, d in days
        ]

    def weekly_rollup(self) -> list[dict]:
        return self._rollup("week", week_key)

    def monthly_rollup(self) -> list[dict]:
        return self._rollup("month", month_key)

    def _rollup(self, label: str, key_fn) -> list[dict]:
        """Aggregate daily buckets into coarser periods, keeping the latest 12."""
        buckets: dict[str, dict] = {}
        for day_key, data in self.record.daily_stats.items():
            period = key_fn(date.fromisoformat(day_key))
            bucket = buckets.setdefault(period, {
                label: period,
                "games_played": 0,
                "games_won": 0,
                "total_time": 0,
                "total_score": 0,
            })
            bucket["games_played"] += data.games_played
            bucket["games_won"] += data.games_won
            bucket["total_time"] += data.total_time
            bucket["total_score"] += data.total_score

        ordered = [buckets[k] for k in sorted(buckets)][-ROLLUP_PERIODS:]
        for bucket in ordered:
            played = bucket["games_played"]
            bucket["win_rate"] = _win_rate(bucket["games_won"], played)
            bucket["average_time"] = round(bucket["total_time"] / played) if played else 0
        return ordered

    def trends(self) -> dict[str, list[dict]]:
        return {
            "daily": self.daily_trend(),
            "weekly": self.weekly_rollup(),
            "monthly": self.monthly_rollup(),
        }

    def insights(self) -> dict[str, list[str]]:
        """Advisory strengths, improvements and recommendations."""
        stats = self.record
        metrics = stats.performance_metrics
        strengths: list[str] = []
        improvements: list[str] = []
        recommendations: list[str] = []

        if metrics.accuracy > 80:
            strengths.append("High accuracy in letter guessing")
        elif metrics.accuracy < 60:
            improvements.append("Consider being more strategic with letter choices")

        if metrics.efficiency > 50:
            strengths.append("Efficient scoring rate")
        elif metrics.efficiency < 20:
            improvements.append("Try to complete games faster for better scores")

        if metrics.consistency < 10000:
            strengths.append("Consistent completion times")
        else:
            improvements.append("Work on maintaining consistent performance")

        if metrics.improvement > 10:
            strengths.append("Improving over time")
        elif metrics.improvement < -10:
            improvements.append("Performance has declined recently")

        if stats.win_percentage < 50:
            recommendations.append("Try playing on easier difficulty to build confidence")
        if stats.current_streak == 0 and stats.games_played > 5:
            recommendations.append("Focus on consistency to build winning streaks")
        if stats.average_play_time > 60000:
            recommendations.append("Try to make faster decisions to improve your time")

        return {
            "strengths": strengths,
            "improvements": improvements,
            "recommendations": recommendations,
        }

    def dashboard(self, achievement_summary: dict | None = None) -> dict:
        """Statistics plus trends, insights and an achievement summary."""
        data = self.record.to_dict()
        data["achievements"] = achievement_summary or {}
        data["trends"] = self.trends()
        data["insights"] = self.insights()
        return data

    # -- Export / reset ----------------------------------------------------

    def export_json(self, achievements: dict | None = None, exported_at: datetime | None = None) -> str:
        exported_at = exported_at or datetime.now(timezone.utc)
        payload = {
            "export_date": exported_at.isoformat(),
            "version": "1.0",
            "statistics": self.dashboard(),
            "achievements": achievements or {},
            "game_history": [asdict(g) for g in self.record.game_history],
        }
        return json.dumps(payload, indent=2)

    def export_csv(self) -> str:
        """Game history as CSV, one row per round."""
        if not self.record.game_history:
            return "No game history available for export"

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow([
            "Date", "Result", "Difficulty", "Category", "Play Time (ms)",
            "Total Guesses", "Correct Guesses", "Incorrect Guesses", "Score", "Word",
        ])
        for g in self.record.game_history:
            writer.writerow([
                g.timestamp[:10], g.result, g.difficulty, g.category, round(g.play_time),
                g.total_guesses, g.correct_guesses, g.incorrect_guesses, g.score, g.word,
            ])
        return buffer.getvalue().rstrip("\n")

    def reset(self) -> None:
        self.record = StatisticsRecord()
