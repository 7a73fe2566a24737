"""
Hangman - Game Mode Controllers

Exactly one mode is active at a time:

    Mode = NormalMode | PracticeMode | TimedMode | MultiplayerMode

Each controller reconfigures the engine through the same hooks: word
selection filters, mistake allowance, scoring inputs, and what happens
when a round starts, pauses, resumes or ends. Controllers own their
timers and cancel them on every transition that invalidates them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from src.engine.base import Difficulty, Round, RoundOutcome, RoundStatus, key_for
from src.engine.events import GameEvent
from src.engine.scheduler import ScheduledTask, Scheduler
from src.engine.scoring import ScoreInput
from src.engine.validators import validate_player_names, validate_time_limit, validate_total_rounds
from src.engine.word_selector import LengthFilter, SelectionFilters

logger = logging.getLogger(__name__)

TICK_MS = 100
DEFAULT_TIME_LIMIT_MS = 60000
AUTO_CONTINUE_DELAY_MS = 1500
AUTO_ADVANCE_DELAY_MS = 2000


class ModeHost(Protocol):
    """The slice of the engine a mode controller may touch."""

    scheduler: Scheduler

    @property
    def round(self) -> Round | None: ...

    def expire_round(self) -> None: ...

    def advance_round(self, round_id: int) -> None: ...

    def finish_multiplayer(self, result: "MultiplayerResult") -> None: ...

    def emit(self, event: GameEvent, **data) -> None: ...

    def save(self, key: str, value) -> bool: ...


class ModeController:
    """Normal play; the base every other mode overrides."""

    name = "normal"
    tracks_progress = True

    def __init__(self) -> None:
        self._host: ModeHost | None = None
        self._tasks: list[ScheduledTask] = []

    def attach(self, host: ModeHost) -> None:
        self._host = host

    def detach(self) -> None:
        self.cancel_timers()
        self._host = None

    # -- Configuration hooks -----------------------------------------------

    def locked_difficulty(self) -> Difficulty | None:
        return None

    def max_incorrect(self, default: int) -> int:
        return default

    def selection_filters(self) -> SelectionFilters | None:
        return None

    def score_input(self, score_input: ScoreInput) -> ScoreInput:
        return score_input

    # -- Lifecycle hooks ---------------------------------------------------

    def on_round_start(self, rnd: Round) -> None:
        pass

    def on_hint(self) -> None:
        pass

    def on_pause(self) -> None:
        pass

    def on_resume(self) -> None:
        pass

    def on_round_end(self, outcome: RoundOutcome) -> None:
        pass

    def on_reset(self) -> None:
        """Called when the current round is quit or about to be replaced."""
        self.cancel_timers()

    # -- Timers ------------------------------------------------------------

    def schedule_advance(self, delay_ms: float, round_id: int, name: str) -> ScheduledTask:
        """Schedule the next round, guarded against the round having changed."""
        host = self._host
        task = host.scheduler.call_later(
            delay_ms, lambda: host.advance_round(round_id), name=name
        )
        self._tasks.append(task)
        return task

    def cancel_timers(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    def describe(self) -> dict:
        return {"name": self.name}


class NormalMode(ModeController):
    """Standard play: achievements and progression active, no timers."""


# =============================================================================
# PRACTICE MODE
# =============================================================================


@dataclass(frozen=True)
class PracticeConfig:
    """
    Practice mode options.

    Attributes:
        allow_repeats: Serve words already seen under the same key
        endless: Start the next round automatically after each one
        locked_difficulty: Keep every round at this tier
        max_mistakes_override: Replace the default mistake allowance
        word_length_filter: Only serve words within these bounds
    """
    allow_repeats: bool = True
    endless: bool = True
    locked_difficulty: Difficulty | None = None
    max_mistakes_override: int | None = None
    word_length_filter: LengthFilter | None = None

    def __post_init__(self) -> None:
        if self.max_mistakes_override is not None and self.max_mistakes_override < 1:
            raise ValueError(
                f"max_mistakes_override must be positive, got {self.max_mistakes_override}."
            )


@dataclass
class CategoryProgress:
    """Practice results for one category."""
    played: int = 0
    correct: int = 0
    wrong: int = 0
    mastered_words: list[str] = field(default_factory=list)


@dataclass
class PracticeProgress:
    """Per-category practice history, persisted across sessions."""
    per_category: dict[str, CategoryProgress] = field(default_factory=dict)

    MASTERY_MAX_INCORRECT = 1

    def record(self, category: str, word: str, won: bool, incorrect_count: int) -> bool:
        """
        Count a practice round.

        Returns:
            True if the word became newly mastered
        """
        stats = self.per_category.setdefault(category, CategoryProgress())
        stats.played += 1
        if won:
            stats.correct += 1
        else:
            stats.wrong += 1
        if won and incorrect_count <= self.MASTERY_MAX_INCORRECT and word not in stats.mastered_words:
            stats.mastered_words.append(word)
            return True
        return False

    def to_dict(self) -> dict:
        return {
            "per_category": {
                k: {
                    "played": v.played,
                    "correct": v.correct,
                    "wrong": v.wrong,
                    "mastered_words": list(v.mastered_words),
                }
                for k, v in self.per_category.items()
            }
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PracticeProgress":
        return cls(per_category={
            k: CategoryProgress(**v) for k, v in (data.get("per_category") or {}).items()
        })


class PracticeMode(ModeController):
    """Relaxed play with hints penalties, repeat control and mastery tracking."""

    name = "practice"
    tracks_progress = False
    HINT_PENALTY = 0.9

    def __init__(
        self,
        config: PracticeConfig | None = None,
        progress: PracticeProgress | None = None,
        auto_continue_delay_ms: float = AUTO_CONTINUE_DELAY_MS,
    ) -> None:
        super().__init__()
        self.config = config or PracticeConfig()
        self.progress = progress if progress is not None else PracticeProgress()
        self.auto_continue_delay_ms = auto_continue_delay_ms
        self.hints_used = 0
        self.score_penalty_multiplier = 1.0
        self.filters = SelectionFilters(
            length=self.config.word_length_filter,
            exclude_seen=not self.config.allow_repeats,
            track_seen=True,
        )

    @property
    def seen_words_by_key(self) -> dict[str, set[str]]:
        return self.filters.seen_words_by_key

    def locked_difficulty(self) -> Difficulty | None:
        return self.config.locked_difficulty

    def max_incorrect(self, default: int) -> int:
        if self.config.max_mistakes_override is not None:
            return self.config.max_mistakes_override
        return default

    def selection_filters(self) -> SelectionFilters:
        return self.filters

    def score_input(self, score_input: ScoreInput) -> ScoreInput:
        return replace(score_input, penalty_multiplier=self.score_penalty_multiplier)

    def on_round_start(self, rnd: Round) -> None:
        self.hints_used = 0
        self.score_penalty_multiplier = 1.0

    def on_hint(self) -> None:
        self.hints_used += 1
        self.score_penalty_multiplier *= self.HINT_PENALTY

    def on_round_end(self, outcome: RoundOutcome) -> None:
        mastered = self.progress.record(
            outcome.category, outcome.round.word, outcome.won, outcome.incorrect_count
        )
        if mastered:
            logger.info("Mastered %r in %s", outcome.round.word, outcome.category)
        self._host.save("practice_progress", self.progress.to_dict())
        if self.config.endless:
            self.schedule_advance(
                self.auto_continue_delay_ms, outcome.round.round_id, name="practice-continue"
            )

    def describe(self) -> dict:
        return {
            "name": self.name,
            "hints_used": self.hints_used,
            "score_penalty_multiplier": self.score_penalty_multiplier,
            "endless": self.config.endless,
            "allow_repeats": self.config.allow_repeats,
        }


# =============================================================================
# TIMED MODE
# =============================================================================


class TimedMode(ModeController):
    """Race a countdown; running out of time loses the round."""

    name = "timed"

    def __init__(
        self,
        time_limit: int = DEFAULT_TIME_LIMIT_MS,
        best_times: dict[str, float] | None = None,
        tick_ms: int = TICK_MS,
    ) -> None:
        super().__init__()
        self.time_limit = validate_time_limit(time_limit)
        self.time_remaining = self.time_limit
        self.best_times = best_times if best_times is not None else {}
        self.tick_ms = tick_ms
        self._countdown: ScheduledTask | None = None

    def score_input(self, score_input: ScoreInput) -> ScoreInput:
        return replace(
            score_input,
            time_remaining_ms=self.time_remaining,
            time_limit_ms=self.time_limit,
        )

    def on_round_start(self, rnd: Round) -> None:
        self.time_remaining = self.time_limit
        self.start_countdown()

    def on_pause(self) -> None:
        self.stop_countdown()

    def on_resume(self) -> None:
        self.start_countdown()

    def on_round_end(self, outcome: RoundOutcome) -> None:
        self.stop_countdown()
        if outcome.won:
            self.record_best_time(outcome.round, outcome.elapsed_ms)

    def on_reset(self) -> None:
        super().on_reset()
        self.stop_countdown()

    def detach(self) -> None:
        self.stop_countdown()
        super().detach()

    def start_countdown(self) -> None:
        self.stop_countdown()
        self._countdown = self._host.scheduler.call_every(
            self.tick_ms, self._tick, name="timed-countdown"
        )

    def stop_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    @property
    def countdown_active(self) -> bool:
        return self._countdown is not None and not self._countdown.cancelled

    def _tick(self) -> None:
        rnd = self._host.round
        if rnd is None or rnd.status != RoundStatus.PLAYING:
            return
        self.time_remaining = max(0, self.time_remaining - self.tick_ms)
        self._host.emit(GameEvent.TIMER_TICK, time_remaining=self.time_remaining)
        if self.time_remaining <= 0:
            self.time_remaining = 0
            self.stop_countdown()
            logger.info("Time up for round %d", rnd.round_id)
            self._host.emit(GameEvent.TIME_UP)
            self._host.expire_round()

    def record_best_time(self, rnd: Round, completion_ms: float) -> bool:
        """Keep the fastest win per difficulty-category key."""
        key = key_for(rnd.difficulty, rnd.category)
        best = self.best_times.get(key)
        if best is not None and completion_ms >= best:
            return False
        self.best_times[key] = completion_ms
        self._host.save("best_times", dict(self.best_times))
        self._host.emit(GameEvent.BEST_TIME_RECORDED, key=key, time=completion_ms)
        return True

    def best_time(self, difficulty: Difficulty, category: str) -> float | None:
        return self.best_times.get(key_for(difficulty, category))

    def describe(self) -> dict:
        return {
            "name": self.name,
            "time_limit": self.time_limit,
            "time_remaining": self.time_remaining,
        }


# =============================================================================
# MULTIPLAYER MODE
# =============================================================================


@dataclass
class PlayerScore:
    """A pass-and-play participant."""
    name: str
    score: int = 0
    wins: int = 0


@dataclass
class MultiplayerSession:
    """
    Turn-taking state.

    Attributes:
        players: Participants in turn order
        current_player_index: Whose turn it is
        rounds_played: Rounds finished so far (across all players)
        total_rounds: Full rotations to play, None = unlimited
    """
    players: list[PlayerScore]
    current_player_index: int = 0
    rounds_played: int = 0
    total_rounds: int | None = None

    def __post_init__(self) -> None:
        if not self.players:
            raise ValueError("A multiplayer session needs players.")
        if not 0 <= self.current_player_index < len(self.players):
            raise ValueError(f"Player index {self.current_player_index} out of range.")

    @property
    def current_player(self) -> PlayerScore:
        return self.players[self.current_player_index]

    def should_end_after_advance(self) -> bool:
        """Whether finishing the current round completes the session."""
        if self.total_rounds is None:
            return False
        completed = (self.rounds_played + 1) // len(self.players)
        return completed >= self.total_rounds

    def rotate(self) -> PlayerScore:
        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        return self.current_player


@dataclass(frozen=True)
class MultiplayerResult:
    """Final standings; `winners` holds every player tied for first."""
    standings: tuple[PlayerScore, ...]
    winners: tuple[PlayerScore, ...]
    rounds_played: int

    @property
    def is_tie(self) -> bool:
        return len(self.winners) > 1


def rank_players(players: list[PlayerScore]) -> tuple[tuple[PlayerScore, ...], tuple[PlayerScore, ...]]:
    """Order by score then wins (stable for equal players) and pick co-winners."""
    standings = tuple(sorted(players, key=lambda p: (-p.score, -p.wins)))
    top = standings[0]
    winners = tuple(p for p in standings if p.score == top.score and p.wins == top.wins)
    return standings, winners


class MultiplayerMode(ModeController):
    """Local pass-and-play: one round per turn, rotating players."""

    name = "multiplayer"

    def __init__(
        self,
        player_names: list[str],
        total_rounds: int | None = None,
        auto_advance_delay_ms: float = AUTO_ADVANCE_DELAY_MS,
    ) -> None:
        super().__init__()
        names = validate_player_names(player_names)
        self.session = MultiplayerSession(
            players=[PlayerScore(name=n) for n in names],
            total_rounds=validate_total_rounds(total_rounds),
        )
        self.auto_advance_delay_ms = auto_advance_delay_ms

    @property
    def current_player(self) -> PlayerScore:
        return self.session.current_player

    def on_round_end(self, outcome: RoundOutcome) -> None:
        session = self.session
        player = session.current_player
        player.score += outcome.score
        if outcome.won:
            player.wins += 1

        should_end = session.should_end_after_advance()
        session.rounds_played += 1

        if should_end:
            self._host.finish_multiplayer(self.finish())
            return

        next_player = session.rotate()
        self._host.emit(
            GameEvent.PLAYER_ADVANCED,
            player=next_player.name,
            player_index=session.current_player_index,
            rounds_played=session.rounds_played,
        )
        self.schedule_advance(
            self.auto_advance_delay_ms, outcome.round.round_id, name="multiplayer-advance"
        )

    def finish(self) -> MultiplayerResult:
        standings, winners = rank_players(self.session.players)
        logger.info(
            "Multiplayer session over after %d rounds; winner(s): %s",
            self.session.rounds_played,
            ", ".join(p.name for p in winners),
        )
        return MultiplayerResult(
            standings=tuple(replace(p) for p in standings),
            winners=tuple(replace(p) for p in winners),
            rounds_played=self.session.rounds_played,
        )

    def scores(self) -> list[PlayerScore]:
        return [replace(p) for p in self.session.players]

    def describe(self) -> dict:
        return {
            "name": self.name,
            "current_player": self.current_player.name,
            "current_player_index": self.session.current_player_index,
            "rounds_played": self.session.rounds_played,
            "total_rounds": self.session.total_rounds,
        }


Mode = NormalMode | PracticeMode | TimedMode | MultiplayerMode
