"""
Hangman - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. Rounds and results are immutable (frozen dataclasses); every
transition produces a new value instead of mutating the old one.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from src.engine.errors import InputErrorReason


DEFAULT_MAX_INCORRECT = 6


class Difficulty(Enum):
    """Difficulty tiers, each with its own word pool and score multiplier."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def multiplier(self) -> int:
        return _MULTIPLIERS[self]

    @classmethod
    def parse(cls, value: "str | Difficulty") -> "Difficulty":
        """Accept either a Difficulty or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown difficulty {value!r}.") from None


_MULTIPLIERS = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 3,
}


class RoundStatus(Enum):
    """Lifecycle states of a single round."""
    PLAYING = "playing"
    PAUSED = "paused"
    WON = "won"
    LOST = "lost"
    QUIT = "quit"

    @property
    def is_terminal(self) -> bool:
        return self in (RoundStatus.WON, RoundStatus.LOST, RoundStatus.QUIT)


class GuessStatus(Enum):
    """Outcome categories for a guess attempt."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    ALREADY_GUESSED = "already_guessed"
    INVALID = "invalid"
    NOT_PLAYING = "not_playing"


def key_for(difficulty: Difficulty | str, category: str) -> str:
    """Build the `difficulty-category` key used by seen-sets and best times."""
    value = difficulty.value if isinstance(difficulty, Difficulty) else difficulty
    return f"{value}-{category}"


@dataclass(frozen=True)
class Round:
    """
    Immutable snapshot of one round.

    Attributes:
        round_id: Monotonic identifier, used to detect stale timer callbacks
        word: Lowercase target word, may contain interior spaces
        difficulty: Tier the word was drawn from
        category: Category the word was drawn from
        revealed: Per-character revealed mask (non-letters start revealed)
        guessed_letters: Every letter guessed so far
        incorrect_guesses: Misses in the order they were made
        max_incorrect: Misses allowed before the round is lost
        status: Current lifecycle state
        started_at: Clock reading (ms) when the round started
        ended_at: Clock reading (ms) when the round left play
        paused_at: Clock reading (ms) of the current pause, if paused
        paused_ms: Total time spent paused so far
    """
    round_id: int
    word: str
    difficulty: Difficulty
    category: str
    revealed: tuple[bool, ...]
    guessed_letters: frozenset[str] = field(default_factory=frozenset)
    incorrect_guesses: tuple[str, ...] = field(default_factory=tuple)
    max_incorrect: int = DEFAULT_MAX_INCORRECT
    status: RoundStatus = RoundStatus.PLAYING
    started_at: float = 0.0
    ended_at: float | None = None
    paused_at: float | None = None
    paused_ms: float = 0.0

    def __post_init__(self) -> None:
        """Validate structural invariants."""
        if len(self.revealed) != len(self.word):
            raise ValueError("Revealed mask must match the word length.")
        if self.max_incorrect < 1:
            raise ValueError(f"max_incorrect must be positive, got {self.max_incorrect}.")
        if not set(self.incorrect_guesses) <= self.guessed_letters:
            raise ValueError("Incorrect guesses must be a subset of guessed letters.")

    @classmethod
    def start(
        cls,
        round_id: int,
        word: str,
        difficulty: Difficulty,
        category: str,
        max_incorrect: int = DEFAULT_MAX_INCORRECT,
        started_at: float = 0.0,
    ) -> "Round":
        """Create a fresh Playing round with every letter hidden."""
        word = word.lower()
        revealed = tuple(not ch.isalpha() for ch in word)
        return cls(
            round_id=round_id,
            word=word,
            difficulty=difficulty,
            category=category,
            revealed=revealed,
            max_incorrect=max_incorrect,
            started_at=started_at,
        )

    @property
    def masked_word(self) -> str:
        """Word with hidden letters shown as underscores."""
        return "".join(
            ch if shown else "_" for ch, shown in zip(self.word, self.revealed)
        )

    @property
    def hidden_letters(self) -> tuple[str, ...]:
        """Distinct letters still hidden, in word order."""
        seen: list[str] = []
        for ch, shown in zip(self.word, self.revealed):
            if not shown and ch not in seen:
                seen.append(ch)
        return tuple(seen)

    @property
    def correct_guesses(self) -> int:
        return len(self.guessed_letters) - len(self.incorrect_guesses)

    @property
    def remaining_attempts(self) -> int:
        return max(0, self.max_incorrect - len(self.incorrect_guesses))

    @property
    def is_solved(self) -> bool:
        return all(self.revealed)

    def elapsed_ms(self, now: float) -> float:
        """Active play time, excluding time spent paused."""
        end = self.ended_at if self.ended_at is not None else now
        paused = self.paused_ms
        if self.paused_at is not None and self.ended_at is None:
            paused += now - self.paused_at
        return max(0.0, end - self.started_at - paused)

    def evolve(self, **changes) -> "Round":
        return replace(self, **changes)


@dataclass(frozen=True)
class GuessResult:
    """
    Result of a guess attempt.

    Attributes:
        status: What happened to the guess
        letter: The normalized letter (empty when validation failed)
        positions: Word indices revealed by this guess
        round_status: Status of the round after the guess
        reason: Validation failure reason for INVALID guesses
        message: User-facing message for INVALID guesses
    """
    status: GuessStatus
    letter: str = ""
    positions: tuple[int, ...] = field(default_factory=tuple)
    round_status: RoundStatus = RoundStatus.PLAYING
    reason: InputErrorReason | None = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.status in (GuessStatus.CORRECT, GuessStatus.INCORRECT)

    @property
    def ends_round(self) -> bool:
        return self.round_status in (RoundStatus.WON, RoundStatus.LOST)


@dataclass(frozen=True)
class RoundOutcome:
    """
    Everything the terminal pipeline needs to know about a finished round.

    Attributes:
        round: The final round snapshot
        won: Whether the word was solved
        elapsed_ms: Active play time
        score: Points awarded (0 for a loss)
        mode: Name of the active mode when the round ended
    """
    round: Round
    won: bool
    elapsed_ms: float
    score: int = 0
    mode: str = "normal"

    @property
    def difficulty(self) -> Difficulty:
        return self.round.difficulty

    @property
    def category(self) -> str:
        return self.round.category

    @property
    def incorrect_count(self) -> int:
        return len(self.round.incorrect_guesses)
