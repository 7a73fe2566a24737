"""
Hangman - Round State Machine

Owns one round's lifecycle:

    Playing -> Paused | Won | Lost | Quit
    Paused  -> Playing | Quit

Won, Lost and Quit are terminal until a new round is started. Every
transition replaces the immutable Round snapshot; nothing mutates it
in place. Scoring, statistics and the other end-of-round effects are
driven by the caller (see src.engine.game).
"""

import logging
import random

from src.engine.base import (
    DEFAULT_MAX_INCORRECT,
    GuessResult,
    GuessStatus,
    Round,
    RoundStatus,
)
from src.engine.errors import InputError
from src.engine.scheduler import Clock, monotonic_ms
from src.engine.validators import validate_guess
from src.engine.word_selector import WordSelection

logger = logging.getLogger(__name__)


class GameStateMachine:
    """Round lifecycle and guess handling."""

    def __init__(self, clock: Clock | None = None, rng: random.Random | None = None) -> None:
        self.clock = clock or monotonic_ms
        self.rng = rng or random.Random()
        self._round: Round | None = None
        self._next_id = 1

    @property
    def round(self) -> Round | None:
        return self._round

    @property
    def status(self) -> RoundStatus | None:
        return self._round.status if self._round else None

    @property
    def is_playing(self) -> bool:
        return self._round is not None and self._round.status == RoundStatus.PLAYING

    def start(self, selection: WordSelection, max_incorrect: int = DEFAULT_MAX_INCORRECT) -> Round:
        """Replace the current round with a fresh Playing round."""
        self._round = Round.start(
            round_id=self._next_id,
            word=selection.word,
            difficulty=selection.difficulty,
            category=selection.category,
            max_incorrect=max_incorrect,
            started_at=self.clock(),
        )
        self._next_id += 1
        logger.debug(
            "Round %d started (%s/%s, %d letters)",
            self._round.round_id,
            selection.difficulty.value,
            selection.category,
            len(selection.word),
        )
        return self._round

    def guess(self, raw: object) -> GuessResult:
        """
        Guess a letter.

        Validation failures, repeats and guesses outside play never
        change the round.

        Args:
            raw: The letter as typed

        Returns:
            GuessResult describing what happened
        """
        rnd = self._round
        if rnd is None or rnd.status != RoundStatus.PLAYING:
            status = rnd.status if rnd else RoundStatus.QUIT
            return GuessResult(status=GuessStatus.NOT_PLAYING, round_status=status)

        try:
            letter = validate_guess(raw)
        except InputError as exc:
            return GuessResult(
                status=GuessStatus.INVALID,
                round_status=rnd.status,
                reason=exc.reason,
                message=exc.message,
            )

        if letter in rnd.guessed_letters:
            return GuessResult(
                status=GuessStatus.ALREADY_GUESSED,
                letter=letter,
                round_status=rnd.status,
                message=f"You already guessed '{letter}'.",
            )

        guessed = rnd.guessed_letters | {letter}
        positions = tuple(i for i, ch in enumerate(rnd.word) if ch == letter)

        if positions:
            revealed = tuple(
                shown or i in positions for i, shown in enumerate(rnd.revealed)
            )
            updated = rnd.evolve(guessed_letters=guessed, revealed=revealed)
            if updated.is_solved:
                updated = self._finish(updated, RoundStatus.WON)
            self._round = updated
            return GuessResult(
                status=GuessStatus.CORRECT,
                letter=letter,
                positions=positions,
                round_status=updated.status,
            )

        incorrect = rnd.incorrect_guesses + (letter,)
        updated = rnd.evolve(guessed_letters=guessed, incorrect_guesses=incorrect)
        if len(incorrect) >= updated.max_incorrect:
            updated = self._finish(updated, RoundStatus.LOST)
        self._round = updated
        return GuessResult(
            status=GuessStatus.INCORRECT,
            letter=letter,
            round_status=updated.status,
        )

    def choose_hint(self) -> str | None:
        """Pick one still-hidden letter uniformly at random."""
        if not self.is_playing:
            return None
        hidden = [
            ch for ch, shown in zip(self._round.word, self._round.revealed) if not shown
        ]
        if not hidden:
            return None
        return self.rng.choice(sorted(set(hidden)))

    def pause(self) -> bool:
        if not self.is_playing:
            return False
        self._round = self._round.evolve(status=RoundStatus.PAUSED, paused_at=self.clock())
        return True

    def resume(self) -> bool:
        rnd = self._round
        if rnd is None or rnd.status != RoundStatus.PAUSED:
            return False
        self._round = self._unpause(rnd).evolve(status=RoundStatus.PLAYING)
        return True

    def quit(self) -> bool:
        """Abandon the round; a quit round is never scored or recorded."""
        rnd = self._round
        if rnd is None or rnd.status not in (RoundStatus.PLAYING, RoundStatus.PAUSED):
            return False
        if rnd.status == RoundStatus.PAUSED:
            rnd = self._unpause(rnd)
        self._round = self._finish(rnd, RoundStatus.QUIT)
        return True

    def force_loss(self) -> bool:
        """End a Playing round as Lost regardless of guesses (e.g. time up)."""
        if not self.is_playing:
            return False
        self._round = self._finish(self._round, RoundStatus.LOST)
        return True

    def elapsed_ms(self) -> float:
        if self._round is None:
            return 0.0
        return self._round.elapsed_ms(self.clock())

    def _unpause(self, rnd: Round) -> Round:
        if rnd.paused_at is None:
            return rnd
        paused_for = self.clock() - rnd.paused_at
        return rnd.evolve(paused_at=None, paused_ms=rnd.paused_ms + paused_for)

    def _finish(self, rnd: Round, status: RoundStatus) -> Round:
        logger.debug("Round %d finished: %s", rnd.round_id, status.value)
        return rnd.evolve(status=status, ended_at=self.clock())
