"""
Hangman - Round State Machine Tests

Tests for guessing, win/loss detection, hints, pause/resume and quit.
"""

import random

import pytest

from src.engine.base import Difficulty, GuessStatus, RoundStatus
from src.engine.errors import InputErrorReason
from src.engine.round import GameStateMachine
from src.engine.word_selector import WordSelection


@pytest.fixture
def machine(clock) -> GameStateMachine:
    machine = GameStateMachine(clock, random.Random(3))
    machine.start(WordSelection("cat", Difficulty.EASY, "animals"))
    return machine


class TestStart:
    def test_round_ids_increase(self, machine):
        first = machine.round.round_id
        machine.start(WordSelection("dog", Difficulty.EASY, "animals"))
        assert machine.round.round_id == first + 1

    def test_max_incorrect_override(self, machine):
        rnd = machine.start(WordSelection("dog", Difficulty.EASY, "animals"), max_incorrect=3)
        assert rnd.max_incorrect == 3


class TestGuess:
    """Tests for GameStateMachine.guess."""

    def test_correct_guess_reveals_all_positions(self, clock):
        machine = GameStateMachine(clock)
        machine.start(WordSelection("banana", Difficulty.EASY, "food"))
        result = machine.guess("a")
        assert result.status == GuessStatus.CORRECT
        assert result.positions == (1, 3, 5)
        assert machine.round.masked_word == "_a_a_a"

    def test_incorrect_guess_recorded(self, machine):
        result = machine.guess("x")
        assert result.status == GuessStatus.INCORRECT
        assert machine.round.incorrect_guesses == ("x",)
        assert "x" in machine.round.guessed_letters

    def test_repeat_guess_is_noop(self, machine):
        machine.guess("x")
        before = machine.round
        result = machine.guess("X")
        assert result.status == GuessStatus.ALREADY_GUESSED
        assert machine.round is before

    def test_invalid_guess_leaves_round_unchanged(self, machine):
        before = machine.round
        result = machine.guess("7")
        assert result.status == GuessStatus.INVALID
        assert result.reason == InputErrorReason.DIGIT
        assert result.message
        assert machine.round is before

    def test_win(self, machine):
        for letter in "cat":
            result = machine.guess(letter)
        assert result.round_status == RoundStatus.WON
        assert machine.round.incorrect_guesses == ()
        assert machine.round.ended_at is not None

    def test_loss_after_max_incorrect(self, machine):
        for letter in "xzqwy":
            assert machine.guess(letter).round_status == RoundStatus.PLAYING
        assert machine.guess("v").round_status == RoundStatus.LOST

    def test_no_guess_after_terminal(self, machine):
        for letter in "cat":
            machine.guess(letter)
        result = machine.guess("b")
        assert result.status == GuessStatus.NOT_PLAYING
        assert "b" not in machine.round.guessed_letters

    def test_incorrect_subset_of_guessed(self, machine):
        for letter in "xcqa":
            machine.guess(letter)
        rnd = machine.round
        assert set(rnd.incorrect_guesses) <= rnd.guessed_letters


class TestHint:
    def test_hint_picks_hidden_letter(self, machine):
        machine.guess("c")
        assert machine.choose_hint() in ("a", "t")

    def test_no_hint_when_not_playing(self, machine):
        machine.pause()
        assert machine.choose_hint() is None


class TestPauseResume:
    def test_pause_only_from_playing(self, machine):
        assert machine.pause()
        assert not machine.pause()
        assert machine.status == RoundStatus.PAUSED

    def test_resume_only_from_paused(self, machine):
        assert not machine.resume()
        machine.pause()
        assert machine.resume()
        assert machine.status == RoundStatus.PLAYING

    def test_guess_rejected_while_paused(self, machine):
        machine.pause()
        assert machine.guess("c").status == GuessStatus.NOT_PLAYING

    def test_paused_time_excluded(self, machine, clock):
        clock.advance(1000)
        machine.pause()
        clock.advance(5000)
        machine.resume()
        clock.advance(1000)
        assert machine.elapsed_ms() == 2000


class TestQuitAndForceLoss:
    def test_quit_from_paused(self, machine):
        machine.pause()
        assert machine.quit()
        assert machine.status == RoundStatus.QUIT
        assert machine.round.paused_at is None

    def test_quit_twice(self, machine):
        machine.quit()
        assert not machine.quit()

    def test_force_loss(self, machine):
        assert machine.force_loss()
        assert machine.status == RoundStatus.LOST
        assert not machine.force_loss()
