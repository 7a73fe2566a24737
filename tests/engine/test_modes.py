"""
Hangman - Game Mode Controller Tests

Tests for the mode controllers in isolation, driven through a mock host.
End-to-end mode behavior is covered in test_game.py.
"""

from unittest.mock import MagicMock

import pytest

from src.engine.base import Difficulty, Round, RoundOutcome, RoundStatus
from src.engine.events import GameEvent
from src.engine.modes import (
    MultiplayerMode,
    MultiplayerSession,
    NormalMode,
    PlayerScore,
    PracticeConfig,
    PracticeMode,
    PracticeProgress,
    TimedMode,
    rank_players,
)
from src.engine.scoring import ScoreInput
from src.engine.word_selector import LengthFilter


@pytest.fixture
def host(scheduler):
    """Mock ModeHost backed by the real fixture scheduler."""
    host = MagicMock()
    host.scheduler = scheduler
    host.round = Round.start(1, "cat", Difficulty.EASY, "animals")
    host.save.return_value = True
    return host


def finished(won: bool = True, round_id: int = 1, word: str = "cat", incorrect=()) -> RoundOutcome:
    rnd = Round.start(round_id, word, Difficulty.EASY, "animals").evolve(
        guessed_letters=frozenset(set(word) | set(incorrect)),
        incorrect_guesses=tuple(incorrect),
        status=RoundStatus.WON if won else RoundStatus.LOST,
    )
    return RoundOutcome(round=rnd, won=won, elapsed_ms=5000, score=150 if won else 0)


class TestNormalMode:
    def test_defaults(self):
        mode = NormalMode()
        assert mode.tracks_progress
        assert mode.max_incorrect(6) == 6
        assert mode.locked_difficulty() is None
        assert mode.selection_filters() is None


# =============================================================================
# PRACTICE
# =============================================================================


class TestPracticeConfig:
    def test_invalid_override(self):
        with pytest.raises(ValueError, match="positive"):
            PracticeConfig(max_mistakes_override=0)


class TestPracticeProgress:
    def test_mastery_requires_win_with_at_most_one_miss(self):
        progress = PracticeProgress()
        assert progress.record("animals", "cat", won=True, incorrect_count=1)
        assert not progress.record("animals", "cat", won=True, incorrect_count=0)
        assert not progress.record("animals", "dog", won=True, incorrect_count=2)
        assert not progress.record("animals", "cow", won=False, incorrect_count=6)
        stats = progress.per_category["animals"]
        assert (stats.played, stats.correct, stats.wrong) == (4, 3, 1)
        assert stats.mastered_words == ["cat"]

    def test_dict_round_trip(self):
        progress = PracticeProgress()
        progress.record("food", "soup", True, 0)
        assert PracticeProgress.from_dict(progress.to_dict()) == progress


class TestPracticeMode:
    def test_configuration_hooks(self):
        mode = PracticeMode(PracticeConfig(
            allow_repeats=False,
            locked_difficulty=Difficulty.HARD,
            max_mistakes_override=10,
            word_length_filter=LengthFilter(min=4),
        ))
        assert not mode.tracks_progress
        assert mode.locked_difficulty() == Difficulty.HARD
        assert mode.max_incorrect(6) == 10
        filters = mode.selection_filters()
        assert filters.exclude_seen
        assert filters.track_seen
        assert filters.length == LengthFilter(min=4)

    def test_hint_penalty_compounds_and_resets(self, host):
        mode = PracticeMode()
        mode.attach(host)
        mode.on_hint()
        mode.on_hint()
        assert mode.hints_used == 2
        assert mode.score_penalty_multiplier == pytest.approx(0.81)
        score_input = mode.score_input(ScoreInput(Difficulty.EASY, 0, 6))
        assert score_input.penalty_multiplier == pytest.approx(0.81)

        mode.on_round_start(host.round)
        assert mode.hints_used == 0
        assert mode.score_penalty_multiplier == 1.0

    def test_round_end_saves_and_schedules_continue(self, host, scheduler):
        mode = PracticeMode(auto_continue_delay_ms=1500)
        mode.attach(host)
        mode.on_round_end(finished())
        host.save.assert_called_once_with("practice_progress", mode.progress.to_dict())

        scheduler.advance(1499)
        host.advance_round.assert_not_called()
        scheduler.advance(1)
        host.advance_round.assert_called_once_with(1)

    def test_not_endless_does_not_continue(self, host, scheduler):
        mode = PracticeMode(PracticeConfig(endless=False))
        mode.attach(host)
        mode.on_round_end(finished())
        scheduler.advance(10000)
        host.advance_round.assert_not_called()

    def test_reset_cancels_continue(self, host, scheduler):
        mode = PracticeMode()
        mode.attach(host)
        mode.on_round_end(finished())
        mode.on_reset()
        scheduler.advance(10000)
        host.advance_round.assert_not_called()


# =============================================================================
# TIMED
# =============================================================================


class TestTimedMode:
    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            TimedMode(time_limit=0)

    def test_countdown_only_while_playing(self, host, scheduler):
        mode = TimedMode(time_limit=1000, tick_ms=100)
        mode.attach(host)
        mode.on_round_start(host.round)
        scheduler.advance(300, step=100)
        assert mode.time_remaining == 700

        host.round = host.round.evolve(status=RoundStatus.PAUSED)
        scheduler.advance(300, step=100)
        assert mode.time_remaining == 700

    def test_pause_stops_and_resume_restarts(self, host):
        mode = TimedMode(time_limit=1000)
        mode.attach(host)
        mode.on_round_start(host.round)
        assert mode.countdown_active
        mode.on_pause()
        assert not mode.countdown_active
        mode.on_resume()
        assert mode.countdown_active

    def test_time_up_expires_round(self, host, scheduler):
        mode = TimedMode(time_limit=250, tick_ms=100)
        mode.attach(host)
        mode.on_round_start(host.round)
        scheduler.advance(300, step=100)
        assert mode.time_remaining == 0
        assert not mode.countdown_active
        host.expire_round.assert_called_once_with()
        host.emit.assert_any_call(GameEvent.TIME_UP)

    def test_best_time_kept_per_key(self, host):
        mode = TimedMode(best_times={})
        mode.attach(host)
        rnd = finished().round
        assert mode.record_best_time(rnd, 9000)
        assert not mode.record_best_time(rnd, 9500)
        assert mode.record_best_time(rnd, 8000)
        assert mode.best_time(Difficulty.EASY, "animals") == 8000
        host.save.assert_called_with("best_times", {"easy-animals": 8000})

    def test_detach_cancels_countdown(self, host, scheduler):
        mode = TimedMode(time_limit=1000)
        mode.attach(host)
        mode.on_round_start(host.round)
        mode.detach()
        assert scheduler.pending == []


# =============================================================================
# MULTIPLAYER
# =============================================================================


class TestMultiplayerSession:
    def test_end_condition(self):
        session = MultiplayerSession(players=[PlayerScore("A"), PlayerScore("B")], total_rounds=1)
        assert not session.should_end_after_advance()
        session.rounds_played = 1
        assert session.should_end_after_advance()

    def test_unlimited(self):
        session = MultiplayerSession(players=[PlayerScore("A"), PlayerScore("B")])
        session.rounds_played = 99
        assert not session.should_end_after_advance()

    def test_rotate_wraps(self):
        session = MultiplayerSession(players=[PlayerScore("A"), PlayerScore("B")])
        assert session.rotate().name == "B"
        assert session.rotate().name == "A"

    def test_index_out_of_range(self):
        with pytest.raises(ValueError, match="out of range"):
            MultiplayerSession(players=[PlayerScore("A")], current_player_index=1)


class TestRankPlayers:
    def test_score_then_wins(self):
        players = [PlayerScore("A", 100, 1), PlayerScore("B", 100, 2), PlayerScore("C", 50, 3)]
        standings, winners = rank_players(players)
        assert [p.name for p in standings] == ["B", "A", "C"]
        assert [p.name for p in winners] == ["B"]

    def test_co_winners(self):
        players = [PlayerScore("A", 100, 1), PlayerScore("B", 100, 1)]
        _, winners = rank_players(players)
        assert [p.name for p in winners] == ["A", "B"]


class TestMultiplayerMode:
    def test_blank_names(self):
        mode = MultiplayerMode(["", "Bo"])
        assert [p.name for p in mode.scores()] == ["Player 1", "Bo"]

    def test_round_end_credits_and_rotates(self, host, scheduler):
        mode = MultiplayerMode(["A", "B"], total_rounds=2, auto_advance_delay_ms=2000)
        mode.attach(host)
        mode.on_round_end(finished())
        assert mode.scores()[0] == PlayerScore("A", 150, 1)
        assert mode.current_player.name == "B"
        assert mode.session.rounds_played == 1
        scheduler.advance(2000)
        host.advance_round.assert_called_once_with(1)

    def test_session_ends(self, host):
        mode = MultiplayerMode(["A", "B"], total_rounds=1)
        mode.attach(host)
        mode.on_round_end(finished(round_id=1))
        mode.on_round_end(finished(won=False, round_id=2, incorrect="xzqwyv"))
        result = host.finish_multiplayer.call_args.args[0]
        assert result.rounds_played == 2
        assert [p.name for p in result.winners] == ["A"]
        assert not result.is_tie
