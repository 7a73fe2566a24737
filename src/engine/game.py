"""
Hangman - Game Engine Facade

HangmanGame wires the round state machine, word selection, scoring,
progression, statistics, achievements, the active mode controller and
persistence together, and notifies subscribers after every state change.

Terminal pipeline (Won/Lost), run synchronously:

    1. scoring (won only)
    2. difficulty progression (promotion applies at the next reset)
    3. statistics
    4. achievements (won only, outside practice mode)
    5. daily challenge (challenge rounds only)
    6. mode end-of-round handling
    7. persistence
"""

import logging
import random
from datetime import datetime, timezone
from typing import Callable, Mapping

from src.catalog import (
    CatalogLoad,
    HttpCatalogProvider,
    StaticCatalogProvider,
    fallback_catalog,
    load_catalog,
)
from src.config.settings import Settings, get_settings
from src.engine.achievements import AchievementContext, AchievementTracker
from src.engine.base import (
    Difficulty,
    GuessResult,
    GuessStatus,
    Round,
    RoundOutcome,
    RoundStatus,
    key_for,
)
from src.engine.challenges import (
    ChallengeSystem,
    DailyChallenge,
    LeaderboardEntry,
    LeaderboardPeriod,
)
from src.engine.errors import SelectionError
from src.engine.events import EventPayload, GameEvent, Listener
from src.engine.modes import (
    ModeController,
    MultiplayerMode,
    MultiplayerResult,
    NormalMode,
    PlayerScore,
    PracticeConfig,
    PracticeMode,
    PracticeProgress,
    TimedMode,
)
from src.engine.progression import DifficultyProgression
from src.engine.round import GameStateMachine
from src.engine.scheduler import Clock, Scheduler, monotonic_ms
from src.engine.scoring import ScoreBreakdown, ScoreInput, ScoringEngine
from src.engine.statistics import StatisticsAggregator, StatisticsRecord
from src.engine.validators import validate_catalog
from src.engine.word_selector import WordSelection, WordSelector
from src.storage import GameRepository, PersistenceStore, create_store
from src.storage.repository import (
    ACHIEVEMENTS_KEY,
    CHALLENGES_KEY,
    PROGRESSION_KEY,
    STATISTICS_KEY,
)

logger = logging.getLogger(__name__)


class HangmanGame:
    """
    One player's hangman session.

    Args:
        settings: Configuration; defaults to get_settings()
        catalog: A raw catalog mapping or a CatalogLoad; loaded from the
            configured provider when omitted
        store: Persistence backend; built from settings when omitted
        repository: Overrides `store` with a ready repository
        scheduler: Timer queue; its clock is reused when `clock` is omitted
        clock: Millisecond clock used for rounds and timers
        rng: Random source for word and hint selection
        now: Wall-clock source for statistics and achievement timestamps
        start: Start the first round immediately

    Raises:
        SelectionError: If the catalog has no playable word
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        catalog: Mapping | CatalogLoad | None = None,
        store: PersistenceStore | None = None,
        repository: GameRepository | None = None,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        now: Callable[[], datetime] | None = None,
        start: bool = True,
    ) -> None:
        self.settings = settings or get_settings()
        self.clock = clock or (scheduler.clock if scheduler else monotonic_ms)
        self.scheduler = scheduler or Scheduler(self.clock)
        self.rng = rng or random.Random()
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.repository = repository or GameRepository(store or create_store(self.settings))

        load = self._load_catalog(catalog)
        self._offline = load.offline
        self.catalog_source = load.source

        self.machine = GameStateMachine(self.clock, self.rng)
        self.selector = WordSelector(load.catalog, self.rng)
        self.difficulty = Difficulty.parse(self.settings.default_difficulty)
        self.category = self.settings.default_category

        repo = self.repository
        self._statistics = StatisticsAggregator(
            repo.load_statistics(), history_capacity=self.settings.history_capacity
        )
        self._achievements = AchievementTracker(repo.load_achievements(), now=self._now)
        self._progression = DifficultyProgression(
            repo.load_progression(), enabled=self.settings.auto_progression
        )
        self._best_times = repo.load_best_times()
        self._practice_progress = repo.load_practice_progress()
        self._challenges = ChallengeSystem(repo.load_challenges())

        self._score = 0
        self._last_score: ScoreBreakdown | None = None
        self._multiplayer_result: MultiplayerResult | None = None
        self._listeners: list[Listener] = []
        self._degraded_reported = False
        self._challenge_round_id: int | None = None

        self._mode: ModeController = NormalMode()
        self._mode.attach(self)

        if start:
            self.reset()

    def _load_catalog(self, catalog: Mapping | CatalogLoad | None) -> CatalogLoad:
        if isinstance(catalog, CatalogLoad):
            return catalog
        if catalog is not None:
            try:
                return CatalogLoad(catalog=validate_catalog(catalog), source="static")
            except ValueError as exc:
                raise SelectionError(str(exc)) from exc
        if self.settings.catalog_url:
            provider = HttpCatalogProvider(
                self.settings.catalog_url,
                timeout=self.settings.catalog_timeout,
                max_retries=self.settings.catalog_max_retries,
            )
        else:
            provider = StaticCatalogProvider(fallback_catalog())
        return load_catalog(provider, self.repository.store, self.settings.catalog_cache_ttl_ms)

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for every state change.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: GameEvent, **data) -> None:
        rnd = self.machine.round
        payload = EventPayload(event=event, round_id=rnd.round_id if rnd else None, data=data)
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener failed handling %s", event.name)

    # =========================================================================
    # Round operations
    # =========================================================================

    def reset(self) -> Round:
        """
        Start a fresh round, keeping cumulative and cross-round state.

        Raises:
            SelectionError: If no word can be selected
        """
        return self._start_round()

    def start_daily_challenge(self) -> Round:
        """
        Start a round on today's challenge word.

        Raises:
            ValueError: In practice or multiplayer mode
        """
        if isinstance(self._mode, (PracticeMode, MultiplayerMode)):
            raise ValueError(f"Daily challenges cannot be played in {self._mode.name} mode.")
        challenge = self.daily_challenge()
        self.save(CHALLENGES_KEY, self._challenges.state.to_dict())
        rnd = self._start_round(challenge.selection)
        self._challenge_round_id = rnd.round_id
        return rnd

    def _start_round(self, selection: WordSelection | None = None) -> Round:
        self._challenge_round_id = None
        self._mode.on_reset()
        if self._mode.tracks_progress:
            promoted = self._progression.take_pending()
            if promoted is not None:
                logger.info("Difficulty promoted to %s", promoted.value)
                self.difficulty = promoted

        if selection is None:
            difficulty = self._mode.locked_difficulty() or self.difficulty
            selection = self.selector.select(
                difficulty, self.category, self._mode.selection_filters()
            )
        rnd = self.machine.start(selection, self._mode.max_incorrect(self.settings.max_incorrect))
        self._last_score = None
        self._mode.on_round_start(rnd)
        self.emit(
            GameEvent.ROUND_STARTED,
            difficulty=rnd.difficulty.value,
            category=rnd.category,
            masked_word=rnd.masked_word,
            max_incorrect=rnd.max_incorrect,
            mode=self._mode.name,
        )
        return rnd

    def guess(self, letter: object) -> GuessResult:
        """
        Guess a letter.

        Invalid input, repeats and guesses outside play leave the round
        unchanged and are reported through the result.
        """
        result = self.machine.guess(letter)
        if not result.accepted:
            self.emit(
                GameEvent.GUESS_REJECTED,
                status=result.status.value,
                letter=result.letter,
                reason=result.reason.value if result.reason else None,
                message=result.message,
            )
            return result

        rnd = self.machine.round
        self.emit(
            GameEvent.GUESS_MADE,
            letter=result.letter,
            correct=result.status == GuessStatus.CORRECT,
            positions=list(result.positions),
            masked_word=rnd.masked_word,
            remaining_attempts=rnd.remaining_attempts,
        )
        if result.ends_round:
            self._finish_round()
        return result

    def hint(self) -> GuessResult | None:
        """Reveal one random hidden letter by guessing it. None unless Playing."""
        letter = self.machine.choose_hint()
        if letter is None:
            return None
        self._mode.on_hint()
        self.emit(GameEvent.HINT_USED, letter=letter)
        return self.guess(letter)

    def pause(self) -> bool:
        if not self.machine.pause():
            return False
        self._mode.on_pause()
        self.emit(GameEvent.ROUND_PAUSED)
        return True

    def resume(self) -> bool:
        if not self.machine.resume():
            return False
        self._mode.on_resume()
        self.emit(GameEvent.ROUND_RESUMED)
        return True

    def quit(self) -> bool:
        """Abandon the round without scoring or recording it."""
        if not self.machine.quit():
            return False
        self._mode.on_reset()
        self.emit(GameEvent.ROUND_QUIT, word=self.machine.round.word)
        return True

    # =========================================================================
    # Terminal pipeline
    # =========================================================================

    def _finish_round(self) -> None:
        rnd = self.machine.round
        won = rnd.status == RoundStatus.WON
        elapsed = rnd.elapsed_ms(self.clock())
        mode = self._mode
        changed: list[str] = [STATISTICS_KEY]

        score = 0
        if won:
            score_input = mode.score_input(ScoreInput(
                difficulty=rnd.difficulty,
                incorrect_count=len(rnd.incorrect_guesses),
                max_incorrect=rnd.max_incorrect,
                elapsed_ms=elapsed,
            ))
            self._last_score = ScoringEngine.breakdown(score_input)
            score = self._last_score.total
            self._score += score

        outcome = RoundOutcome(round=rnd, won=won, elapsed_ms=elapsed, score=score, mode=mode.name)

        if mode.tracks_progress and self._progression.enabled:
            if won:
                promoted = self._progression.record_win(rnd.difficulty)
                if promoted is not None:
                    self.emit(GameEvent.DIFFICULTY_PROMOTED, difficulty=promoted.value)
            else:
                self._progression.record_loss()
            changed.append(PROGRESSION_KEY)

        self._statistics.record_round(outcome, self._now())

        if won and mode.tracks_progress:
            stats = self._statistics.record
            unlocked = self._achievements.evaluate(AchievementContext(
                games_won=stats.games_won,
                current_streak=stats.current_streak,
                incorrect_count=len(rnd.incorrect_guesses),
                elapsed_ms=elapsed,
                difficulty=rnd.difficulty.value,
                categories_played=self._statistics.categories_played,
                total_score=stats.total_score,
            ))
            if unlocked:
                changed.append(ACHIEVEMENTS_KEY)
                self.emit(
                    GameEvent.ACHIEVEMENTS_UNLOCKED,
                    achievements=[a.value for a in unlocked],
                    titles=[a.title for a in unlocked],
                )

        if rnd.round_id == self._challenge_round_id:
            self._challenge_round_id = None
            challenge = self._challenges.complete(outcome, self._now().date())
            if challenge is not None:
                self._score += challenge.rule.reward_points
                changed.append(CHALLENGES_KEY)
                self.emit(
                    GameEvent.CHALLENGE_COMPLETED,
                    challenge=challenge.type.value,
                    reward=challenge.rule.reward_points,
                    badge=challenge.rule.badge,
                    streak=self._challenges.streak,
                )

        logger.info(
            "Round %d %s (%s/%s): %d points in %.0f ms",
            rnd.round_id, rnd.status.value, rnd.difficulty.value, rnd.category, score, elapsed,
        )
        self.emit(
            GameEvent.ROUND_WON if won else GameEvent.ROUND_LOST,
            word=rnd.word,
            score=score,
            total_score=self._score,
            elapsed_ms=elapsed,
        )

        mode.on_round_end(outcome)
        self._persist(changed)

    def _persist(self, keys: list[str]) -> None:
        documents = {
            STATISTICS_KEY: lambda: self._statistics.record.to_dict(),
            ACHIEVEMENTS_KEY: self._achievements.snapshot,
            PROGRESSION_KEY: lambda: self._progression.state.to_dict(),
            CHALLENGES_KEY: lambda: self._challenges.state.to_dict(),
        }
        for key in keys:
            self.save(key, documents[key]())

    def save(self, key: str, value) -> bool:
        """Best-effort write; reports the first degradation to subscribers."""
        saved = self.repository.save(key, value)
        if not saved and not self._degraded_reported:
            self._degraded_reported = True
            self.emit(GameEvent.STORAGE_DEGRADED, key=key)
        return saved

    # =========================================================================
    # Mode host callbacks
    # =========================================================================

    def expire_round(self) -> None:
        """Time ran out: the round is lost."""
        if self.machine.force_loss():
            self._finish_round()

    def advance_round(self, round_id: int) -> None:
        """Start the next round, unless the scheduled-for round is gone."""
        rnd = self.machine.round
        if rnd is None or rnd.round_id != round_id or not rnd.status.is_terminal:
            logger.debug("Ignoring stale advance for round %d", round_id)
            return
        self.reset()

    def finish_multiplayer(self, result: MultiplayerResult) -> None:
        self._multiplayer_result = result
        self.emit(
            GameEvent.MULTIPLAYER_ENDED,
            winners=[p.name for p in result.winners],
            standings=[(p.name, p.score, p.wins) for p in result.standings],
            tie=result.is_tie,
        )
        self._switch_mode(NormalMode(), start_round=False)

    # =========================================================================
    # Modes
    # =========================================================================

    def _switch_mode(self, mode: ModeController, *, start_round: bool) -> None:
        previous = self._mode
        previous.detach()
        self._mode = mode
        mode.attach(self)
        logger.info("Mode changed: %s -> %s", previous.name, mode.name)
        self.emit(GameEvent.MODE_CHANGED, mode=mode.name, previous=previous.name)
        if start_round:
            self.reset()

    def enable_practice_mode(self, config: PracticeConfig | None = None) -> None:
        """Switch to practice mode and start a fresh round."""
        self._switch_mode(
            PracticeMode(
                config,
                progress=self._practice_progress,
                auto_continue_delay_ms=self.settings.auto_continue_delay_ms,
            ),
            start_round=True,
        )

    def disable_practice_mode(self) -> bool:
        if not isinstance(self._mode, PracticeMode):
            return False
        self._switch_mode(NormalMode(), start_round=False)
        return True

    def enable_timed_mode(self, time_limit: int | None = None) -> None:
        """
        Switch to timed mode and start a fresh round.

        Raises:
            ValueError: If the time limit is not positive
        """
        self._switch_mode(
            TimedMode(
                time_limit if time_limit is not None else self.settings.default_time_limit_ms,
                best_times=self._best_times,
                tick_ms=self.settings.timed_tick_ms,
            ),
            start_round=True,
        )

    def disable_timed_mode(self) -> bool:
        if not isinstance(self._mode, TimedMode):
            return False
        self._switch_mode(NormalMode(), start_round=False)
        return True

    def enable_multiplayer_mode(self, players: list[str], total_rounds: int | None = None) -> None:
        """
        Start a pass-and-play session with a fresh round for the first player.

        Raises:
            ValueError: If fewer than two players are given or total_rounds is invalid
        """
        mode = MultiplayerMode(
            players,
            total_rounds=total_rounds,
            auto_advance_delay_ms=self.settings.auto_advance_delay_ms,
        )
        self._multiplayer_result = None
        self._switch_mode(mode, start_round=True)

    def disable_multiplayer_mode(self) -> bool:
        if not isinstance(self._mode, MultiplayerMode):
            return False
        self._switch_mode(NormalMode(), start_round=False)
        return True

    def end_multiplayer_game(self) -> MultiplayerResult | None:
        """Finish the session early with the current standings."""
        if not isinstance(self._mode, MultiplayerMode):
            return None
        result = self._mode.finish()
        self.finish_multiplayer(result)
        return result

    # =========================================================================
    # Preferences and resets
    # =========================================================================

    def set_difficulty(self, difficulty: Difficulty | str) -> Round:
        """Choose a tier manually; drops any pending promotion and starts a round."""
        self.difficulty = Difficulty.parse(difficulty)
        self._progression.take_pending()
        return self.reset()

    def set_category(self, category: str) -> Round:
        self.category = category.strip().lower()
        return self.reset()

    def reset_statistics(self) -> None:
        self._statistics.reset()
        self._progression.reset()
        self._persist([STATISTICS_KEY, PROGRESSION_KEY])
        self.emit(GameEvent.STATISTICS_RESET)

    def reset_achievements(self) -> None:
        self._achievements.reset()
        self._persist([ACHIEVEMENTS_KEY])
        self.emit(GameEvent.ACHIEVEMENTS_RESET)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def round(self) -> Round | None:
        return self.machine.round

    @property
    def status(self) -> RoundStatus | None:
        return self.machine.status

    @property
    def score(self) -> int:
        """Cumulative score of this session."""
        return self._score

    @property
    def last_score(self) -> ScoreBreakdown | None:
        return self._last_score

    @property
    def statistics(self) -> StatisticsRecord:
        return self._statistics.snapshot()

    @property
    def achievements(self) -> dict[str, dict]:
        return self._achievements.snapshot()

    @property
    def mode(self) -> str:
        return self._mode.name

    @property
    def mode_state(self) -> dict:
        return self._mode.describe()

    @property
    def time_remaining(self) -> float | None:
        if isinstance(self._mode, TimedMode):
            return self._mode.time_remaining
        return None

    @property
    def players(self) -> list[PlayerScore]:
        if isinstance(self._mode, MultiplayerMode):
            return self._mode.scores()
        return []

    @property
    def multiplayer_result(self) -> MultiplayerResult | None:
        return self._multiplayer_result

    @property
    def offline_mode(self) -> bool:
        return self._offline

    @property
    def degraded_persistence(self) -> bool:
        return self.repository.degraded

    @property
    def consecutive_wins(self) -> int:
        return self._progression.consecutive_wins

    @property
    def practice_progress(self) -> PracticeProgress:
        return PracticeProgress.from_dict(self._practice_progress.to_dict())

    def best_time(
        self,
        difficulty: Difficulty | str | None = None,
        category: str | None = None,
    ) -> float | None:
        """Fastest timed win for a difficulty and category (the current round's by default)."""
        rnd = self.machine.round
        if difficulty is not None:
            tier = Difficulty.parse(difficulty)
        else:
            tier = rnd.difficulty if rnd else self.difficulty
        if category is None:
            category = rnd.category if rnd else self.category
        return self._best_times.get(key_for(tier, category))

    def daily_challenge(self) -> DailyChallenge:
        """Today's challenge; generated from the catalog on first request."""
        return self._challenges.challenge_for(self._now().date(), self.selector)

    @property
    def challenge_completed_today(self) -> bool:
        self.daily_challenge()
        return self._challenges.completed_today

    @property
    def challenge_streak(self) -> tuple[int, int]:
        """Current and best daily challenge streaks."""
        return self._challenges.streak, self._challenges.best_streak

    def challenge_leaderboard(
        self, period: LeaderboardPeriod | str = LeaderboardPeriod.DAILY
    ) -> list[LeaderboardEntry]:
        return self._challenges.leaderboard(period, self._now().date())

    def dashboard(self) -> dict:
        return self._statistics.dashboard(self._achievements.summary())

    def export_json(self) -> str:
        return self._statistics.export_json(self._achievements.snapshot(), exported_at=self._now())

    def export_csv(self) -> str:
        return self._statistics.export_csv()
