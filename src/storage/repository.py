"""
Hangman - Game Repository

Typed load/save of every persisted game document on top of a
PersistenceStore. Loads validate the stored shape and repair corrupt
documents by resetting them to defaults. Saves never raise: a failed
write prunes the store once and retries, then marks persistence as
degraded.
"""

import logging
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from src.engine.achievements import default_achievements
from src.engine.challenges import ChallengeState
from src.engine.errors import DataError, StorageError
from src.engine.modes import PracticeProgress
from src.engine.progression import ProgressionState
from src.engine.statistics import StatisticsRecord
from src.storage.base import PersistenceStore
from src.storage.models import (
    AchievementsSnapshot,
    BestTimesSnapshot,
    ChallengeSnapshot,
    PracticeProgressSnapshot,
    ProgressionSnapshot,
    StatisticsSnapshot,
)

logger = logging.getLogger(__name__)

STATISTICS_KEY = "statistics"
ACHIEVEMENTS_KEY = "achievements"
BEST_TIMES_KEY = "best_times"
PRACTICE_PROGRESS_KEY = "practice_progress"
PROGRESSION_KEY = "difficulty_progression"
CHALLENGES_KEY = "daily_challenges"

# Game documents; pruning only ever evicts other entries such as the catalog cache.
DOCUMENT_KEYS = frozenset({
    STATISTICS_KEY,
    ACHIEVEMENTS_KEY,
    BEST_TIMES_KEY,
    PRACTICE_PROGRESS_KEY,
    PROGRESSION_KEY,
    CHALLENGES_KEY,
})

PRUNE_COUNT = 5

T = TypeVar("T")


def validate_snapshot(key: str, model: type[BaseModel], raw: Any) -> Any:
    """
    Validate a stored document.

    Returns:
        The JSON-compatible, normalized document

    Raises:
        DataError: If the document does not match the model
    """
    try:
        parsed = model.model_validate(raw)
    except ValidationError as exc:
        raise DataError(key, str(exc)) from exc
    return parsed.model_dump(mode="json")


class GameRepository:
    """Loads and saves game documents with repair and degradation."""

    def __init__(self, store: PersistenceStore) -> None:
        self.store = store
        self.degraded = False
        self.repaired: list[str] = []

    # -- Loading -----------------------------------------------------------

    def _load(
        self,
        key: str,
        model: type[BaseModel],
        build: Callable[[Any], T],
        default: Callable[[], T],
        dump: Callable[[T], Any],
    ) -> T:
        raw = self.store.get(key)
        if raw is None:
            return default()
        try:
            return build(validate_snapshot(key, model, raw))
        except DataError as exc:
            logger.warning("Repairing corrupt %s document: %s", key, exc.detail)
            self.repaired.append(key)
            value = default()
            self.save(key, dump(value))
            return value

    def load_statistics(self) -> StatisticsRecord:
        return self._load(
            STATISTICS_KEY,
            StatisticsSnapshot,
            StatisticsRecord.from_dict,
            StatisticsRecord,
            lambda record: record.to_dict(),
        )

    def load_achievements(self) -> dict[str, dict]:
        return self._load(
            ACHIEVEMENTS_KEY,
            AchievementsSnapshot,
            lambda data: data,
            default_achievements,
            lambda data: data,
        )

    def load_best_times(self) -> dict[str, float]:
        return self._load(BEST_TIMES_KEY, BestTimesSnapshot, dict, dict, dict)

    def load_practice_progress(self) -> PracticeProgress:
        return self._load(
            PRACTICE_PROGRESS_KEY,
            PracticeProgressSnapshot,
            PracticeProgress.from_dict,
            PracticeProgress,
            lambda progress: progress.to_dict(),
        )

    def load_progression(self) -> ProgressionState:
        return self._load(
            PROGRESSION_KEY,
            ProgressionSnapshot,
            ProgressionState.from_dict,
            ProgressionState,
            lambda state: state.to_dict(),
        )

    def load_challenges(self) -> ChallengeState:
        return self._load(
            CHALLENGES_KEY,
            ChallengeSnapshot,
            ChallengeState.from_dict,
            ChallengeState,
            lambda state: state.to_dict(),
        )

    # -- Saving ------------------------------------------------------------

    def save(self, key: str, value: Any, **kwargs) -> bool:
        """
        Best-effort write.

        Returns:
            True if the value was stored, False if persistence is degraded
        """
        try:
            return self.store.set(key, value, **kwargs)
        except StorageError:
            logger.warning("Write of %s failed, pruning and retrying", key)
        try:
            self.store.prune(PRUNE_COUNT, protected=DOCUMENT_KEYS)
            return self.store.set(key, value, **kwargs)
        except StorageError:
            logger.exception("Write of %s failed after pruning, persistence degraded", key)
            self.degraded = True
            return False

    def delete(self, key: str) -> bool:
        return self.store.delete(key)
