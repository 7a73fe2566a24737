"""
Hangman - Word Selector

Picks the next word from the catalog for a difficulty/category pair,
applying practice-mode filters. Fallbacks for unknown difficulties and
categories are bounded; exhausting them raises SelectionError.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Mapping

from src.engine.base import Difficulty, key_for
from src.engine.errors import SelectionError

logger = logging.getLogger(__name__)

Catalog = Mapping[str, Mapping[str, list[str]]]


@dataclass(frozen=True)
class LengthFilter:
    """Inclusive word-length bounds (interior whitespace ignored)."""
    min: int | None = None
    max: int | None = None

    def __post_init__(self) -> None:
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"Length filter min {self.min} exceeds max {self.max}.")

    def accepts(self, word: str) -> bool:
        length = len("".join(word.split()))
        if self.min is not None and length < self.min:
            return False
        if self.max is not None and length > self.max:
            return False
        return True


@dataclass
class SelectionFilters:
    """
    Mode-supplied filters for word selection.

    Attributes:
        length: Optional word-length bounds
        exclude_seen: Skip words already served under the same key
        track_seen: Record served words in `seen_words_by_key`
        seen_words_by_key: Served words per `difficulty-category` key
    """
    length: LengthFilter | None = None
    exclude_seen: bool = False
    track_seen: bool = False
    seen_words_by_key: dict[str, set[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class WordSelection:
    """The chosen word and the difficulty/category it actually came from."""
    word: str
    difficulty: Difficulty
    category: str


class WordSelector:
    """Selects words from a catalog of difficulty -> category -> words."""

    MAX_DIFFICULTY_ATTEMPTS = 5

    def __init__(self, catalog: Catalog, rng: random.Random | None = None) -> None:
        self._catalog = catalog
        self._rng = rng or random.Random()

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def replace_catalog(self, catalog: Catalog) -> None:
        self._catalog = catalog

    def categories(self, difficulty: Difficulty | str) -> list[str]:
        """Categories with at least one word for a difficulty."""
        value = difficulty.value if isinstance(difficulty, Difficulty) else difficulty
        return [c for c, words in self._catalog.get(value, {}).items() if words]

    def select(
        self,
        difficulty: Difficulty,
        category: str,
        filters: SelectionFilters | None = None,
    ) -> WordSelection:
        """
        Choose a word.

        Args:
            difficulty: Requested tier
            category: Requested category
            filters: Optional mode filters

        Returns:
            WordSelection with the resolved difficulty and category

        Raises:
            SelectionError: If no difficulty, category or word is available
        """
        filters = filters or SelectionFilters()
        difficulty = self._resolve_difficulty(difficulty)
        category = self._resolve_category(difficulty, category)
        key = key_for(difficulty, category)

        candidates = self._candidates(difficulty, category, filters, key)
        if not candidates:
            logger.warning("No words left for %s after filtering; resetting seen words", key)
            filters.seen_words_by_key.pop(key, None)
            candidates = self._candidates(difficulty, category, filters, key)
        if not candidates:
            raise SelectionError(f"No words available for {key} with the active filters.")

        word = self._rng.choice(candidates).lower()
        if filters.track_seen:
            filters.seen_words_by_key.setdefault(key, set()).add(word)
        return WordSelection(word=word, difficulty=difficulty, category=category)

    def _resolve_difficulty(self, difficulty: Difficulty) -> Difficulty:
        """Fall back to the first playable difficulty, bounded to a few attempts."""
        current = difficulty
        for _ in range(self.MAX_DIFFICULTY_ATTEMPTS):
            if self.categories(current):
                return current
            logger.error("Invalid difficulty %s; looking for a fallback", current.value)
            fallback = next(
                (d for d in self._catalog if self._is_known(d) and self.categories(d)),
                None,
            )
            if fallback is None:
                break
            current = Difficulty(fallback)
        raise SelectionError("No difficulty with playable words is available.")

    def _resolve_category(self, difficulty: Difficulty, category: str) -> str:
        available = self.categories(difficulty)
        if category in available:
            return category
        logger.warning(
            "Invalid category %s for %s; using %s", category, difficulty.value, available[0]
        )
        return available[0]

    def _candidates(
        self,
        difficulty: Difficulty,
        category: str,
        filters: SelectionFilters,
        key: str,
    ) -> list[str]:
        words = [w.lower() for w in self._catalog[difficulty.value][category]]
        if filters.length is not None:
            words = [w for w in words if filters.length.accepts(w)]

        if filters.exclude_seen:
            seen = filters.seen_words_by_key.get(key, set())
            unseen = [w for w in words if w not in seen]
            if not unseen and words:
                logger.info("All words in %s seen; starting over", key)
                filters.seen_words_by_key[key] = set()
                unseen = words
            words = unseen
        return words

    @staticmethod
    def _is_known(value: str) -> bool:
        return value in {d.value for d in Difficulty}
