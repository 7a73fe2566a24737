"""
Hangman - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

import random
from datetime import datetime, timezone

import pytest

from src.config.settings import Settings
from src.engine.game import HangmanGame
from src.engine.scheduler import ManualClock, Scheduler
from src.storage.memory import MemoryStore


FIXED_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# CATALOG TEST DATA
# =============================================================================

@pytest.fixture
def small_catalog() -> dict[str, dict[str, list[str]]]:
    """
    A catalog where every easy/animals round is "cat".

    Returns:
        Mapping of difficulty -> category -> words
    """
    return {
        "easy": {
            "animals": ["cat"],
            "colors": ["red", "blue", "green"],
        },
        "medium": {
            "animals": ["tiger"],
        },
        "hard": {
            "animals": ["rhinoceros"],
        },
    }


# =============================================================================
# CLOCK / SCHEDULER
# =============================================================================

@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1000.0)


@pytest.fixture
def scheduler(clock: ManualClock) -> Scheduler:
    return Scheduler(clock)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


# =============================================================================
# SETTINGS / STORAGE
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        storage_backend="memory",
        default_difficulty="easy",
        default_category="animals",
        catalog_url=None,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


# =============================================================================
# GAME
# =============================================================================

@pytest.fixture
def make_game(settings, small_catalog, store, scheduler, rng):
    """Factory for games sharing the fixture clock, store and catalog."""

    def _make(**overrides) -> HangmanGame:
        kwargs = {
            "settings": settings,
            "catalog": small_catalog,
            "store": store,
            "scheduler": scheduler,
            "rng": rng,
            "now": lambda: FIXED_NOW,
        }
        kwargs.update(overrides)
        return HangmanGame(**kwargs)

    return _make


@pytest.fixture
def game(make_game) -> HangmanGame:
    """A normal-mode game with an easy/animals "cat" round in play."""
    return make_game()
