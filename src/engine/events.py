"""
Hangman - Engine Event Definitions

Event types and payloads delivered to the presentation layer after
every state mutation.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable


class GameEvent(Enum):
    """Events that can occur during a session."""

    ROUND_STARTED = auto()
    GUESS_MADE = auto()
    GUESS_REJECTED = auto()
    HINT_USED = auto()
    ROUND_PAUSED = auto()
    ROUND_RESUMED = auto()
    ROUND_WON = auto()
    ROUND_LOST = auto()
    ROUND_QUIT = auto()
    TIMER_TICK = auto()
    TIME_UP = auto()
    BEST_TIME_RECORDED = auto()
    DIFFICULTY_PROMOTED = auto()
    ACHIEVEMENTS_UNLOCKED = auto()
    CHALLENGE_COMPLETED = auto()
    PLAYER_ADVANCED = auto()
    MULTIPLAYER_ENDED = auto()
    MODE_CHANGED = auto()
    STATISTICS_RESET = auto()
    ACHIEVEMENTS_RESET = auto()
    STORAGE_DEGRADED = auto()


@dataclass
class EventPayload:
    """Wrapper for engine event data."""

    event: GameEvent
    round_id: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[EventPayload], None]
