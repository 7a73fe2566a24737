"""
Hangman - Difficulty Progression

Promotes the difficulty tier after enough consecutive wins. A promotion
never affects the round that earned it; it is held as pending and applied
when the next round starts.
"""

import logging
from dataclasses import dataclass, field

from src.engine.base import Difficulty

logger = logging.getLogger(__name__)

DEFAULT_ORDER: tuple[Difficulty, ...] = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)
DEFAULT_THRESHOLDS: dict[Difficulty, int] = {
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 7,
}


@dataclass
class ProgressionState:
    """
    Mutable progression state.

    Attributes:
        consecutive_wins: Wins since the last loss or reset
        pending: Tier to apply at the next round start, if any
        thresholds: Consecutive wins needed to reach each tier
        order: Tier sequence from easiest to hardest
    """
    consecutive_wins: int = 0
    pending: Difficulty | None = None
    thresholds: dict[Difficulty, int] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))
    order: tuple[Difficulty, ...] = DEFAULT_ORDER

    def to_dict(self) -> dict:
        return {
            "consecutive_wins": self.consecutive_wins,
            "pending": self.pending.value if self.pending else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgressionState":
        pending = data.get("pending")
        return cls(
            consecutive_wins=int(data.get("consecutive_wins", 0)),
            pending=Difficulty(pending) if pending else None,
        )


class DifficultyProgression:
    """Tracks consecutive wins and decides tier promotions."""

    def __init__(self, state: ProgressionState | None = None, enabled: bool = True) -> None:
        self.state = state or ProgressionState()
        self.enabled = enabled

    @property
    def consecutive_wins(self) -> int:
        return self.state.consecutive_wins

    @property
    def pending(self) -> Difficulty | None:
        return self.state.pending

    def next_tier(self, current: Difficulty) -> Difficulty | None:
        """The tier after `current`, or None at the top."""
        order = self.state.order
        index = order.index(current)
        return order[index + 1] if index + 1 < len(order) else None

    def record_win(self, difficulty: Difficulty) -> Difficulty | None:
        """
        Count a win at `difficulty`.

        Returns:
            The tier promoted to (pending until the next round), or None
        """
        if not self.enabled:
            return None
        self.state.consecutive_wins += 1
        current = self.state.pending or difficulty
        target = self.next_tier(current)
        if target is None:
            return None
        if self.state.consecutive_wins >= self.state.thresholds.get(target, float("inf")):
            self.state.pending = target
            logger.info(
                "Promotion to %s after %d consecutive wins",
                target.value,
                self.state.consecutive_wins,
            )
            return target
        return None

    def record_loss(self) -> None:
        """A loss breaks the streak; difficulty is never downgraded."""
        if not self.enabled:
            return
        self.state.consecutive_wins = 0

    def take_pending(self) -> Difficulty | None:
        """Consume the pending promotion when a new round starts."""
        pending = self.state.pending
        self.state.pending = None
        return pending

    def reset(self) -> None:
        self.state.consecutive_wins = 0
        self.state.pending = None
