from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SUCCESS_THRESHOLD = 8
CHANCE_SUCCESS = 10
CHANCE_BOTCH = 1
EXCEPTIONAL_SUCCESSES = 5


class DieOrigin(str, Enum):
    INITIAL = "initial"
    EXPLOSION = "explosion"
    ROTE_REROLL = "rote-reroll"


@dataclass(frozen=True)
class RollRequest:
    pool_size: int
    rote: bool = False
    nine_again: bool = False
    eight_again: bool = False
    no_explode: bool = False

    @property
    def is_chance_die(self) -> bool:
        return self.pool_size <= 0

    @property
    def explosion_threshold(self) -> int | None:
        """Lowest face that spawns another die, or None when nothing explodes.

        Eight-again wins over nine-again when both are set; no_explode wins over both.
        """
        if self.no_explode:
            return None
        if self.eight_again:
            return 8
        if self.nine_again:
            return 9
        return 10


@dataclass(frozen=True)
class DieOutcome:
    value: int
    origin: DieOrigin = DieOrigin.INITIAL
    # Index in RollResult.dice of the die that spawned this one
    trigger: int | None = None


@dataclass(frozen=True)
class RollResult:
    dice: tuple[DieOutcome, ...]
    successes: int
    is_chance_die: bool
    is_botch: bool
    exploded_count: int

    @property
    def values(self) -> list[int]:
        return [d.value for d in self.dice]

    @property
    def is_success(self) -> bool:
        return self.successes > 0

    @property
    def is_exceptional(self) -> bool:
        return not self.is_chance_die and self.successes >= EXCEPTIONAL_SUCCESSES

    def to_payload(self) -> dict:
        """JSON-ready summary used for logs and audit digests."""
        return {
            "dice": [
                {"value": d.value, "origin": d.origin.value, "trigger": d.trigger}
                for d in self.dice
            ],
            "successes": self.successes,
            "is_chance_die": self.is_chance_die,
            "is_botch": self.is_botch,
            "exploded_count": self.exploded_count,
        }
