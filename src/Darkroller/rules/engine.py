from typing import Protocol

from .dice import DiceRNG, RecordingRNG
from .pool import DEFAULT_MAX_EXPLOSIONS, RandomSource, resolve
from .types import RollRequest, RollResult


class Ruleset(Protocol):
    """
    Defines the interface command handlers use to resolve rolls, abstracting
    away where the dice come from.
    """
    def roll_pool(self, request: RollRequest) -> RollResult:
        ...


class CodRuleset:
    """
    Chronicles of Darkness implementation of the Ruleset interface.

    Every face drawn is also kept in ``last_draws`` so the most recent roll can
    be replayed with ScriptedRNG.
    """
    def __init__(
        self,
        seed: int | None = None,
        *,
        rng: RandomSource | None = None,
        max_explosions: int = DEFAULT_MAX_EXPLOSIONS,
    ):
        self.rng = rng if rng is not None else DiceRNG(seed)
        self.max_explosions = max_explosions
        self.last_draws: list[int] = []

    def roll_pool(self, request: RollRequest) -> RollResult:
        recorder = RecordingRNG(self.rng)
        try:
            return resolve(request, recorder, max_explosions=self.max_explosions)
        finally:
            self.last_draws = recorder.draws
