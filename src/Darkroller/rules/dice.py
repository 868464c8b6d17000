# rules/dice.py

from __future__ import annotations

import random
from collections.abc import Iterable

import structlog

from .pool import DicePoolError, RandomSource


class ScriptExhaustedError(DicePoolError):
    """Raised when a scripted source runs out of recorded faces."""


class DiceRNG:
    """d10 source backed by random.Random; pass a seed for reproducible rolls."""

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)
        self._log = structlog.get_logger()
        self.seed = seed
        self._log.debug("rules.dice.rng.created", seeded=seed is not None)

    def d10(self) -> int:
        return self._rng.randint(1, 10)


class ScriptedRNG:
    """Replays a fixed sequence of faces, e.g. one captured by RecordingRNG."""

    def __init__(self, faces: Iterable[int]):
        self._faces = list(faces)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._faces) - self._pos

    def d10(self) -> int:
        if self._pos >= len(self._faces):
            raise ScriptExhaustedError(
                f"Scripted dice exhausted after {len(self._faces)} draws"
            )
        value = self._faces[self._pos]
        self._pos += 1
        return value


class RecordingRNG:
    """Wraps another source and keeps every face it hands out."""

    def __init__(self, inner: RandomSource):
        self._inner = inner
        self.draws: list[int] = []

    def d10(self) -> int:
        value = self._inner.d10()
        self.draws.append(value)
        return value

    def replay(self) -> ScriptedRNG:
        return ScriptedRNG(self.draws)
