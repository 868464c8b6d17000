"""Chronicles of Darkness dice-pool resolution.

Resolves a RollRequest into a RollResult using an injected randomness source:

1. Pools of zero or fewer dice roll a single chance die (success on 10, botch on 1).
2. Otherwise N d10 are rolled; each 8+ is a success.
3. Rote quality re-rolls every initial failure once; the re-roll is appended,
   the failed die stays.
4. Dice at or above the explosion threshold (10, 9 or 8) add another die, and
   the added dice can explode again. Explosions are processed as a FIFO queue.

The engine keeps no state between calls.
"""

from __future__ import annotations

from collections import deque
from typing import Protocol

import structlog

from .types import (
    CHANCE_BOTCH,
    CHANCE_SUCCESS,
    SUCCESS_THRESHOLD,
    DieOrigin,
    DieOutcome,
    RollRequest,
    RollResult,
)

DEFAULT_MAX_EXPLOSIONS = 10_000

log = structlog.get_logger()


class RandomSource(Protocol):
    def d10(self) -> int: ...


class DicePoolError(RuntimeError):
    """Base class for fatal resolution errors."""


class RunawayRollError(DicePoolError):
    """Raised when a single resolution draws more explosion dice than allowed."""


class InvalidDieError(DicePoolError):
    """Raised when the randomness source yields a face outside 1-10."""


def _draw(rng: RandomSource) -> int:
    value = rng.d10()
    if not isinstance(value, int) or not 1 <= value <= 10:
        raise InvalidDieError(f"Randomness source returned {value!r}, expected 1-10")
    return value


def _chance_die(rng: RandomSource) -> RollResult:
    value = _draw(rng)
    successes = 1 if value == CHANCE_SUCCESS else 0
    return RollResult(
        dice=(DieOutcome(value),),
        successes=successes,
        is_chance_die=True,
        is_botch=successes == 0 and value == CHANCE_BOTCH,
        exploded_count=0,
    )


def resolve(
    request: RollRequest,
    rng: RandomSource,
    *,
    max_explosions: int = DEFAULT_MAX_EXPLOSIONS,
) -> RollResult:
    """Resolve one dice pool.

    Args:
        request: Pool size and modifier flags.
        rng: Source of independent uniform d10 faces.
        max_explosions: Upper bound on explosion draws before giving up.

    Returns:
        A fresh RollResult; dice are listed in the order they were drawn.

    Raises:
        RunawayRollError: If more than max_explosions explosion dice are drawn.
        InvalidDieError: If rng yields a face outside 1-10.
    """
    log.debug(
        "rules.pool.resolve.start",
        pool_size=request.pool_size,
        rote=request.rote,
        nine_again=request.nine_again,
        eight_again=request.eight_again,
        no_explode=request.no_explode,
    )
    if request.is_chance_die:
        result = _chance_die(rng)
        log.debug("rules.pool.resolve.chance", value=result.dice[0].value, botch=result.is_botch)
        return result

    dice: list[DieOutcome] = [DieOutcome(_draw(rng)) for _ in range(request.pool_size)]

    if request.rote:
        failures = [i for i, d in enumerate(dice) if d.value < SUCCESS_THRESHOLD]
        for i in failures:
            dice.append(DieOutcome(_draw(rng), DieOrigin.ROTE_REROLL, trigger=i))

    exploded = 0
    threshold = request.explosion_threshold
    if threshold is not None:
        pending = deque(range(len(dice)))
        while pending:
            i = pending.popleft()
            if dice[i].value < threshold:
                continue
            if exploded >= max_explosions:
                log.error(
                    "rules.pool.resolve.runaway",
                    pool_size=request.pool_size,
                    max_explosions=max_explosions,
                )
                raise RunawayRollError(
                    f"Explosion limit of {max_explosions} dice exceeded; "
                    "check the randomness source"
                )
            dice.append(DieOutcome(_draw(rng), DieOrigin.EXPLOSION, trigger=i))
            exploded += 1
            pending.append(len(dice) - 1)

    result = RollResult(
        dice=tuple(dice),
        successes=sum(1 for d in dice if d.value >= SUCCESS_THRESHOLD),
        is_chance_die=False,
        is_botch=False,
        exploded_count=exploded,
    )
    log.debug(
        "rules.pool.resolve.result",
        values=result.values,
        successes=result.successes,
        exploded_count=exploded,
    )
    return result
