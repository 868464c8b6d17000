"""Parse roll command text into a RollRequest.

Accepted forms (case-insensitive):

    5
    chance
    3 + 2 - 1 rote 9again
    4-6 no10again

A pool expression is ``chance`` or integers joined by ``+``/``-``. Its sum may
be zero or negative, which rolls a chance die. Flag tokens follow the pool.
"""

from __future__ import annotations

import re

from Darkroller.rules.types import RollRequest

DEFAULT_MAX_POOL = 100
CHANCE = "chance"

_TERM_RE = re.compile(r"[+-]|\d+")
_POOL_RE = re.compile(r"^[\d+\-\s]+$")

_FLAG_ALIASES: dict[str, str | None] = {
    "rote": "rote",
    "9again": "nine_again",
    "9-again": "nine_again",
    "nine-again": "nine_again",
    "8again": "eight_again",
    "8-again": "eight_again",
    "eight-again": "eight_again",
    "10again": None,
    "10-again": None,
    "no10again": "no_explode",
    "noagain": "no_explode",
    "no-again": "no_explode",
}


class RollParseError(ValueError):
    """Raised when roll text cannot be turned into a RollRequest."""


def _is_flag(token: str) -> bool:
    return token in _FLAG_ALIASES


def split_pool_and_flags(text: str) -> tuple[str, list[str]]:
    """Split roll text into the pool expression and its flag tokens.

    Raises:
        RollParseError: If the text is empty, has no pool, or a flag is unknown.
    """
    tokens = (text or "").lower().split()
    if not tokens:
        raise RollParseError("Tell me how many dice to roll, e.g. `5` or `chance`.")

    pool_parts: list[str] = []
    flags: list[str] = []
    for tok in tokens:
        if _is_flag(tok):
            flags.append(tok)
            continue
        if flags:
            # Pool terms must come before any flag
            raise RollParseError(f"Unexpected `{tok}` after modifiers.")
        if tok == CHANCE or _POOL_RE.match(tok):
            pool_parts.append(tok)
        else:
            raise RollParseError(f"Unknown modifier or pool term: `{tok}`.")

    if not pool_parts:
        raise RollParseError("Missing dice pool, e.g. `5` or `chance`.")
    return " ".join(pool_parts), flags


def parse_pool(expr: str) -> int:
    """Evaluate a pool expression like ``3 + 2 - 1`` or ``chance``."""
    expr = expr.strip().lower()
    if expr == CHANCE:
        return 0
    if not expr or not _POOL_RE.match(expr):
        raise RollParseError(f"Invalid dice pool: `{expr}`.")

    total = 0
    sign = 1
    expect_number = True
    prev_operator = False
    for term in _TERM_RE.findall(expr):
        if term in "+-":
            if prev_operator:
                raise RollParseError(f"Two operators in a row in dice pool: `{expr}`.")
            sign = 1 if term == "+" else -1
            prev_operator = True
            expect_number = True
            continue
        prev_operator = False
        if not expect_number:
            raise RollParseError(f"Missing operator in dice pool: `{expr}`.")
        total += sign * int(term)
        sign = 1
        expect_number = False

    if expect_number:
        raise RollParseError(f"Dice pool ends with an operator: `{expr}`.")
    return total


def parse_roll(text: str, *, max_pool: int = DEFAULT_MAX_POOL) -> RollRequest:
    """Parse full roll text (pool plus modifiers) into a RollRequest.

    Args:
        text: User text after the command name, e.g. "5 rote 9again".
        max_pool: Largest pool accepted.

    Returns:
        A RollRequest; pools of zero or fewer become chance dice.

    Raises:
        RollParseError: If the text is malformed or the pool is too large.
    """
    pool_text, flag_tokens = split_pool_and_flags(text)
    if CHANCE in pool_text.split() and pool_text != CHANCE:
        raise RollParseError("`chance` cannot be combined with other pool terms.")
    pool = parse_pool(pool_text)
    if pool > max_pool:
        raise RollParseError(f"Too many dice: {pool} (max {max_pool}).")

    flags = {"rote": False, "nine_again": False, "eight_again": False, "no_explode": False}
    for tok in flag_tokens:
        field = _FLAG_ALIASES[tok]
        if field is not None:
            flags[field] = True
    return RollRequest(pool_size=pool, **flags)
