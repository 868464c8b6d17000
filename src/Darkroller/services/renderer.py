from __future__ import annotations

import hashlib

import orjson

from Darkroller.rules.types import DieOrigin, DieOutcome, RollRequest, RollResult


def format_die(outcome: DieOutcome) -> str:
    """Explosion dice show as (v), rote re-rolls as [v]."""
    if outcome.origin is DieOrigin.EXPLOSION:
        return f"({outcome.value})"
    if outcome.origin is DieOrigin.ROTE_REROLL:
        return f"[{outcome.value}]"
    return str(outcome.value)


def describe_modifiers(request: RollRequest) -> list[str]:
    if request.is_chance_die:
        return []
    mods: list[str] = []
    if request.rote:
        mods.append("rote")
    threshold = request.explosion_threshold
    if threshold is None:
        mods.append("no 10-again")
    elif threshold < 10:
        mods.append(f"{threshold}-again")
    return mods


def _pluralize(count: int) -> str:
    return f"{count} success" if count == 1 else f"{count} successes"


def render_roll(
    result: RollResult,
    *,
    request: RollRequest | None = None,
    pool_label: str | None = None,
    mention: str | None = None,
) -> str:
    """Render a roll as a single chat line.

    Examples:
        "<@1> rolled 5 dice and got 3 successes: 8, 3, 10, 10, 5, (7), (2)"
        "<@1> rolled a chance die and botched: 1"
    """
    who = mention or "You"
    dice_text = ", ".join(format_die(d) for d in result.dice)

    if result.is_chance_die:
        if result.is_botch:
            outcome = "botched"
        elif result.is_success:
            outcome = "succeeded"
        else:
            outcome = "failed"
        return f"{who} rolled a chance die and {outcome}: {dice_text}"

    if pool_label is None:
        pool_label = str(request.pool_size) if request is not None else str(
            sum(1 for d in result.dice if d.origin is DieOrigin.INITIAL)
        )
    mods = describe_modifiers(request) if request is not None else []
    mods_text = f" ({', '.join(mods)})" if mods else ""
    text = (
        f"{who} rolled {pool_label} dice{mods_text} and got "
        f"{_pluralize(result.successes)}: {dice_text}"
    )
    if result.is_exceptional:
        text += " Exceptional success!"
    return text


def roll_digest(result: RollResult, request: RollRequest | None = None) -> str:
    """SHA-256 of the canonical (sorted-key) roll payload, for audit logs."""
    payload = result.to_payload()
    if request is not None:
        payload["request"] = {
            "pool_size": request.pool_size,
            "rote": request.rote,
            "nine_again": request.nine_again,
            "eight_again": request.eight_again,
            "no_explode": request.no_explode,
        }
    blob = orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)
    return hashlib.sha256(blob).hexdigest()
