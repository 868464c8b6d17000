# src/Darkroller/commands/roll.py
import dataclasses
from functools import lru_cache

import structlog
from pydantic import Field

from Darkroller.commanding import Invocation, Option, slash_command
from Darkroller.config import load_settings
from Darkroller.metrics import inc_counter
from Darkroller.roll_parser import DEFAULT_MAX_POOL, RollParseError, parse_roll
from Darkroller.services.renderer import render_roll, roll_digest

log = structlog.get_logger()


class RollOpts(Option):
    pool: str = Field(description="Dice pool: a number, a sum like 3+2-1, or 'chance'")
    modifiers: str | None = Field(
        default=None,
        description="Optional modifiers: rote, 9again, 8again, no10again",
        max_length=100,
    )
    rote: bool = Field(default=False, description="Rote quality: re-roll failed dice once")
    nine_again: bool = Field(default=False, description="Re-roll 9s and 10s")
    eight_again: bool = Field(default=False, description="Re-roll 8s, 9s and 10s")
    no_explode: bool = Field(default=False, description="Do not re-roll 10s")


@lru_cache(maxsize=8)
def _shared_ruleset(seed: int | None, max_explosions: int):
    # One ruleset per configuration so a seeded stream advances across rolls
    from Darkroller.rules.engine import CodRuleset

    return CodRuleset(seed=seed, max_explosions=max_explosions)


def _build_ruleset(inv: Invocation, settings):
    # Prefer injected ruleset; fall back to the shared one (tests/CLI)
    if inv.ruleset is not None:
        return inv.ruleset
    return _shared_ruleset(
        getattr(settings, "dice_seed", None),
        getattr(settings, "dice_max_explosions", 10_000),
    )


@slash_command(
    name="roll",
    description="Roll a Chronicles of Darkness dice pool (e.g., 5 9again).",
    option_model=RollOpts,
)
async def roll(inv: Invocation, opts: RollOpts):
    settings = inv.settings or load_settings()
    max_pool = getattr(settings, "dice_max_pool", DEFAULT_MAX_POOL)
    text = " ".join(p for p in (opts.pool, opts.modifiers) if p)
    try:
        request = parse_roll(text, max_pool=max_pool)
    except RollParseError as err:
        inc_counter("roll.parse_error")
        log.info("roll.parse_error", text=text, error=str(err), user_id=inv.user_id)
        await inv.responder.send(f"❌ {err}", ephemeral=True)
        return

    # Boolean options stack with modifier tokens
    request = dataclasses.replace(
        request,
        rote=request.rote or opts.rote,
        nine_again=request.nine_again or opts.nine_again,
        eight_again=request.eight_again or opts.eight_again,
        no_explode=request.no_explode or opts.no_explode,
    )

    ruleset = _build_ruleset(inv, settings)
    result = ruleset.roll_pool(request)

    inc_counter("roll.performed")
    if result.is_chance_die:
        inc_counter("roll.chance")
    if result.is_botch:
        inc_counter("roll.botch")
    if result.is_exceptional:
        inc_counter("roll.exceptional")

    log.info(
        "roll.resolved",
        user_id=inv.user_id,
        guild_id=inv.guild_id,
        pool_size=request.pool_size,
        values=result.values,
        successes=result.successes,
        is_chance_die=result.is_chance_die,
        is_botch=result.is_botch,
        exploded_count=result.exploded_count,
        digest=roll_digest(result, request),
    )
    mention = f"<@{inv.user_id}>" if inv.user_id else None
    await inv.responder.send(render_roll(result, request=request, mention=mention))
