#!/usr/bin/env python3
"""
Dynamic CLI that discovers Darkroller slash commands and runs the same handlers.

Examples:
  PYTHONPATH=./src python scripts/cli.py roll --pool 5 --modifiers "rote 9again"
  PYTHONPATH=./src python scripts/cli.py roll --pool chance
  PYTHONPATH=./src python scripts/cli.py help

This CLI does not mock Discord. It constructs an Invocation with a PrintResponder and
calls the command's handler directly.
"""
from __future__ import annotations

import asyncio
from types import UnionType
from typing import Any, Union, get_args, get_origin

import click

from Darkroller.command_loader import load_all_commands
from Darkroller.commanding import Invocation, all_commands
from Darkroller.config import load_settings
from Darkroller.logging import setup_logging
from Darkroller.rules.engine import CodRuleset


class PrintResponder:
    async def send(self, content: str, *, ephemeral: bool = False) -> None:  # pragma: no cover
        prefix = "(ephemeral) " if ephemeral else ""
        click.echo(prefix + str(content))


def _click_type_for(annotation: Any):
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is None:
        if annotation in (str, int, float, bool):
            return annotation
        return str

    # Optional/Union -> use the first non-None arg
    if origin in (Union, UnionType) and args:
        base = next((a for a in args if a is not type(None)), str)
        return _click_type_for(base)

    return str


def _params_from_model(option_model: type) -> list[click.Parameter]:
    params: list[click.Parameter] = []
    for name, field in option_model.model_fields.items():
        opt_name = f"--{name.replace('_', '-')}"
        ann = field.annotation or str
        required = field.is_required()
        default = None if required else field.default
        help_text = field.description or ""

        if ann is bool:
            params.append(click.Option([opt_name], is_flag=True, default=bool(default), help=help_text))
            continue

        params.append(
            click.Option(
                [opt_name],
                type=_click_type_for(ann),
                required=required,
                default=default,
                show_default=default is not None,
                help=help_text,
            )
        )
    return params


def _make_click_command(name: str, option_model: type, handler, sub: str | None = None) -> click.Command:
    params = _params_from_model(option_model)

    @click.pass_context
    def _callback(ctx: click.Context, **kwargs: Any):
        seed = ctx.obj.get("seed") if ctx.obj else None

        async def _run():
            settings = load_settings()
            setup_logging(settings)
            inv = Invocation(
                name=name,
                subcommand=sub,
                options=kwargs,
                user_id="",
                channel_id=None,
                guild_id=None,
                responder=PrintResponder(),
                settings=settings,
                ruleset=CodRuleset(
                    seed=seed if seed is not None else settings.dice_seed,
                    max_explosions=settings.dice_max_explosions,
                ),
            )
            opts = option_model.model_validate(kwargs)
            await handler(inv, opts)

        asyncio.run(_run())

    return click.Command(name=sub or name, params=params, callback=_callback)


def build_app() -> click.Group:
    load_all_commands()

    @click.group()
    @click.option("--seed", type=int, default=None, help="Seed the dice for a reproducible roll.")
    @click.pass_context
    def app(ctx: click.Context, seed: int | None):
        ctx.obj = {"seed": seed}

    bucket: dict[str, list] = {}
    for cmd in all_commands().values():
        bucket.setdefault(cmd.name, []).append(cmd)

    for name, cmds in bucket.items():
        subs = [c for c in cmds if c.subcommand]
        if subs:
            grp = click.Group(name=name)
            for c in subs:
                grp.add_command(_make_click_command(name, c.option_model, c.handler, c.subcommand))
            app.add_command(grp)
        else:
            c = cmds[0]
            app.add_command(_make_click_command(name, c.option_model, c.handler))

    return app


def main() -> None:  # pragma: no cover
    app = build_app()
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
