from __future__ import annotations

from pydantic import Field

from Darkroller.commanding import Invocation, Option, find_command, slash_command
from Darkroller.metrics import inc_counter
from Darkroller.roll_parser import DEFAULT_MAX_POOL


class HelpOpts(Option):
	# Optional focus area; capped to keep payloads tiny.
	topic: str | None = Field(
		default=None,
		description="Optional topic to focus help on (e.g., roll, modifiers)",
		max_length=24,
	)


def _build_help_text(settings, topic: str | None) -> str:
	max_pool = int(getattr(settings, "dice_max_pool", DEFAULT_MAX_POOL))
	lines: list[str] = []

	lines.append("Darkroller — Chronicles of Darkness dice roller")
	lines.append("")

	if topic in (None, "roll") and find_command("roll", None) is not None:
		lines.append("Rolling:")
		lines.append(f"• /roll pool:<n> rolls n ten-sided dice (up to {max_pool}).")
		lines.append("• Each 8, 9 or 10 is a success; five or more is an exceptional success.")
		lines.append("• Pools can be sums like 3+2-1. Zero or less rolls a chance die.")
		lines.append("• /roll pool:chance rolls a chance die: only a 10 succeeds, a 1 botches.")
		lines.append("")

	if topic in (None, "roll", "modifiers"):
		lines.append("Modifiers (add to the modifiers option or the pool text):")
		lines.append("• rote - re-roll every failed die once")
		lines.append("• 9again - 9s and 10s add another die")
		lines.append("• 8again - 8s, 9s and 10s add another die")
		lines.append("• no10again - nothing adds extra dice")
		lines.append("")
		lines.append("In results, extra dice from 10-again show as (v) and rote re-rolls as [v].")
		lines.append("")

	lines.append("Examples: /roll pool:4 • /roll pool:chance • /roll pool:10 modifiers:9again rote")
	return "\n".join(lines)


@slash_command(
	name="help",
	description="Show how to roll dice with Darkroller.",
	option_model=HelpOpts,
)
async def help_cmd(inv: Invocation, opts: HelpOpts):
	inc_counter("help.view")

	topic = (opts.topic or "").strip().lower() or None
	text = _build_help_text(inv.settings, topic)
	await inv.responder.send(text, ephemeral=True)
