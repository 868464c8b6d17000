import pytest

from Darkroller.command_loader import load_all_commands
from Darkroller.commanding import Invocation, find_command
from Darkroller.metrics import get_counter


async def _help(responder, settings=None, **options):
    load_all_commands()
    cmd = find_command("help", None)
    assert cmd is not None
    inv = Invocation(
        name="help",
        subcommand=None,
        options=options,
        user_id="u1",
        channel_id="c1",
        guild_id="g1",
        responder=responder,
        settings=settings,
    )
    await cmd.handler(inv, cmd.option_model.model_validate(inv.options))
    content, ephemeral = responder.messages[0]
    return content, ephemeral


@pytest.mark.asyncio
async def test_help_happy_path(responder):
    content, ephemeral = await _help(responder)

    assert ephemeral is True
    assert "Chronicles of Darkness dice roller" in content
    assert "chance die" in content
    assert "9again" in content
    assert "up to 100" in content
    assert len(content) < 2000
    assert get_counter("help.view") == 1


@pytest.mark.asyncio
async def test_help_uses_configured_max_pool(responder):
    settings = type("S", (), {"dice_max_pool": 30})()
    content, _ = await _help(responder, settings=settings)
    assert "up to 30" in content


@pytest.mark.asyncio
async def test_help_modifiers_topic(responder):
    content, _ = await _help(responder, topic="modifiers")
    assert "rote" in content
    assert "Rolling:" not in content
