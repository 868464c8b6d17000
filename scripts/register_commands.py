#!/usr/bin/env python3
"""
Discord Command Management Script

Registers, unregisters and lists Darkroller's slash commands, globally or for
one guild. Command payloads are built from the option models of the
registered command handlers.

Usage:
  python scripts/register_commands.py --status [--global|--guild [GUILD_ID]]
  python scripts/register_commands.py --register [--global|--guild [GUILD_ID]]
  python scripts/register_commands.py --unregister [--global|--guild [GUILD_ID]]

Environment Variables (read from .env.local or .env):
  - DISCORD_APPLICATION_ID or DISCORD_APP_ID: The application ID of the bot.
  - DISCORD_BOT_TOKEN: The bot token for authentication.
  - DISCORD_GUILD_ID (optional): The guild ID for guild-scoped commands.
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Any

import httpx
import orjson
from dotenv import load_dotenv
from prettytable import PrettyTable
from pydantic.fields import FieldInfo

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from Darkroller.command_loader import load_all_commands  # noqa: E402
from Darkroller.commanding import all_commands  # noqa: E402

DISCORD_API_BASE = "https://discord.com/api/v10"

# Discord API constants
CMD_CHAT_INPUT = 1
SUB_COMMAND = 1
OPT_STRING = 3
OPT_INTEGER = 4
OPT_BOOLEAN = 5
OPT_NUMBER = 10


def _map_pydantic_to_discord(field_name: str, f: FieldInfo) -> dict[str, Any]:
    ann = f.annotation
    if ann is int:
        t = OPT_INTEGER
    elif ann is float:
        t = OPT_NUMBER
    elif ann is bool:
        t = OPT_BOOLEAN
    else:
        t = OPT_STRING
    desc = (f.description or "").strip()
    return {
        "name": field_name,
        "description": (desc or field_name)[:100],
        "type": t,
        "required": f.is_required(),
    }


def _options_for(option_model) -> list[dict[str, Any]]:
    opts = [_map_pydantic_to_discord(n, f) for n, f in option_model.model_fields.items()]
    # Discord requires required options to come first
    return sorted(opts, key=lambda o: not o["required"])


def build_commands_payload() -> list[dict[str, Any]]:
    load_all_commands()
    by_name: dict[str, list] = {}
    for cmd in all_commands().values():
        by_name.setdefault(cmd.name, []).append(cmd)

    payload: list[dict[str, Any]] = []
    for name, cmds in by_name.items():
        subs = [c for c in cmds if c.subcommand]
        if subs:
            options = [
                {
                    "type": SUB_COMMAND,
                    "name": c.subcommand,
                    "description": c.description,
                    "options": _options_for(c.option_model),
                }
                for c in subs
            ]
            description = subs[0].description
        else:
            options = _options_for(cmds[0].option_model)
            description = cmds[0].description
        payload.append(
            {"name": name, "description": description, "type": CMD_CHAT_INPUT, "options": options}
        )
    return payload


def _command_url(app_id: str, guild_id: str | None = None) -> str:
    base_url = f"{DISCORD_API_BASE}/applications/{app_id}"
    if guild_id:
        return f"{base_url}/guilds/{guild_id}/commands"
    return f"{base_url}/commands"


async def _fetch_commands(client: httpx.AsyncClient, url: str, headers: dict) -> list[dict]:
    response = await client.get(url, headers=headers)
    response.raise_for_status()
    return response.json()


def print_status(local_commands: list[dict], registered_commands: list[dict], scope: str) -> None:
    print(f"\nStatus for {scope} commands:")
    table = PrettyTable()
    table.field_names = ["Command Name", "Registered", "Description", "Options"]
    table.hrules = 1
    registered_names = {rc["name"] for rc in registered_commands}
    for cmd in local_commands:
        options = "\n".join(
            f"- {o['name']} ({'Required' if o.get('required') else 'Optional'})"
            for o in cmd.get("options", [])
        )
        table.add_row([
            cmd["name"],
            "Yes" if cmd["name"] in registered_names else "No",
            cmd.get("description", ""),
            options or "No options",
        ])
    print(table)


async def _register(client, url, headers, local_commands) -> None:
    # POST upserts by name, so existing commands are updated in place
    for cmd in local_commands:
        response = await client.post(url, headers=headers, content=orjson.dumps(cmd))
        if response.status_code in (200, 201):
            print(f"Registered: {cmd['name']}")
        else:
            print(f"Failed to register {cmd['name']}. Status: {response.status_code}")


async def _unregister(client, url, headers, local_commands, registered_commands) -> None:
    local_names = {lc["name"] for lc in local_commands}
    for cmd in registered_commands:
        if cmd["name"] not in local_names:
            continue
        response = await client.delete(f"{url}/{cmd['id']}", headers=headers)
        if response.status_code == 204:
            print(f"Unregistered: {cmd['name']}")
        else:
            print(f"Failed to unregister {cmd['name']}. Status: {response.status_code}")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Manage Discord slash commands.")
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--status", action="store_true", help="Check the status of commands.")
    action.add_argument("--register", action="store_true", help="Register commands.")
    action.add_argument("--unregister", action="store_true", help="Unregister commands.")
    parser.add_argument("--global", action="store_true", dest="is_global", help="Global commands (default).")
    parser.add_argument("--guild", nargs="?", const=True, dest="guild", help="Guild commands; optional guild ID.")
    args = parser.parse_args()

    env_local = project_root / ".env.local"
    load_dotenv(dotenv_path=env_local if env_local.exists() else project_root / ".env")
    try:
        app_id = os.environ.get("DISCORD_APPLICATION_ID") or os.environ["DISCORD_APP_ID"]
        bot_token = os.environ["DISCORD_BOT_TOKEN"]
    except KeyError as e:
        print(f"Error: Missing required environment variable: {e}")
        return 1

    guild_id = None
    if args.guild:
        guild_id = os.environ.get("DISCORD_GUILD_ID") if args.guild is True else args.guild
        if not guild_id:
            print("Error: DISCORD_GUILD_ID must be set for guild-scoped commands.")
            return 1

    url = _command_url(app_id, guild_id)
    scope = f"guild {guild_id}" if guild_id else "global"
    headers = {"Authorization": f"Bot {bot_token}", "Content-Type": "application/json"}
    local_commands = build_commands_payload()

    async with httpx.AsyncClient(timeout=10) as client:
        registered = await _fetch_commands(client, url, headers)
        if args.register:
            await _register(client, url, headers, local_commands)
        elif args.unregister:
            await _unregister(client, url, headers, local_commands, registered)
        if args.register or args.unregister:
            # Give Discord a moment before re-reading to avoid rate limits
            await asyncio.sleep(2)
            registered = await _fetch_commands(client, url, headers)
        print_status(local_commands, registered, scope)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
