# discord_schemas.py

from typing import Any

from pydantic import BaseModel


class User(BaseModel):
    id: str | None = None


class Member(BaseModel):
    user: User | None = None


class InteractionData(BaseModel):
    name: str | None = None
    # Slash command options, or a single subcommand entry (type 1) wrapping them
    options: list[dict[str, Any]] | None = None


class Interaction(BaseModel):
    id: str
    type: int
    token: str
    application_id: str
    data: InteractionData | None = None
    guild_id: str | None = None
    channel_id: str | None = None
    member: Member | None = None
    # DMs carry the user directly instead of a guild member
    user: User | None = None
