import httpx
import orjson
import structlog
from fastapi import Response

from Darkroller.config import Settings

__all__ = [
    "orjson_response",
    "respond_pong",
    "respond_deferred",
    "followup_message",
]

DISCORD_API_BASE = "https://discord.com/api/v10"
EPHEMERAL_FLAG = 64


def orjson_response(data: dict) -> Response:
    return Response(content=orjson.dumps(data), media_type="application/json")


def respond_pong() -> Response:
    return orjson_response({"type": 1})


def respond_deferred() -> Response:
    return orjson_response({"type": 5})


async def followup_message(
    application_id: str,
    token: str,
    content: str,
    ephemeral: bool = False,
    *,
    settings: Settings,
    allow_settings_override: bool = True,
):
    """
    Send a follow-up message via webhook.
    Uses discord_webhook_url_override from settings if present and allowed.
    """
    log = structlog.get_logger()
    base_url_source = "default"
    if settings.discord_webhook_url_override and allow_settings_override:
        base_url = settings.discord_webhook_url_override
        base_url_source = "settings_override"
    else:
        base_url = DISCORD_API_BASE
    url = f"{base_url.rstrip('/')}/webhooks/{application_id}/{token}"

    payload = {"content": content, "flags": EPHEMERAL_FLAG if ephemeral else 0}
    log.info(
        "discord.followup.send",
        ephemeral=ephemeral,
        content_len=len(content or ""),
        base_url_source=base_url_source,
    )

    async with httpx.AsyncClient(timeout=20) as client:
        try:
            r = await client.post(
                url, content=orjson.dumps(payload), headers={"Content-Type": "application/json"}
            )
            r.raise_for_status()
            log.info("discord.followup.sent", http_status_code=r.status_code)
        except httpx.RequestError as e:
            log.error(
                "discord.followup.network_error",
                error=str(e),
                base_url_source=base_url_source,
            )
            # Only re-raise when targeting the real Discord API
            if base_url_source == "default":
                raise
        except httpx.HTTPStatusError as e:
            log.error(
                "discord.followup.http_error",
                http_status_code=e.response.status_code,
                text_preview=(e.response.text or "")[:200],
                base_url_source=base_url_source,
            )
            if base_url_source == "default":
                raise
