"""FastAPI app entrypoint for Darkroller."""

import asyncio
import time
import uuid
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request

from Darkroller.command_loader import load_all_commands
from Darkroller.commanding import Invocation, find_command
from Darkroller.config import Settings, load_settings
from Darkroller.crypto import verify_ed25519
from Darkroller.discord_schemas import Interaction
from Darkroller.logging import redact_settings, setup_logging
from Darkroller.metrics import get_counters, inc_counter, observe_histogram
from Darkroller.responder import followup_message, respond_deferred, respond_pong
from Darkroller.rules.engine import CodRuleset

log = structlog.get_logger()
settings = load_settings()
setup_logging(settings)
app = FastAPI(title="Darkroller")

# Shared by every interaction so a configured seed yields one continuous stream
_ruleset = CodRuleset(seed=settings.dice_seed, max_explosions=settings.dice_max_explosions)

# Background dispatch tasks; kept referenced until done
_tasks: set[asyncio.Task] = set()

DISCORD_SIG_HEADER = "X-Signature-Ed25519"
DISCORD_TS_HEADER = "X-Signature-Timestamp"
DEV_KEY_HEADER = "X-Darkroller-Use-Dev-Key"


@app.on_event("startup")
async def startup():
    log.info("app.startup", config=redact_settings(settings))
    load_all_commands()


class DiscordResponder:
    def __init__(self, application_id: str, token: str, settings: Settings, dev_request: bool = False):
        self.application_id = application_id
        self.token = token
        self.settings = settings
        self.dev_request = dev_request

    async def send(self, content: str, *, ephemeral: bool = False) -> None:
        await followup_message(
            self.application_id,
            self.token,
            content,
            ephemeral=ephemeral,
            settings=self.settings,
            allow_settings_override=self.dev_request,
        )


@app.post("/interactions")
async def interactions(request: Request):
    raw = await request.body()
    sig = request.headers.get(DISCORD_SIG_HEADER)
    ts = request.headers.get(DISCORD_TS_HEADER)
    log.info(
        "discord.request.received",
        http_path=str(request.url.path),
        has_sig=bool(sig),
        has_ts=bool(ts),
    )
    if not sig or not ts:
        log.error("discord.request.missing_signature")
        raise HTTPException(status_code=401, detail="missing signature headers")

    # A trusted dev header opts in to the alternate public key, only in dev
    use_dev_pub = (
        request.headers.get(DEV_KEY_HEADER) == "1"
        and settings.env == "dev"
        and bool(settings.discord_dev_public_key)
    )
    pubkey = (settings.discord_dev_public_key or "") if use_dev_pub else settings.discord_public_key
    if not verify_ed25519(pubkey, ts, raw, sig):
        log.error("discord.request.bad_signature", use_dev_key=use_dev_pub)
        raise HTTPException(status_code=401, detail="bad signature")

    try:
        inter = Interaction.model_validate_json(raw)
    except ValueError as err:
        preview = raw[:200].decode("utf-8", errors="replace")
        log.error("discord.request.parse_error", raw_body_preview=preview)
        raise HTTPException(status_code=400, detail="invalid interaction payload") from err

    # Ping = 1
    if inter.type == 1:
        return respond_pong()

    # Application command = 2: DEFER immediately to satisfy the 3s budget
    if inter.type == 2 and inter.data is not None and inter.data.name is not None:
        task = asyncio.create_task(_dispatch_command(inter, dev_request=use_dev_pub))
        _tasks.add(task)
        task.add_done_callback(_tasks.discard)
    return respond_deferred()


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Assign a request_id, bind it to structlog context, and measure duration."""
    from structlog.contextvars import bind_contextvars, clear_contextvars

    start = time.perf_counter()
    bind_contextvars(request_id=str(uuid.uuid4()))
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        log.info(
            "http.request.completed",
            http_path=str(request.url.path),
            http_method=request.method,
            http_status_code=status_code,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        clear_contextvars()


def _extract_options(inter: Interaction) -> dict[str, Any]:
    opts: list[dict[str, Any]] = (inter.data.options or []) if inter.data is not None else []
    if opts and isinstance(opts[0], dict) and opts[0].get("type") == 1:
        opts = opts[0].get("options", []) or []
    options: dict[str, Any] = {}
    for o in opts:
        n = o.get("name")
        if isinstance(n, str):
            options[n] = o.get("value")
    return options


def _subcommand(inter: Interaction) -> str | None:
    if inter.data is not None and inter.data.options:
        first = inter.data.options[0]
        if isinstance(first, dict) and first.get("type") == 1:
            name = first.get("name")
            return str(name) if name is not None else None
    return None


def _infer_user_id(inter: Interaction) -> str:
    user = inter.member.user if inter.member and inter.member.user else inter.user
    return str(user.id) if user and user.id else "0"


async def _dispatch_command(inter: Interaction, *, dev_request: bool = False):
    assert inter.data is not None and inter.data.name is not None
    name = inter.data.name
    sub = _subcommand(inter)
    cmd = find_command(name, sub)
    if cmd is None:
        log.warning("command.unknown", command_name=name, subcommand=sub)
        return

    options = _extract_options(inter)
    user_id = _infer_user_id(inter)
    responder = DiscordResponder(inter.application_id, inter.token, settings, dev_request=dev_request)
    inv = Invocation(
        name=name,
        subcommand=sub,
        options=options,
        user_id=user_id,
        channel_id=inter.channel_id,
        guild_id=inter.guild_id,
        responder=responder,
        settings=settings,
        ruleset=_ruleset,
    )

    try:
        opts_obj = cmd.option_model.model_validate(options)
    except ValueError:
        inc_counter("command.options_error")
        await responder.send(f"❌ Invalid options for `{name}`.", ephemeral=True)
        return

    start = time.perf_counter()
    status = "success"
    log.info(
        "command.initiated",
        command_name=name,
        subcommand=sub,
        options=options,
        user_id=user_id,
        guild_id=inter.guild_id,
    )
    try:
        await cmd.handler(inv, opts_obj)
    except Exception:
        status = "error"
        log.error("command.error", command_name=name, subcommand=sub, user_id=user_id, exc_info=True)
        raise
    finally:
        duration_ms = int((time.perf_counter() - start) * 1000)
        observe_histogram(f"command.{name}.duration_ms", duration_ms)
        log.info(
            "command.completed",
            command_name=name,
            subcommand=sub,
            user_id=user_id,
            status=status,
            duration_ms=duration_ms,
        )


@app.get("/healthz")
async def healthz():
    load_all_commands()
    if find_command("roll", None) is None:
        raise HTTPException(status_code=500, detail="unhealthy: roll command not registered")
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    if not settings.metrics_endpoint_enabled:
        raise HTTPException(status_code=404, detail="metrics disabled")
    return get_counters()
