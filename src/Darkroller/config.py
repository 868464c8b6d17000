"""Settings loader for Darkroller."""

from pathlib import Path
from typing import Any

import tomllib
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from config.toml with keys mapped to Settings fields.

    This source has LOWER priority than env/.env so those can override TOML.
    """
    cfg_path = Path("config.toml")
    if not cfg_path.exists():
        return {}
    with cfg_path.open("rb") as f:
        t = tomllib.load(f)

    discord_cfg = t.get("discord", {}) or {}
    dice_cfg = t.get("dice", {}) or {}
    log_cfg = t.get("logging", {}) or {}
    out: dict[str, Any] = {
        "env": (t.get("app", {}) or {}).get("env", "dev"),
        "response_timeout_seconds": discord_cfg.get("response_timeout_seconds", 3),
        # When set, follow-ups go to this base URL instead of Discord.
        # Example: "http://127.0.0.1:18000/dev-webhook"
        "discord_webhook_url_override": discord_cfg.get("webhook_url_override"),
        "dice_seed": dice_cfg.get("seed"),
        "dice_max_pool": dice_cfg.get("max_pool", 100),
        "dice_max_explosions": dice_cfg.get("max_explosions", 10_000),
        "logging_enabled": log_cfg.get("enabled", True),
        "logging_level": log_cfg.get("level", "INFO"),
        "logging_file_path": log_cfg.get("file_path", "logs/darkroller.jsonl"),
        "logging_max_bytes": log_cfg.get("max_bytes", 5_000_000),
        "logging_backup_count": log_cfg.get("backup_count", 5),
    }

    # Per-handler levels: strings INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE
    # Booleans map True -> overall level, False -> NONE
    overall = out["logging_level"]

    def _norm_level(v, default):
        if isinstance(v, str):
            return v.upper()
        if isinstance(v, bool):
            return default if v else "NONE"
        return default

    out["logging_console"] = _norm_level(log_cfg.get("console"), overall)
    out["logging_file"] = _norm_level(log_cfg.get("to_file"), overall)

    ops_cfg = t.get("ops", {}) or {}
    out["metrics_endpoint_enabled"] = ops_cfg.get("metrics_endpoint_enabled", False)

    # Drop unset optionals so pydantic defaults apply
    return {k: v for k, v in out.items() if v is not None}


class Settings(BaseSettings):
    env: str = Field(default="dev")

    # --- Discord Credentials ---
    discord_app_id: str | None = None
    discord_public_key: str = ""
    # Development-only alternate public key used for locally signed requests
    discord_dev_public_key: str | None = None
    discord_bot_token: SecretStr | None = None
    # For redirecting webhooks back to a local sink
    discord_webhook_url_override: str | None = None

    # --- App Behavior ---
    response_timeout_seconds: int = 3
    app_port: int = 18000

    # --- Dice ---
    dice_seed: int | None = None
    dice_max_pool: int = Field(default=100, ge=1)
    dice_max_explosions: int = Field(default=10_000, ge=1)

    # --- Logging ---
    logging_enabled: bool = True
    logging_level: str = "INFO"
    logging_console: str = "INFO"
    logging_file: str = "INFO"
    logging_file_path: str = "logs/darkroller.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    # --- Ops ---
    metrics_endpoint_enabled: bool = False

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env)
        # 4) TOML (config.toml) project defaults
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )


def load_settings() -> Settings:
    return Settings()
