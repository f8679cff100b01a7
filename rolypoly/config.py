"""
rolypoly.config — YAML Configuration & Environment Secrets
===========================================================

Two sources feed the bot at startup:

* ``config.yaml`` — soft settings (environment, database URL, log level,
  tracking message presentation).
* Environment (``.env`` via python-dotenv) — secrets and per-deployment
  identifiers: ``DISCORD_BOT_TOKEN`` and, for development, ``DEBUG_GUILD_ID``.

Usage::

    from rolypoly.config import load_config, load_token

    cfg = load_config()          # reads ./config.yaml by default
    token = load_token()         # raises ConfigError if unset
    print(cfg.environment)       # "development"
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from rolypoly.constants import DEFAULT_EMBED_COLOR, DEFAULT_MESSAGE_TITLE

ENVIRONMENTS: frozenset[str] = frozenset({"development", "production"})


class ConfigError(RuntimeError):
    """Raised when startup configuration is missing or malformed."""


@dataclass(frozen=True, slots=True)
class RolyPolyConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # ``development`` scopes command sync to DEBUG_GUILD_ID
    environment: str = "production"

    # Falls back to DATABASE_URL, then the local SQLite file
    database_url: str | None = None

    log_level: str = "INFO"

    # Tracking message presentation
    message_title: str = DEFAULT_MESSAGE_TITLE
    embed_color: int = DEFAULT_EMBED_COLOR

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def _parse_color(value: object) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(str(value).lstrip("#"), 16)
    except ValueError as exc:
        raise ConfigError(f"embed_color must be a hex colour, got {value!r}") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> RolyPolyConfig:
    """Read *path* and return a :class:`RolyPolyConfig` instance.

    Every key is optional; an empty file yields the defaults.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ConfigError
        If the file is not a mapping, or ``environment`` or ``embed_color``
        hold an unusable value.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"{config_path} must contain a mapping of settings, got {type(raw).__name__}"
        )

    environment = str(raw.get("environment", "production")).lower()
    if environment not in ENVIRONMENTS:
        raise ConfigError(
            f"environment must be one of {sorted(ENVIRONMENTS)}, got {environment!r}"
        )

    return RolyPolyConfig(
        environment=environment,
        database_url=raw.get("database_url") or None,
        log_level=str(raw.get("log_level", "INFO")).upper(),
        message_title=raw.get("message_title") or DEFAULT_MESSAGE_TITLE,
        embed_color=_parse_color(raw.get("embed_color", DEFAULT_EMBED_COLOR)),
    )


def load_token() -> str:
    """Return the bot token from ``DISCORD_BOT_TOKEN``."""
    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    if not token or token == "your-discord-bot-token-here":
        raise ConfigError(
            "DISCORD_BOT_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
    return token


def load_debug_guild_id() -> int:
    """Return the guild that development builds register commands in."""
    raw = os.getenv("DEBUG_GUILD_ID", "").strip()
    if not raw:
        raise ConfigError("Expected DEBUG_GUILD_ID to be set for development builds.")
    if not raw.isdigit():
        raise ConfigError(f"DEBUG_GUILD_ID must be an integer, got {raw!r}")
    return int(raw)
