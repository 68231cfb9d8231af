"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global bot settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/shopbot.db"),
        description="SQLite database location.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token the gateway relay must present on /interactions.",
    )
    discord_application_id: Optional[str] = Field(
        default=None,
        description="Application id used to address interaction webhooks.",
    )
    discord_bot_token: Optional[str] = Field(
        default=None,
        description="Bot token used for channel message reads/edits during reconciliation.",
    )
    discord_api_base_url: str = Field(
        default="https://discord.com/api/v10",
        description="Base URL of the chat platform REST API.",
    )
    discord_timeout: float = Field(
        default=10.0,
        description="Seconds before an outbound render call is abandoned.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    suggestion_history_limit: int = Field(
        default=50,
        ge=1,
        description="Recent records fetched per source (user and global) for autocomplete.",
    )
    reconcile_enabled: bool = Field(
        default=False,
        description="Run the periodic reconciliation sweep when true.",
    )
    reconcile_interval: float = Field(
        default=300.0,
        description="Seconds between reconciliation sweeps.",
    )
    reconcile_batch_size: int = Field(
        default=50,
        description="Maximum number of records inspected per reconciliation sweep.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Settings field -> (environment variables, first set wins; converter)
_ENV_FIELDS: Dict[str, Tuple[Tuple[str, ...], Callable[[str], object]]] = {
    "database_path": (("SHOPBOT_DATABASE_PATH",), Path),
    "api_token": (("SHOPBOT_API_TOKEN",), str),
    "discord_application_id": (("SHOPBOT_DISCORD_APPLICATION_ID",), str),
    "discord_bot_token": (("SHOPBOT_DISCORD_BOT_TOKEN", "DISCORD_TOKEN"), str),
    "discord_api_base_url": (("SHOPBOT_DISCORD_API_BASE_URL",), lambda value: value.rstrip("/")),
    "discord_timeout": (("SHOPBOT_DISCORD_TIMEOUT",), float),
    "log_level": (("SHOPBOT_LOG_LEVEL",), str),
    "log_format": (("SHOPBOT_LOG_FORMAT",), str),
    "log_requests": (("SHOPBOT_LOG_REQUESTS",), _coerce_bool),
    "suggestion_history_limit": (("SHOPBOT_SUGGESTION_HISTORY_LIMIT",), int),
    "reconcile_enabled": (("SHOPBOT_RECONCILE_ENABLED",), _coerce_bool),
    "reconcile_interval": (("SHOPBOT_RECONCILE_INTERVAL",), float),
    "reconcile_batch_size": (("SHOPBOT_RECONCILE_BATCH_SIZE",), int),
}


def _parse_env_file(path: Path) -> Dict[str, str]:
    """Read ``KEY=VALUE`` lines, skipping blanks and comments."""

    if not path.is_file():
        return {}
    values: Dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key.startswith("#"):
            continue
        values[key.strip()] = value.strip().strip("\"'")
    return values


def _load_from_env() -> Dict[str, object]:
    """Collect overrides from env vars (with .env fallbacks); unparsable values are ignored."""

    file_values: Dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        file_values.update(_parse_env_file(candidate))

    payload: Dict[str, object] = {}
    for field, (keys, convert) in _ENV_FIELDS.items():
        raw = next(
            (value for key in keys if (value := os.environ.get(key) or file_values.get(key))),
            None,
        )
        if raw is None:
            continue
        try:
            payload[field] = convert(raw)
        except ValueError:
            continue
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
