"""Process-wide configuration for the Resend MCP server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_BASE_URL = "https://api.resend.com"
DEFAULT_PORT = 3000


class ConfigError(RuntimeError):
    """Raised when the server cannot start with the supplied configuration."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    sender_email_address: str | None = None
    reply_to_email_addresses: tuple[str, ...] = field(default_factory=tuple)
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    log_level: str = "INFO"

    def summary(self) -> dict[str, str]:
        """Loggable view of the settings with the credential masked."""
        return {
            "RESEND_API_KEY": "***SET***" if self.api_key else "MISSING",
            "SENDER_EMAIL_ADDRESS": self.sender_email_address or "NOT SET",
            "REPLY_TO_EMAIL_ADDRESSES": ",".join(self.reply_to_email_addresses) or "NOT SET",
            "PORT": str(self.port),
        }


def parse_address_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma separated address list, keeping order and dropping blanks."""
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _parse_number(environ: Mapping[str, str], key: str, default: float, kind: type) -> float:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = kind(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}.") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}.")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``; callers that
            want ``.env`` support should run ``load_dotenv()`` first.

    Raises:
        ConfigError: If RESEND_API_KEY is missing or a numeric value is invalid.
    """
    env = os.environ if environ is None else environ

    api_key = (env.get("RESEND_API_KEY") or "").strip()
    if not api_key:
        raise ConfigError(
            "No API key provided. Please set RESEND_API_KEY environment variable."
        )

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}.")

    sender = (env.get("SENDER_EMAIL_ADDRESS") or "").strip() or None

    return Settings(
        api_key=api_key,
        sender_email_address=sender,
        reply_to_email_addresses=parse_address_list(env.get("REPLY_TO_EMAIL_ADDRESSES")),
        host=(env.get("HOST") or "0.0.0.0").strip(),
        port=int(_parse_number(env, "PORT", DEFAULT_PORT, int)),
        base_url=(env.get("RESEND_BASE_URL") or DEFAULT_BASE_URL).strip(),
        timeout=float(_parse_number(env, "RESEND_TIMEOUT_SECONDS", 30.0, float)),
        log_level=log_level,
    )
