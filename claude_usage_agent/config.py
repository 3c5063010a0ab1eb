"""
Configuration
=============

Defaults for endpoints, credentials and timing, plus an optional JSON file
that overrides them.
"""
from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from . import __version__
from .errors import ConfigError

logger = logging.getLogger(__name__)

# ── Configuration ──────────────────────────────────────────────
POLL_INTERVAL = 300  # Seconds between background updates
REQUEST_TIMEOUT = 10.0  # Seconds per HTTP request

CREDENTIAL_SERVICE = 'Claude Code-credentials'
ACCOUNT_ENV_VARS = ('USER', 'USERNAME')

API_URL_USAGE = 'https://api.anthropic.com/api/oauth/usage'
API_URL_TOKEN = 'https://console.anthropic.com/v1/oauth/token'
OAUTH_CLIENT_ID = '9d1c250a-e61b-44d9-88ed-5944d1962f5e'
ANTHROPIC_BETA = 'oauth-2025-04-20'
USER_AGENT = f'claude-usage-agent/{__version__}'

CONFIG_PATH = Path(
    os.getenv(
        'CLAUDE_USAGE_AGENT_CONFIG',
        Path.home() / '.config' / 'claude_usage_agent' / 'config.json',
    )
)
# ───────────────────────────────────────────────────────────────


DURATION_FIELDS = ('poll_interval', 'request_timeout')


def check_duration(name: str, value: Any) -> float:
    """Return *value* as a positive, finite number of seconds.

    Raises
    ------
    ConfigError
        If *value* is not a number, is zero or negative, or is infinite or NaN.
    """
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f'invalid {name}: {value!r}') from None
    if isinstance(value, bool) or not math.isfinite(seconds) or seconds <= 0:
        raise ConfigError(f'{name} must be a positive number of seconds, got {value!r}')
    return seconds


@dataclass(frozen=True)
class Settings:
    poll_interval: float = POLL_INTERVAL
    request_timeout: float = REQUEST_TIMEOUT
    credential_service: str = CREDENTIAL_SERVICE
    usage_url: str = API_URL_USAGE
    token_url: str = API_URL_TOKEN
    client_id: str = OAUTH_CLIENT_ID
    beta_header: str = ANTHROPIC_BETA
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        for name in DURATION_FIELDS:
            object.__setattr__(self, name, check_duration(name, getattr(self, name)))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from a mapping, ignoring unknown keys.

        Durations are coerced to ``float``; values that are not positive finite
        numbers keep their default.
        """
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            if key in DURATION_FIELDS:
                try:
                    value = check_duration(key, value)
                except ConfigError as e:
                    logger.warning('Ignoring %s', e)
                    continue
            elif not isinstance(value, str):
                logger.warning('Ignoring non-string %s in config: %r', key, value)
                continue
            values[key] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from *path* (or ``CONFIG_PATH``), falling back to defaults.

    A missing, unreadable or malformed file is not an error: the agent runs
    with its built-in defaults.
    """
    path = path or CONFIG_PATH
    if not path.exists():
        return Settings()

    try:
        with path.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning('Could not read config file %s: %s', path, e)
        return Settings()

    if not isinstance(data, dict):
        logger.warning('Config file %s does not contain a JSON object', path)
        return Settings()
    return Settings.from_dict(data)


__all__ = ['CONFIG_PATH', 'Settings', 'check_duration', 'load_settings']
