"""
Claude Usage Agent
==================

Keeps a Claude Code OAuth session valid and reports plan usage
(5-hour and 7-day windows) from the Anthropic OAuth usage API.

Tokens are read from the platform credential store that Claude Code
writes to (requires Claude Code login).
"""
from __future__ import annotations

__version__ = '1.0.0'

from .agent import USAGE_UPDATED, Poller, UsageAgent  # noqa: E402
from .cache import UsageCache  # noqa: E402
from .config import Settings, load_settings  # noqa: E402
from .session import UsageSession  # noqa: E402
from .usage_api import UsageBucket, UsageReport  # noqa: E402

__all__ = [
    'USAGE_UPDATED',
    'Poller',
    'Settings',
    'UsageAgent',
    'UsageBucket',
    'UsageCache',
    'UsageReport',
    'UsageSession',
    'load_settings',
]
