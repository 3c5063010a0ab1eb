"""Thread-safe slot holding the most recent usage report."""
from __future__ import annotations

import threading

from .usage_api import UsageReport


class UsageCache:
    """Single-value cache; each ``set`` replaces the report wholesale."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._report: UsageReport | None = None

    def get(self) -> UsageReport | None:
        with self._lock:
            return self._report

    def set(self, report: UsageReport) -> None:
        with self._lock:
            self._report = report


__all__ = ['UsageCache']
