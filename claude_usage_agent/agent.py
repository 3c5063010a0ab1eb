"""
Usage Agent
===========

Process-wide state and the commands a presentation layer calls:

- ``get_usage()``: run one cycle, cache and return the report (errors raise).
- ``get_cached_usage()``: last cached report, no network I/O.
- ``usage-updated``: event emitted to listeners after each successful
  background poll.

The :class:`Poller` drives ``poll_once()`` from a daemon thread at a fixed
interval. ``poll_once()`` is the only place where a failed cycle is logged
and dropped instead of raised, so a transient outage never stops polling.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable

import requests

from .cache import UsageCache
from .config import Settings, check_duration
from .errors import UsageAgentError
from .session import UsageSession
from .usage_api import UsageReport

logger = logging.getLogger(__name__)

USAGE_UPDATED = 'usage-updated'

Listener = Callable[[str, dict[str, Any]], None]


class UsageAgent:
    """Owns the shared HTTP session, the report cache and the event listeners."""

    def __init__(self, settings: Settings | None = None, http: requests.Session | None = None) -> None:
        self.settings = settings or Settings()
        self.http = http or requests.Session()
        self.cache = UsageCache()
        self.session = UsageSession(self.http, self.settings)
        self._listeners: list[Listener] = []

    def on_usage_updated(self, listener: Listener) -> None:
        """Register *listener* to be called as ``listener(event, payload)``."""
        self._listeners.append(listener)

    def get_usage(self) -> UsageReport:
        """Run one cycle and cache the result. Errors leave the cache untouched."""
        report = self.session.run_cycle()
        self.cache.set(report)
        return report

    def get_cached_usage(self) -> UsageReport | None:
        return self.cache.get()

    def poll_once(self) -> UsageReport | None:
        """Background variant of :meth:`get_usage`.

        Returns
        -------
        UsageReport or None
            The new report, or ``None`` if the cycle failed. On failure the
            cache keeps its previous value and no event is emitted.
        """
        try:
            report = self.get_usage()
        except UsageAgentError as e:
            logger.warning('Background usage update failed: %s', e)
            return None

        self._emit(USAGE_UPDATED, report.to_dict())
        return report

    def _emit(self, event: str, payload: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                logger.exception('Listener %r failed for %s', listener, event)

    def close(self) -> None:
        self.http.close()


class Poller:
    """Calls ``agent.poll_once()`` every *interval* seconds on a daemon thread.

    The first cycle runs one full interval after :meth:`start`, not immediately.
    Raises :class:`~claude_usage_agent.errors.ConfigError` for an interval that
    is not a positive, finite number of seconds.
    """

    def __init__(self, agent: UsageAgent, interval: float | None = None) -> None:
        self.agent = agent
        self.interval = check_duration('poll_interval', interval if interval is not None else agent.settings.poll_interval)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='usage-poller', daemon=True)
        self._thread.start()
        logger.info('Polling every %ss', self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop polling. A cycle already in flight finishes on its own."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        logger.info('Polling stopped')

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.agent.poll_once()
            except Exception:
                logger.exception('Unexpected error in poll loop')


__all__ = ['Listener', 'Poller', 'USAGE_UPDATED', 'UsageAgent']
