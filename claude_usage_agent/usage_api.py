"""
Usage Fetcher
=============

Calls the Anthropic OAuth usage endpoint and normalizes the response into
an immutable :class:`UsageReport`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import requests

from .config import Settings
from .errors import ApiError, NetworkError, ParseError

logger = logging.getLogger(__name__)

BUCKET_KEYS = ('five_hour', 'seven_day', 'seven_day_opus')


@dataclass(frozen=True)
class UsageBucket:
    """Consumption of one rate-limit window."""

    utilization: float
    resets_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {'utilization': self.utilization, 'resetsAt': self.resets_at}


@dataclass(frozen=True)
class UsageReport:
    """One successful usage snapshot.

    Each bucket is ``None`` when the API omitted it; it is never defaulted to zero.
    """

    five_hour: UsageBucket | None
    seven_day: UsageBucket | None
    seven_day_opus: UsageBucket | None
    fetched_at: str

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase payload sent with ``usage-updated`` events."""
        def bucket(b: UsageBucket | None) -> dict[str, Any] | None:
            return b.to_dict() if b else None

        return {
            'fiveHour': bucket(self.five_hour),
            'sevenDay': bucket(self.seven_day),
            'sevenDayOpus': bucket(self.seven_day_opus),
            'fetchedAt': self.fetched_at,
        }


def _parse_bucket(key: str, entry: Any) -> UsageBucket | None:
    if entry is None:
        return None
    if not isinstance(entry, dict):
        raise ParseError('usage response', f'{key} is not an object')

    utilization = entry.get('utilization')
    if isinstance(utilization, bool) or not isinstance(utilization, (int, float)):
        raise ParseError('usage response', f'{key}.utilization is not a number')
    resets_at = entry.get('resets_at')
    if resets_at is not None and not isinstance(resets_at, str):
        raise ParseError('usage response', f'{key}.resets_at is not a string')

    return UsageBucket(utilization=float(utilization), resets_at=resets_at)


def parse_usage(payload: Any, fetched_at: str | None = None) -> UsageReport:
    """Map a decoded usage response onto a :class:`UsageReport`.

    Parameters
    ----------
    payload : Any
        Decoded JSON body of the usage endpoint.
    fetched_at : str, optional
        Timestamp to stamp the report with. Defaults to the current UTC time.

    Raises
    ------
    ParseError
        If the payload or one of its known buckets has the wrong shape.
    """
    if not isinstance(payload, dict):
        raise ParseError('usage response', 'expected a JSON object')

    buckets = {key: _parse_bucket(key, payload.get(key)) for key in BUCKET_KEYS}
    return UsageReport(
        **buckets,
        fetched_at=fetched_at or datetime.now(timezone.utc).isoformat(),
    )


def fetch_usage(http: requests.Session, access_token: str, settings: Settings | None = None) -> UsageReport:
    """Fetch the usage report for *access_token*.

    Raises
    ------
    NetworkError
        If the request did not produce a response.
    ApiError
        If the endpoint answered with a non-2xx status (``status == 401`` for an expired token).
    ParseError
        If the body is not a well-formed usage document.
    """
    settings = settings or Settings()
    headers = {
        'Authorization': f'Bearer {access_token}',
        'anthropic-beta': settings.beta_header,
        'User-Agent': settings.user_agent,
    }

    try:
        resp = http.get(settings.usage_url, headers=headers, timeout=settings.request_timeout)
    except requests.RequestException as e:
        raise NetworkError('Usage', e) from e

    if not 200 <= resp.status_code < 300:
        raise ApiError(resp.status_code, resp.text)

    try:
        payload = resp.json()
    except ValueError as e:
        raise ParseError('usage response', e) from e

    report = parse_usage(payload)
    logger.debug('Fetched usage report at %s', report.fetched_at)
    return report


__all__ = ['UsageBucket', 'UsageReport', 'fetch_usage', 'parse_usage']
