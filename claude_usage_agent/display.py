"""Short human-readable rendering of a usage report."""
from __future__ import annotations

from datetime import datetime, timezone

from .usage_api import UsageBucket, UsageReport

LABELS = (
    ('five_hour', 'Session (5h)'),
    ('seven_day', 'Weekly (7d)'),
    ('seven_day_opus', 'Weekly Opus'),
)


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        if value.endswith('Z'):
            value = value[:-1] + '+00:00'
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def time_until(resets_at: str | None, now: datetime | None = None) -> str:
    """Return the reset countdown for a bucket.

    Later:   "resets in 2h 20m"
    Soon:    "resets in 12m"
    Past:    "resetting soon"
    Unknown: ""
    """
    reset = parse_timestamp(resets_at)
    if reset is None:
        return ''

    now = now or datetime.now(timezone.utc)
    total_min = int((reset - now).total_seconds() // 60)
    if total_min <= 0:
        return 'resetting soon'
    if total_min >= 60:
        return f'resets in {total_min // 60}h {total_min % 60}m'
    return f'resets in {total_min}m'


def format_bucket(label: str, bucket: UsageBucket, now: datetime | None = None) -> str:
    line = f'{label}: {bucket.utilization:.0f}%'
    reset = time_until(bucket.resets_at, now)
    if reset:
        line += f' ({reset})'
    return line


def updated_ago(fetched_at: str | None, now: datetime | None = None) -> str:
    """Return how long ago a report was fetched, or '' if unknown."""
    fetched = parse_timestamp(fetched_at)
    if fetched is None:
        return ''

    now = now or datetime.now(timezone.utc)
    mins = max(0, round((now - fetched).total_seconds() / 60))
    if mins < 1:
        return 'Updated just now'
    return f'Updated {mins} min ago'


def format_summary(report: UsageReport, now: datetime | None = None) -> str:
    """Format a report as one line per bucket the API reported, plus its age."""
    lines = []
    for key, label in LABELS:
        bucket = getattr(report, key)
        if bucket is not None:
            lines.append(format_bucket(label, bucket, now))
    if not lines:
        lines.append('No usage data')

    age = updated_ago(report.fetched_at, now)
    if age:
        lines.append(age)
    return '\n'.join(lines)


__all__ = ['format_bucket', 'format_summary', 'parse_timestamp', 'time_until', 'updated_ago']
