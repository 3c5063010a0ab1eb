from __future__ import annotations

import threading

from claude_usage_agent.cache import UsageCache
from claude_usage_agent.usage_api import UsageBucket, UsageReport


def make_report(n: int) -> UsageReport:
    bucket = UsageBucket(float(n), f'reset-{n}')
    return UsageReport(five_hour=bucket, seven_day=bucket, seven_day_opus=bucket, fetched_at=f'fetched-{n}')


def test_empty_cache_returns_none():
    assert UsageCache().get() is None


def test_set_then_get_returns_report():
    cache = UsageCache()
    report = make_report(1)
    cache.set(report)
    assert cache.get() == report


def test_set_replaces_wholesale():
    cache = UsageCache()
    cache.set(make_report(1))
    second = UsageReport(five_hour=None, seven_day=None, seven_day_opus=None, fetched_at='later')
    cache.set(second)
    assert cache.get() == second


def test_concurrent_sets_leave_one_complete_report():
    cache = UsageCache()
    seen = []
    stop = threading.Event()

    def writer(n: int) -> None:
        for _ in range(500):
            cache.set(make_report(n))

    def reader() -> None:
        while not stop.is_set():
            report = cache.get()
            if report is not None:
                seen.append(report)

    reader_thread = threading.Thread(target=reader)
    reader_thread.start()
    writers = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in writers:
        t.start()
    for t in writers:
        t.join()
    stop.set()
    reader_thread.join()

    final = cache.get()
    assert final in [make_report(n) for n in range(8)]
    for report in seen + [final]:
        n = int(report.five_hour.utilization)
        assert report == make_report(n)
