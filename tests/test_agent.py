from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from claude_usage_agent.agent import USAGE_UPDATED, Poller, UsageAgent
from claude_usage_agent.config import Settings
from claude_usage_agent.errors import ApiError, ConfigError, NetworkError, StoreAccessError
from claude_usage_agent.usage_api import UsageBucket, UsageReport

REPORT = UsageReport(five_hour=UsageBucket(42.0), seven_day=None, seven_day_opus=None, fetched_at='t1')
LATER = UsageReport(five_hour=UsageBucket(50.0), seven_day=None, seven_day_opus=None, fetched_at='t2')


@pytest.fixture
def agent(http):
    agent = UsageAgent(Settings(), http=http)
    agent.session = MagicMock()
    return agent


def test_get_usage_caches_report(agent):
    agent.session.run_cycle.return_value = REPORT

    assert agent.get_cached_usage() is None
    assert agent.get_usage() is REPORT
    assert agent.get_cached_usage() is REPORT


def test_get_usage_error_propagates_and_keeps_cache(agent):
    agent.session.run_cycle.side_effect = [REPORT, ApiError(500, 'boom')]
    agent.get_usage()

    with pytest.raises(ApiError):
        agent.get_usage()
    assert agent.get_cached_usage() is REPORT


def test_get_cached_usage_makes_no_network_calls(agent, http):
    assert agent.get_cached_usage() is None
    agent.session.run_cycle.assert_not_called()
    http.get.assert_not_called()


def test_poll_once_emits_camel_case_event(agent):
    agent.session.run_cycle.return_value = REPORT
    events = []
    agent.on_usage_updated(lambda event, payload: events.append((event, payload)))

    assert agent.poll_once() is REPORT

    assert events == [(USAGE_UPDATED, REPORT.to_dict())]
    assert events[0][1]['fiveHour']['utilization'] == 42.0
    assert agent.get_cached_usage() is REPORT


@pytest.mark.parametrize('error', [
    NetworkError('Usage', OSError('down')),
    StoreAccessError('svc', 'alice', 'locked'),
    ApiError(401, 'expired'),
])
def test_poll_once_swallows_errors_without_emitting(agent, error):
    agent.session.run_cycle.side_effect = [REPORT, error]
    listener = MagicMock()
    agent.poll_once()
    agent.on_usage_updated(listener)

    assert agent.poll_once() is None

    listener.assert_not_called()
    assert agent.get_cached_usage() is REPORT


def test_failing_listener_does_not_break_others(agent):
    agent.session.run_cycle.return_value = REPORT
    good = MagicMock()
    agent.on_usage_updated(MagicMock(side_effect=RuntimeError('ui gone')))
    agent.on_usage_updated(good)

    assert agent.poll_once() is REPORT
    good.assert_called_once_with(USAGE_UPDATED, REPORT.to_dict())


def test_get_usage_does_not_emit(agent):
    agent.session.run_cycle.return_value = REPORT
    listener = MagicMock()
    agent.on_usage_updated(listener)

    agent.get_usage()
    listener.assert_not_called()


def test_last_writer_wins(agent):
    first_started = threading.Event()
    release_first = threading.Event()

    def run_cycle():
        if not first_started.is_set():
            first_started.set()
            release_first.wait(5)
            return REPORT
        return LATER

    agent.session.run_cycle.side_effect = run_cycle
    slow = threading.Thread(target=agent.get_usage)
    slow.start()
    first_started.wait(5)

    agent.get_usage()
    assert agent.get_cached_usage() is LATER

    release_first.set()
    slow.join(5)
    assert agent.get_cached_usage() is REPORT


def test_close_closes_http_session(agent, http):
    agent.close()
    http.close.assert_called_once_with()


def test_agent_builds_session_on_shared_http(http):
    agent = UsageAgent(Settings(request_timeout=2), http=http)
    assert agent.session.http is http
    assert agent.session.settings.request_timeout == 2


def test_poller_skips_first_tick():
    agent = MagicMock()
    poller = Poller(agent, interval=60)
    poller.start()
    time.sleep(0.1)
    poller.stop(timeout=1)

    agent.poll_once.assert_not_called()
    assert not poller.running


def test_poller_ticks_and_survives_unexpected_errors():
    agent = MagicMock()
    ticks = threading.Semaphore(0)

    def poll_once():
        ticks.release()
        raise RuntimeError('unexpected')

    agent.poll_once.side_effect = poll_once
    poller = Poller(agent, interval=0.01)
    poller.start()
    try:
        assert ticks.acquire(timeout=2)
        assert ticks.acquire(timeout=2)
        assert poller.running
    finally:
        poller.stop(timeout=1)


def test_poller_uses_configured_interval():
    agent = MagicMock()
    agent.settings = Settings(poll_interval=123)
    assert Poller(agent).interval == 123


def test_poller_drives_real_agent(http):
    agent = UsageAgent(Settings(), http=http)
    updated = threading.Event()
    agent.on_usage_updated(lambda event, payload: updated.set())

    with patch.object(agent.session, 'run_cycle', return_value=REPORT):
        poller = Poller(agent, interval=0.01)
        poller.start()
        try:
            assert updated.wait(2)
        finally:
            poller.stop(timeout=1)

    assert agent.get_cached_usage() is REPORT


@pytest.mark.parametrize('interval', [0, -5, float('inf'), float('nan')])
def test_poller_rejects_unusable_interval(interval):
    agent = MagicMock()
    with pytest.raises(ConfigError):
        Poller(agent, interval=interval)
    agent.poll_once.assert_not_called()
