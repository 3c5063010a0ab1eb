"""
Command-line entry point.

Usage:
    python -m claude_usage_agent            # poll in the foreground, print JSON events
    python -m claude_usage_agent --once     # fetch once and print a summary
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from .agent import Poller, UsageAgent
from .config import check_duration, load_settings
from .display import format_summary
from .errors import ConfigError, UsageAgentError


def positive_float(text: str) -> float:
    try:
        return check_duration('value', text)
    except ConfigError:
        raise argparse.ArgumentTypeError(f'expected a positive number of seconds, got {text!r}') from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='claude-usage-agent',
        description='Keep a Claude OAuth session alive and report plan usage.',
    )
    parser.add_argument('--once', action='store_true', help='fetch usage once and exit')
    parser.add_argument('--json', action='store_true', help='with --once, print the report as JSON')
    parser.add_argument('--interval', type=positive_float, help='seconds between background updates')
    parser.add_argument('--timeout', type=positive_float, help='seconds per HTTP request')
    parser.add_argument('--config', type=Path, help='path to a JSON config file')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    return parser


def print_event(event: str, payload: dict[str, Any]) -> None:
    print(json.dumps({'event': event, 'payload': payload}), flush=True)


def run_once(agent: UsageAgent, as_json: bool) -> int:
    try:
        report = agent.get_usage()
    except UsageAgentError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    print(json.dumps(report.to_dict(), indent=2) if as_json else format_summary(report))
    return 0


def run_forever(agent: UsageAgent) -> int:
    agent.on_usage_updated(print_event)

    # Warm the cache; the poller itself waits a full interval before its first cycle.
    # Printed without an event label: only poller cycles emit usage-updated.
    try:
        print(json.dumps(agent.get_usage().to_dict()), flush=True)
    except UsageAgentError as e:
        print(f'Error: {e}', file=sys.stderr)

    poller = Poller(agent)
    poller.start()
    try:
        while poller.running:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop(timeout=1)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    settings = load_settings(args.config)
    overrides = {}
    if args.interval is not None:
        overrides['poll_interval'] = args.interval
    if args.timeout is not None:
        overrides['request_timeout'] = args.timeout
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    agent = UsageAgent(settings)
    try:
        if args.once:
            return run_once(agent, args.json)
        return run_forever(agent)
    finally:
        agent.close()


if __name__ == '__main__':
    sys.exit(main())
