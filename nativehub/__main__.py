# -*- coding: utf-8 -*-
"""
Headless NativeHub session.

Logs in, lists repositories once authenticated, and prints every event
until the list or a failure arrives.

    python -m nativehub [--timeout SECONDS]
"""

import argparse
import sys
import time

from nativehub.core import log, settings
from nativehub.core.actions import ListRepositories, Login
from nativehub.core.events import (
    AuthSucceeded,
    DeviceCodeIssued,
    Failed,
    LogLine,
    RepositoryList,
)
from nativehub.core.services import ServiceContainer

POLL_INTERVAL_S = 0.05
DEFAULT_TIMEOUT_S = 20 * 60


def format_event(event):
    """Render one event as a single console line."""
    if isinstance(event, LogLine):
        return f"> {event.text}"
    if isinstance(event, DeviceCodeIssued):
        return (
            f"> Visit {event.code.verification_uri} "
            f"and enter code {event.code.user_code}"
        )
    if isinstance(event, AuthSucceeded):
        return "> AUTHENTICATED."
    if isinstance(event, Failed):
        return f"! {event.message} [{event.code}]"
    if isinstance(event, RepositoryList):
        lines = [f"> {len(event.items)} repositories:"]
        for repo in event.items:
            visibility = "private" if repo.is_private else "public"
            lines.append(f"  {repo.full_name} ({visibility}, updated {repo.last_updated})")
        return "\n".join(lines)
    return f"> {event!r}"


def run_session(bridge, timeout_s=DEFAULT_TIMEOUT_S, out=None, sleep=time.sleep):
    """
    Drive one login + listing session against a started bridge.

    Returns:
        int: Process exit code (0 on a repository list)
    """
    out = out or sys.stdout
    deadline = time.monotonic() + timeout_s

    if not bridge.submit(Login()):
        print("! Could not submit login", file=out)
        return 1

    while time.monotonic() < deadline:
        for event in bridge.poll_events():
            print(format_event(event), file=out)
            if isinstance(event, AuthSucceeded):
                bridge.submit(ListRepositories())
            elif isinstance(event, RepositoryList):
                return 0
            elif isinstance(event, Failed):
                return 1
        sleep(POLL_INTERVAL_S)

    print("! Timed out", file=out)
    return 1


def main(argv=None):
    parser = argparse.ArgumentParser(prog="nativehub", description=__doc__.splitlines()[1])
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help="give up after this many seconds",
    )
    args = parser.parse_args(argv)

    log.configure(settings.load_log_level())

    bridge = ServiceContainer().bridge()
    bridge.start()
    try:
        return run_session(bridge, timeout_s=args.timeout)
    except KeyboardInterrupt:
        return 130
    finally:
        bridge.shutdown()


if __name__ == "__main__":
    sys.exit(main())
