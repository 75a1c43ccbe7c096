# -*- coding: utf-8 -*-
"""
Tests for core.bridge - command/event bridge and backend runtime
"""

import asyncio
import time

import pytest

from nativehub.core.actions import Cancel, ListRepositories, Login, ReadFile, Search
from nativehub.core.bridge import BANNER_LINES, CancelPolicy, CommandBridge
from nativehub.core.events import TERMINAL_SUCCESS_EVENTS, FileRead, Failed, LogLine
from nativehub.github.errors import ArgumentError


def wait_for(bridge, predicate, timeout=5.0):
    """Collect events until ``predicate(events)`` holds."""
    events = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        events.extend(bridge.poll_events())
        if predicate(events):
            return events
        time.sleep(0.005)
    raise AssertionError(f"timed out; got {events!r}")


def failures(events):
    return [e for e in events if isinstance(e, Failed)]


class ScriptedHandler:
    """Work units: Login waits forever, ReadFile answers, Search raises."""

    def __init__(self):
        self.started = []

    async def __call__(self, action, emit):
        self.started.append(type(action).__name__)
        if isinstance(action, Login):
            await asyncio.Event().wait()
        elif isinstance(action, ListRepositories):
            await asyncio.sleep(60)
        elif isinstance(action, ReadFile):
            emit(FileRead(action.url, "content"))
        elif isinstance(action, Search):
            if action.query == "boom":
                raise RuntimeError("kaboom")
            raise ArgumentError("Search query is empty")


@pytest.fixture
def make_bridge():
    bridges = []

    def factory(handler=None, **kwargs):
        bridge = CommandBridge(handler or ScriptedHandler(), **kwargs)
        bridges.append(bridge)
        bridge.start()
        return bridge

    yield factory
    for bridge in bridges:
        bridge.shutdown()


class TestStartup:
    def test_banner_lines(self, make_bridge):
        bridge = make_bridge()
        events = wait_for(bridge, lambda ev: len(ev) >= 2)
        assert [e.text for e in events[:2]] == list(BANNER_LINES)
        assert all(isinstance(e, LogLine) for e in events[:2])

    def test_on_start_runs(self, make_bridge):
        started = []

        async def on_start():
            started.append("start")

        bridge = make_bridge(on_start=on_start)
        wait_for(bridge, lambda ev: len(ev) >= 2)
        deadline = time.monotonic() + 5
        while not started and time.monotonic() < deadline:
            time.sleep(0.005)
        assert started == ["start"]

    def test_slow_on_start_does_not_hold_back_actions(self, make_bridge):
        """A keychain prompt at startup must not delay dispatch"""

        async def on_start():
            await asyncio.sleep(60)

        bridge = make_bridge(on_start=on_start)
        bridge.submit(ReadFile("x"))
        wait_for(bridge, lambda ev: any(isinstance(e, FileRead) for e in ev), timeout=2.0)

    def test_slow_on_start_cancelled_on_shutdown(self, make_bridge):
        async def on_start():
            await asyncio.sleep(60)

        bridge = make_bridge(on_start=on_start)
        bridge.shutdown()
        assert not bridge._thread.is_alive()


class TestDispatch:
    """Every non-Cancel action yields a terminal event; the loop never dies"""

    def test_success_event(self, make_bridge):
        bridge = make_bridge()
        assert bridge.submit(ReadFile("https://x/a.txt")) is True
        events = wait_for(bridge, lambda ev: any(isinstance(e, FileRead) for e in ev))
        assert isinstance([e for e in events if isinstance(e, FileRead)][0], TERMINAL_SUCCESS_EVENTS)

    def test_known_error_becomes_failed(self, make_bridge):
        bridge = make_bridge(describe=lambda a: "SEARCH FAILED")
        bridge.submit(Search(""))
        events = wait_for(bridge, lambda ev: failures(ev))
        failed = failures(events)
        assert len(failed) == 1
        assert failed[0].message == "SEARCH FAILED: Search query is empty"
        assert failed[0].code == "ArgumentError"

    def test_unexpected_error_becomes_failed_and_loop_survives(self, make_bridge):
        bridge = make_bridge()
        bridge.submit(Search("boom"))
        events = wait_for(bridge, lambda ev: failures(ev))
        assert failures(events)[0].code == "Unexpected"

        bridge.submit(ReadFile("after"))
        wait_for(bridge, lambda ev: any(isinstance(e, FileRead) for e in ev))

    def test_long_login_does_not_block_other_work(self, make_bridge):
        handler = ScriptedHandler()
        bridge = make_bridge(handler)
        bridge.submit(Login())
        bridge.submit(ReadFile("quick"))
        events = wait_for(bridge, lambda ev: any(isinstance(e, FileRead) for e in ev))
        assert not failures(events)
        assert handler.started[:2] == ["Login", "ReadFile"]


class TestSubmit:
    def test_full_queue_returns_false_without_blocking(self):
        bridge = CommandBridge(ScriptedHandler(), capacity=2)
        # Not started: fake a loop so submit only exercises the queue
        bridge._loop = asyncio.new_event_loop()
        bridge._wakeup = asyncio.Event()
        try:
            assert bridge.submit(ReadFile("1")) is True
            assert bridge.submit(ReadFile("2")) is True
            started = time.monotonic()
            assert bridge.submit(ReadFile("3")) is False
            assert time.monotonic() - started < 0.5
        finally:
            bridge._loop.close()

    def test_submit_before_start(self):
        bridge = CommandBridge(ScriptedHandler())
        assert bridge.submit(ReadFile("x")) is False

    def test_submit_after_shutdown(self, make_bridge):
        bridge = make_bridge()
        bridge.shutdown()
        assert bridge.submit(ReadFile("x")) is False
        assert not bridge._thread.is_alive()


class TestCancelPolicy:
    def test_from_setting(self):
        assert CancelPolicy.from_setting("MOST_RECENT") is CancelPolicy.MOST_RECENT
        assert CancelPolicy.from_setting(None) is CancelPolicy.LOGIN
        assert CancelPolicy.from_setting("bogus") is CancelPolicy.LOGIN

    def test_login_policy_cancels_login(self, make_bridge):
        bridge = make_bridge(describe=lambda a: f"{type(a).__name__} FAILED")
        bridge.submit(Login())
        bridge.submit(ListRepositories())
        time.sleep(0.05)
        bridge.submit(Cancel())
        events = wait_for(bridge, lambda ev: failures(ev))
        time.sleep(0.05)
        events.extend(bridge.poll_events())
        failed = failures(events)
        assert len(failed) == 1
        assert failed[0].message == "Login FAILED: cancelled"
        assert failed[0].code == "Cancelled"

    def test_most_recent_policy(self, make_bridge):
        bridge = make_bridge(
            describe=lambda a: f"{type(a).__name__} FAILED",
            cancel_policy=CancelPolicy.MOST_RECENT,
        )
        bridge.submit(Login())
        bridge.submit(ListRepositories())
        time.sleep(0.05)
        bridge.submit(Cancel())
        events = wait_for(bridge, lambda ev: failures(ev))
        assert failures(events)[0].message == "ListRepositories FAILED: cancelled"

    def test_ignore_policy(self, make_bridge):
        bridge = make_bridge(cancel_policy=CancelPolicy.IGNORE)
        bridge.submit(Login())
        time.sleep(0.05)
        bridge.submit(Cancel())
        time.sleep(0.1)
        assert not failures(bridge.poll_events())

    def test_cancel_with_nothing_running(self, make_bridge):
        bridge = make_bridge()
        bridge.submit(Cancel())
        bridge.submit(ReadFile("x"))
        events = wait_for(bridge, lambda ev: any(isinstance(e, FileRead) for e in ev))
        assert not failures(events)


class TestShutdown:
    def test_cancels_tasks_and_runs_stop_hook(self, make_bridge):
        stopped = []

        async def on_stop():
            stopped.append(True)

        bridge = make_bridge(on_stop=on_stop)
        bridge.submit(Login())
        time.sleep(0.05)
        bridge.shutdown()

        assert stopped == [True]
        # Events emitted during shutdown are dropped
        assert not failures(bridge.poll_events())

    def test_shutdown_twice(self, make_bridge):
        bridge = make_bridge()
        bridge.shutdown()
        bridge.shutdown()
