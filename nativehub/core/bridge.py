# -*- coding: utf-8 -*-
"""
NativeHub Command/Event Bridge
Decouples the UI thread from the asyncio backend.

- Inbound: bounded queue of actions. ``submit`` never blocks the caller.
- Outbound: unbounded queue of events drained by ``poll_events``.
- Backend: one daemon thread hosting an event loop. A single dispatch loop
  reads one action at a time and spawns a task per action, so a long login
  never delays a file read.
"""

from __future__ import annotations

import asyncio
import enum
import queue
import threading
from typing import Awaitable, Callable, List, Optional, Tuple

from nativehub.core import log, settings
from nativehub.core.actions import Action, Cancel, Login
from nativehub.core.events import Event, Failed, LogLine
from nativehub.github.errors import NativeHubError

Emit = Callable[[Event], None]
Handler = Callable[[Action, Emit], Awaitable[None]]
Hook = Callable[[], Awaitable[None]]

BANNER_LINES = ("SYSTEM LINE ONLINE.", "AWAITING INPUT...")
UNEXPECTED_CODE = "Unexpected"
CANCELLED_CODE = "Cancelled"
DEFAULT_JOIN_TIMEOUT_S = 5.0


class CancelPolicy(enum.Enum):
    """What a Cancel action stops."""

    LOGIN = "login"
    MOST_RECENT = "most_recent"
    IGNORE = "ignore"

    @classmethod
    def from_setting(cls, value: Optional[str]) -> "CancelPolicy":
        try:
            return cls((value or cls.LOGIN.value).strip().lower())
        except ValueError:
            log.warning(f"Unknown cancel policy {value!r}, using {cls.LOGIN.value}")
            return cls.LOGIN


def _default_prefix(action: Action) -> str:
    return f"{type(action).__name__.upper()} FAILED"


class CommandBridge:
    """
    UI-facing handle of the backend runtime.

    Args:
        handler: Coroutine running the work unit for an action
        describe: Returns the Failed message prefix for an action
        capacity: Inbound queue size
        cancel_policy: Cancel behaviour
        on_start: Coroutine started as a task alongside dispatch
        on_stop: Coroutine run on the loop after outstanding tasks are cancelled
    """

    def __init__(
        self,
        handler: Handler,
        describe: Callable[[Action], str] = _default_prefix,
        capacity: int = settings.ACTION_QUEUE_CAPACITY,
        cancel_policy: CancelPolicy = CancelPolicy.LOGIN,
        on_start: Optional[Hook] = None,
        on_stop: Optional[Hook] = None,
    ):
        self._handler = handler
        self._describe = describe
        self._cancel_policy = cancel_policy
        self._on_start = on_start
        self._on_stop = on_stop

        self._inbox: "queue.Queue[Action]" = queue.Queue(maxsize=capacity)
        self._outbox: "queue.SimpleQueue[Event]" = queue.SimpleQueue()

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._wakeup: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._stopping = False
        self._closed = False

        # Spawned (action, task) pairs in spawn order; loop thread only
        self._running: List[Tuple[Action, asyncio.Task]] = []

    @property
    def cancel_policy(self) -> CancelPolicy:
        return self._cancel_policy

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._closed

    # ---- UI thread side ----

    def start(self) -> None:
        """Start the backend thread and wait until its loop is ready."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run_loop, name="nativehub-backend", daemon=True
        )
        self._thread.start()
        self._ready.wait()
        log.debug("Backend runtime started")

    def submit(self, action: Action) -> bool:
        """
        Hand an action to the backend without blocking.

        Returns:
            bool: False if the bridge is not running or the queue is full
        """
        if self._closed or self._loop is None:
            log.warning(f"Backend not running, dropping {type(action).__name__}")
            return False

        try:
            self._inbox.put_nowait(action)
        except queue.Full:
            log.warning(f"Action queue full, dropping {type(action).__name__}")
            return False

        try:
            self._loop.call_soon_threadsafe(self._wakeup.set)
        except RuntimeError:
            # Loop closed between the check above and now
            return False
        return True

    def poll_events(self, max_events: Optional[int] = None) -> List[Event]:
        """Drain pending events without blocking (oldest first)."""
        events: List[Event] = []
        while max_events is None or len(events) < max_events:
            try:
                events.append(self._outbox.get_nowait())
            except queue.Empty:
                break
        return events

    def shutdown(self, timeout: float = DEFAULT_JOIN_TIMEOUT_S) -> None:
        """
        Stop the backend: cancel outstanding tasks, run the stop hook,
        join the thread. Events emitted from now on are dropped.
        """
        if self._closed:
            return
        self._closed = True
        self._stopping = True

        if self._loop is not None:
            try:
                self._loop.call_soon_threadsafe(self._wakeup.set)
            except RuntimeError:
                pass

        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                log.warning("Backend thread did not stop in time")
        log.debug("Backend runtime stopped")

    # ---- Backend thread side ----

    def emit(self, event: Event) -> None:
        """Queue an event for the UI (dropped after shutdown)."""
        if self._closed:
            return
        self._outbox.put(event)

    def _run_loop(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._wakeup = asyncio.Event()
        self._ready.set()
        try:
            loop.run_until_complete(self._main())
        except Exception as e:
            log.error(f"Backend loop crashed: {e}", exc_info=True)
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()

    async def _main(self) -> None:
        for line in BANNER_LINES:
            self.emit(LogLine(line))

        startup = None
        if self._on_start is not None:
            startup = asyncio.get_running_loop().create_task(
                self._run_start_hook(), name="nativehub-startup"
            )

        try:
            await self._dispatch_loop()
        finally:
            tasks = [task for _, task in self._running]
            if startup is not None and not startup.done():
                tasks.append(startup)
            for task in tasks:
                task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
            if self._on_stop is not None:
                try:
                    await self._on_stop()
                except Exception as e:
                    log.error(f"Shutdown hook failed: {e}", exc_info=True)

    async def _run_start_hook(self) -> None:
        try:
            await self._on_start()
        except Exception as e:
            log.error(f"Startup hook failed: {e}", exc_info=True)

    async def _dispatch_loop(self) -> None:
        while not self._stopping:
            self._wakeup.clear()
            while not self._stopping:
                try:
                    action = self._inbox.get_nowait()
                except queue.Empty:
                    break
                self._dispatch(action)
            if self._stopping:
                break
            await self._wakeup.wait()

    def _dispatch(self, action: Action) -> None:
        if isinstance(action, Cancel):
            self._cancel()
            return

        task = asyncio.get_running_loop().create_task(
            self._run_unit(action), name=f"nativehub-{type(action).__name__}"
        )
        entry = (action, task)
        self._running.append(entry)
        task.add_done_callback(lambda _t: self._running.remove(entry))

    def _cancel(self) -> None:
        if self._cancel_policy is CancelPolicy.IGNORE:
            log.debug("Cancel ignored by policy")
            return

        for action, task in reversed(self._running):
            if task.done():
                continue
            if self._cancel_policy is CancelPolicy.LOGIN and not isinstance(action, Login):
                continue
            log.info(f"Cancelling {type(action).__name__}")
            task.cancel()
            return

        log.debug("Cancel: nothing to cancel")

    async def _run_unit(self, action: Action) -> None:
        """Run one work unit; every failure becomes exactly one Failed event."""
        prefix = self._describe(action)
        try:
            await self._handler(action, self.emit)
        except asyncio.CancelledError:
            self.emit(Failed(f"{prefix}: cancelled", code=CANCELLED_CODE))
            raise
        except NativeHubError as e:
            log.warning(f"{prefix}: {e.message}")
            self.emit(Failed(f"{prefix}: {e.message}", code=e.code))
        except Exception as e:
            log.error(f"{prefix}: unexpected error: {e}", exc_info=True)
            self.emit(Failed(f"{prefix}: {e}", code=UNEXPECTED_CODE))
