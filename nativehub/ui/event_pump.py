# -*- coding: utf-8 -*-
"""
NativeHub Qt Event Pump
Drains bridge events on a QTimer and re-emits them as a Qt signal, so slots
always run on the UI thread.
"""

from nativehub.core import log

DEFAULT_INTERVAL_MS = 16
DEFAULT_BATCH = 200


def _get_qt_core():
    """
    Lazy import of QtCore so the backend never needs Qt

    Returns:
        QtCore module
    """
    try:
        from PySide6 import QtCore
    except ImportError:
        try:
            from PySide2 import QtCore
        except ImportError:
            raise ImportError(
                "Neither PySide6 nor PySide2 found. "
                "Install the 'gui' extra to use the Qt event pump."
            )
    return QtCore


class EventPump:
    """
    Poll the bridge from the UI thread.

    Connect slots to ``event_received`` (one event per emission, in the
    order the bridge delivered them) and ``submit_rejected`` (an action the
    bridge refused because its queue was full or it was stopped).
    """

    def __init__(self, bridge, interval_ms=DEFAULT_INTERVAL_MS, batch=DEFAULT_BATCH, parent=None):
        QtCore = _get_qt_core()

        class _Emitter(QtCore.QObject):
            event_received = QtCore.Signal(object)
            submit_rejected = QtCore.Signal(object)

        self._bridge = bridge
        self._batch = batch
        self._emitter = _Emitter(parent)
        self._timer = QtCore.QTimer(self._emitter)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.pump)

    @property
    def event_received(self):
        return self._emitter.event_received

    @property
    def submit_rejected(self):
        return self._emitter.submit_rejected

    def start(self):
        self._timer.start()

    def stop(self):
        self._timer.stop()

    def is_active(self):
        return self._timer.isActive()

    def submit(self, action):
        """
        Forward an action to the bridge without blocking.

        Returns:
            bool: True if the bridge accepted it
        """
        accepted = self._bridge.submit(action)
        if not accepted:
            log.warning(f"Action rejected: {type(action).__name__}")
            self._emitter.submit_rejected.emit(action)
        return accepted

    def pump(self):
        """
        Deliver at most one batch of pending events.

        Returns:
            int: Number of events delivered
        """
        events = self._bridge.poll_events(max_events=self._batch)
        for event in events:
            self._emitter.event_received.emit(event)
        return len(events)
