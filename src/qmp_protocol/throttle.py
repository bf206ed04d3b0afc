"""
Emitter-side rate limiting of events.

The first event of a type goes out immediately and opens a window of
``interval`` seconds. Events of that type arriving inside the window
replace each other; the last one is sent when the window closes, which
opens a new window. A window that closes with nothing pending ends.
"""

import asyncio
import logging
from typing import Callable, Optional

from qmp_protocol.models.generic import Event

logger = logging.getLogger("qmp_protocol.throttle")

DEFAULT_INTERVAL_S = 1.0


class EventThrottle:
    def __init__(self, emit: Callable[[Event], None], interval: float = DEFAULT_INTERVAL_S):
        self._emit = emit
        self._interval = interval
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._pending: dict[str, Event] = {}

    def push(self, event: Event) -> None:
        name = event.event
        if name not in self._timers:
            # the window stays open even if emit raises
            self._arm(name)
            self._emit(event)
            return
        dropped = self._pending.get(name)
        if dropped is not None:
            logger.debug("Dropping throttled %s event from %s", name, dropped.timestamp)
        self._pending[name] = event

    def _arm(self, name: str) -> None:
        loop = asyncio.get_running_loop()
        self._timers[name] = loop.call_later(self._interval, self._expire, name)

    def _expire(self, name: str) -> None:
        event: Optional[Event] = self._pending.pop(name, None)
        if event is None:
            del self._timers[name]
            return
        self._arm(name)
        try:
            self._emit(event)
        except Exception as e:
            logger.error("Emit failed for %s event: %s", name, e)

    def flush(self) -> None:
        """Emit every pending event now and close all windows."""
        for name in list(self._timers):
            self._timers.pop(name).cancel()
            event = self._pending.pop(name, None)
            if event is not None:
                self._emit(event)

    def close(self) -> None:
        """Close all windows, discarding pending events."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._pending.clear()
