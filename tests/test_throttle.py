"""Emitter-side event rate limiting."""

import asyncio
import logging

import pytest

from qmp_protocol import Event, EventThrottle, Timestamp

INTERVAL = 0.05


def make_event(name: str, n: int) -> Event:
    return Event(event=name, data={"n": n}, timestamp=Timestamp(seconds=n, microseconds=0))


class TestEventThrottle:
    @pytest.mark.asyncio
    async def test_first_event_is_immediate(self):
        sent: list[Event] = []
        throttle = EventThrottle(sent.append, interval=INTERVAL)
        throttle.push(make_event("RTC_CHANGE", 1))
        assert [e.data["n"] for e in sent] == [1]
        throttle.close()

    @pytest.mark.asyncio
    async def test_burst_keeps_only_last_and_delays_it(self):
        sent: list[Event] = []
        throttle = EventThrottle(sent.append, interval=INTERVAL)
        for n in range(1, 5):
            throttle.push(make_event("RTC_CHANGE", n))
        assert [e.data["n"] for e in sent] == [1]
        await asyncio.sleep(INTERVAL * 3)
        assert [e.data["n"] for e in sent] == [1, 4]
        throttle.close()

    @pytest.mark.asyncio
    async def test_types_are_independent(self):
        sent: list[Event] = []
        throttle = EventThrottle(sent.append, interval=INTERVAL)
        throttle.push(make_event("RTC_CHANGE", 1))
        throttle.push(make_event("BALLOON_CHANGE", 2))
        throttle.push(make_event("RTC_CHANGE", 3))
        assert [(e.event, e.data["n"]) for e in sent] == [("RTC_CHANGE", 1), ("BALLOON_CHANGE", 2)]
        throttle.close()

    @pytest.mark.asyncio
    async def test_quiet_window_resets(self):
        sent: list[Event] = []
        throttle = EventThrottle(sent.append, interval=INTERVAL)
        throttle.push(make_event("RTC_CHANGE", 1))
        await asyncio.sleep(INTERVAL * 3)
        throttle.push(make_event("RTC_CHANGE", 2))
        assert [e.data["n"] for e in sent] == [1, 2]
        throttle.close()

    @pytest.mark.asyncio
    async def test_flush_emits_pending(self):
        sent: list[Event] = []
        throttle = EventThrottle(sent.append, interval=10)
        throttle.push(make_event("RTC_CHANGE", 1))
        throttle.push(make_event("RTC_CHANGE", 2))
        throttle.flush()
        assert [e.data["n"] for e in sent] == [1, 2]
        throttle.push(make_event("RTC_CHANGE", 3))
        assert [e.data["n"] for e in sent] == [1, 2, 3]
        throttle.close()

    @pytest.mark.asyncio
    async def test_close_discards_pending(self):
        sent: list[Event] = []
        throttle = EventThrottle(sent.append, interval=INTERVAL)
        throttle.push(make_event("RTC_CHANGE", 1))
        throttle.push(make_event("RTC_CHANGE", 2))
        throttle.close()
        await asyncio.sleep(INTERVAL * 2)
        assert [e.data["n"] for e in sent] == [1]

    @pytest.mark.asyncio
    async def test_failed_immediate_emit_keeps_window(self):
        sent: list[Event] = []

        def emit(event: Event) -> None:
            if event.data["n"] == 1:
                raise RuntimeError("sink down")
            sent.append(event)

        throttle = EventThrottle(emit, interval=INTERVAL)
        with pytest.raises(RuntimeError):
            throttle.push(make_event("RTC_CHANGE", 1))
        throttle.push(make_event("RTC_CHANGE", 2))
        assert sent == []
        await asyncio.sleep(INTERVAL * 3)
        assert [e.data["n"] for e in sent] == [2]
        throttle.close()

    @pytest.mark.asyncio
    async def test_failed_delayed_emit_does_not_stall_type(self, caplog):
        sent: list[Event] = []
        failing = False

        def emit(event: Event) -> None:
            if failing:
                raise RuntimeError("sink down")
            sent.append(event)

        throttle = EventThrottle(emit, interval=INTERVAL)
        throttle.push(make_event("RTC_CHANGE", 1))
        throttle.push(make_event("RTC_CHANGE", 2))
        failing = True
        with caplog.at_level(logging.ERROR, logger="qmp_protocol.throttle"):
            await asyncio.sleep(INTERVAL * 1.5)
        assert "Emit failed for RTC_CHANGE" in caplog.text

        failing = False
        await asyncio.sleep(INTERVAL * 2)
        throttle.push(make_event("RTC_CHANGE", 3))
        await asyncio.sleep(INTERVAL * 3)
        assert [e.data["n"] for e in sent] == [1, 3]
        throttle.close()
