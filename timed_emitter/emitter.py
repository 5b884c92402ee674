"""
Periodic Emitter + fixed-rate poller.

PeriodicEmitter.tick() is the zero-argument producer: one call → one
TimedMessage handed to the outbound channel. The sequence counter lives on the
emitter, so text goes "Hello SCS World 0", "... 1", "... 2", ...

run_poller() is the timer: it calls tick() max_messages_per_poll times every
interval_ms, and spends the gaps inside producer.poll() so delivery reports
(and therefore the error observer) keep flowing while we wait.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

from timed_emitter.message import DEFAULT_LABEL, TimedMessage, make_text, now_millis


class Publisher(Protocol):
    def publish(self, message: TimedMessage) -> None: ...


class Channel(Publisher, Protocol):
    def serve(self, timeout: float) -> int: ...


class PeriodicEmitter:
    """
    Builds and publishes one TimedMessage per tick.

    Args:
        channel: where messages go (OutboundChannel in the app, a fake in tests)
        label:   fixed text prefix
        start_seq: first sequence number
        clock:   returns epoch milliseconds; swap in a fake for deterministic tests
    """

    def __init__(
        self,
        channel: Publisher,
        label: str = DEFAULT_LABEL,
        start_seq: int = 0,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.channel: Publisher = channel
        self.label: str = label
        self.clock: Callable[[], int] = clock
        self.seq: int = start_seq
        self.emitted: int = 0
        self._last_ts: Optional[int] = None

    def tick(self) -> TimedMessage:
        ts: int = self.clock()
        # Wall clock stepped back (NTP etc.): hold the last timestamp instead.
        if self._last_ts is not None and ts < self._last_ts:
            ts = self._last_ts
        message = TimedMessage(timestamp=ts, text=make_text(self.label, self.seq))

        self.channel.publish(message)

        self._last_ts = ts
        self.seq += 1
        self.emitted += 1
        return message


def run_poller(
    emitter: PeriodicEmitter,
    channel: Channel,
    interval_ms: int = 1000,
    max_messages_per_poll: int = 1,
    limit: int = 0,
    should_stop: Callable[[], bool] = lambda: False,
    monotonic: Callable[[], float] = time.monotonic,
) -> int:
    """
    Fixed-rate loop around emitter.tick().

    Returns the number of ticks performed. limit=0 means run until should_stop().
    If one period overruns, the schedule re-anchors at "now" instead of
    firing a burst of catch-up ticks.
    """
    if interval_ms < 0:
        raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")
    if max_messages_per_poll < 1:
        raise ValueError(f"max_messages_per_poll must be >= 1, got {max_messages_per_poll}")

    interval_s: float = interval_ms / 1000.0
    ticks: int = 0
    next_at: float = monotonic()

    while not should_stop():
        for _ in range(max_messages_per_poll):
            emitter.tick()
            ticks += 1
            if limit and ticks >= limit:
                return ticks

        next_at += interval_s
        remaining: float = next_at - monotonic()
        if remaining <= 0:
            next_at = monotonic()
            continue

        # poll() returns early whenever it served a callback, so keep waiting
        # until the period is really over.
        while remaining > 0 and not should_stop():
            channel.serve(remaining)
            remaining = next_at - monotonic()

    return ticks
