"""
Wiring: build the producer, the channel, the observer and the emitter by hand,
then run the fixed-rate poller until Ctrl+C / SIGTERM (or --count messages).

    poller → PeriodicEmitter.tick() → OutboundChannel → Producer → broker
                                             ↓ (failed delivery)
                                        ErrorObserver
"""

from __future__ import annotations

import argparse
import signal
from typing import Any, Dict, List, Optional

from timed_emitter.channel import OutboundChannel
from timed_emitter.config import build_args, make_producer
from timed_emitter.emitter import PeriodicEmitter, run_poller
from timed_emitter.observer import ErrorObserver


# Global stop flag toggled by signal handlers
_SHOULD_STOP: bool = False


def _sig_handler(sig: int, _frame: Any) -> None:
    global _SHOULD_STOP
    print("\n[SHUTDOWN] signal received, finishing current period…")
    _SHOULD_STOP = True


def _install_signal_handlers() -> Dict[int, Any]:
    """Allow Ctrl+C / SIGTERM to break the loop gracefully; returns the old handlers."""
    previous: Dict[int, Any] = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, _sig_handler)
    return previous


def _should_stop() -> bool:
    return _SHOULD_STOP


def run(args: argparse.Namespace) -> int:
    """
    Emit until stopped, then flush.

    Returns:
        int: number of messages still undelivered after the flush timeout.
    """
    global _SHOULD_STOP
    _SHOULD_STOP = False

    observer = ErrorObserver()
    channel = OutboundChannel(make_producer(args), args.topic, on_failure=observer)
    emitter = PeriodicEmitter(channel, label=args.label)

    print(
        f"[START] topic='{args.topic}' bootstrap={args.bootstrap} interval={args.interval_ms}ms "
        f"per_poll={args.max_messages_per_poll} count={args.count or '∞'}"
    )
    print(f"[CONFIG] reliable={args.reliable} delivery.timeout.ms={args.delivery_timeout_ms}")

    previous = _install_signal_handlers()
    try:
        ticks: int = run_poller(
            emitter,
            channel,
            interval_ms=args.interval_ms,
            max_messages_per_poll=args.max_messages_per_poll,
            limit=args.count,
            should_stop=_should_stop,
        )
    except KeyboardInterrupt:
        # Redundant thanks to _install_signal_handlers, but safe.
        ticks = emitter.emitted
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    # Ensure buffered messages are delivered (or give up at timeout);
    # anything purged here still reaches the observer.
    remaining: int = channel.flush(args.flush_timeout)
    print(
        f"[FLUSHED] emitted={ticks} delivered={channel.delivered} "
        f"failed={observer.failures} remaining={remaining}"
    )
    return remaining


def main(argv: Optional[List[str]] = None) -> None:
    run(build_args(argv))


if __name__ == "__main__":
    main()
