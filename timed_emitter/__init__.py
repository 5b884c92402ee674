"""Emit a timestamped message every second to Kafka; log failed deliveries."""

from timed_emitter.channel import OutboundChannel
from timed_emitter.emitter import PeriodicEmitter, run_poller
from timed_emitter.message import TimedMessage
from timed_emitter.observer import ErrorObserver, PublishFailure

__all__ = [
    "ErrorObserver",
    "OutboundChannel",
    "PeriodicEmitter",
    "PublishFailure",
    "TimedMessage",
    "run_poller",
]
