"""
Error Observer: the landing spot for every publish that did not make it.

The channel hands us a PublishFailure once per failed message, either from the
librdkafka delivery report (async, possibly much later) or straight from a
produce() call that was rejected locally (queue full, message too large, ...).

We only observe: no retry, no requeue. The log line carries enough of the
error to tell what happened (name, retriable flag, reason).
"""

from __future__ import annotations

from typing import NamedTuple

from confluent_kafka import KafkaError

from timed_emitter.message import TimedMessage


class PublishFailure(NamedTuple):
    message: TimedMessage
    error: KafkaError
    topic: str


class ErrorObserver:
    """Logs each PublishFailure and counts them."""

    def __init__(self) -> None:
        self.failures: int = 0

    def __call__(self, failure: PublishFailure) -> None:
        self.failures += 1
        err: KafkaError = failure.error
        print(
            f"[DELIVERY-ERROR] topic={failure.topic} ts={failure.message.timestamp} "
            f"text={failure.message.text!r} code={err.name()} "
            f"retriable={err.retriable()} err={err.str()}"
        )
