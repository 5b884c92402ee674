"""
Outbound channel: one topic, one confluent_kafka Producer.

publish() is fire-and-forget:
  - produce() buffers the record; librdkafka sends + retries in the background
  - poll(0) serves any delivery reports that are already waiting

Failures never come back as exceptions. Every failed message reaches the
error observer exactly once as a PublishFailure:
  - async: delivery report with err != None
  - sync:  produce() raised BufferError (local queue full) or KafkaException
"""

from __future__ import annotations

from functools import partial
from typing import Any, Callable, Optional

from confluent_kafka import KafkaError, KafkaException, Message, Producer

from timed_emitter.message import TimedMessage
from timed_emitter.observer import PublishFailure


FailureCallback = Callable[[PublishFailure], None]


class OutboundChannel:
    def __init__(self, producer: Producer, topic: str, on_failure: FailureCallback) -> None:
        self.producer = producer
        self.topic: str = topic
        self.on_failure: FailureCallback = on_failure
        self.sent: int = 0
        self.delivered: int = 0
        self.failed: int = 0

    def publish(self, message: TimedMessage) -> None:
        """
        Hand one message to the producer without blocking.

        The original TimedMessage is bound into the delivery callback, so the
        observer sees exactly what we tried to send (no decoding of msg.value()).
        """
        try:
            self.producer.produce(
                topic=self.topic,
                value=message.to_json(),
                on_delivery=partial(self._on_delivery, message),
            )
        except BufferError as e:
            # Local queue is full: no backpressure here, report and move on.
            self._report(message, KafkaError(KafkaError._QUEUE_FULL, str(e)))
        except KafkaException as e:
            self._report(message, _kafka_error_of(e))
        else:
            self.sent += 1
            print(f"[SENT] value={message.to_dict()}")

        # Serve delivery callbacks from the background queue (acks, errors)
        self.producer.poll(0)

    def serve(self, timeout: float) -> int:
        """Wait up to `timeout` seconds while serving delivery callbacks."""
        return self.producer.poll(timeout)

    def flush(self, timeout: float) -> int:
        """
        Block until buffered messages are delivered; returns how many were left.

        Leftovers are purged so each one still gets a delivery report
        (_PURGE_QUEUE / _PURGE_INFLIGHT) and reaches the observer.
        """
        remaining: int = self.producer.flush(timeout)
        if remaining:
            self.producer.purge()
            # Serve the purge delivery reports
            self.producer.flush(0)
        return remaining

    def _on_delivery(self, message: TimedMessage, err: Optional[KafkaError], msg: Message) -> None:
        if err is not None:
            self._report(message, err)
            return
        self.delivered += 1
        print(f"[DELIVERED] topic={msg.topic()} partition={msg.partition()} offset={msg.offset()}")

    def _report(self, message: TimedMessage, err: KafkaError) -> None:
        self.failed += 1
        try:
            self.on_failure(PublishFailure(message=message, error=err, topic=self.topic))
        except Exception as e:
            # Runs on the client's callback path: contain it, never re-raise.
            print(f"[OBSERVER-ERROR] observer raised {type(e).__name__}: {e}")


def _kafka_error_of(exc: KafkaException) -> KafkaError:
    first: Any = exc.args[0] if exc.args else None
    if isinstance(first, KafkaError):
        return first
    return KafkaError(KafkaError._FAIL, str(exc))
