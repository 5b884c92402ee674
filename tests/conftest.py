"""Shared fakes: a producer that never talks to a broker, and controllable clocks."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

import pytest
from confluent_kafka import KafkaError

from timed_emitter.observer import PublishFailure


class FakeMessage:
    """Just the bits of confluent_kafka.Message the delivery report reads."""

    def __init__(self, topic: str, value: bytes, offset: int) -> None:
        self._topic = topic
        self._value = value
        self._offset = offset

    def topic(self) -> str:
        return self._topic

    def partition(self) -> int:
        return 0

    def offset(self) -> int:
        return self._offset

    def key(self) -> Optional[bytes]:
        return None

    def value(self) -> bytes:
        return self._value


class FakeProducer:
    """
    Duck-typed stand-in for confluent_kafka.Producer.

    fail(attempt) decides the delivery outcome of produce attempt #attempt (1-based):
    return a KafkaError to fail it, None to deliver it. Delivery reports are queued
    and only fire from poll()/flush(), like librdkafka. stalled=True models an
    unreachable broker: nothing is delivered until purge().
    """

    def __init__(
        self,
        fail: Optional[Callable[[int], Optional[KafkaError]]] = None,
        raise_on_produce: Optional[Callable[[int], Optional[Exception]]] = None,
        stalled: bool = False,
    ) -> None:
        self.fail = fail or (lambda attempt: None)
        self.raise_on_produce = raise_on_produce or (lambda attempt: None)
        self.stalled: bool = stalled
        self.purged: int = 0
        self.attempts: int = 0
        self.produced: List[Tuple[str, bytes]] = []
        self.poll_timeouts: List[float] = []
        self._pending: List[Tuple[Any, Optional[KafkaError], FakeMessage]] = []

    def produce(self, topic: str, value: bytes, key: Any = None, on_delivery: Any = None) -> None:
        self.attempts += 1
        exc = self.raise_on_produce(self.attempts)
        if exc is not None:
            raise exc
        self.produced.append((topic, value))
        msg = FakeMessage(topic, value, offset=len(self.produced) - 1)
        self._pending.append((on_delivery, self.fail(self.attempts), msg))

    def poll(self, timeout: Optional[float] = None) -> int:
        self.poll_timeouts.append(timeout)
        if self.stalled:
            return 0
        pending, self._pending = self._pending, []
        for callback, err, msg in pending:
            if callback is not None:
                callback(err, msg)
        return len(pending)

    def flush(self, timeout: Optional[float] = None) -> int:
        self.poll(0)
        return len(self._pending)

    def purge(self, in_queue: bool = True, in_flight: bool = True, blocking: bool = True) -> None:
        """Fail everything still pending with _PURGE_QUEUE, like librdkafka does."""
        self.purged += len(self._pending)
        self._pending = [
            (callback, KafkaError(KafkaError._PURGE_QUEUE, "Purged in queue"), msg)
            for callback, _err, msg in self._pending
        ]
        self.stalled = False


class FakeClock:
    """Epoch-millis clock that returns the queued readings, then repeats the last one."""

    def __init__(self, *readings: int) -> None:
        self.readings: List[int] = list(readings)

    def __call__(self) -> int:
        if len(self.readings) > 1:
            return self.readings.pop(0)
        return self.readings[0]


class FailureRecorder:
    def __init__(self) -> None:
        self.calls: List[PublishFailure] = []

    def __call__(self, failure: PublishFailure) -> None:
        self.calls.append(failure)


@pytest.fixture
def make_producer() -> Callable[..., FakeProducer]:
    return FakeProducer


@pytest.fixture
def make_clock() -> Callable[..., FakeClock]:
    return FakeClock


@pytest.fixture
def recorder() -> FailureRecorder:
    return FailureRecorder()


@pytest.fixture
def timed_out() -> KafkaError:
    return KafkaError(KafkaError._MSG_TIMED_OUT, "Message timed out")
