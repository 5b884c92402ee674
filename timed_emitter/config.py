"""
CLI flags + producer configuration.

The flags map onto librdkafka settings the same way the other producers do:
  * bootstrap.servers        → --bootstrap
  * linger.ms                → small fixed micro-batching (5 ms)
  * acks / enable.idempotence → --reliable
  * delivery.timeout.ms      → upper bound before a failure reaches the observer
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional

from confluent_kafka import Producer

from timed_emitter.message import DEFAULT_LABEL


DEFAULT_TOPIC: str = "output"


def build_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI flags.

    Returns:
        argparse.Namespace with:
            bootstrap (str): broker list, host:port[,host:port]
            topic (str): destination topic
            interval_ms (int): poll period in milliseconds
            max_messages_per_poll (int): ticks per period
            count (int): stop after this many messages (0 = run forever)
            label (str): text prefix for each message
            reliable (bool): acks=all + enable.idempotence
            delivery_timeout_ms (int): retry budget inside the client
            flush_timeout (float): seconds to wait for in-flight messages on shutdown
    """
    ap = argparse.ArgumentParser(description="Emit a timestamped message every second; log failed deliveries.")
    ap.add_argument("--bootstrap", type=str, default="localhost:9092",
                    help="Kafka bootstrap servers (default: localhost:9092).")
    ap.add_argument("--topic", type=str, default=DEFAULT_TOPIC,
                    help=f"Destination topic (default: {DEFAULT_TOPIC}).")
    ap.add_argument("--interval-ms", type=_non_negative_int, default=1000,
                    help="Poll period in milliseconds (default: 1000).")
    ap.add_argument("--max-messages-per-poll", type=_positive_int, default=1,
                    help="Messages emitted per poll period (default: 1).")
    ap.add_argument("--count", type=_non_negative_int, default=0,
                    help="Stop after this many messages; 0 runs until Ctrl+C (default: 0).")
    ap.add_argument("--label", type=str, default=DEFAULT_LABEL,
                    help=f"Text prefix for each message (default: '{DEFAULT_LABEL}').")
    ap.add_argument("--reliable", action="store_true",
                    help="Use acks=all + enable.idempotence=True.")
    ap.add_argument("--delivery-timeout-ms", type=_positive_int, default=120_000,
                    help="How long the client retries before reporting a failure (default: 120000).")
    ap.add_argument("--flush-timeout", type=float, default=10.0,
                    help="Seconds to wait for in-flight messages on shutdown (default: 10).")
    return ap.parse_args(argv)


def make_producer_conf(args: argparse.Namespace) -> Dict[str, Any]:
    conf: Dict[str, Any] = {
        "bootstrap.servers": args.bootstrap,
        # keep batching tiny; one message a second doesn't need more
        "linger.ms": 5,
        "delivery.timeout.ms": args.delivery_timeout_ms,
    }
    if args.reliable:
        conf["acks"] = "all"
        conf["enable.idempotence"] = True
        # must stay <= 5 with idempotence
        conf["max.in.flight.requests.per.connection"] = 5
    return conf


def make_producer(args: argparse.Namespace) -> Producer:
    return Producer(make_producer_conf(args))


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected an integer >= 1, got {raw}")
    return value


def _non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected an integer >= 0, got {raw}")
    return value
