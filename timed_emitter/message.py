"""
TimedMessage: the one record this app publishes.

Each tick builds a fresh, immutable message:
  - timestamp (int) → epoch milliseconds, read from the wall clock
  - text (str)      → "<label> <seq>", e.g. "Hello SCS World 0"

Wire format is a UTF-8 JSON object (no schema registry, no key).
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, NamedTuple


DEFAULT_LABEL: str = "Hello SCS World"


def now_millis() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def make_text(label: str, seq: int) -> str:
    return f"{label} {seq}"


class TimedMessage(NamedTuple):
    timestamp: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "text": self.text}

    def to_json(self) -> bytes:
        # dict -> JSON string -> bytes (utf-8); Kafka only cares about bytes
        return json.dumps(self.to_dict()).encode("utf-8")
