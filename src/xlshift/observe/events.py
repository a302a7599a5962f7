"""Command timing and NDJSON lifecycle events on stderr."""

from __future__ import annotations

import json
import sys
import time
from datetime import datetime, timezone
from typing import Any, TextIO


class Timer:
    """Context-manager timer for measuring duration_ms."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)


class EventEmitter:
    """Writes one JSON object per line to stderr while enabled.

    Every event carries the command name it was created for, so a caller
    tailing stderr across several invocations can tell them apart.
    """

    def __init__(self, command: str = "", enabled: bool = False, stream: TextIO | None = None) -> None:
        self.command = command
        self.enabled = enabled
        self._stream = stream
        self.emitted = 0

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        payload = {
            "event": event,
            "command": self.command,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data or {},
        }
        out = self._stream or sys.stderr
        out.write(json.dumps(payload, default=str) + "\n")
        out.flush()
        self.emitted += 1
