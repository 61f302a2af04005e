"""Wall-clock timing of build tasks."""

from __future__ import annotations

import threading
import time
from typing import Mapping


class TimingContext:
    """Store how long the ``with`` block took under ``timings[key]``.

    Tasks of one wave finish on different threads, so every write takes
    a shared lock. The duration is stored even when the block raises.
    """

    _lock = threading.Lock()

    def __init__(self, timings: dict[str, float], key: str) -> None:
        self.timings = timings
        self.key = key
        self.started = 0.0

    def __enter__(self) -> "TimingContext":
        self.started = time.monotonic()
        return self

    def __exit__(self, *exc_info) -> bool:
        elapsed = time.monotonic() - self.started
        with self._lock:
            self.timings[self.key] = round(elapsed, 3)
        return False


def format_duration(seconds: float) -> str:
    """``0.5`` -> ``"0.5s"``, ``65.3`` -> ``"1m 5.3s"``"""
    minutes, rest = divmod(seconds, 60)
    if not minutes:
        return f"{rest:.1f}s"
    return f"{int(minutes)}m {rest:.1f}s"


def timing_summary(timings: Mapping[str, float]) -> str:
    """One line, task by task, closed by the summed total."""
    if not timings:
        return "no phases recorded"

    cells = [f"{name}: {format_duration(seconds)}" for name, seconds in timings.items()]
    cells.append(f"total: {format_duration(sum(timings.values()))}")
    return " | ".join(cells)
