"""
Shared utilities for the skinbuild CLI.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Iterable, Optional, TypeVar

T = TypeVar("T")


# =============================================================================
# Logging
# =============================================================================

_ANSI = {
    "red": "91",
    "green": "92",
    "yellow": "93",
    "cyan": "96",
    "bold": "1",
    "dim": "2",
}

# level -> (tag, color of the tag)
_LEVELS = {
    "success": ("[OK]", "green"),
    "warning": ("[WARN]", "yellow"),
    "error": ("[ERROR]", "red"),
}


class Logger:
    """Build log with a clock stamp per line, safe to call from phase threads.

    Colors are used when stdout is a terminal unless ``set_color(False)``
    (``--no-color``) says otherwise. ``debug`` only prints with ``verbose``.
    """

    def __init__(self, use_color: Optional[bool] = None, verbose: bool = False):
        self._use_color = sys.stdout.isatty() if use_color is None else use_color
        self.verbose = verbose
        self._lock = threading.Lock()

    def set_color(self, use_color: bool) -> None:
        self._use_color = use_color

    def paint(self, text: str, color: str) -> str:
        if not self._use_color or color not in _ANSI:
            return text
        return f"\033[{_ANSI[color]}m{text}\033[0m"

    def _emit(self, message: str, stamp: bool = True) -> None:
        line = message
        if stamp:
            line = f"[{self.paint(time.strftime('%H:%M:%S'), 'dim')}] {message}"
        with self._lock:
            print(line)

    def _tagged(self, level: str, message: str) -> None:
        tag, color = _LEVELS[level]
        self._emit(f"{self.paint(tag, color)} {message}")

    def header(self, message: str) -> None:
        self._emit("", stamp=False)
        self._emit(self.paint(f"== {message} ==", "cyan"))

    def info(self, message: str) -> None:
        self._emit(message)

    def debug(self, message: str) -> None:
        if self.verbose:
            self._emit(self.paint(message, "dim"))

    def success(self, message: str) -> None:
        self._tagged("success", message)

    def warning(self, message: str) -> None:
        self._tagged("warning", message)

    def error(self, message: str) -> None:
        self._tagged("error", message)

    def dim(self, message: str) -> None:
        self._emit(self.paint(message, "dim"), stamp=False)

    def table_row(self, label: str, value: str, width: int = 24) -> None:
        """Two aligned columns, used by ``inspect``."""
        self._emit(f"  {label:<{width}} {self.paint(value, 'bold')}", stamp=False)


log = Logger()


# =============================================================================
# Sequence Helpers
# =============================================================================


def uniq(items: Iterable[T]) -> tuple[T, ...]:
    """Drop repeated items, keeping the position of the first occurrence."""
    seen: set[T] = set()
    result: list[T] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return tuple(result)


def plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"
