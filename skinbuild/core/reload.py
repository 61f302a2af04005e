"""
Live reload broadcast sink.

Compile phases push reload messages here; the serve command attaches an
asyncio loop and WebSocket clients. With no loop attached (a one-shot
build), every notification is a no-op.
"""

from __future__ import annotations

import asyncio
import json
import threading
from typing import Any, Optional

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed

from skinbuild.core.utils import log, plural

RELOAD = "reload"
CSS_RELOAD = "css-reload"


class ReloadBroadcaster:
    """Browsers connected to one site's reload socket."""

    def __init__(self, name: str = ""):
        self.name = name
        self._connections: set[ServerConnection] = set()
        self._guard = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def client_count(self) -> int:
        with self._guard:
            return len(self._connections)

    def set_loop(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        self._loop = loop

    async def handler(self, connection: ServerConnection) -> None:
        """Keep a browser registered until its socket closes."""
        with self._guard:
            self._connections.add(connection)
        log.debug(f"[{self.name}] {plural(self.client_count, 'browser')} connected")
        try:
            # The page script only listens
            await connection.wait_closed()
        finally:
            with self._guard:
                self._connections.discard(connection)
            log.debug(f"[{self.name}] {plural(self.client_count, 'browser')} connected")

    def broadcast(self, message: dict[str, Any]) -> None:
        """Queue ``message`` for every browser. Callable from any thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        with self._guard:
            targets = list(self._connections)
        if targets:
            payload = json.dumps(message)
            asyncio.run_coroutine_threadsafe(self._deliver(targets, payload), loop)

    @staticmethod
    async def _deliver(targets: list[ServerConnection], payload: str) -> None:
        for connection in targets:
            try:
                await connection.send(payload)
            except ConnectionClosed:
                continue

    def notify_reload(self) -> None:
        self.broadcast({"type": RELOAD})

    def notify_css_reload(self, filename: Optional[str] = None) -> None:
        """Ask pages to refetch stylesheets, only ``filename`` when given."""
        message: dict[str, Any] = {"type": CSS_RELOAD}
        if filename:
            message["file"] = filename
        self.broadcast(message)


class ReloadHub:
    """One broadcaster per site, keyed by the site's skin path."""

    def __init__(self) -> None:
        self._broadcasters: dict[str, ReloadBroadcaster] = {}
        self._guard = threading.Lock()

    def for_key(self, key: str) -> ReloadBroadcaster:
        with self._guard:
            return self._broadcasters.setdefault(key, ReloadBroadcaster(key))

    def notify_reload(self, key: str) -> None:
        self.for_key(key).notify_reload()

    def notify_css_reload(self, key: str, filename: Optional[str] = None) -> None:
        self.for_key(key).notify_css_reload(filename)
