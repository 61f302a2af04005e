"""
Live reload servers for skinbuild.

Per site: an HTTP server that adds a reload client to HTML pages, plus
a WebSocket server the client connects to. The HTTP side either serves
the site's base directory or, with ``server.proxy``, forwards to a
running store. Compile phases push messages through the site's
ReloadBroadcaster.
"""

from __future__ import annotations

import asyncio
import functools
import threading
import urllib.error
import urllib.request
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from websockets.asyncio.server import serve as ws_serve

from skinbuild.build.config import DEFAULT_SERVER_PORT, SiteConfig
from skinbuild.build.context import BuildContext
from skinbuild.core.reload import CSS_RELOAD, RELOAD, ReloadBroadcaster
from skinbuild.core.utils import log

WS_PATH = "/ws"
HTML_SUFFIXES = (".html", ".htm")


# =============================================================================
# Reload Client
# =============================================================================

# %(port)s, %(path)s and the message types are filled in by client_script()
RELOAD_CLIENT = """<script>
(function () {
  var delay = 250;

  function restyle(file) {
    var sheets = document.getElementsByTagName('link');
    for (var n = 0; n < sheets.length; n++) {
      var link = sheets[n];
      if (link.rel !== 'stylesheet' || !link.href) continue;
      var url = link.href.replace(/[?&]skinbuild=\\d+$/, '');
      if (file && url.indexOf(file) === -1) continue;
      link.href = url + (url.indexOf('?') === -1 ? '?' : '&') + 'skinbuild=' + Date.now();
    }
  }

  function open() {
    var socket = new WebSocket('ws://' + location.hostname + ':%(port)s%(path)s');
    socket.onopen = function () { delay = 250; };
    socket.onmessage = function (event) {
      var data = JSON.parse(event.data);
      if (data.type === '%(css)s') restyle(data.file);
      if (data.type === '%(reload)s') location.reload();
    };
    socket.onclose = function () {
      setTimeout(open, delay);
      delay = Math.min(delay * 2, 4000);
    };
  }

  open();
})();
</script>
"""


def client_script(ws_port: int) -> str:
    return RELOAD_CLIENT % {"port": ws_port, "path": WS_PATH, "css": CSS_RELOAD, "reload": RELOAD}


def inject_script(html: str, ws_port: int) -> str:
    """Insert the reload client before </body>, else </html>, else at the end."""
    script = client_script(ws_port)
    lowered = html.lower()
    for marker in ("</body>", "</html>"):
        at = lowered.rfind(marker)
        if at != -1:
            return html[:at] + script + html[at:]
    return html + script


# =============================================================================
# HTTP Handler
# =============================================================================


class InjectingHandler(SimpleHTTPRequestHandler):
    """Static file handler that serves HTML pages with the reload client."""

    def __init__(self, *args, ws_port: int, directory: Optional[str] = None, **kwargs):
        self.ws_port = ws_port
        super().__init__(*args, directory=directory, **kwargs)

    def log_message(self, format, *args):
        log.debug(f"http {self.address_string()} {format % args}")

    def _html_target(self) -> Optional[Path]:
        target = Path(self.translate_path(self.path))
        if target.is_dir():
            target = target / "index.html"
        if target.is_file() and target.suffix.lower() in HTML_SUFFIXES:
            return target
        return None

    def do_GET(self):
        page = self._html_target()
        if page is None:
            super().do_GET()
            return

        body = inject_script(page.read_text(encoding="utf-8", errors="replace"), self.ws_port)
        payload = body.encode("utf-8")
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(payload)


# =============================================================================
# Proxy Handler
# =============================================================================

# Headers that describe one hop, or that no longer match the rewritten body
HOP_HEADERS = frozenset({
    "connection",
    "content-encoding",
    "content-length",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
})


class _KeepRedirects(urllib.request.HTTPRedirectHandler):
    """Hand 3xx responses back to the browser instead of following them."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


_upstream = urllib.request.build_opener(_KeepRedirects)


class ProxyHandler(BaseHTTPRequestHandler):
    """Forwards requests to a running store and adds the reload client to its pages."""

    timeout_seconds = 60

    def __init__(self, *args, ws_port: int, target: str, **kwargs):
        self.ws_port = ws_port
        self.target = target.rstrip("/")
        super().__init__(*args, **kwargs)

    def log_message(self, format, *args):
        log.debug(f"proxy {self.command} {self.path} {format % args}")

    def _forward(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else None
        headers = {
            name: value for name, value in self.headers.items()
            if name.lower() not in HOP_HEADERS and name.lower() not in ("host", "accept-encoding")
        }
        request = urllib.request.Request(self.target + self.path, data=body, headers=headers, method=self.command)

        try:
            response = _upstream.open(request, timeout=self.timeout_seconds)
            status = response.status
        except urllib.error.HTTPError as e:
            response, status = e, e.code
        except urllib.error.URLError as e:
            self.send_error(HTTPStatus.BAD_GATEWAY, f"{self.target} unreachable: {e.reason}")
            return

        with response:
            payload = response.read()
            if response.headers.get_content_type() == "text/html":
                charset = response.headers.get_content_charset() or "utf-8"
                page = inject_script(payload.decode(charset, errors="replace"), self.ws_port)
                payload = page.encode(charset, errors="replace")

            self.send_response(status)
            for name, value in response.headers.items():
                if name.lower() not in HOP_HEADERS and name.lower() not in ("date", "server"):
                    self.send_header(name, value)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            if self.command != "HEAD":
                self.wfile.write(payload)

    do_GET = do_POST = do_PUT = do_DELETE = do_HEAD = _forward


def proxy_target(site: SiteConfig) -> Optional[str]:
    """The upstream URL from ``server.proxy``, as a string or ``{target: ...}``."""
    proxy = site.server.get("proxy")
    if isinstance(proxy, Mapping):
        proxy = proxy.get("target")
    if not proxy:
        return None
    proxy = str(proxy)
    if "://" not in proxy:
        proxy = f"http://{proxy}"
    return proxy


# =============================================================================
# Server Options
# =============================================================================


def server_options(
    site: SiteConfig,
    root: Path,
    index: int = 0,
) -> tuple[str, int, int, Path]:
    """Return (host, http_port, ws_port, base_dir) from a site's server block.

    Sites without an explicit port get consecutive port pairs starting at
    DEFAULT_SERVER_PORT so several sites can be served at once.
    """
    options: Mapping[str, Any] = site.server
    host = options.get("host", "localhost")
    port = int(options.get("port", DEFAULT_SERVER_PORT + 2 * index))
    ws_port = int(options.get("wsPort", options.get("ws_port", port + 1)))
    base_dir = root / options.get("baseDir", options.get("base_dir", "."))
    return host, port, ws_port, base_dir


# =============================================================================
# Live Reload Server
# =============================================================================


class LiveReloadServer:
    """HTTP + WebSocket pair for one site."""

    def __init__(
        self,
        site: SiteConfig,
        broadcaster: ReloadBroadcaster,
        host: str,
        port: int,
        ws_port: int,
        base_dir: Path,
        proxy: Optional[str] = None,
    ):
        self.site = site
        self.broadcaster = broadcaster
        self.host = host
        self.port = port
        self.ws_port = ws_port
        self.base_dir = base_dir
        self.proxy = proxy
        self.http: Optional[ThreadingHTTPServer] = None
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.closing: Optional[asyncio.Future] = None
        self.threads: list[threading.Thread] = []

    def _spawn(self, target) -> None:
        thread = threading.Thread(target=target, name=f"serve:{self.site.name}", daemon=True)
        thread.start()
        self.threads.append(thread)

    def start(self) -> None:
        if self.proxy:
            handler = functools.partial(ProxyHandler, ws_port=self.ws_port, target=self.proxy)
        else:
            handler = functools.partial(InjectingHandler, ws_port=self.ws_port, directory=str(self.base_dir))
        self.http = ThreadingHTTPServer((self.host, self.port), handler)
        self._spawn(self.http.serve_forever)

        self.loop = asyncio.new_event_loop()
        self.closing = self.loop.create_future()
        self.broadcaster.set_loop(self.loop)
        self._spawn(self._socket_thread)

        source = f"proxying {self.proxy}" if self.proxy else f"serving {self.base_dir}"
        log.success(f"[{self.site.name}] http://{self.host}:{self.port} {source}")
        log.info(f"[{self.site.name}] reload socket ws://{self.host}:{self.ws_port}{WS_PATH}")

    def _socket_thread(self) -> None:
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_until_complete(self._accept())
        finally:
            self.loop.close()

    async def _accept(self) -> None:
        async with ws_serve(
            self.broadcaster.handler,
            self.host,
            self.ws_port,
            process_request=reject_other_paths,
        ):
            await self.closing

    def stop(self) -> None:
        self.broadcaster.set_loop(None)
        if self.http is not None:
            self.http.shutdown()
            self.http.server_close()
            self.http = None
        if self.loop is not None and not self.loop.is_closed():
            self.loop.call_soon_threadsafe(_finish, self.closing)
        for thread in self.threads:
            thread.join(timeout=5)
        self.threads.clear()


def _finish(future: Optional[asyncio.Future]) -> None:
    if future is not None and not future.done():
        future.set_result(None)


async def reject_other_paths(connection, request):
    """Answer 404 to any handshake that is not for the reload socket."""
    if request.path == WS_PATH:
        return None
    return connection.respond(HTTPStatus.NOT_FOUND, f"Only {WS_PATH} accepts connections\n")


def start_servers(context: BuildContext, sites: Sequence[SiteConfig]) -> list[LiveReloadServer]:
    """Start one live reload server per site."""
    log.header("Live reload")
    servers: list[LiveReloadServer] = []
    for index, site in enumerate(sites):
        host, port, ws_port, base_dir = server_options(site, context.config.root, index)
        server = LiveReloadServer(
            site,
            context.reload.for_key(site.skin_path),
            host,
            port,
            ws_port,
            base_dir,
            proxy=proxy_target(site),
        )
        server.start()
        servers.append(server)
    return servers
