from __future__ import annotations

import errno
import html
import sys
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlsplit

NOT_FOUND_HTML = "<h1>Page Not Found</h1>"
HTML_TYPE = "text/html; charset=utf-8"


@dataclass(frozen=True)
class Response:
    status: int
    body: bytes
    content_type: str = HTML_TYPE


def resolve_request(output_dir: Path, request_path: str) -> Response:
    """Map a request path onto a file under ``output_dir``."""
    path = unquote(urlsplit(request_path or "/").path)
    root = Path(output_dir).resolve()
    try:
        candidate = (root / path.lstrip("/")).resolve()
        found = candidate.is_relative_to(root) and candidate.is_file()
    except (OSError, ValueError):
        found = False
    if not found:
        return Response(404, NOT_FOUND_HTML.encode("utf-8"))
    return Response(200, candidate.read_bytes())


def handle_request(app: Callable[[str], Response], request_path: str) -> Response:
    try:
        return app(request_path)
    except Exception as exc:
        print(f"Error handling request: {exc}", file=sys.stderr)
        body = f"<h1>Error</h1><p>{html.escape(str(exc))}</p>"
        return Response(500, body.encode("utf-8"))


class SiteServer(ThreadingHTTPServer):
    # a second server on the same port must fail to bind, not share it
    allow_reuse_port = False
    daemon_threads = True


def make_handler(output_dir: Path) -> type[BaseHTTPRequestHandler]:
    def app(request_path: str) -> Response:
        return resolve_request(output_dir, request_path)

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            self._respond(send_body=True)

        def do_HEAD(self) -> None:
            self._respond(send_body=False)

        def _respond(self, send_body: bool) -> None:
            response = handle_request(app, self.path)
            self.send_response(response.status)
            self.send_header("Content-Type", response.content_type)
            self.send_header("Content-Length", str(len(response.body)))
            self.end_headers()
            if send_body:
                self.wfile.write(response.body)

    return Handler


def start_server(output_dir: Path, host: str = "localhost", port: int = 3000, attempts: int = 100) -> SiteServer:
    """Bind a server for ``output_dir``, moving to the next port while ports are taken.

    The returned server is bound but not serving; call ``serve_forever()``.
    """
    handler = make_handler(output_dir)
    for offset in range(max(1, attempts)):
        candidate = port + offset if port else 0
        try:
            httpd = SiteServer((host, candidate), handler)
        except OSError as exc:
            if exc.errno != errno.EADDRINUSE or not port:
                raise
            print(f"Port {candidate} is in use. Trying port {candidate + 1}")
            continue
        print(f"Server started on port {httpd.server_address[1]}")
        return httpd
    raise OSError(errno.EADDRINUSE, f"No free port in {port}-{port + attempts - 1}")
