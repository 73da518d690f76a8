"""serve command - expose the cached report as JSON over HTTP.

Endpoints:
    GET /                      report for the default Go version
    GET /api/releases?go=X.Y   report for X.Y (subject to cache freshness)
    GET /healthz               liveness
"""

from __future__ import annotations

import json
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import typer

from gbp.cli.context import build_context
from gbp.core.errors import ErrorCode
from gbp.core.log import get_logger
from gbp.progress.cache import ReportCache
from gbp.progress.report import snapshot_to_dict

log = get_logger(__name__)


def make_handler(cache: ReportCache, default_version: str) -> type[BaseHTTPRequestHandler]:
    """Request handler class bound to ``cache``."""

    class ReportHandler(BaseHTTPRequestHandler):
        server_version = "gbp"

        def do_GET(self) -> None:  # noqa: N802
            url = urlparse(self.path)
            if url.path == "/healthz":
                self._send(HTTPStatus.OK, {"status": "ok"})
                return
            if url.path not in ("/", "/api/releases"):
                self._send(HTTPStatus.NOT_FOUND, {"error": f"no route for {url.path}"})
                return

            requested = parse_qs(url.query).get("go", [default_version])[0].strip()
            snapshot = cache.get(requested or default_version)
            self._send(HTTPStatus.OK, snapshot_to_dict(snapshot))

        def log_message(self, format: str, *args: object) -> None:
            log.debug("%s - %s", self.address_string(), format % args)

        def _send(self, status: HTTPStatus, body: object) -> None:
            payload = json.dumps(body).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

    return ReportHandler


def serve(
    go_version: str = typer.Argument(..., help="Default target Go version"),
    config: Path = typer.Option(Path("config.json"), "--config", "-c", help="Config file"),
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8080, "--port", "-p", help="Bind port"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Serve the report as JSON, refreshing it at most once per interval."""
    ctx = build_context(config, verbose=verbose)
    cache = ctx.cache()

    try:
        server = ThreadingHTTPServer((host, port), make_handler(cache, go_version))
    except OSError as e:
        ctx.console.error(f"cannot listen on {host}:{port}: {e}")
        raise typer.Exit(code=int(ErrorCode.NETWORK_ERROR))

    ctx.console.success(f"serving on http://{host}:{port}/ (Ctrl+C to stop)")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        ctx.console.print("stopping")
    finally:
        server.server_close()
