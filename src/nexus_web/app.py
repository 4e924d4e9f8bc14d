from __future__ import annotations

import argparse
import os
import socket
import sys
import traceback
import webbrowser
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Iterable, Optional

from nexus_docs.registry import DEFAULT_REGISTRY, DocumentRegistry, load_registry
from nexus_docs import __version__ as VERSION

from .config import ViewerConfig
from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SITE_TAGLINE, DEFAULT_SITE_TITLE, LOG_PREFIX
from .routes import handle_get as _dispatch_get
from .utils import expand_env_reference, json_bytes as _json_bytes


class DocsHandler(BaseHTTPRequestHandler):
    server_version = f"nexus-docs/{VERSION}"

    def _cfg(self) -> ViewerConfig:
        return self.server.cfg  # type: ignore[attr-defined]

    def log_message(self, format: str, *args: Any) -> None:
        sys.stderr.write(f"{LOG_PREFIX} " + format % args + "\n")

    def _send_json(self, payload: Any, status: int = 200) -> None:
        self._send_bytes(_json_bytes(payload), "application/json; charset=utf-8", status)

    def _send_bytes(self, data: bytes, content_type: str, status: int = 200) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(data)

    def do_GET(self) -> None:  # noqa: N802
        try:
            _dispatch_get(self)
        except Exception as exc:  # pragma: no cover - safety net for local servers
            tb = traceback.format_exc()
            sys.stderr.write(f"{LOG_PREFIX} GET error: {exc}\n{tb}\n")
            try:
                self.send_error(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
            except OSError:
                pass


class DocsHTTPServer(ThreadingHTTPServer):
    # Avoid multiple viewer processes binding the same port on Windows.
    allow_reuse_address = False

    def server_bind(self) -> None:  # pragma: no cover - platform-dependent
        if os.name == "nt":
            try:
                self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_EXCLUSIVEADDRUSE, 1)
            except OSError:
                pass
        super().server_bind()


def resolve_registry(root: Path, raw: str | None) -> DocumentRegistry:
    expanded = expand_env_reference(raw)
    if not expanded:
        return DEFAULT_REGISTRY
    path = Path(expanded).expanduser()
    if not path.is_absolute():
        path = root / path
    return load_registry(path)


class _HelpFormatter(argparse.ArgumentDefaultsHelpFormatter, argparse.RawTextHelpFormatter):
    """Preserve example formatting while still showing defaults."""


def build_parser() -> argparse.ArgumentParser:
    examples = """Examples:
  # Serve the built-in backend docs from the current directory.
  nexus-docs --root . --port 3000
  # Share on the LAN (bind all interfaces).
  nexus-docs --root . --host 0.0.0.0
  # Use a custom document registry (JSON, relative to --root).
  nexus-docs --root site --registry docs.json
  # Registry path taken from an environment variable.
  nexus-docs --registry '$NEXUS_DOCS_REGISTRY'
  # Module entrypoint, headless.
  python -m nexus_web.app --root . --no-open-browser
"""
    ap = argparse.ArgumentParser(
        prog="nexus-docs",
        description="Nexus Docs: local viewer for exported HTML documentation.",
        epilog=examples,
        formatter_class=_HelpFormatter,
    )
    ap.add_argument("--host", default=DEFAULT_HOST, help="Host to bind.")
    ap.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to bind.")
    ap.add_argument(
        "--root",
        default=".",
        help="Base directory. Document paths are resolved under it and path escapes fall back to the placeholder.",
    )
    ap.add_argument(
        "--registry",
        default=None,
        help="JSON document registry replacing the built-in one. Accepts $VAR, ${VAR} and %%VAR%% references.",
    )
    ap.add_argument("--title", default=DEFAULT_SITE_TITLE, help="Site title shown in the sidebar.")
    ap.add_argument("--tagline", default=DEFAULT_SITE_TAGLINE, help="Subtitle shown under the site title.")
    ap.add_argument(
        "--open-browser",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Open the viewer in a browser on startup.",
    )
    return ap


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    root = Path(args.root).resolve()
    try:
        registry = resolve_registry(root, args.registry)
    except ValueError as exc:
        print(f"{LOG_PREFIX} {exc}", file=sys.stderr)
        return 2

    cfg = ViewerConfig(root=root, registry=registry, site_title=args.title, site_tagline=args.tagline)
    server = DocsHTTPServer((args.host, args.port), DocsHandler)
    server.cfg = cfg  # type: ignore[attr-defined]

    url = f"http://{args.host}:{args.port}/"
    print(f"{LOG_PREFIX} Serving {url}")
    print(f"{LOG_PREFIX} Root: {root}")
    print(f"{LOG_PREFIX} Documents: {len(registry)} (default: {registry.default_key})")
    if args.open_browser:
        try:
            webbrowser.open(url)
        except webbrowser.Error:
            pass

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print(f"\n{LOG_PREFIX} Shutting down.")
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
