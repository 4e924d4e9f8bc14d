from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import parse_qs, unquote, urlparse

from nexus_docs.loader import load_document
from nexus_docs.registry import resolve_doc_key
from nexus_docs.render.html import sanitize_and_extract
from nexus_docs.render.page import NavSection, build_nav_tree, doc_href, render_docs_page
from nexus_docs.search import search_documents
from nexus_docs import __version__ as VERSION

from .config import ViewerConfig
from .constants import DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT
from .utils import first_query_value, parse_int


class HandlerLike(Protocol):
    path: str

    def _cfg(self) -> ViewerConfig: ...

    def _send_json(self, payload: Any, status: int = 200) -> None: ...

    def _send_bytes(self, data: bytes, content_type: str, status: int = 200) -> None: ...


def _nav_payload(node: NavSection) -> dict[str, Any]:
    return {
        "id": node.section_id,
        "label": node.label,
        "keys": list(node.keys),
        "children": [_nav_payload(child) for child in node.children],
    }


def _sanitized(cfg: ViewerConfig, key: str) -> str:
    return sanitize_and_extract(load_document(cfg.registry[key], cfg.root))


def handle_get(handler: HandlerLike) -> None:
    cfg = handler._cfg()
    registry = cfg.registry
    parsed = urlparse(handler.path)
    path = parsed.path
    qs = parse_qs(parsed.query)
    if path in {"/", "/index.html"}:
        doc_key = resolve_doc_key(qs.get("doc"), registry)
        page = render_docs_page(
            registry,
            doc_key,
            _sanitized(cfg, doc_key),
            site_title=cfg.site_title,
            site_tagline=cfg.site_tagline,
        )
        handler._send_bytes(page.encode("utf-8"), "text/html; charset=utf-8")
        return
    if path == "/api/health":
        handler._send_json({"status": "ok"})
        return
    if path == "/api/info":
        handler._send_json(
            {
                "version": VERSION,
                "root": str(cfg.root.resolve()),
                "default": registry.default_key,
                "documents": len(registry),
            }
        )
        return
    if path == "/api/docs":
        documents = [
            {
                "key": key,
                "title": entry.title,
                "label": entry.display_label,
                "section": list(entry.section),
                "href": doc_href(key),
            }
            for key, entry in registry.items()
        ]
        handler._send_json(
            {
                "default": registry.default_key,
                "documents": documents,
                "nav": _nav_payload(build_nav_tree(registry)),
            }
        )
        return
    if path.startswith("/api/docs/"):
        key = unquote(path.split("/", 3)[3])
        if key not in registry:
            handler._send_json({"error": f"Document not found: {key}"}, status=404)
            return
        handler._send_json({"key": key, "title": registry[key].title, "html": _sanitized(cfg, key)})
        return
    if path == "/api/search":
        query = first_query_value(qs, "q") or ""
        limit = parse_int(first_query_value(qs, "limit"), DEFAULT_SEARCH_LIMIT, maximum=MAX_SEARCH_LIMIT)
        try:
            results = search_documents(registry, query, cfg.root, limit=limit)
        except ValueError as exc:
            handler._send_json({"error": str(exc)}, status=400)
            return
        handler._send_json({"query": query.strip(), "results": results})
        return
    handler._send_json({"error": "unknown_endpoint"}, status=404)
