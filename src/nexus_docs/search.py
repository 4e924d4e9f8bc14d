from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from .loader import FALLBACK_HTML, load_document
from .registry import DocumentRegistry
from .render.html import html_to_text, sanitize_and_extract

SNIPPET_RADIUS = 60


def _snippet(text: str, start: int, end: int) -> str:
    left = max(0, start - SNIPPET_RADIUS)
    right = min(len(text), end + SNIPPET_RADIUS)
    snippet = re.sub(r"\s+", " ", text[left:right]).strip()
    if left > 0:
        snippet = "..." + snippet
    if right < len(text):
        snippet = snippet + "..."
    return snippet


def document_text(registry: DocumentRegistry, key: str, root: Path | None = None) -> str | None:
    """Plain text of a document, or ``None`` when it could not be loaded."""
    raw = load_document(registry[key], root)
    if raw == FALLBACK_HTML:
        return None
    return html_to_text(sanitize_and_extract(raw))


def search_documents(
    registry: DocumentRegistry,
    query: str,
    root: Path | None = None,
    limit: int = 20,
) -> list[dict[str, Any]]:
    needle = (query or "").strip()
    if not needle:
        raise ValueError("query must be a non-empty string")
    pattern = re.compile(re.escape(needle), re.IGNORECASE)
    results: list[dict[str, Any]] = []
    for key, entry in registry.items():
        text = document_text(registry, key, root)
        if text is None:
            continue
        hits = list(pattern.finditer(text))
        if not hits:
            continue
        first = hits[0]
        results.append(
            {
                "key": key,
                "title": entry.title,
                "matches": len(hits),
                "snippet": _snippet(text, first.start(), first.end()),
            }
        )
        if len(results) >= max(limit, 1):
            break
    return results
