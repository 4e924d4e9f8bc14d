from __future__ import annotations

import sys
from pathlib import Path

from .registry import DocumentEntry
from .render.html import markdown_to_html

FALLBACK_HTML = (
    "<!doctype html><html><body>"
    '<p style="font-family:Arial, sans-serif">Documento não encontrado ou erro ao carregar.</p>'
    "</body></html>"
)

MARKDOWN_SUFFIXES = {".md", ".markdown"}


def _resolve_document_path(root: Path, file_path: str) -> Path:
    candidate = Path(file_path).expanduser()
    if not candidate.is_absolute():
        candidate = root / candidate
    candidate = candidate.resolve()
    try:
        candidate.relative_to(root.resolve())
    except ValueError as exc:
        raise ValueError(f"Path escapes root: {file_path}") from exc
    return candidate


def _read_text(file_path: str, root: Path | None) -> str | None:
    base = root or Path.cwd()
    try:
        path = _resolve_document_path(base, file_path)
        return path.read_bytes().decode("utf-8", errors="replace")
    except (OSError, ValueError) as exc:
        sys.stderr.write(f"[nexus-docs] document unavailable: {file_path} ({exc})\n")
        return None


def load_html(file_path: str, root: Path | None = None) -> str:
    """Read a document file, or the fallback page when it cannot be read."""
    text = _read_text(file_path, root)
    return FALLBACK_HTML if text is None else text


def load_document(entry: DocumentEntry, root: Path | None = None) -> str:
    text = _read_text(entry.file_path, root)
    if text is None:
        return FALLBACK_HTML
    if Path(entry.file_path).suffix.lower() in MARKDOWN_SUFFIXES:
        return markdown_to_html(text)
    return text
