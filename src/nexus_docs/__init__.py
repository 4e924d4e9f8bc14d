"""Nexus Docs viewer core package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _package_version

try:
    __version__ = _package_version("nexus-docs")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.3.0"

__all__ = ["DEFAULT_REGISTRY", "resolve_doc_key", "load_document", "sanitize_and_extract", "__version__"]


def __getattr__(name: str):
    if name in {"DEFAULT_REGISTRY", "resolve_doc_key"}:
        from .registry import DEFAULT_REGISTRY, resolve_doc_key

        return DEFAULT_REGISTRY if name == "DEFAULT_REGISTRY" else resolve_doc_key
    if name == "load_document":
        from .loader import load_document

        return load_document
    if name == "sanitize_and_extract":
        from .render.html import sanitize_and_extract

        return sanitize_and_extract
    raise AttributeError(f"module 'nexus_docs' has no attribute {name!r}")
