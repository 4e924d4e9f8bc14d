from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nexus_docs.registry import DocumentRegistry

from .constants import DEFAULT_SITE_TAGLINE, DEFAULT_SITE_TITLE


@dataclass
class ViewerConfig:
    root: Path
    registry: DocumentRegistry
    site_title: str = DEFAULT_SITE_TITLE
    site_tagline: str = DEFAULT_SITE_TAGLINE
