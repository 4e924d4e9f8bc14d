from __future__ import annotations

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_SITE_TITLE = "Nexus Docs"
DEFAULT_SITE_TAGLINE = "Documentação da Plataforma Nexus"
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100
LOG_PREFIX = "[nexus-docs]"
