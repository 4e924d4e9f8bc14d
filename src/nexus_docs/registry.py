"""Document registry: the fixed set of viewable documents and key resolution."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class DocumentEntry:
    title: str
    file_path: str
    label: str = ""
    section: tuple[str, ...] = ()

    @property
    def display_label(self) -> str:
        return self.label or self.title

    @property
    def tab_label(self) -> str:
        return self.title.split("/")[-1] or self.title


@dataclass(frozen=True)
class DocumentRegistry:
    entries: Mapping[str, DocumentEntry]
    default_key: str
    section_labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.entries:
            raise ValueError("registry has no documents")
        if self.default_key not in self.entries:
            raise ValueError(f"default document is not registered: {self.default_key}")
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))
        object.__setattr__(self, "section_labels", MappingProxyType(dict(self.section_labels)))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key in self.entries

    def __getitem__(self, key: str) -> DocumentEntry:
        return self.entries[key]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> list[str]:
        return list(self.entries)

    def items(self) -> list[tuple[str, DocumentEntry]]:
        return list(self.entries.items())

    def section_label(self, section_id: str) -> str:
        return self.section_labels.get(section_id) or section_id.replace("-", " ").title()


def resolve_doc_key(param: Any, registry: DocumentRegistry | None = None) -> str:
    """Map a raw ``doc`` query value onto a registered key.

    Lists and tuples contribute their first element. Anything that is not a
    registered key, including a missing value, resolves to the default key.
    """
    registry = registry or DEFAULT_REGISTRY
    key = param
    if isinstance(param, (list, tuple)):
        key = param[0] if param else None
    if isinstance(key, str) and key in registry:
        return key
    return registry.default_key


def _entries_from_payload(documents: Iterable[Any]) -> dict[str, DocumentEntry]:
    entries: dict[str, DocumentEntry] = {}
    for idx, item in enumerate(documents):
        if not isinstance(item, dict):
            raise ValueError(f"documents[{idx}] must be an object")
        key = str(item.get("key") or "").strip()
        title = str(item.get("title") or "").strip()
        file_path = str(item.get("file") or "").strip()
        if not key or not title or not file_path:
            raise ValueError(f"documents[{idx}] requires key, title and file")
        if key in entries:
            raise ValueError(f"duplicate document key: {key}")
        section = item.get("section") or []
        if isinstance(section, str):
            section = [chunk for chunk in section.split("/") if chunk]
        if not isinstance(section, list):
            raise ValueError(f"documents[{idx}].section must be a list")
        entries[key] = DocumentEntry(
            title=title,
            file_path=file_path,
            label=str(item.get("label") or "").strip(),
            section=tuple(str(part).strip() for part in section if str(part).strip()),
        )
    return entries


def registry_from_payload(payload: Any) -> DocumentRegistry:
    if not isinstance(payload, dict):
        raise ValueError("registry must be a JSON object")
    documents = payload.get("documents")
    if not isinstance(documents, list):
        raise ValueError("registry.documents must be a list")
    entries = _entries_from_payload(documents)
    sections = payload.get("sections") or {}
    if not isinstance(sections, dict):
        raise ValueError("registry.sections must be an object")
    default_key = str(payload.get("default") or "").strip()
    if not default_key and entries:
        default_key = next(iter(entries))
    return DocumentRegistry(
        entries=entries,
        default_key=default_key,
        section_labels={str(k): str(v) for k, v in sections.items()},
    )


def load_registry(path: Path) -> DocumentRegistry:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Registry file not readable: {path}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Registry file is not valid JSON: {path} ({exc.msg})") from exc
    return registry_from_payload(payload)


_BACKEND = ("platform", "backend")

DEFAULT_SECTION_LABELS = {
    "platform": "Plataforma Nexus",
    "backend": "Backend",
    "config": "Config",
    "middleware": "Middleware",
    "integrations": "Integrations",
    "integrations-actionvoice": "Action Voice",
    "integrations-aws": "AWS",
}

DEFAULT_REGISTRY = DocumentRegistry(
    entries={
        "helmet": DocumentEntry(
            title="src/config/helmet.ts",
            file_path="src/docs/backend/config/src_config_helmet.html",
            label="Helmet",
            section=_BACKEND + ("config",),
        ),
        "database": DocumentEntry(
            title="src/config/database.ts",
            file_path="src/docs/backend/config/src_config_database.html",
            label="Database",
            section=_BACKEND + ("config",),
        ),
        "adminRoutesTs": DocumentEntry(
            title="src/config/admin-routes.ts",
            file_path="src/docs/backend/config/src_config_admin_routes.ts.html",
            label="Admin Routes",
            section=_BACKEND + ("config",),
        ),
        "adminRoutes": DocumentEntry(
            title="src/config/routes.ts",
            file_path="src/docs/backend/config/src_config_routes.html",
            label="Routes",
            section=_BACKEND + ("config",),
        ),
        "env": DocumentEntry(
            title="src/config/env.ts",
            file_path="src/docs/backend/config/src_config_env.html",
            label="Env",
            section=_BACKEND + ("config",),
        ),
        "errorHandler": DocumentEntry(
            title="Middleware/errorHandler.ts",
            file_path="src/docs/backend/middleware/middleware_error_Handler.html",
            label="Error Handler",
            section=_BACKEND + ("middleware",),
        ),
        "roleMiddleware": DocumentEntry(
            title="Middleware/roleMiddleware.ts",
            file_path="src/docs/backend/middleware/middleware_role_Middleware.html",
            label="Role Middleware",
            section=_BACKEND + ("middleware",),
        ),
        "authMiddleware": DocumentEntry(
            title="Middleware/authMiddleware.ts",
            file_path="src/docs/backend/middleware/middleware_auth_Middleware.html",
            label="Auth Middleware",
            section=_BACKEND + ("middleware",),
        ),
        "actionVoice": DocumentEntry(
            title="integrations/actionvoice",
            file_path="src/docs/backend/integrations/action_voice/integrations_actionvoice_index.html",
            label="ActionVoice",
            section=_BACKEND + ("integrations", "integrations-actionvoice"),
        ),
        "awsPinpoint": DocumentEntry(
            title="integrations/aws/pinpoint",
            file_path="src/docs/backend/integrations/aws/pinpoint/integrations_aws_pinpoint_index.html",
            label="AWS Pinpoint",
            section=_BACKEND + ("integrations", "integrations-aws"),
        ),
        "awsS3": DocumentEntry(
            title="integrations/aws/s3",
            file_path="src/docs/backend/integrations/aws/s3/integrations_aws_s3_index.html",
            label="AWS S3",
            section=_BACKEND + ("integrations", "integrations-aws"),
        ),
    },
    default_key="helmet",
    section_labels=DEFAULT_SECTION_LABELS,
)
