from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from nexus_docs.registry import (
    DEFAULT_REGISTRY,
    DocumentEntry,
    DocumentRegistry,
    load_registry,
    registry_from_payload,
    resolve_doc_key,
)


def test_every_registered_key_resolves_to_itself() -> None:
    for key in DEFAULT_REGISTRY:
        assert resolve_doc_key(key) == key
        assert resolve_doc_key([key]) == key


def test_missing_or_unknown_values_fall_back_to_default() -> None:
    assert DEFAULT_REGISTRY.default_key == "helmet"
    for raw in (None, [], (), "", "nope", ["nope"], 42, [None]):
        assert resolve_doc_key(raw) == "helmet"


def test_sequence_uses_first_element() -> None:
    assert resolve_doc_key(["database", "env"]) == "database"
    assert resolve_doc_key(("env", "helmet")) == "env"
    assert resolve_doc_key(["nope", "env"]) == "helmet"


def test_resolve_against_custom_registry() -> None:
    registry = DocumentRegistry(
        entries={"a": DocumentEntry("A", "a.html"), "b": DocumentEntry("B", "b.html")},
        default_key="b",
    )
    assert resolve_doc_key("a", registry) == "a"
    assert resolve_doc_key("helmet", registry) == "b"


def test_default_registry_order_and_labels() -> None:
    assert DEFAULT_REGISTRY.keys()[:3] == ["helmet", "database", "adminRoutesTs"]
    assert len(DEFAULT_REGISTRY) == 11
    assert DEFAULT_REGISTRY["awsS3"].tab_label == "s3"
    assert DEFAULT_REGISTRY["env"].display_label == "Env"
    assert DEFAULT_REGISTRY.section_label("integrations-aws") == "AWS"
    assert DEFAULT_REGISTRY.section_label("unknown-group") == "Unknown Group"


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        DEFAULT_REGISTRY.entries["extra"] = DocumentEntry("x", "x.html")  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_REGISTRY.default_key = "env"  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_REGISTRY.entries = {}  # type: ignore[misc]
    assert DEFAULT_REGISTRY.default_key == "helmet"


def test_registry_rejects_unknown_default() -> None:
    with pytest.raises(ValueError, match="default document"):
        DocumentRegistry(entries={"a": DocumentEntry("A", "a.html")}, default_key="b")


def test_load_registry_from_json(tmp_path: Path) -> None:
    path = tmp_path / "docs.json"
    path.write_text(
        json.dumps(
            {
                "sections": {"guides": "Guides"},
                "documents": [
                    {"key": "intro", "title": "guides/intro", "file": "docs/intro.html", "section": "guides"},
                    {"key": "faq", "title": "FAQ", "file": "docs/faq.md", "label": "Questions"},
                ],
            }
        ),
        encoding="utf-8",
    )
    registry = load_registry(path)
    assert registry.default_key == "intro"
    assert registry["intro"].section == ("guides",)
    assert registry["faq"].display_label == "Questions"
    assert registry.section_label("guides") == "Guides"


def test_registry_payload_errors() -> None:
    with pytest.raises(ValueError, match="documents must be a list"):
        registry_from_payload({"documents": {}})
    with pytest.raises(ValueError, match="duplicate document key"):
        registry_from_payload(
            {
                "documents": [
                    {"key": "a", "title": "A", "file": "a.html"},
                    {"key": "a", "title": "A2", "file": "a2.html"},
                ]
            }
        )
    with pytest.raises(ValueError, match="requires key, title and file"):
        registry_from_payload({"documents": [{"key": "a"}]})


def test_load_registry_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_registry(path)
    with pytest.raises(ValueError, match="not readable"):
        load_registry(tmp_path / "missing.json")


def test_package_exports_resolve_lazily() -> None:
    import nexus_docs

    assert nexus_docs.resolve_doc_key is resolve_doc_key
    assert nexus_docs.DEFAULT_REGISTRY is DEFAULT_REGISTRY
    assert nexus_docs.sanitize_and_extract("<p> x </p>") == "<p> x </p>"
    assert nexus_docs.__version__


def test_version_falls_back_outside_an_installed_distribution(monkeypatch) -> None:
    import importlib
    import importlib.metadata

    import nexus_docs

    def missing(name: str) -> str:
        raise importlib.metadata.PackageNotFoundError(name)

    monkeypatch.setattr(importlib.metadata, "version", missing)
    try:
        assert importlib.reload(nexus_docs).__version__ == "0.3.0"
    finally:
        monkeypatch.undo()
        importlib.reload(nexus_docs)
