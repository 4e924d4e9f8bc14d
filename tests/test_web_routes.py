from __future__ import annotations

from pathlib import Path

import nexus_web.routes as routes_mod
from nexus_docs.registry import DocumentEntry, DocumentRegistry
from nexus_web.config import ViewerConfig
from nexus_web.routes import handle_get


class DummyHandler:
    def __init__(self, cfg: ViewerConfig, path: str) -> None:
        self._cfg_obj = cfg
        self.path = path
        self.json_response: tuple[int, object] | None = None
        self.bytes_response: tuple[int, bytes, str] | None = None

    def _cfg(self) -> ViewerConfig:
        return self._cfg_obj

    def _send_json(self, payload: object, status: int = 200) -> None:
        self.json_response = (status, payload)

    def _send_bytes(self, data: bytes, content_type: str, status: int = 200) -> None:
        self.bytes_response = (status, data, content_type)


def make_cfg(tmp_path: Path) -> ViewerConfig:
    docs = tmp_path / "docs"
    docs.mkdir(parents=True, exist_ok=True)
    (docs / "helmet.html").write_text(
        "<html><head><style>p{}</style></head><body><p class=\"x\">Helmet<br>headers</p></body></html>",
        encoding="utf-8",
    )
    (docs / "database.html").write_text("<body><p id=\"p1\">Database pool</p></body>", encoding="utf-8")
    registry = DocumentRegistry(
        entries={
            "helmet": DocumentEntry("src/config/helmet.ts", "docs/helmet.html", label="Helmet", section=("config",)),
            "database": DocumentEntry("src/config/database.ts", "docs/database.html", section=("config",)),
            "missing": DocumentEntry("src/config/missing.ts", "docs/missing.html"),
        },
        default_key="helmet",
        section_labels={"config": "Config"},
    )
    return ViewerConfig(root=tmp_path, registry=registry)


def test_handle_get_health(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/api/health")
    handle_get(handler)
    assert handler.json_response == (200, {"status": "ok"})


def test_index_renders_requested_document(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/?doc=database")
    handle_get(handler)
    assert handler.bytes_response is not None
    status, data, content_type = handler.bytes_response
    assert status == 200
    assert content_type == "text/html; charset=utf-8"
    page = data.decode("utf-8")
    assert 'data-doc="database"><p>Database pool</p></article>' in page


def test_index_falls_back_to_default_document(tmp_path: Path) -> None:
    for path in ("/", "/index.html?doc=unknown", "/?doc=&other=1"):
        handler = DummyHandler(make_cfg(tmp_path), path)
        handle_get(handler)
        assert handler.bytes_response is not None
        page = handler.bytes_response[1].decode("utf-8")
        assert 'data-doc="helmet"><pre><code>Helmet\nheaders</code></pre></article>' in page


def test_index_uses_first_repeated_doc_param(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/?doc=database&doc=helmet")
    handle_get(handler)
    assert handler.bytes_response is not None
    assert 'data-doc="database"' in handler.bytes_response[1].decode("utf-8")


def test_index_missing_file_shows_placeholder(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/?doc=missing")
    handle_get(handler)
    assert handler.bytes_response is not None
    page = handler.bytes_response[1].decode("utf-8")
    assert "<p>Documento não encontrado ou erro ao carregar.</p>" in page


def test_api_docs_lists_registry(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/api/docs")
    handle_get(handler)
    assert handler.json_response is not None
    status, body = handler.json_response
    assert status == 200
    assert isinstance(body, dict)
    assert body["default"] == "helmet"
    assert [doc["key"] for doc in body["documents"]] == ["helmet", "database", "missing"]
    assert body["documents"][0]["href"] == "/?doc=helmet"
    assert body["nav"]["keys"] == ["missing"]
    assert body["nav"]["children"][0] == {
        "id": "config",
        "label": "Config",
        "keys": ["helmet", "database"],
        "children": [],
    }


def test_api_doc_detail_and_unknown_key(tmp_path: Path) -> None:
    cfg = make_cfg(tmp_path)
    handler = DummyHandler(cfg, "/api/docs/database")
    handle_get(handler)
    assert handler.json_response == (
        200,
        {"key": "database", "title": "src/config/database.ts", "html": "<p>Database pool</p>"},
    )
    handler = DummyHandler(cfg, "/api/docs/nope")
    handle_get(handler)
    assert handler.json_response == (404, {"error": "Document not found: nope"})


def test_api_search(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/api/search?q=pool")
    handle_get(handler)
    assert handler.json_response is not None
    status, body = handler.json_response
    assert status == 200
    assert isinstance(body, dict)
    assert body["query"] == "pool"
    assert [item["key"] for item in body["results"]] == ["database"]


def test_api_search_requires_query(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/api/search")
    handle_get(handler)
    assert handler.json_response == (400, {"error": "query must be a non-empty string"})


def test_api_search_forwards_clamped_limit(tmp_path: Path, monkeypatch) -> None:
    captured: dict[str, object] = {}

    def _fake_search(registry, query, root, limit=20):
        captured["query"] = query
        captured["limit"] = limit
        return []

    monkeypatch.setattr(routes_mod, "search_documents", _fake_search)
    handler = DummyHandler(make_cfg(tmp_path), "/api/search?q=x&limit=5000")
    handle_get(handler)
    assert handler.json_response == (200, {"query": "x", "results": []})
    assert captured == {"query": "x", "limit": 100}


def test_unknown_endpoint(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/api/does-not-exist")
    handle_get(handler)
    assert handler.json_response == (404, {"error": "unknown_endpoint"})


def test_api_info_reports_registry(tmp_path: Path) -> None:
    handler = DummyHandler(make_cfg(tmp_path), "/api/info")
    handle_get(handler)
    assert handler.json_response is not None
    status, body = handler.json_response
    assert status == 200
    assert isinstance(body, dict)
    assert body["default"] == "helmet"
    assert body["documents"] == 3
    assert body["version"]
