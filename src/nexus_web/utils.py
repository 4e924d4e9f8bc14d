from __future__ import annotations

import json
import os
from typing import Any, Optional


def json_bytes(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def first_query_value(qs: dict[str, list[str]], key: str) -> Optional[str]:
    return (qs.get(key) or [None])[0]


def parse_int(raw: str | None, default: int, *, minimum: int = 1, maximum: int | None = None) -> int:
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


def expand_env_reference(value: str | None) -> str | None:
    if not value:
        return value
    raw = value.strip()
    name = None
    if raw.startswith("${") and raw.endswith("}"):
        name = raw[2:-1].strip()
    elif raw.startswith("$") and len(raw) > 1:
        name = raw[1:].strip()
    elif raw.startswith("%") and raw.endswith("%") and len(raw) > 2:
        name = raw[1:-1].strip()
    if name:
        expanded = os.environ.get(name)
        if expanded:
            return expanded
    return value
