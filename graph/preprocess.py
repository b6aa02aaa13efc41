from __future__ import annotations

import json
from typing import Any, Dict

from .schema import Graph


def load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def normalize_raw_to_graph(raw: Any) -> Graph:
    """Parse an editor graph (dict) into a ``Graph``.

    Also accepts an existing ``Graph`` and pydantic-like objects exposing
    ``model_dump()``. Editor exports that wrap the graph as ``{"graph": {...}}``
    are unwrapped.
    """
    if isinstance(raw, Graph):
        return raw
    if hasattr(raw, "model_dump"):
        raw = raw.model_dump(mode="json", by_alias=True)

    if not isinstance(raw, dict):
        raise ValueError("Flow graph must be a JSON object")

    payload: Dict[str, Any] = raw
    if "nodes" not in payload and isinstance(payload.get("graph"), dict):
        payload = payload["graph"]

    return Graph.model_validate(payload)
