"""Stable furni.json-shaped payload of a FurniOffset."""

from __future__ import annotations

from typing import Any

from src.schema import FurniOffset


def _stable_value(value: Any):
    if isinstance(value, (list, tuple)):
        return [_stable_value(item) for item in value]
    if isinstance(value, dict):
        normalized: dict[str, Any] = {}
        for key in sorted(value, key=_key_order):
            normalized[str(key)] = _stable_value(value[key])
        return normalized
    return value


def _key_order(key: Any) -> tuple:
    # numeric ids sort numerically, and ahead of names
    try:
        return (0, int(key), "")
    except (TypeError, ValueError):
        return (1, 0, str(key))


def offset_to_payload(offset: FurniOffset) -> dict[str, Any]:
    """Client key names, optional fields omitted, mapping keys as strings."""
    raw = offset.model_dump(by_alias=True, exclude_none=True)
    return {
        "assets": _stable_value(raw["assets"]),
        "logic": _stable_value(raw["logic"]),
        "visualization": _stable_value(raw["visualization"]),
        "index": _stable_value(raw["index"]),
    }
