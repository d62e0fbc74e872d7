"""Structured conversion events and the sinks that receive them."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, Protocol


class Severity(IntEnum):
    INFO = 0
    WARN = 1
    ERROR = 2


STAGES = frozenset({"parse", "extract", "select", "assemble"})
SOURCES = frozenset({"xml", "folder", "computed"})
COMPONENTS = frozenset({"assets", "logic", "index", "visualization", "offset"})
DEFAULT_STAGE = "assemble"
DEFAULT_SOURCE = "computed"
DEFAULT_COMPONENT = "offset"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Event:
    """One diagnostics record. Field order is the JSONL column order."""

    ts: str
    run_id: str
    stage: str
    component: str
    code: str
    severity: int
    path: str
    source: str
    input_value: Any
    resolved_value: Any
    reason: str
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _pick(value: Any, allowed: frozenset, default: str) -> str:
    candidate = value.strip().lower() if isinstance(value, str) else ""
    return candidate if candidate in allowed else default


def _clamp_severity(severity: Any) -> int:
    try:
        value = int(severity)
    except (TypeError, ValueError):
        return int(Severity.INFO)
    return max(int(Severity.INFO), min(int(Severity.ERROR), value))


def make_event(
    *,
    code: str,
    stage: str = DEFAULT_STAGE,
    component: str = DEFAULT_COMPONENT,
    source: str = DEFAULT_SOURCE,
    severity: int = Severity.INFO,
    run_id: str = "",
    path: str = "",
    input_value: Any = None,
    resolved_value: Any = None,
    reason: str = "",
    meta: dict[str, Any] | None = None,
    ts: str = "",
) -> Event:
    """Build an Event, mapping unknown stage/component/source to the defaults.

    Replaced values are kept under ``meta["normalized_from"]``.
    """
    requested = {"stage": stage, "component": component, "source": source}
    resolved = {
        "stage": _pick(stage, STAGES, DEFAULT_STAGE),
        "component": _pick(component, COMPONENTS, DEFAULT_COMPONENT),
        "source": _pick(source, SOURCES, DEFAULT_SOURCE),
    }
    meta_value = dict(meta) if isinstance(meta, dict) else {}
    replaced = {
        key: requested[key]
        for key in requested
        if not isinstance(requested[key], str) or requested[key].strip().lower() != resolved[key]
    }
    if replaced:
        meta_value["normalized_from"] = replaced
        reason = reason or "normalized diagnostics vocabulary"
    return Event(
        ts=ts or utc_now_iso(),
        run_id=run_id,
        code=code,
        severity=_clamp_severity(severity),
        path=path,
        input_value=input_value,
        resolved_value=resolved_value,
        reason=reason,
        meta=meta_value,
        **resolved,
    )


_EVENT_ARGS = frozenset(
    {"stage", "component", "source", "severity", "run_id", "path", "input_value", "resolved_value", "reason", "ts"}
)


def emit_simple(sink: DiagnosticsSink, *, code: str, meta: dict[str, Any] | None = None, **fields: Any) -> Event:
    """Build an event and hand it to ``sink``.

    Keyword arguments that are not Event fields are merged into ``meta``.
    """
    event_fields = {key: fields.pop(key) for key in list(fields) if key in _EVENT_ARGS}
    merged_meta = dict(meta) if isinstance(meta, dict) else {}
    merged_meta.update(fields)
    event = make_event(code=code, meta=merged_meta, **event_fields)
    sink.emit(event)
    return event


class DiagnosticsSink(Protocol):
    def emit(self, event: Event) -> None:
        """Publish one diagnostics event."""


class NoopDiagnosticsSink:
    """Drops every event."""

    def emit(self, event: Event) -> None:
        del event


class JsonlDiagnosticsSink:
    """Append events to a JSONL file, one object per line."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    def emit(self, event: Event) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(event.to_dict(), ensure_ascii=False, sort_keys=True, default=str)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")
