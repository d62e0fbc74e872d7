"""Index XML -> IndexRecord."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from src.extractors.result import ExtractResult, FailureKind
from src.extractors.xml_tree import XmlParseError, child, load_xml_tree
from src.schema import IndexRecord

COMPONENT = "index"


def _text(value) -> Optional[str]:
    return None if value is None else str(value)


def extract_index(raw_xml: str) -> ExtractResult[IndexRecord]:
    try:
        parsed = load_xml_tree(raw_xml)
    except XmlParseError as exc:
        return ExtractResult.fail(FailureKind.parse_failure, COMPONENT, reason=str(exc))

    raw_object = parsed.get("object")
    if raw_object is None:
        return ExtractResult.fail(
            FailureKind.structural_mismatch,
            COMPONENT,
            path="object",
            reason="object element not found",
        )
    try:
        index = IndexRecord(
            logic=_text(child(raw_object, "logic")),
            type=_text(child(raw_object, "type")),
            visualization=_text(child(raw_object, "visualization")),
        )
    except ValidationError as exc:
        return ExtractResult.fail(FailureKind.structural_mismatch, COMPONENT, path="object", reason=str(exc))
    return ExtractResult.success(index)


def generate_index_from_xml(raw_xml: str) -> Optional[IndexRecord]:
    return extract_index(raw_xml).unwrap_or_none()
