"""Logic XML -> LogicRecord."""

from __future__ import annotations

from typing import List, Optional

from pydantic import ValidationError

from src.extractors.result import ExtractResult, FailureKind
from src.extractors.xml_tree import XmlParseError, as_list, child, load_xml_tree
from src.schema import Dimensions, LogicRecord

COMPONENT = "logic"


def extract_logic(raw_xml: str) -> ExtractResult[LogicRecord]:
    try:
        parsed = load_xml_tree(raw_xml)
    except XmlParseError as exc:
        return ExtractResult.fail(FailureKind.parse_failure, COMPONENT, reason=str(exc))

    model = child(parsed, "objectData", "model")
    raw_dimensions = child(model, "dimensions")
    if raw_dimensions is None:
        return ExtractResult.fail(
            FailureKind.structural_mismatch,
            COMPONENT,
            path="objectData.model.dimensions",
            reason="dimensions not found",
        )

    directions: List[int] = []
    if child(model, "directions") is not None:
        for raw_direction in as_list(child(model, "directions", "direction")):
            directions.append(child(raw_direction, "id"))

    try:
        logic = LogicRecord(
            dimensions=Dimensions(
                x=child(raw_dimensions, "x"),
                y=child(raw_dimensions, "y"),
                z=child(raw_dimensions, "z"),
            ),
            directions=directions,
        )
    except ValidationError as exc:
        return ExtractResult.fail(
            FailureKind.structural_mismatch,
            COMPONENT,
            path="objectData.model",
            reason=str(exc),
        )
    return ExtractResult.success(logic)


def generate_logic_from_xml(raw_xml: str) -> Optional[LogicRecord]:
    return extract_logic(raw_xml).unwrap_or_none()
