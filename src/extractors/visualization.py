"""Visualization XML -> VisualizationSet.

Each ``<visualization>`` entry becomes a VisualizationVariant; the set keeps
the first variant found for the icon (1), small (32) and large (64) sizes.
Icon and large are mandatory, small is optional.

Two parts of the client model are declared but not read from the XML:
per-direction layer overrides (``directions`` only gets an empty list per
declared id) and ``AnimationDef.transition_to``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from src.extractors.result import ExtractResult, FailureKind
from src.extractors.xml_tree import XmlParseError, as_list, child, load_xml_tree
from src.schema import (
    ICON_SIZE,
    LARGE_SIZE,
    SMALL_SIZE,
    AnimationDef,
    AnimationLayer,
    ColorLayerRef,
    LayerMeta,
    VisualizationSet,
    VisualizationVariant,
)

COMPONENT = "visualization"

_LAYER_OPTIONAL_FIELDS = {
    "ink": "ink",
    "alpha": "alpha",
    "ignoreMouse": "ignore_mouse",
    "z": "z",
}


def _raw_visualizations(root: Any) -> List[Any]:
    graphics = child(root, "graphics")
    if graphics is not None:
        return as_list(child(graphics, "visualization"))
    return as_list(child(root, "visualization"))


def _directions(raw: Any) -> Dict[int, List[LayerMeta]]:
    directions: Dict[int, List[LayerMeta]] = {}
    for raw_direction in as_list(child(raw, "directions", "direction")):
        directions[child(raw_direction, "id")] = []
    return directions


def _colors(raw: Any) -> Dict[int, List[ColorLayerRef]]:
    colors: Dict[int, List[ColorLayerRef]] = {}
    for raw_color in as_list(child(raw, "colors", "color")):
        color_layers: List[ColorLayerRef] = []
        for raw_color_layer in as_list(child(raw_color, "colorLayer")):
            color = child(raw_color_layer, "color")
            color_layers.append(
                ColorLayerRef(
                    layer_id=child(raw_color_layer, "id"),
                    color=str(color) if color is not None else None,
                )
            )
        colors[child(raw_color, "id")] = color_layers
    return colors


def _frame_sequences(raw_animation_layer: Any) -> List[List[int]]:
    return [
        [child(raw_frame, "id") for raw_frame in as_list(child(raw_sequence, "frame"))]
        for raw_sequence in as_list(child(raw_animation_layer, "frameSequence"))
    ]


def _animations(raw: Any) -> Dict[int, AnimationDef]:
    animations: Dict[int, AnimationDef] = {}
    for raw_animation in as_list(child(raw, "animations", "animation")):
        layers = [
            AnimationLayer(
                layer_id=child(raw_animation_layer, "id"),
                frame_sequence=_frame_sequences(raw_animation_layer),
            )
            for raw_animation_layer in as_list(child(raw_animation, "animationLayer"))
        ]
        animation_id = child(raw_animation, "id")
        animations[animation_id] = AnimationDef(id=animation_id, layers=layers)
    return animations


def _layer_meta(raw_layer: Any) -> LayerMeta:
    fields: Dict[str, Any] = {"layer_id": child(raw_layer, "id")}
    for xml_name, field_name in _LAYER_OPTIONAL_FIELDS.items():
        value = child(raw_layer, xml_name)
        if value is not None:
            fields[field_name] = str(value) if field_name == "ink" else value
    return LayerMeta(**fields)


def build_variant(raw: Any) -> VisualizationVariant:
    """Map one raw ``<visualization>`` node. Raises ValidationError."""
    fields: Dict[str, Any] = {
        "angle": child(raw, "angle"),
        "layer_count": child(raw, "layerCount"),
        "size": child(raw, "size"),
        "directions": _directions(raw),
    }
    if child(raw, "colors", "color") is not None:
        fields["colors"] = _colors(raw)
    if child(raw, "animations", "animation") is not None:
        fields["animations"] = _animations(raw)
    if child(raw, "layers", "layer") is not None:
        fields["layers"] = [_layer_meta(raw_layer) for raw_layer in as_list(child(raw, "layers", "layer"))]
    return VisualizationVariant(**fields)


def _first_of_size(variants: List[VisualizationVariant], size: int) -> Optional[VisualizationVariant]:
    return next((variant for variant in variants if variant.size == size), None)


def extract_visualization(raw_xml: str) -> ExtractResult[VisualizationSet]:
    try:
        parsed = load_xml_tree(raw_xml)
    except XmlParseError as exc:
        return ExtractResult.fail(FailureKind.parse_failure, COMPONENT, reason=str(exc))

    root = parsed.get("visualizationData")
    if root is None:
        return ExtractResult.fail(
            FailureKind.structural_mismatch,
            COMPONENT,
            path="visualizationData",
            reason="visualizationData element not found",
        )

    variants: List[VisualizationVariant] = []
    for position, raw in enumerate(_raw_visualizations(root)):
        try:
            variants.append(build_variant(raw))
        except ValidationError as exc:
            return ExtractResult.fail(
                FailureKind.structural_mismatch,
                COMPONENT,
                path=f"visualizationData.visualization[{position}]",
                reason=str(exc),
            )

    icon = _first_of_size(variants, ICON_SIZE)
    small = _first_of_size(variants, SMALL_SIZE)
    large = _first_of_size(variants, LARGE_SIZE)
    if icon is None or large is None:
        missing = [str(size) for size, found in ((ICON_SIZE, icon), (LARGE_SIZE, large)) if found is None]
        return ExtractResult.fail(
            FailureKind.structural_mismatch,
            COMPONENT,
            path="visualizationData.visualization",
            reason=f"missing size variant(s): {', '.join(missing)}",
        )
    return ExtractResult.success(VisualizationSet(icon=icon, small=small, large=large))


def generate_visualization_from_xml(raw_xml: str) -> Optional[VisualizationSet]:
    return extract_visualization(raw_xml).unwrap_or_none()
