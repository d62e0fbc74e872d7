from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ints stay ints, decimals stay floats
Number = Union[int, float]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# =========================
# Assets
# =========================

class AssetRecord(_Record):
    name: str
    exists: bool
    x: Number
    y: Number
    flip_h: Optional[int] = Field(default=None, alias="flipH")
    source: Optional[str] = None


AssetDictionary = Dict[str, AssetRecord]


# =========================
# Logic / index
# =========================

class Dimensions(_Record):
    x: Number
    y: Number
    z: Number


class LogicRecord(_Record):
    dimensions: Dimensions
    # source order, duplicates kept
    directions: List[int] = Field(default_factory=list)


class IndexRecord(_Record):
    type: str
    visualization: str
    logic: str


# =========================
# Visualization
# =========================

class LayerMeta(_Record):
    """Rendering hints of one layer. Fields missing in the XML stay None."""

    layer_id: int = Field(alias="layerId")
    ink: Optional[str] = None
    alpha: Optional[Number] = None
    ignore_mouse: Optional[int] = Field(default=None, alias="ignoreMouse")
    z: Optional[Number] = None


class ColorLayerRef(_Record):
    layer_id: int = Field(alias="layerId")
    color: str


class AnimationLayer(_Record):
    layer_id: int = Field(alias="layerId")
    frame_sequence: List[List[int]] = Field(default_factory=list, alias="frameSequence")


class AnimationDef(_Record):
    id: int
    # declared for the client, not read from the XML
    transition_to: Optional[int] = Field(default=None, alias="transitionTo")
    layers: List[AnimationLayer] = Field(default_factory=list)


class VisualizationVariant(_Record):
    """One size-specific rendering definition.

    ``directions`` is seeded with an empty list per declared direction id;
    per-direction layer overrides are not read from the XML.
    """

    angle: int
    layer_count: int = Field(alias="layerCount")
    size: int
    directions: Dict[int, List[LayerMeta]] = Field(default_factory=dict)
    layers: Optional[List[LayerMeta]] = None
    colors: Optional[Dict[int, List[ColorLayerRef]]] = None
    animations: Optional[Dict[int, AnimationDef]] = None


ICON_SIZE = 1
SMALL_SIZE = 32
LARGE_SIZE = 64


class VisualizationSet(_Record):
    """Variants keyed by pixel size. Icon and large are mandatory."""

    icon: VisualizationVariant = Field(alias="1")
    small: Optional[VisualizationVariant] = Field(default=None, alias="32")
    large: VisualizationVariant = Field(alias="64")

    def by_size(self) -> Dict[int, VisualizationVariant]:
        sizes = {ICON_SIZE: self.icon, LARGE_SIZE: self.large}
        if self.small is not None:
            sizes[SMALL_SIZE] = self.small
        return dict(sorted(sizes.items()))


# =========================
# furni.json
# =========================

class FurniOffset(_Record):
    """Normalized description of one furniture item."""

    assets: AssetDictionary
    logic: LogicRecord
    visualization: VisualizationSet
    index: IndexRecord
