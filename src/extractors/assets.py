"""Asset manifest XML -> AssetDictionary."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from pydantic import ValidationError

from src.extractors.result import ExtractResult, FailureKind
from src.extractors.xml_tree import XmlParseError, as_list, child, load_xml_tree
from src.schema import AssetDictionary, AssetRecord

COMPONENT = "assets"


def asset_exists(name: str, folder_assets: Iterable[str]) -> bool:
    """True when any listed filename contains ``name``.

    Substring matching: ``chair`` also matches ``chair_2.png``.
    """
    return any(name in filename for filename in folder_assets)


def extract_assets(raw_xml: str, folder_assets: Sequence[str]) -> ExtractResult[AssetDictionary]:
    try:
        parsed = load_xml_tree(raw_xml)
    except XmlParseError as exc:
        return ExtractResult.fail(FailureKind.parse_failure, COMPONENT, reason=str(exc))

    if "assets" not in parsed:
        return ExtractResult.fail(
            FailureKind.structural_mismatch,
            COMPONENT,
            path="assets",
            reason=f"unexpected root element {next(iter(parsed))!r}",
        )

    filenames = [str(filename) for filename in folder_assets]
    dictionary: Dict[str, AssetRecord] = {}
    for position, raw_asset in enumerate(as_list(child(parsed, "assets", "asset"))):
        name = child(raw_asset, "name")
        source = child(raw_asset, "source")
        try:
            record = AssetRecord(
                name=str(name) if name is not None else None,
                exists=name is not None and asset_exists(str(name), filenames),
                x=child(raw_asset, "x"),
                y=child(raw_asset, "y"),
                flip_h=child(raw_asset, "flipH"),
                source=str(source) if source is not None else None,
            )
        except ValidationError as exc:
            return ExtractResult.fail(
                FailureKind.structural_mismatch,
                COMPONENT,
                path=f"assets.asset[{position}]",
                reason=str(exc),
            )
        # later duplicates win
        dictionary[record.name] = record
    return ExtractResult.success(dictionary)


def generate_assets_from_xml(raw_xml: str, folder_assets: Sequence[str]) -> Optional[AssetDictionary]:
    return extract_assets(raw_xml, folder_assets).unwrap_or_none()
