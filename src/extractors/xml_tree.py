"""Generic XML tree loading and the helpers every extractor shares.

The tree mirrors what furni XML tooling traditionally hands to the client
code: attributes and child elements collapse into one mapping per element,
numeric values are coerced, and a child element that occurs once is a bare
node while a repeated one is a list. ``as_list`` erases that ambiguity.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Any, List, Optional, TypeVar, Union

T = TypeVar("T")

TEXT_KEY = "#text"

_INT_RE = re.compile(r"^[-+]?(0|[1-9]\d*)$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+)$")


class XmlParseError(ValueError):
    """Raised when text cannot be turned into an XML tree."""


def coerce_scalar(text: str) -> Union[int, float, str]:
    """Turn numeric attribute/text values into numbers.

    Only lossless conversions are made: ``str()`` of the result always gives
    the source text back, so ``1.10``, ``+5`` or ``007`` stay strings, as do
    colors like ``000000``. Exponent notation is not read, so ``1E5555``
    stays a string too. Typed fields downstream parse such strings.
    """
    value = text.strip()
    try:
        if _INT_RE.match(value):
            number: Union[int, float] = int(value)
        elif _FLOAT_RE.match(value):
            number = float(value)
        else:
            return text
    except ValueError:
        # int() refuses very long digit strings
        return text
    return number if str(number) == value else text


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _add_child(node: dict, key: str, value: Any) -> None:
    if key not in node:
        node[key] = value
        return
    existing = node[key]
    if isinstance(existing, list):
        existing.append(value)
    else:
        node[key] = [existing, value]


def _convert(element: ET.Element) -> Any:
    node: dict[str, Any] = {}
    for name, raw in element.attrib.items():
        node[_local_name(name)] = coerce_scalar(raw)
    for sub in element:
        # comments and processing instructions carry a callable tag
        if not isinstance(sub.tag, str):
            continue
        _add_child(node, _local_name(sub.tag), _convert(sub))

    text = (element.text or "").strip()
    if not node:
        return coerce_scalar(text) if text else ""
    if text:
        node[TEXT_KEY] = coerce_scalar(text)
    return node


def load_xml_tree(raw_xml: Any) -> dict:
    """Parse XML text into ``{root_tag: node}``.

    Raises XmlParseError for non-text, blank or malformed input.
    """
    if not isinstance(raw_xml, str):
        raise XmlParseError(f"expected XML text, got {type(raw_xml).__name__}")
    text = raw_xml.lstrip("\ufeff").strip()
    if not text:
        raise XmlParseError("empty XML document")
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise XmlParseError(str(exc)) from exc
    return {_local_name(root.tag): _convert(root)}


def parse_xml(raw_xml: Any) -> Optional[dict]:
    """Failure-value variant of load_xml_tree."""
    try:
        return load_xml_tree(raw_xml)
    except XmlParseError:
        return None


def as_list(value: Union[T, List[T], None]) -> List[T]:
    """Normalize a singleton-or-list tree value to a list."""
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def child(node: Any, *path: str) -> Any:
    """Walk ``path`` through nested mappings; None when any step is missing."""
    current = node
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current
