"""Furni XML extractors."""

from src.extractors.assets import extract_assets, generate_assets_from_xml
from src.extractors.index import extract_index, generate_index_from_xml
from src.extractors.logic import extract_logic, generate_logic_from_xml
from src.extractors.visualization import extract_visualization, generate_visualization_from_xml

__all__ = [
    "extract_assets",
    "extract_index",
    "extract_logic",
    "extract_visualization",
    "generate_assets_from_xml",
    "generate_index_from_xml",
    "generate_logic_from_xml",
    "generate_visualization_from_xml",
]
