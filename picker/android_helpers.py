"""
Parsing helpers for uiautomator dumps.

Kept apart from the query layer so the coordinate parsing can be tested on
plain XML strings without a device.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Iterator, Optional, Tuple

__all__ = [
    "is_xml_unusable",
    "safe_parse_xml",
    "parse_bounds",
    "iter_node_attrs",
]

_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")


def is_xml_unusable(xml: str) -> bool:
    """Very small guard for empty/garbled uiautomator dumps."""
    if not xml:
        return True
    xml = xml.strip()
    if len(xml) < 50:
        return True
    if "<node" not in xml:
        return True
    return False


def safe_parse_xml(xml_text: str) -> Optional[ET.Element]:
    """Returns None for blank dumps or parse errors."""
    if not xml_text:
        return None
    try:
        return ET.fromstring(xml_text)
    except ET.ParseError:
        return None


def parse_bounds(bounds: str) -> Optional[Tuple[int, int, int, int]]:
    """Convert "[l,t][r,b]" into (left, top, right, bottom)."""
    m = _BOUNDS_RE.search(bounds or "")
    if not m:
        return None
    left, top, right, bottom = map(int, m.groups())
    return left, top, right, bottom


def iter_node_attrs(root: ET.Element) -> Iterator[dict]:
    """Yield the attribute dict of every <node>, in document order."""
    for el in root.iter("node"):
        yield el.attrib
