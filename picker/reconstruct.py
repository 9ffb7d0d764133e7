"""
Rebuild the rows of an open dropdown from loose text nodes.

The accessibility dump of a picker is a flat bag of text elements: a row is
usually a name line with a type/subtitle line under it, and nothing in the
tree says which lines belong together. Rows are recovered by walking the
text top to bottom and starting a new row whenever the vertical gap to the
previous line exceeds the cluster gap (see config.CLUSTER_GAP). The first
line of each row is its anchor, which is what gets tapped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from picker.config import CLUSTER_GAP, PATH_DELIMITER, PickerConfig
from picker.query import TEXT, ElementQuery, Predicate, ScreenElement


@dataclass(frozen=True)
class Window:
    """Coordinate window for candidate nodes. No y_max admits rows below the fold."""

    x_min: int
    x_max: int
    y_min: int
    y_max: Optional[int] = None

    def contains(self, el: ScreenElement) -> bool:
        if not (self.x_min <= el.x <= self.x_max):
            return False
        if el.y < self.y_min:
            return False
        if self.y_max is not None and el.y > self.y_max:
            return False
        return True


@dataclass
class Entry:
    index: int
    anchor: ScreenElement
    label: str
    details: List[str] = field(default_factory=list)

    @property
    def y(self) -> int:
        return self.anchor.y


def is_blocked(text: str, block_list: Iterable[str]) -> bool:
    """True when `text` equals a block-list label or is a prefix of one (case-insensitive)."""
    t = (text or "").strip().lower()
    if not t:
        return True
    for blocked in block_list:
        b = blocked.strip().lower()
        if t == b or b.startswith(t):
            return True
    return False


def filter_raw_nodes(
    elements: Iterable[ScreenElement],
    window: Window,
    block_list: Sequence[str] = (),
    path_delimiter: str = PATH_DELIMITER,
) -> List[ScreenElement]:
    """Keep text nodes inside the window that are neither labels nor breadcrumbs."""
    nodes = []
    for el in elements:
        if not window.contains(el):
            continue
        text = (el.text or "").strip()
        if is_blocked(text, block_list):
            continue
        if path_delimiter and path_delimiter in text:
            continue
        nodes.append(el)
    return nodes


def cluster_entries(nodes: Iterable[ScreenElement], gap: int = CLUSTER_GAP) -> List[Entry]:
    """Group nodes into rows; a gap strictly larger than `gap` starts a new row."""
    ordered = sorted(nodes, key=lambda n: n.y)
    entries: List[Entry] = []
    prev: Optional[ScreenElement] = None
    for node in ordered:
        text = (node.text or "").strip()
        if prev is None or node.y - prev.y > gap:
            entries.append(Entry(index=len(entries), anchor=node, label=text))
        else:
            entries[-1].details.append(text)
        prev = node
    return entries


class ListReconstructor:
    def __init__(self, query: ElementQuery, config: Optional[PickerConfig] = None):
        self.query = query
        self.config = config or query.config

    def reconstruct(self, window: Window, block_list: Sequence[str] = ()) -> List[Entry]:
        elements = self.query.query(Predicate(kind=TEXT))
        nodes = filter_raw_nodes(elements, window, block_list, self.config.path_delimiter)
        entries = cluster_entries(nodes, self.config.cluster_gap)
        logging.info(f"[RECONSTRUCT] {len(nodes)} text nodes -> {len(entries)} entries")
        for e in entries:
            logging.debug(f"[RECONSTRUCT]   {e.index}: {e.label!r} y={e.y} details={e.details}")
        return entries
