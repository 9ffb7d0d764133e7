"""
Accessibility-tree queries on top of the adb device.

Every query re-dumps the tree: the hierarchy mutates continuously while
dropdowns animate, so elements are never cached between calls. "Not found"
is an empty list or None; only a dump that cannot be read at all raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from adb.device import AndroidDevice

from picker.android_helpers import is_xml_unusable, iter_node_attrs, parse_bounds, safe_parse_xml
from picker.config import PickerConfig

TEXT = "text"
BUTTON = "button"


class UiDumpUnavailable(RuntimeError):
    """Raised when the device returns no usable accessibility dump."""


@dataclass
class ScreenElement:
    text: Optional[str]
    x: int
    y: int
    width: int = 0
    height: int = 0
    enabled: bool = True
    visible: bool = True
    cls: str = ""
    clickable: bool = False
    _query: Optional["ElementQuery"] = field(default=None, repr=False, compare=False)

    @property
    def position(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def center(self) -> Tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2

    @property
    def is_text(self) -> bool:
        return self.cls.endswith("TextView")

    @property
    def is_button(self) -> bool:
        return self.clickable or self.cls.endswith("Button")

    def click(self) -> bool:
        """Tap the element. False means it was not interactable."""
        if self._query is None:
            return False
        return self._query.click(self)


@dataclass(frozen=True)
class Predicate:
    """Element filter. Unset fields match anything."""

    kind: Optional[str] = None
    text: Optional[str] = None
    contains: Optional[str] = None
    visible: Optional[bool] = None
    enabled: Optional[bool] = None

    def matches(self, el: ScreenElement) -> bool:
        if self.kind == TEXT and not el.is_text:
            return False
        if self.kind == BUTTON and not el.is_button:
            return False
        value = (el.text or "").strip()
        if self.text is not None and value != self.text.strip():
            return False
        if self.contains is not None and self.contains.lower() not in value.lower():
            return False
        if self.visible is not None and el.visible != self.visible:
            return False
        if self.enabled is not None and el.enabled != self.enabled:
            return False
        return True


def parse_elements(xml_text: str, query: Optional["ElementQuery"] = None) -> List[ScreenElement]:
    """Turn a uiautomator dump into ScreenElements, in document order."""
    if is_xml_unusable(xml_text):
        raise UiDumpUnavailable("UI dump was empty (uiautomator dump failed)")
    root = safe_parse_xml(xml_text)
    if root is None:
        raise UiDumpUnavailable("UI dump was not valid XML")

    elements: List[ScreenElement] = []
    for attrs in iter_node_attrs(root):
        rect = parse_bounds(attrs.get("bounds") or "")
        if rect is None:
            continue
        left, top, right, bottom = rect
        text = (attrs.get("text") or "").strip() or (attrs.get("content-desc") or "").strip()
        elements.append(
            ScreenElement(
                text=text or None,
                x=left,
                y=top,
                width=right - left,
                height=bottom - top,
                enabled=attrs.get("enabled") != "false",
                visible=attrs.get("visible-to-user", "true") != "false",
                cls=attrs.get("class") or "",
                clickable=attrs.get("clickable") == "true",
                _query=query,
            )
        )
    return elements


class ElementQuery:
    """Find, tap and scroll accessibility elements on one device session."""

    def __init__(self, device: AndroidDevice, config: Optional[PickerConfig] = None):
        self.device = device
        self.config = config or PickerConfig()

    def elements(self) -> List[ScreenElement]:
        return parse_elements(self.device.ui_dump(), query=self)

    def query(self, predicate: Predicate) -> List[ScreenElement]:
        return [el for el in self.elements() if predicate.matches(el)]

    def find(self, predicate: Predicate) -> Optional[ScreenElement]:
        found = self.query(predicate)
        return found[0] if found else None

    def on_screen(self, el: ScreenElement) -> bool:
        width, height = self.device.screen_size()
        cx, cy = el.center
        return 0 <= cx < width and 0 <= cy < height

    def click(self, el: ScreenElement) -> bool:
        if not el.enabled or not el.visible or not self.on_screen(el):
            logging.debug(f'[QUERY] click rejected for "{el.text}" at {el.position}')
            return False
        cx, cy = el.center
        self.device.tap(cx, cy)
        return True

    def scroll_into_view(self, predicate: Predicate) -> Optional[ScreenElement]:
        """Swipe until an element matching `predicate` is on screen.

        Gives up after `config.scroll_swipes` swipes and returns None.
        """
        width, height = self.device.screen_size()
        x = width // 2
        low, high = int(height * 0.7), int(height * 0.4)

        for attempt in range(self.config.scroll_swipes + 1):
            candidates = self.query(predicate)
            for el in candidates:
                if el.visible and self.on_screen(el):
                    return el
            if attempt == self.config.scroll_swipes:
                break
            # Content above the viewport needs a downward swipe, anything else upward.
            if candidates and candidates[0].center[1] < 0:
                self.device.swipe(x, high, x, low)
            else:
                self.device.swipe(x, low, x, high)
        logging.debug(f"[QUERY] scroll_into_view gave up for {predicate}")
        return None
