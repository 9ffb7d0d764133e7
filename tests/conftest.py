"""
Shared fakes for the picker tests: no device, no sleeps.
"""
from typing import Callable, List, Optional

import pytest

from picker.config import PickerConfig
from picker.query import Predicate, ScreenElement

TEXT_CLS = "android.widget.TextView"
BUTTON_CLS = "android.widget.Button"


class FakeDevice:
    def __init__(self):
        self.back_presses = 0

    def back(self):
        self.back_presses += 1


class FakeQuery:
    """In-memory stand-in for ElementQuery.

    `rejected` holds labels whose first click is refused (off-screen);
    `scroll_targets` maps a label to the element scroll_into_view returns.
    """

    def __init__(self, elements: Optional[List[ScreenElement]] = None, config: Optional[PickerConfig] = None):
        self.config = config or PickerConfig(settle_ms=0, verify_backoff_ms=0)
        self.device = FakeDevice()
        self._elements: List[ScreenElement] = []
        self.clicks: List[str] = []
        self.rejected: set = set()
        self.scroll_targets: dict = {}
        self.scroll_calls: List[Predicate] = []
        self.on_click: Optional[Callable[[ScreenElement], None]] = None
        self.set_elements(elements or [])

    def set_elements(self, elements: List[ScreenElement]):
        for el in elements:
            el._query = self
        self._elements = list(elements)

    def elements(self) -> List[ScreenElement]:
        return list(self._elements)

    def query(self, predicate: Predicate) -> List[ScreenElement]:
        return [el for el in self._elements if predicate.matches(el)]

    def find(self, predicate: Predicate) -> Optional[ScreenElement]:
        found = self.query(predicate)
        return found[0] if found else None

    def on_screen(self, el: ScreenElement) -> bool:
        cx, cy = el.center
        return 0 <= cx < 1080 and 0 <= cy < 2400

    def click(self, el: ScreenElement) -> bool:
        if el.text in self.rejected:
            self.rejected.discard(el.text)
            return False
        self.clicks.append(el.text)
        if self.on_click:
            self.on_click(el)
        return True

    def scroll_into_view(self, predicate: Predicate) -> Optional[ScreenElement]:
        self.scroll_calls.append(predicate)
        target = self.scroll_targets.get(predicate.text)
        if target is not None:
            target._query = self
        return target


def text_el(y: int, text: Optional[str], x: int = 100, **kw) -> ScreenElement:
    return ScreenElement(text=text, x=x, y=y, width=400, height=24, cls=TEXT_CLS, **kw)


def button_el(y: int, text: Optional[str], x: int = 100, **kw) -> ScreenElement:
    return ScreenElement(text=text, x=x, y=y, width=800, height=60, cls=BUTTON_CLS, clickable=True, **kw)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda s: None)

