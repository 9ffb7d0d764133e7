"""
Read back what a picker field shows after its dropdown closed.

The driver gives no confirmation that a tap changed anything, and the close
animation keeps the old field value on screen for a moment, so the read-back
is retried a fixed number of times with a fixed backoff.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from picker.config import PickerConfig
from picker.query import ElementQuery


@dataclass(frozen=True)
class SectionBounds:
    """Labels that open and close the form section holding the field value."""

    start_label: str
    end_label: Optional[str] = None


Strategy = Callable[[str, Optional[SectionBounds]], Optional[str]]


def display_name(text: str) -> str:
    """Field buttons render "Name, Type"; the name is what precedes the first comma."""
    return text.split(",", 1)[0].strip()


class SelectionVerifier:
    def __init__(
        self,
        query: ElementQuery,
        config: Optional[PickerConfig] = None,
        strategies: Optional[Sequence[Strategy]] = None,
    ):
        self.query = query
        self.config = config or query.config
        if strategies is None:
            strategies = [self.anchor_relative_scan, self.section_scan]
        self.strategies: List[Strategy] = list(strategies)

    def _is_value_text(self, text: str, labels: Sequence[str]) -> bool:
        t = (text or "").strip()
        if len(t) <= 1:
            return False
        if self.config.is_placeholder(t) or self.config.is_action_label(t):
            return False
        return t.lower() not in {lab.strip().lower() for lab in labels if lab}

    def anchor_relative_scan(self, field_label: str, section: Optional[SectionBounds] = None) -> Optional[str]:
        """Value button directly under the field's title label."""
        elements = self.query.elements()
        wanted = field_label.strip().lower()
        anchor = next(
            (el for el in elements if el.is_text and (el.text or "").strip().lower() == wanted),
            None,
        )
        if anchor is None:
            return None

        top, bottom = anchor.y, anchor.y + self.config.anchor_window
        for el in elements:
            if el is anchor or not el.is_button:
                continue
            if not top <= el.y <= bottom:
                continue
            if self._is_value_text(el.text, [field_label]):
                return display_name(el.text)
        return None

    def section_scan(self, field_label: str, section: Optional[SectionBounds] = None) -> Optional[str]:
        """First plain text between the section's start and end labels."""
        if section is None:
            return None
        labels = [section.start_label, section.end_label, field_label]
        start = section.start_label.strip().lower()
        end = (section.end_label or "").strip().lower()

        inside = False
        for el in self.query.elements():
            if not el.is_text:
                continue
            t = (el.text or "").strip()
            low = t.lower()
            if not inside:
                inside = low == start
                continue
            if end and low == end:
                break
            if self.config.path_delimiter and self.config.path_delimiter in t:
                continue
            if self._is_value_text(t, labels):
                return t
        return None

    def verify_selection(self, field_label: str, section: Optional[SectionBounds] = None) -> Optional[str]:
        """Return the selected name, or None when it could not be confirmed.

        None means the read-back was inconclusive, not that the field is empty.
        """
        attempts = self.config.verify_attempts
        for attempt in range(1, attempts + 1):
            for strategy in self.strategies:
                name = strategy(field_label, section)
                if name:
                    logging.info(f'[VERIFY] {field_label}: "{name}" (attempt {attempt})')
                    return name
            logging.debug(f"[VERIFY] {field_label}: nothing readable on attempt {attempt}/{attempts}")
            if attempt < attempts:
                time.sleep(self.config.verify_backoff_ms / 1000.0)
        logging.info(f"[VERIFY] {field_label}: unconfirmed after {attempts} attempts")
        return None
