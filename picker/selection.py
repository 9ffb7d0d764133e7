"""
Click a reconstructed entry, either by index or at random among siblings.

Selection never raises for expected UI outcomes. A failure comes back as a
SelectionResult with chosen_index == -1 and a FailureKind, so the caller can
re-open the dropdown and reconstruct instead of reusing a stale list.
"""

from __future__ import annotations

import enum
import logging
import random
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from picker.config import PickerConfig
from picker.query import TEXT, ElementQuery, Predicate
from picker.reconstruct import Entry


class FailureKind(enum.Enum):
    NO_ENTRIES = "no_entries"
    NO_VALID_CANDIDATE = "no_valid_candidate"
    CLICK_REJECTED = "click_rejected"


@dataclass(frozen=True)
class SelectionResult:
    chosen_index: int
    chosen_label: Optional[str]
    failure: Optional[FailureKind] = None
    # Set when an out-of-range index was replaced by the first visible entry.
    fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(cls, kind: FailureKind) -> "SelectionResult":
        return cls(chosen_index=-1, chosen_label=None, failure=kind)


class SelectionEngine:
    def __init__(self, query: ElementQuery, config: Optional[PickerConfig] = None, rng: Optional[random.Random] = None):
        self.query = query
        self.config = config or query.config
        self.rng = rng or random.Random()
        self._last_selected_label: Optional[str] = None

    def get_last_selected_label(self) -> Optional[str]:
        return self._last_selected_label

    def _settle(self):
        time.sleep(self.config.settle_ms / 1000.0)

    def _visible(self, el) -> bool:
        return el.visible and self.query.on_screen(el)

    def _click_entry(self, entry: Entry) -> bool:
        """Click the anchor; on rejection scroll its label into view and retry once."""
        if entry.anchor.click():
            return True
        logging.info(f'[SELECT] "{entry.label}" not interactable, scrolling into view')
        predicate = Predicate(kind=TEXT, text=entry.label)
        target = self.query.scroll_into_view(predicate)
        if target is None:
            return False
        # Same label elsewhere on screen: keep the one in the anchor's column.
        same_label = [target] + [el for el in self.query.query(predicate) if el is not target and self._visible(el)]
        target = min(same_label, key=lambda el: abs(el.x - entry.anchor.x))
        return target.click()

    def select_by_index(self, entries: Sequence[Entry], target_index: int) -> SelectionResult:
        if not entries:
            logging.info("[SELECT] no entries to select from")
            return SelectionResult.failed(FailureKind.NO_ENTRIES)

        fallback = False
        if not 0 <= target_index < len(entries):
            # Kept for parity with the existing suites: this silently picks
            # something other than what was asked for, flagged via `fallback`.
            requested = target_index
            visible = [i for i, e in enumerate(entries) if self._visible(e.anchor)]
            target_index = visible[0] if visible else 0
            logging.warning(
                f"[SELECT] index {requested} out of range ({len(entries)} entries), falling back to {target_index}"
            )
            fallback = True

        entry = entries[target_index]
        if not self._click_entry(entry):
            return SelectionResult.failed(FailureKind.CLICK_REJECTED)
        self._settle()
        logging.info(f'[SELECT] index {target_index}: "{entry.label}"')
        return SelectionResult(chosen_index=target_index, chosen_label=entry.label, fallback=fallback)

    def candidate_indices(
        self,
        entries: Sequence[Entry],
        exclude_indices: Iterable[int] = (),
        exclude_names: Iterable[str] = (),
    ) -> list[int]:
        """Indices eligible for sibling selection. Index 0 is never eligible."""
        skip_idx = set(exclude_indices)
        skip_names = {n.strip() for n in exclude_names if n}
        return [
            i for i in range(1, len(entries))
            if i not in skip_idx and entries[i].label.strip() not in skip_names
        ]

    def select_random_sibling(
        self,
        entries: Sequence[Entry],
        exclude_indices: Iterable[int] = (),
        exclude_names: Iterable[str] = (),
    ) -> SelectionResult:
        if not entries:
            logging.info("[SELECT] no entries to select from")
            return SelectionResult.failed(FailureKind.NO_ENTRIES)

        candidates = self.candidate_indices(entries, exclude_indices, exclude_names)
        if not candidates:
            logging.info(f"[SELECT] every sibling excluded ({len(entries)} entries)")
            return SelectionResult.failed(FailureKind.NO_VALID_CANDIDATE)

        index = self.rng.choice(candidates)
        entry = entries[index]
        if not self._click_entry(entry):
            logging.info(f'[SELECT] click on "{entry.label}" rejected after scroll')
            return SelectionResult.failed(FailureKind.CLICK_REJECTED)

        self._settle()
        self._last_selected_label = entry.label
        logging.info(f'[SELECT] random sibling {index}/{len(entries) - 1}: "{entry.label}"')
        return SelectionResult(chosen_index=index, chosen_label=entry.label)
