"""
Open → reconstruct → select → verify, for one picker field at a time.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from picker.config import PickerConfig
from picker.query import BUTTON, ElementQuery, Predicate
from picker.reconstruct import ListReconstructor, Window
from picker.selection import SelectionEngine, SelectionResult
from picker.verifier import SectionBounds, SelectionVerifier


class PickError(RuntimeError):
    """Raised when a dropdown could not be opened at all."""


@dataclass(frozen=True)
class DropdownField:
    title: str
    # None when the list is already showing (a nested level of a drill-down).
    opener: Optional[str]
    window: Window
    block_list: Tuple[str, ...] = ()
    section: Optional[SectionBounds] = None


@dataclass(frozen=True)
class PickOutcome:
    result: SelectionResult
    verified_name: Optional[str]

    @property
    def name(self) -> Optional[str]:
        return self.verified_name or self.result.chosen_label

    @property
    def confirmed(self) -> bool:
        return self.result.ok and self.verified_name is not None


class DropdownPicker:
    def __init__(self, query: ElementQuery, config: Optional[PickerConfig] = None, rng: Optional[random.Random] = None):
        self.query = query
        self.config = config or query.config
        self.reconstructor = ListReconstructor(query, self.config)
        self.engine = SelectionEngine(query, self.config, rng)
        self.verifier = SelectionVerifier(query, self.config)

    def open(self, field: DropdownField):
        predicate = Predicate(kind=BUTTON, text=field.opener)
        opener = self.query.find(predicate)
        if opener is None or not opener.click():
            opener = self.query.scroll_into_view(predicate)
            if opener is None or not opener.click():
                raise PickError(f'Could not open "{field.title}" via "{field.opener}"')
        logging.info(f'[FLOW] opened "{field.title}"')
        time.sleep(self.config.settle_ms / 1000.0)

    def _finish(self, field: DropdownField, result: SelectionResult) -> PickOutcome:
        if not result.ok:
            # Leave the form usable for a retry at a higher level.
            self.query.device.back()
            return PickOutcome(result=result, verified_name=None)
        name = self.verifier.verify_selection(field.title, field.section)
        if name and name != result.chosen_label:
            logging.info(f'[FLOW] {field.title}: clicked "{result.chosen_label}" but field shows "{name}"')
        return PickOutcome(result=result, verified_name=name)

    def pick_by_index(self, field: DropdownField, index: int) -> PickOutcome:
        self.open(field)
        entries = self.reconstructor.reconstruct(field.window, field.block_list)
        return self._finish(field, self.engine.select_by_index(entries, index))

    def pick_random(
        self,
        field: DropdownField,
        exclude_indices: Iterable[int] = (),
        exclude_names: Iterable[str] = (),
    ) -> PickOutcome:
        self.open(field)
        entries = self.reconstructor.reconstruct(field.window, field.block_list)
        result = self.engine.select_random_sibling(entries, exclude_indices, exclude_names)
        return self._finish(field, result)

    def pick_source_and_target(
        self, source: DropdownField, target: DropdownField
    ) -> Tuple[PickOutcome, Optional[PickOutcome]]:
        """Pick a source, then a target that is not the same item."""
        first = self.pick_random(source)
        if not first.result.ok:
            return first, None
        exclude: Sequence[str] = [n for n in {first.result.chosen_label, first.verified_name} if n]
        second = self.pick_random(target, exclude_names=exclude)
        return first, second

    def pick_location(self, levels: Sequence[DropdownField]) -> List[PickOutcome]:
        """Drill down a hierarchical picker (building > floor > room).

        Each level takes its first entry; tapping it shows the next
        level in the same sheet. Only the last level is read back, since the
        field shows the full path once the sheet closes. Stops at the first
        level that fails.
        """
        outcomes: List[PickOutcome] = []
        for depth, level in enumerate(levels):
            if level.opener is not None:
                self.open(level)
            entries = self.reconstructor.reconstruct(level.window, level.block_list)
            result = self.engine.select_by_index(entries, 0)
            if not result.ok or depth == len(levels) - 1:
                outcomes.append(self._finish(level, result))
                break
            logging.info(f'[FLOW] {level.title} level {depth + 1}: "{result.chosen_label}"')
            outcomes.append(PickOutcome(result=result, verified_name=None))
        return outcomes
