"""
Runtime settings for the dropdown picker.

Everything is read from environment variables so a run can be recalibrated
for a different screen density without touching code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# Rows in the asset pickers put the subtitle line ~27 units under the name
# line and the next row ~37 units under it; 32 sits between the two.
CLUSTER_GAP = 32

PLACEHOLDER_PREFIX = "select"
PATH_DELIMITER = ">"

# Buttons that live next to picker fields but never carry a selected value.
ACTION_LABELS = frozenset({
    "cancel",
    "done",
    "save",
    "create",
    "clear",
    "close",
    "back",
    "edit",
    "delete",
})


def _bool_env(name: str, default: bool) -> bool:
    v = os.environ.get(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _int_env(name: str, default: int) -> int:
    v = os.environ.get(name)
    try:
        return int(v) if v is not None else default
    except Exception:
        return default


def _str_env(name: str, default: str) -> str:
    v = os.environ.get(name)
    return v if v else default


@dataclass(frozen=True)
class PickerConfig:
    cluster_gap: int = CLUSTER_GAP
    settle_ms: int = 500
    verify_attempts: int = 3
    verify_backoff_ms: int = 500
    anchor_window: int = 80
    scroll_swipes: int = 3
    path_delimiter: str = PATH_DELIMITER
    placeholder_prefix: str = PLACEHOLDER_PREFIX
    action_labels: frozenset = field(default=ACTION_LABELS)

    @classmethod
    def from_env(cls) -> "PickerConfig":
        # A negative gap splits equal-y nodes; zero attempts never reads back.
        return cls(
            cluster_gap=max(0, _int_env("PICKER_CLUSTER_GAP", CLUSTER_GAP)),
            settle_ms=_int_env("PICKER_SETTLE_MS", 500),
            verify_attempts=max(1, _int_env("PICKER_VERIFY_ATTEMPTS", 3)),
            verify_backoff_ms=_int_env("PICKER_VERIFY_BACKOFF_MS", 500),
            anchor_window=_int_env("PICKER_ANCHOR_WINDOW", 80),
            scroll_swipes=_int_env("PICKER_SCROLL_SWIPES", 3),
            path_delimiter=_str_env("PICKER_PATH_DELIMITER", PATH_DELIMITER),
        )

    def is_placeholder(self, text: str) -> bool:
        return (text or "").strip().lower().startswith(self.placeholder_prefix)

    def is_action_label(self, text: str) -> bool:
        return (text or "").strip().lower() in self.action_labels


APP_PACKAGE = _str_env("APP_PACKAGE", "com.egalvanic.zplatform")
VERBOSE_LOGS = _bool_env("VERBOSE_LOGS", False)
