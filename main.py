"""
Scenario runner for the picker dropdowns of the asset and connection forms.

Each scenario assumes the form it exercises is already on screen (reaching
it is handled by the navigation suites). A scenario opens a dropdown,
rebuilds its rows from the accessibility dump, selects one and reads the
field back. Results and end screenshots are written under runs/<timestamp>/.

Tool registration for agent-driven runs lives in picker_adk/agent.py.
"""

import json
import os
import logging
from datetime import datetime

from adb.device import AndroidDevice
from picker.config import APP_PACKAGE, VERBOSE_LOGS, PickerConfig, _bool_env
from picker.flows import DropdownField, DropdownPicker, PickError, PickOutcome
from picker.query import ElementQuery, UiDumpUnavailable
from picker.reconstruct import Window
from picker.verifier import SectionBounds

CONNECTION_LABELS = (
    "New Connection",
    "Source Node",
    "Target Node",
    "Connection Type",
    "Search",
    "Cancel",
    "Create",
)

ASSET_FORM_LABELS = (
    "Asset Class",
    "Asset Name",
    "Location",
    "QR Code",
    "Search",
    "Cancel",
)

SOURCE_NODE = DropdownField(
    title="Source Node",
    opener="Select source",
    window=Window(x_min=0, x_max=1080, y_min=420),
    block_list=CONNECTION_LABELS,
    section=SectionBounds("Source Node", "Target Node"),
)

TARGET_NODE = DropdownField(
    title="Target Node",
    opener="Select target",
    window=Window(x_min=0, x_max=1080, y_min=420),
    block_list=CONNECTION_LABELS,
    section=SectionBounds("Target Node", "Connection Type"),
)

ASSET_CLASS = DropdownField(
    title="Asset Class",
    opener="Select asset class",
    window=Window(x_min=0, x_max=1080, y_min=300, y_max=2200),
    block_list=ASSET_FORM_LABELS,
    section=SectionBounds("Asset Class", "Location"),
)

# The location sheet lists buildings; tapping one replaces the list with its
# floors, then rooms. Only the first level has an opener on the form.
LOCATION_LABELS = (
    "Select Location",
    "Location",
    "Building",
    "Floor",
    "Room",
    "Add Floor",
    "Add Room",
    "Search",
    "Cancel",
    "Done",
)

LOCATION_LEVELS = (
    DropdownField(
        title="Location",
        opener="Select location",
        window=Window(x_min=0, x_max=1080, y_min=300, y_max=2200),
        block_list=LOCATION_LABELS,
    ),
    DropdownField(
        title="Location",
        opener=None,
        window=Window(x_min=0, x_max=1080, y_min=300, y_max=2200),
        block_list=LOCATION_LABELS,
    ),
    DropdownField(
        title="Location",
        opener=None,
        window=Window(x_min=0, x_max=1080, y_min=300, y_max=2200),
        block_list=LOCATION_LABELS,
        section=SectionBounds("Location", "QR Code"),
    ),
)

TESTS = [
    {
        "name": "NC_source_node_random",
        "expected": "PASS",
        "case": "On the New Connection form, pick a random source node and confirm the field shows it.",
    },
    {
        "name": "NC_source_target_distinct",
        "expected": "PASS",
        "case": "On the New Connection form, pick a source node, then a target node that is not the source.",
    },
    {
        "name": "AC_asset_class_first",
        "expected": "PASS",
        "case": "On the Create Asset form, pick the first asset class and confirm the field shows it.",
    },
    {
        "name": "AC_location_drilldown",
        "expected": "PASS",
        "case": "On the Create Asset form, drill the location picker down to a room and confirm the field shows the full path.",
    },
]

logging.basicConfig(level=logging.INFO, format="%(message)s")

if VERBOSE_LOGS:
    logging.getLogger().setLevel(logging.DEBUG)


def _describe(outcome: PickOutcome) -> dict:
    r = outcome.result
    return {
        "index": r.chosen_index,
        "label": r.chosen_label,
        "verified": outcome.verified_name,
        "failure": r.failure.value if r.failure else None,
        "fallback": r.fallback,
    }


def build_verdict(passed: bool, notes: str, picks: list[PickOutcome]) -> dict:
    return {
        "outcome": "PASS" if passed else "FAIL",
        "notes": notes,
        "picks": [_describe(p) for p in picks],
    }


def handle_source_node_random(picker: DropdownPicker) -> dict:
    outcome = picker.pick_random(SOURCE_NODE)
    if not outcome.result.ok:
        return build_verdict(False, f"selection failed: {outcome.result.failure.value}", [outcome])
    if outcome.verified_name is None:
        return build_verdict(False, "source node could not be read back", [outcome])
    return build_verdict(
        outcome.verified_name == outcome.result.chosen_label,
        f"selected {outcome.result.chosen_label!r}, field shows {outcome.verified_name!r}",
        [outcome],
    )


def handle_source_target_distinct(picker: DropdownPicker) -> dict:
    source, target = picker.pick_source_and_target(SOURCE_NODE, TARGET_NODE)
    if target is None:
        return build_verdict(False, "source selection failed", [source])
    if not target.result.ok:
        return build_verdict(False, f"target selection failed: {target.result.failure.value}", [source, target])
    if not (source.confirmed and target.confirmed):
        return build_verdict(False, "read-back inconclusive", [source, target])
    return build_verdict(
        source.name != target.name,
        f"source={source.name!r} target={target.name!r}",
        [source, target],
    )


def handle_asset_class_first(picker: DropdownPicker) -> dict:
    outcome = picker.pick_by_index(ASSET_CLASS, 0)
    if not outcome.result.ok:
        return build_verdict(False, f"selection failed: {outcome.result.failure.value}", [outcome])
    return build_verdict(
        outcome.confirmed,
        f"asset class {outcome.name!r}",
        [outcome],
    )


def handle_location_drilldown(picker: DropdownPicker) -> dict:
    outcomes = picker.pick_location(LOCATION_LEVELS)
    last = outcomes[-1]
    if not last.result.ok:
        return build_verdict(
            False, f"level {len(outcomes)} selection failed: {last.result.failure.value}", outcomes
        )
    path = [o.result.chosen_label for o in outcomes]
    shown = last.verified_name or ""
    return build_verdict(
        last.confirmed and shown.endswith(path[-1]),
        f"picked {' > '.join(path)!r}, field shows {last.verified_name!r}",
        outcomes,
    )


HANDLERS = {
    "NC_source_node_random": handle_source_node_random,
    "NC_source_target_distinct": handle_source_target_distinct,
    "AC_asset_class_first": handle_asset_class_first,
    "AC_location_drilldown": handle_location_drilldown,
}


def run_test(test: dict, device: AndroidDevice, picker: DropdownPicker, run_dir: str) -> dict:
    handler = HANDLERS[test["name"]]
    try:
        verdict = handler(picker)
    except (PickError, UiDumpUnavailable) as e:
        verdict = {"outcome": "FAIL", "notes": str(e), "picks": []}

    end_shot = os.path.join(run_dir, f"{test['name']}_end.png")
    try:
        device.screenshot(end_shot)
    except Exception as e:
        logging.debug(f"[RUN] screenshot failed: {e!r}")
        end_shot = None

    verdict["name"] = test["name"]
    verdict["expected"] = test["expected"]
    verdict["matched_expectation"] = verdict["outcome"] == test["expected"]
    verdict["artifacts"] = {"end": end_shot}
    return verdict


def run_suite(tests=None, launch=None):
    """Run the suite via CLI/ADK wrapper and return (run_dir, results)."""
    logging.info("=== Picker QA Run ===")
    logging.info(f"Time: {datetime.now().isoformat(timespec='seconds')}")

    config = PickerConfig.from_env()
    logging.info(f"[CONFIG] cluster_gap={config.cluster_gap} verify_attempts={config.verify_attempts}")

    device = AndroidDevice(serial=os.environ.get("ANDROID_SERIAL"))
    query = ElementQuery(device, config)
    picker = DropdownPicker(query, config)

    run_dir = os.path.join("runs", datetime.now().strftime("%Y%m%d_%H%M%S"))
    os.makedirs(run_dir, exist_ok=True)

    launch_flag = launch if launch is not None else _bool_env("LAUNCH_APP", False)
    if launch_flag:
        device.launch_app(APP_PACKAGE)

    results = []
    for t in list(tests or TESTS):
        logging.info(f"\n--- Running {t['name']} (expected {t['expected']}) ---")
        r = run_test(t, device, picker, run_dir)
        logging.info(f"Result: {r}")
        results.append(r)

    log_path = os.path.join(run_dir, "results.jsonl")
    with open(log_path, "w", encoding="utf-8") as f:
        for r in results:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")

    logging.info(f"\nDone. Artifacts + results saved under: {run_dir}")
    return run_dir, results


def run_one(test_name: str):
    """Run a single test case and return (run_dir, verdict)."""
    tests = [t for t in TESTS if t["name"] == test_name]
    if not tests:
        raise ValueError(f"Unknown test name: {test_name}")
    run_dir, results = run_suite(tests=tests)
    return run_dir, results[0] if results else None


def main():
    run_suite()


if __name__ == "__main__":
    main()
