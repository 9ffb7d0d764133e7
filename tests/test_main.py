"""
Scenario runner tests (no device)
"""
import json
from unittest.mock import Mock, patch

import pytest

import main
from picker.flows import PickError, PickOutcome
from picker.selection import FailureKind, SelectionResult


def outcome(label, verified=None, index=1):
    return PickOutcome(result=SelectionResult(chosen_index=index, chosen_label=label), verified_name=verified)


def failed(kind):
    return PickOutcome(result=SelectionResult.failed(kind), verified_name=None)


class TestHandlers:
    def test_source_node_confirmed(self):
        picker = Mock()
        picker.pick_random.return_value = outcome("A1.1", "A1.1")
        verdict = main.handle_source_node_random(picker)
        assert verdict["outcome"] == "PASS"
        picker.pick_random.assert_called_once_with(main.SOURCE_NODE)

    def test_source_node_inconclusive(self):
        picker = Mock()
        picker.pick_random.return_value = outcome("A1.1", None)
        assert main.handle_source_node_random(picker)["outcome"] == "FAIL"

    def test_source_node_failure_kind_reported(self):
        picker = Mock()
        picker.pick_random.return_value = failed(FailureKind.NO_VALID_CANDIDATE)
        verdict = main.handle_source_node_random(picker)
        assert verdict["outcome"] == "FAIL"
        assert "no_valid_candidate" in verdict["notes"]
        assert verdict["picks"][0]["index"] == -1

    def test_source_target_distinct(self):
        picker = Mock()
        picker.pick_source_and_target.return_value = (outcome("A1.1", "A1.1"), outcome("B2", "B2", index=2))
        verdict = main.handle_source_target_distinct(picker)
        assert verdict["outcome"] == "PASS"
        assert [p["verified"] for p in verdict["picks"]] == ["A1.1", "B2"]

    def test_source_target_same_name_fails(self):
        picker = Mock()
        picker.pick_source_and_target.return_value = (outcome("A1.1", "A1.1"), outcome("A1.1", "A1.1"))
        assert main.handle_source_target_distinct(picker)["outcome"] == "FAIL"

    def test_asset_class_fallback_is_visible(self):
        picker = Mock()
        picker.pick_by_index.return_value = PickOutcome(
            result=SelectionResult(chosen_index=0, chosen_label="ATS", fallback=True),
            verified_name="ATS",
        )
        verdict = main.handle_asset_class_first(picker)
        assert verdict["outcome"] == "PASS"
        assert verdict["picks"][0]["fallback"] is True

    def test_location_drilldown_confirmed(self):
        picker = Mock()
        picker.pick_location.return_value = [
            outcome("Main building", index=0),
            outcome("Floor 1", index=0),
            outcome("Room 101", "Main building > Floor 1 > Room 101", index=0),
        ]
        verdict = main.handle_location_drilldown(picker)
        assert verdict["outcome"] == "PASS"
        picker.pick_location.assert_called_once_with(main.LOCATION_LEVELS)
        assert [p["label"] for p in verdict["picks"]] == ["Main building", "Floor 1", "Room 101"]

    def test_location_level_failure(self):
        picker = Mock()
        picker.pick_location.return_value = [outcome("Main building", index=0), failed(FailureKind.NO_ENTRIES)]
        verdict = main.handle_location_drilldown(picker)
        assert verdict["outcome"] == "FAIL"
        assert verdict["notes"] == "level 2 selection failed: no_entries"

    def test_location_shows_other_room(self):
        picker = Mock()
        picker.pick_location.return_value = [
            outcome("Main building", index=0),
            outcome("Floor 1", index=0),
            outcome("Room 101", "Main building > Floor 1 > Room 102", index=0),
        ]
        assert main.handle_location_drilldown(picker)["outcome"] == "FAIL"

    def test_every_scenario_has_a_handler(self):
        assert {t["name"] for t in main.TESTS} == set(main.HANDLERS)


class TestRunTest:
    def test_pick_error_becomes_fail(self, tmp_path):
        device = Mock()
        picker = Mock()
        picker.pick_random.side_effect = PickError("no opener")
        test = main.TESTS[0]
        verdict = main.run_test(test, device, picker, str(tmp_path))
        assert verdict["outcome"] == "FAIL"
        assert verdict["notes"] == "no opener"
        assert verdict["matched_expectation"] is False
        device.screenshot.assert_called_once()

    def test_screenshot_failure_is_tolerated(self, tmp_path):
        device = Mock()
        device.screenshot.side_effect = OSError("adb gone")
        picker = Mock()
        picker.pick_random.return_value = outcome("A1.1", "A1.1")
        verdict = main.run_test(main.TESTS[0], device, picker, str(tmp_path))
        assert verdict["outcome"] == "PASS"
        assert verdict["artifacts"]["end"] is None

    def test_run_suite_writes_results(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch.object(main, "AndroidDevice") as device_cls, \
                patch.object(main, "run_test", return_value={"name": "x", "outcome": "PASS"}):
            run_dir, results = main.run_suite(tests=[main.TESTS[0]], launch=False)
        device_cls.return_value.launch_app.assert_not_called()
        lines = (tmp_path / run_dir / "results.jsonl").read_text(encoding="utf-8").splitlines()
        assert [json.loads(line) for line in lines] == results

    def test_unknown_test_name(self):
        with pytest.raises(ValueError):
            main.run_one("does_not_exist")
