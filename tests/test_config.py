"""
Environment-driven picker settings
"""
import pytest

from picker.config import ACTION_LABELS, CLUSTER_GAP, PickerConfig

ENV_VARS = (
    "PICKER_CLUSTER_GAP",
    "PICKER_SETTLE_MS",
    "PICKER_VERIFY_ATTEMPTS",
    "PICKER_VERIFY_BACKOFF_MS",
    "PICKER_ANCHOR_WINDOW",
    "PICKER_SCROLL_SWIPES",
    "PICKER_PATH_DELIMITER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestFromEnv:
    def test_defaults_when_unset(self):
        assert PickerConfig.from_env() == PickerConfig()
        cfg = PickerConfig.from_env()
        assert cfg.cluster_gap == CLUSTER_GAP == 32
        assert cfg.verify_attempts == 3
        assert cfg.verify_backoff_ms == 500
        assert cfg.action_labels == ACTION_LABELS

    def test_every_variable_is_read(self, monkeypatch):
        monkeypatch.setenv("PICKER_CLUSTER_GAP", "40")
        monkeypatch.setenv("PICKER_SETTLE_MS", "250")
        monkeypatch.setenv("PICKER_VERIFY_ATTEMPTS", "5")
        monkeypatch.setenv("PICKER_VERIFY_BACKOFF_MS", "100")
        monkeypatch.setenv("PICKER_ANCHOR_WINDOW", "120")
        monkeypatch.setenv("PICKER_SCROLL_SWIPES", "1")
        monkeypatch.setenv("PICKER_PATH_DELIMITER", "/")
        cfg = PickerConfig.from_env()
        assert cfg.cluster_gap == 40
        assert cfg.settle_ms == 250
        assert cfg.verify_attempts == 5
        assert cfg.verify_backoff_ms == 100
        assert cfg.anchor_window == 120
        assert cfg.scroll_swipes == 1
        assert cfg.path_delimiter == "/"

    @pytest.mark.parametrize("value", ["abc", "3.5", ""])
    def test_unparsable_int_falls_back(self, monkeypatch, value):
        monkeypatch.setenv("PICKER_CLUSTER_GAP", value)
        monkeypatch.setenv("PICKER_VERIFY_ATTEMPTS", value)
        cfg = PickerConfig.from_env()
        assert cfg.cluster_gap == 32
        assert cfg.verify_attempts == 3

    def test_empty_delimiter_falls_back(self, monkeypatch):
        monkeypatch.setenv("PICKER_PATH_DELIMITER", "")
        assert PickerConfig.from_env().path_delimiter == ">"

    def test_attempts_clamped_to_one(self, monkeypatch):
        monkeypatch.setenv("PICKER_VERIFY_ATTEMPTS", "0")
        assert PickerConfig.from_env().verify_attempts == 1
        monkeypatch.setenv("PICKER_VERIFY_ATTEMPTS", "-2")
        assert PickerConfig.from_env().verify_attempts == 1

    def test_negative_gap_clamped_to_zero(self, monkeypatch):
        monkeypatch.setenv("PICKER_CLUSTER_GAP", "-5")
        assert PickerConfig.from_env().cluster_gap == 0


class TestLabels:
    @pytest.mark.parametrize("text", ["Select source", "  select asset class", "SELECT"])
    def test_placeholder(self, text):
        assert PickerConfig().is_placeholder(text)

    def test_value_is_not_placeholder(self):
        assert not PickerConfig().is_placeholder("A1.1")
        assert not PickerConfig().is_placeholder(None)

    def test_action_label(self):
        cfg = PickerConfig()
        assert cfg.is_action_label(" Cancel ")
        assert not cfg.is_action_label("Panelboard")
