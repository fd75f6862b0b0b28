"""
Tests for ConfigService: defaults, YAML overrides and in-memory changes.
"""

import pytest

from services.plan_framework.config import ConfigService
from services.plan_framework.constants import PERIODIZATION_RULES


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(ConfigService, "_config_dir", tmp_path)
    ConfigService._config = None
    return tmp_path


class TestDefaults:

    def test_shipped_rules_match_constants(self):
        assert ConfigService.get_periodization_rules()["weekly_ramp"] == PERIODIZATION_RULES["weekly_ramp"]
        assert ConfigService.get_default_plan_weeks() == 12

    def test_missing_key_returns_default(self):
        assert ConfigService.get("plan_rules.nope.deeper", "fallback") == "fallback"
        assert ConfigService.get("plan_rules.default_plan_weeks.too_deep") is None

    def test_no_key_returns_everything(self):
        assert "plan_rules" in ConfigService.get()

    def test_defaults_without_yaml(self, config_dir):
        assert ConfigService.get("plan_rules.long_run.start_km") == 8
        assert ConfigService.get_session_limits()["key_floor_minutes"] == 40


class TestYamlOverrides:

    def test_partial_override_keeps_other_defaults(self, config_dir):
        (config_dir / "plan_rules.yaml").write_text(
            "periodization:\n  weekly_ramp: 0.08\ndefault_plan_weeks: 16\n",
            encoding="utf-8",
        )

        rules = ConfigService.get_periodization_rules()
        assert rules["weekly_ramp"] == 0.08
        assert rules["cutback_reduction"] == PERIODIZATION_RULES["cutback_reduction"]
        assert ConfigService.get_default_plan_weeks() == 16

    def test_broken_yaml_is_ignored(self, config_dir):
        (config_dir / "plan_rules.yaml").write_text("periodization: [unclosed\n", encoding="utf-8")
        assert ConfigService.get("plan_rules.periodization.weekly_ramp") == PERIODIZATION_RULES["weekly_ramp"]

    def test_non_mapping_yaml_is_ignored(self, config_dir):
        (config_dir / "plan_rules.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        assert ConfigService.get_default_plan_weeks() == 12

    def test_reload_picks_up_changes(self, config_dir):
        path = config_dir / "plan_rules.yaml"
        path.write_text("base_load:\n  min_minutes: 200\n", encoding="utf-8")
        assert ConfigService.get_base_load_rules()["min_minutes"] == 200

        path.write_text("base_load:\n  min_minutes: 150\n", encoding="utf-8")
        assert ConfigService.get_base_load_rules()["min_minutes"] == 200
        ConfigService.reload()
        assert ConfigService.get_base_load_rules()["min_minutes"] == 150


class TestSet:

    def test_set_creates_nested_keys(self):
        ConfigService.set("plan_rules.experimental.flag", True)
        assert ConfigService.get("plan_rules.experimental.flag") is True

    def test_set_does_not_leak_into_constants(self):
        ConfigService.set("plan_rules.periodization.weekly_ramp", 0.5)
        assert PERIODIZATION_RULES["weekly_ramp"] == 0.05
