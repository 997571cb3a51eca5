"""Tests for configuration."""

import json

import pytest

from docconform.config import Config, RuleSettings, get_config, load_rule_config, reset_config
from docconform.models import Severity


def test_defaults(test_config):
    assert test_config.max_nesting_depth == 8
    assert test_config.default_markup == "rdoc"
    assert test_config.log_level == "WARNING"
    assert test_config.rule("R7").enabled
    assert test_config.rule("R7").severity is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DOCCONFORM_MAX_NESTING_DEPTH", "3")
    monkeypatch.setenv("DOCCONFORM_RULES", '{"R3": {"enabled": false}}')

    config = Config(_env_file=None)

    assert config.max_nesting_depth == 3
    assert not config.rule("R3").enabled


def test_get_config_is_cached():
    reset_config()
    try:
        assert get_config() is get_config()
    finally:
        reset_config()


class TestRuleSettings:
    """Tests for per-rule settings."""

    def test_threshold_parameter(self):
        settings = RuleSettings.model_validate({"enabled": True, "threshold_chars": 300})

        assert settings.param("threshold_chars", 100) == 300
        assert settings.param("other", 5) == 5

    def test_severity_override(self):
        settings = RuleSettings.model_validate({"severity": "violation"})

        assert settings.severity == Severity.VIOLATION

    def test_non_numeric_parameter(self):
        settings = RuleSettings.model_validate({"threshold_chars": True})

        with pytest.raises(ValueError):
            settings.param("threshold_chars", 300)


class TestLoadRuleConfig:
    """Tests for rule override files."""

    def test_flat_mapping(self, temp_dir):
        path = temp_dir / "rules.json"
        path.write_text(json.dumps({"R3": {"enabled": True}, "R7": {"threshold_chars": 300}}))

        rules = load_rule_config(path)

        assert rules["R3"].enabled
        assert rules["R7"].param("threshold_chars", 100) == 300

    def test_nested_mapping(self, temp_dir):
        path = temp_dir / "rules.json"
        path.write_text(json.dumps({"rules": {"R4": {"enabled": False}}}))

        assert not load_rule_config(path)["R4"].enabled

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_rule_config(temp_dir / "missing.json")

    def test_not_an_object(self, temp_dir):
        path = temp_dir / "rules.json"
        path.write_text("[1, 2]")

        with pytest.raises(ValueError):
            load_rule_config(path)

    def test_config_merges_rules_file(self, temp_dir):
        path = temp_dir / "rules.json"
        path.write_text(json.dumps({"R4": {"enabled": False}, "R7": {"enabled": False}}))

        config = Config(_env_file=None, rules_file=path, rules={"R7": {"enabled": True}})

        assert not config.rule("R4").enabled
        assert config.rule("R7").enabled
