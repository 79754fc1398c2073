"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from dsa_tracker.core.config import (
    RuleSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dsa_tracker.core.exceptions import ConfigurationError


class TestRuleSettings:
    """Tests for RuleSettings configuration."""

    def test_default_values(self) -> None:
        """Test default rule settings."""
        rules = RuleSettings()

        assert rules.check_mode == "roll_under"
        assert rules.check_notation == "1d20"
        assert rules.crit_on_low == "critical_failure"
        assert rules.crit_on_high == "critical_success"
        assert rules.crit_single_die_only is True
        assert rules.max_dice_count == 100
        assert rules.max_faces == 1000

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test rule settings are read from the environment."""
        monkeypatch.setenv("DSA_TRACKER_RULES_CHECK_MODE", "roll_over")
        monkeypatch.setenv("DSA_TRACKER_RULES_CRIT_ON_LOW", "none")

        rules = RuleSettings()

        assert rules.check_mode == "roll_over"
        assert rules.crit_on_low == "none"

    def test_same_critical_for_both_extremes(self) -> None:
        """Test both extremes cannot map to the same critical."""
        with pytest.raises(ConfigurationError) as exc_info:
            RuleSettings(crit_on_low="critical_success", crit_on_high="critical_success")

        assert exc_info.value.details["config_key"] == "crit_on_low"

    def test_both_none_allowed(self) -> None:
        """Test criticals can be switched off entirely."""
        rules = RuleSettings(crit_on_low="none", crit_on_high="none")
        assert rules.crit_on_high == "none"


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self) -> None:
        """Test default settings values."""
        settings = Settings()

        assert settings.app_name == "dsa-tracker"
        assert settings.log_level == "WARNING"
        assert settings.output_format == "human"
        assert settings.hero_file is None
        assert settings.autosave is True
        assert settings.seed is None
        assert isinstance(settings.rules, RuleSettings)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test settings from environment variables."""
        monkeypatch.setenv("DSA_TRACKER_HERO_FILE", "alrik.json")
        monkeypatch.setenv("DSA_TRACKER_OUTPUT_FORMAT", "json")
        monkeypatch.setenv("DSA_TRACKER_SEED", "7")

        settings = Settings()

        assert settings.hero_file == Path("alrik.json")
        assert settings.output_format == "json"
        assert settings.seed == 7


class TestGetSettings:
    """Tests for the settings singleton."""

    def test_cached(self) -> None:
        """Test get_settings returns the same instance."""
        assert get_settings() is get_settings()

    def test_clear_cache(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test clearing the cache reloads from the environment."""
        first = get_settings()
        monkeypatch.setenv("DSA_TRACKER_SEED", "3")
        clear_settings_cache()

        second = get_settings()

        assert second is not first
        assert second.seed == 3

    def test_invalid_env_wrapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test invalid environment values raise ConfigurationError."""
        monkeypatch.setenv("DSA_TRACKER_OUTPUT_FORMAT", "xml")

        with pytest.raises(ConfigurationError):
            get_settings()
