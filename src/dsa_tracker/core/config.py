"""Configuration management for the DSA hero tracker.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides from
the command line.

Example:
    >>> from dsa_tracker.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.rules.check_notation
    '1d20'

Environment Variables:
    DSA_TRACKER_HERO_FILE: Default hero session file
    DSA_TRACKER_OUTPUT_FORMAT: Output format (human, json)
    DSA_TRACKER_SEED: Seed for reproducible rolls
    DSA_TRACKER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DSA_TRACKER_RULES_CHECK_MODE: roll_under or roll_over
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dsa_tracker.core.exceptions import ConfigurationError


CritResult = Literal["critical_success", "critical_failure", "none"]


class RuleSettings(BaseSettings):
    """Game rule configuration consumed by the check policy and parser.

    Attributes:
        check_mode: Whether a check succeeds by rolling under or over the target.
        check_notation: Notation rolled for a plain skill check.
        crit_on_low: Outcome when every die of a check shows its minimum face.
        crit_on_high: Outcome when every die of a check shows its maximum face.
        crit_single_die_only: Only single-die expressions can be critical.
        max_dice_count: Largest dice count a single term may request.
        max_faces: Largest face count a single term may request.
    """

    model_config = SettingsConfigDict(
        env_prefix="DSA_TRACKER_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    check_mode: Literal["roll_under", "roll_over"] = Field(
        default="roll_under",
        description="Success when the total is at most (under) or at least (over) the target",
    )
    check_notation: str = Field(
        default="1d20",
        min_length=1,
        description="Notation rolled for skill checks",
    )
    crit_on_low: CritResult = Field(
        default="critical_failure",
        description="Classification of an all-minimum single die",
    )
    crit_on_high: CritResult = Field(
        default="critical_success",
        description="Classification of an all-maximum single die",
    )
    crit_single_die_only: bool = Field(
        default=True,
        description="Only single-die expressions can be critical",
    )
    max_dice_count: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Maximum dice per term",
    )
    max_faces: int = Field(
        default=1000,
        ge=2,
        le=1_000_000,
        description="Maximum faces per die",
    )

    @model_validator(mode="after")
    def validate_crit_outcomes(self) -> "RuleSettings":
        """Ensure the low and high extremes do not map to the same critical.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If both extremes produce the same critical result.
        """
        if self.crit_on_low != "none" and self.crit_on_low == self.crit_on_high:
            raise ConfigurationError(
                f"crit_on_low and crit_on_high are both {self.crit_on_low!r}",
                config_key="crit_on_low",
            )
        return self


class Settings(BaseSettings):
    """Main application settings.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        log_level: Application logging level.
        json_logs: Emit logs as JSON instead of console lines.
        log_file: Optional file receiving a copy of the logs.
        output_format: Rendering of command results.
        hero_file: Default hero session file.
        autosave: Save the session after every mutating command.
        seed: Optional seed for reproducible rolls.
        rules: Game rule settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DSA_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="dsa-tracker", description="Application name")
    app_version: str = Field(default="0.2.0", description="Application version")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="Emit JSON logs")
    log_file: Path | None = Field(default=None, description="Copy logs to this file")
    output_format: Literal["human", "json"] = Field(
        default="human",
        description="Output format for command results",
    )
    hero_file: Path | None = Field(default=None, description="Default hero session file")
    autosave: bool = Field(default=True, description="Save after mutating commands")
    seed: int | None = Field(default=None, description="Seed for reproducible rolls")

    rules: RuleSettings = Field(default_factory=RuleSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "CritResult",
    "RuleSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
