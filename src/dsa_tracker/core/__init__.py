"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DsaTrackerError: Base exception for all application errors.
        ParseError and its kinds: Malformed dice notation.
        ModelError, UnknownAttribute, UnknownSkill, InvalidMaximum: Hero lookups
            and bounds.
        PersistenceError, LoadError, SaveError: Hero file I/O.
        ConfigurationError: Invalid settings.

    Configuration:
        Settings: Main application settings class.
        RuleSettings: Game rule settings.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from dsa_tracker.core.config import (
    RuleSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dsa_tracker.core.exceptions import (
    ConfigurationError,
    DsaTrackerError,
    InvalidDiceCount,
    InvalidFaceCount,
    InvalidMaximum,
    InvalidSelector,
    LoadError,
    ModelError,
    NotationSyntaxError,
    ParseError,
    ParseErrorKind,
    PersistenceError,
    RandomSourceExhausted,
    SaveError,
    UnknownAttribute,
    UnknownSkill,
)
from dsa_tracker.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "DsaTrackerError",
    # Notation exceptions
    "ParseError",
    "ParseErrorKind",
    "NotationSyntaxError",
    "InvalidDiceCount",
    "InvalidFaceCount",
    "InvalidSelector",
    "RandomSourceExhausted",
    # Model exceptions
    "ModelError",
    "UnknownAttribute",
    "UnknownSkill",
    "InvalidMaximum",
    # Persistence exceptions
    "PersistenceError",
    "LoadError",
    "SaveError",
    # Configuration
    "ConfigurationError",
    "Settings",
    "RuleSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
