"""Custom exception hierarchy for the DSA hero tracker.

Every error raised by the tracker derives from DsaTrackerError so the
command-line layer can render any failure with a single handler. The
hierarchy mirrors the domains of the application:

- ParseError: malformed dice notation.
- ModelError: unknown attribute or skill names on a hero.
- PersistenceError: loading or saving hero session files.
- ConfigurationError: invalid settings.

No error in this module is fatal to the process; callers may recover from
all of them.

Example:
    >>> from dsa_tracker.core.exceptions import InvalidDiceCount
    >>> raise InvalidDiceCount("Dice count must be at least 1", notation="0d6")
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any


class DsaTrackerError(Exception):
    """Base exception for all DSA tracker errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception.

        Returns:
            String representation suitable for debugging.
        """
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Notation Exceptions
# =============================================================================


class ParseErrorKind(StrEnum):
    """Categories of notation parse failures."""

    SYNTAX = "syntax"
    INVALID_DICE_COUNT = "invalid_dice_count"
    INVALID_FACE_COUNT = "invalid_face_count"
    INVALID_SELECTOR = "invalid_selector"


class ParseError(DsaTrackerError):
    """Base exception for dice notation that cannot be parsed.

    The parser is strict: a ParseError means nothing of the notation was
    accepted.

    Attributes:
        kind: Category of the failure.
    """

    kind: ParseErrorKind = ParseErrorKind.SYNTAX

    def __init__(
        self,
        message: str,
        *,
        notation: str | None = None,
        position: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize parse error with notation context.

        Args:
            message: Human-readable error description.
            notation: The notation string that failed to parse.
            position: Character offset where parsing failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if notation is not None:
            combined_details["notation"] = notation
        if position is not None:
            combined_details["position"] = position
        super().__init__(message, details=combined_details)


class NotationSyntaxError(ParseError):
    """Raised for malformed terms, dangling operators or stray characters."""

    kind = ParseErrorKind.SYNTAX


class InvalidDiceCount(ParseError):
    """Raised when a dice term asks for fewer than one die or too many."""

    kind = ParseErrorKind.INVALID_DICE_COUNT


class InvalidFaceCount(ParseError):
    """Raised when a dice term has fewer than two faces or too many."""

    kind = ParseErrorKind.INVALID_FACE_COUNT


class InvalidSelector(ParseError):
    """Raised when a keep/drop selector count exceeds the dice count."""

    kind = ParseErrorKind.INVALID_SELECTOR


class RandomSourceExhausted(DsaTrackerError):
    """Raised when a scripted random source has no values left."""


# =============================================================================
# Hero Model Exceptions
# =============================================================================


class ModelError(DsaTrackerError):
    """Base exception for lookups against a hero that cannot be satisfied."""


class UnknownAttribute(ModelError):
    """Raised when an attribute name is not present on the hero."""

    def __init__(
        self,
        name: str,
        *,
        known: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize unknown attribute error.

        Args:
            name: The attribute name that was requested.
            known: Attribute names the hero does have.
            details: Optional dictionary containing additional error context.
        """
        self.name = name
        combined_details = details or {}
        if known:
            combined_details["known"] = known
        super().__init__(f"Unknown attribute '{name}'", details=combined_details)


class UnknownSkill(ModelError):
    """Raised when a skill name is not present on the hero."""

    def __init__(
        self,
        name: str,
        *,
        known: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize unknown skill error.

        Args:
            name: The skill name that was requested.
            known: Skill names the hero does have.
            details: Optional dictionary containing additional error context.
        """
        self.name = name
        combined_details = details or {}
        if known:
            combined_details["known"] = known
        super().__init__(f"Unknown skill '{name}'", details=combined_details)


class InvalidMaximum(ModelError):
    """Raised when a resource maximum would fall below its floor."""

    def __init__(
        self,
        name: str,
        maximum: int,
        *,
        floor: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid maximum error.

        Args:
            name: The resource whose maximum was changed.
            maximum: The rejected maximum.
            floor: The resource's lower bound.
            details: Optional dictionary containing additional error context.
        """
        self.name = name
        self.maximum = maximum
        combined_details = details or {}
        combined_details["maximum"] = maximum
        if floor is not None:
            combined_details["floor"] = floor
        super().__init__(f"Invalid maximum {maximum} for '{name}'", details=combined_details)


# =============================================================================
# Persistence Exceptions
# =============================================================================


class PersistenceError(DsaTrackerError):
    """Base exception for hero file I/O."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize persistence error with file context.

        Args:
            message: Human-readable error description.
            path: The file that could not be read or written.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if path is not None:
            combined_details["path"] = str(path)
        super().__init__(message, details=combined_details)


class LoadError(PersistenceError):
    """Raised when a hero file is missing, unreadable or malformed."""


class SaveError(PersistenceError):
    """Raised when a hero session cannot be written."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(DsaTrackerError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "DsaTrackerError",
    # Notation exceptions
    "ParseErrorKind",
    "ParseError",
    "NotationSyntaxError",
    "InvalidDiceCount",
    "InvalidFaceCount",
    "InvalidSelector",
    "RandomSourceExhausted",
    # Hero model exceptions
    "ModelError",
    "UnknownAttribute",
    "UnknownSkill",
    "InvalidMaximum",
    # Persistence exceptions
    "PersistenceError",
    "LoadError",
    "SaveError",
    # Configuration exceptions
    "ConfigurationError",
]
