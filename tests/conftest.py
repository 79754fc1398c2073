"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the DSA hero tracker test suite.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

import pytest

from dsa_tracker.engine.rng import ScriptedRandomSource
from dsa_tracker.engine.tracker import Tracker
from dsa_tracker.models.hero import Hero, Resource, Skill


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dsa_tracker.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's environment and .env file out of the tests."""
    for key in [
        "DSA_TRACKER_HERO_FILE",
        "DSA_TRACKER_OUTPUT_FORMAT",
        "DSA_TRACKER_SEED",
        "DSA_TRACKER_LOG_LEVEL",
        "DSA_TRACKER_AUTOSAVE",
        "DSA_TRACKER_RULES_CHECK_MODE",
        "DSA_TRACKER_RULES_CRIT_ON_LOW",
        "DSA_TRACKER_RULES_CRIT_ON_HIGH",
    ]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Drop logging configuration bound to a CliRunner's temporary streams."""
    import structlog

    yield
    structlog.reset_defaults()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def scripted() -> Callable[[Iterable[int]], ScriptedRandomSource]:
    """Provide a factory for scripted random sources.

    Returns:
        Callable building a ScriptedRandomSource from a list of values.
    """
    return ScriptedRandomSource


@pytest.fixture
def tracker() -> Tracker:
    """Provide a tracker with an unscripted random source."""
    return Tracker()


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_hero() -> Hero:
    """Provide a wounded hero with resources, base values and skills.

    Returns:
        A Hero with 8 of 20 life points.
    """
    return Hero(
        name="Alrik",
        resources={
            "life_points": Resource(current=8, maximum=20),
            "astral_points": Resource(current=12, maximum=30),
            "fate_points": Resource(current=3, maximum=3),
        },
        base_values={
            "MU": 12,
            "KL": 11,
            "IN": 13,
            "CH": 10,
            "FF": 11,
            "GE": 14,
            "KO": 12,
            "KK": 13,
        },
        skills={
            "klettern": Skill(value=5, checks=("MU", "GE", "KK")),
            "sinnesschaerfe": Skill(value=7, checks=("KL", "IN", "IN")),
            "schwimmen": Skill(value=10),
        },
    )
