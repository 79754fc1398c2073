"""DSA hero tracker - dice and resources for Das Schwarze Auge sessions.

Rolls dice from textual notation, resolves skill and 3d20 talent checks,
and tracks a hero's bounded resources through an append-only transaction
log that is saved alongside the hero.

Example:
    >>> from dsa_tracker import Hero, Tracker
    >>>
    >>> hero = Hero(name="Alrik", resources={"life_points": {"current": 20, "maximum": 20}})
    >>> tracker = Tracker()
    >>> delta = tracker.apply_damage(hero, "life_points", 5)
    >>> hero.attribute("life_points")
    15

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 hero model.
    engine: Notation parser, dice evaluation, checks, and the tracker.
    storage: JSON session files and Helden-Software import.
    cli: Typer command line client and interactive shell.
"""

from __future__ import annotations

# Core
from dsa_tracker.core.config import Settings, get_settings
from dsa_tracker.core.exceptions import DsaTrackerError
from dsa_tracker.core.logging import configure_logging, get_logger

# Hero model
from dsa_tracker.models.hero import AppliedDelta, Hero, Resource, Skill

# Engine
from dsa_tracker.engine.dice import DiceRoller, RollOutcome, evaluate
from dsa_tracker.engine.notation import Expression, parse
from dsa_tracker.engine.rng import RandomSource, ScriptedRandomSource, SystemRandomSource
from dsa_tracker.engine.tracker import Tracker

# Storage
from dsa_tracker.storage.session_store import HeroStore


__version__ = "0.2.0"

__all__ = [
    # Core
    "Settings",
    "get_settings",
    "DsaTrackerError",
    "configure_logging",
    "get_logger",
    # Hero model
    "Hero",
    "Resource",
    "Skill",
    "AppliedDelta",
    # Engine
    "Expression",
    "parse",
    "evaluate",
    "RollOutcome",
    "DiceRoller",
    "RandomSource",
    "SystemRandomSource",
    "ScriptedRandomSource",
    "Tracker",
    # Storage
    "HeroStore",
    # Version
    "__version__",
]
