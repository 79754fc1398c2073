"""Hero data models.

Pydantic models for the character record: resources with bounds, base
values, skills, and the AppliedDelta returned by every mutation.
"""

from __future__ import annotations

from dsa_tracker.models.hero import (
    BASE_VALUE_NAMES,
    AppliedDelta,
    Hero,
    Resource,
    Skill,
    normalize_name,
)


__all__ = [
    "BASE_VALUE_NAMES",
    "AppliedDelta",
    "Hero",
    "Resource",
    "Skill",
    "normalize_name",
]
