"""Hero model for the DSA hero tracker.

A Hero owns three mappings:

- resources: pools such as life points, astral points or fate points, each
  with a current value and optional bounds.
- base_values: the eight DSA attributes (MU, KL, IN, CH, FF, GE, KO, KK)
  that talent checks roll against.
- skills: talent values, optionally with the three base values a talent
  check uses.

The hero is the only place resource values change. ``apply_delta`` clamps
every mutation itself, so a resource is always within its bounds no matter
what the caller passes in.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from dsa_tracker.core.exceptions import InvalidMaximum, UnknownAttribute, UnknownSkill


BASE_VALUE_NAMES: tuple[str, ...] = ("MU", "KL", "IN", "CH", "FF", "GE", "KO", "KK")

ResourceName = Annotated[str, Field(min_length=1, pattern=r"^[a-z][a-z0-9_]*$")]


def normalize_name(name: str) -> str:
    """Lowercase a resource or skill name and use underscores for spaces."""
    return "_".join(name.strip().lower().split())


# =============================================================================
# Components
# =============================================================================


class Resource(BaseModel):
    """A tracked pool such as life points.

    ``floor`` defaults to 0; ``None`` leaves the pool unbounded below.
    ``maximum`` of ``None`` leaves it unbounded above.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    current: int
    maximum: int | None = Field(default=None, ge=0)
    floor: int | None = Field(default=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "Resource":
        if self.floor is not None and self.maximum is not None and self.floor > self.maximum:
            raise ValueError(f"floor {self.floor} is above maximum {self.maximum}")
        if self.floor is not None and self.current < self.floor:
            raise ValueError(f"current {self.current} is below floor {self.floor}")
        if self.maximum is not None and self.current > self.maximum:
            raise ValueError(f"current {self.current} is above maximum {self.maximum}")
        return self

    def clamp(self, value: int) -> int:
        """Clamp a value into this resource's bounds."""
        if self.floor is not None:
            value = max(self.floor, value)
        if self.maximum is not None:
            value = min(self.maximum, value)
        return value

    @computed_field(description="Current value as percentage of maximum")
    @property
    def percentage(self) -> float | None:
        if not self.maximum:
            return None
        return (self.current / self.maximum) * 100


class Skill(BaseModel):
    """A talent value and the base values its check rolls against."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: int
    checks: tuple[str, str, str] | None = Field(
        default=None,
        description="Base values rolled against in a talent check, e.g. MU/KL/CH",
    )

    @field_validator("checks", mode="before")
    @classmethod
    def upper_checks(cls, v: Any) -> Any:
        if v is None:
            return None
        return tuple(str(name).strip().upper() for name in v)


class AppliedDelta(BaseModel):
    """Outcome of one resource mutation.

    ``applied`` can differ from ``requested`` when the value was clamped.
    """

    model_config = ConfigDict(frozen=True)

    attribute: str
    requested: int
    applied: int
    before: int
    after: int
    maximum: int | None = None

    @property
    def clamped(self) -> bool:
        return self.requested != self.applied

    @property
    def overflow(self) -> int:
        """Part of the requested change that was cut off by a bound."""
        return self.requested - self.applied


# =============================================================================
# Hero
# =============================================================================


class Hero(BaseModel):
    """A player character and the resources tracked during a session.

    Example:
        >>> hero = Hero(
        ...     name="Alrik",
        ...     resources={"life_points": Resource(current=8, maximum=20)},
        ... )
        >>> hero.apply_delta("life_points", -10).applied
        -8
        >>> hero.attribute("life_points")
        0
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    name: str = Field(min_length=1, description="Stable hero name")
    resources: dict[ResourceName, Resource] = Field(default_factory=dict)
    base_values: dict[str, int] = Field(default_factory=dict)
    skills: dict[str, Skill] = Field(default_factory=dict)

    @field_validator("resources", "skills", mode="before")
    @classmethod
    def normalize_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {normalize_name(key): value for key, value in v.items()}
        return v

    @field_validator("base_values", mode="before")
    @classmethod
    def upper_base_values(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(key).strip().upper(): value for key, value in v.items()}
        return v

    @field_validator("base_values")
    @classmethod
    def known_base_values(cls, v: dict[str, int]) -> dict[str, int]:
        unknown = sorted(set(v) - set(BASE_VALUE_NAMES))
        if unknown:
            raise ValueError(
                f"unknown base values {', '.join(unknown)}; expected {'/'.join(BASE_VALUE_NAMES)}"
            )
        return v

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    def _resource(self, name: str) -> Resource:
        resource = self.resources.get(normalize_name(name))
        if resource is None:
            raise UnknownAttribute(name, known=sorted(self.resources))
        return resource

    def attribute(self, name: str) -> int:
        """Current value of a resource.

        Raises:
            UnknownAttribute: If the hero has no such resource.
        """
        return self._resource(name).current

    def maximum(self, name: str) -> int | None:
        """Maximum of a resource, ``None`` when unbounded."""
        return self._resource(name).maximum

    def gauge(self, name: str) -> tuple[int, int | None]:
        """Current and maximum value of a resource."""
        resource = self._resource(name)
        return resource.current, resource.maximum

    def base_value(self, name: str) -> int:
        """Value of a base attribute such as MU.

        Raises:
            UnknownAttribute: If the hero has no such base value.
        """
        key = name.strip().upper()
        if key not in self.base_values:
            raise UnknownAttribute(name, known=sorted(self.base_values))
        return self.base_values[key]

    def skill(self, name: str) -> Skill:
        """Look up a skill.

        Raises:
            UnknownSkill: If the hero has no such skill.
        """
        skill = self.skills.get(normalize_name(name))
        if skill is None:
            raise UnknownSkill(name, known=sorted(self.skills))
        return skill

    def skill_value(self, name: str) -> int:
        """Target value of a skill.

        Raises:
            UnknownSkill: If the hero has no such skill.
        """
        return self.skill(name).value

    def snapshot(self) -> dict[str, int]:
        """Current value of every resource."""
        return {name: resource.current for name, resource in self.resources.items()}

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def apply_delta(self, attribute: str, delta: int) -> AppliedDelta:
        """Add ``delta`` to a resource, clamped to its bounds.

        The hero is left untouched when the attribute is unknown.

        Args:
            attribute: Resource name, e.g. ``life_points``.
            delta: Change to apply, negative for damage.

        Returns:
            AppliedDelta with the change that actually happened.

        Raises:
            UnknownAttribute: If the hero has no such resource.
        """
        resource = self._resource(attribute)
        before = resource.current
        after = resource.clamp(before + delta)
        resource.current = after
        return AppliedDelta(
            attribute=normalize_name(attribute),
            requested=delta,
            applied=after - before,
            before=before,
            after=after,
            maximum=resource.maximum,
        )

    def set_maximum(self, attribute: str, maximum: int) -> AppliedDelta:
        """Change the maximum of a resource and re-clamp its current value.

        The returned delta describes the change of the current value; its
        ``requested`` is 0 since only the bound was asked to move.

        Raises:
            UnknownAttribute: If the hero has no such resource.
            InvalidMaximum: If ``maximum`` is negative or below the floor.
        """
        resource = self._resource(attribute)
        if maximum < 0 or (resource.floor is not None and maximum < resource.floor):
            raise InvalidMaximum(attribute, maximum, floor=resource.floor)
        before = resource.current
        after = min(before, maximum)
        # Lower current first so every assignment passes the bounds check.
        resource.current = after
        resource.maximum = maximum
        return AppliedDelta(
            attribute=normalize_name(attribute),
            requested=0,
            applied=after - before,
            before=before,
            after=after,
            maximum=maximum,
        )


__all__ = [
    "BASE_VALUE_NAMES",
    "normalize_name",
    "Resource",
    "Skill",
    "AppliedDelta",
    "Hero",
]
