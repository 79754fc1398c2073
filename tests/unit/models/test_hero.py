"""Tests for the hero model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dsa_tracker.core.exceptions import InvalidMaximum, UnknownAttribute, UnknownSkill
from dsa_tracker.models.hero import (
    BASE_VALUE_NAMES,
    AppliedDelta,
    Hero,
    Resource,
    Skill,
    normalize_name,
)


class TestResource:
    """Tests for bounded resources."""

    def test_percentage(self) -> None:
        """Test percentage is computed from the maximum."""
        assert Resource(current=5, maximum=20).percentage == 25.0
        assert Resource(current=5).percentage is None

    def test_current_above_maximum_rejected(self) -> None:
        """Test a resource cannot start above its maximum."""
        with pytest.raises(ValidationError):
            Resource(current=25, maximum=20)

    def test_current_below_floor_rejected(self) -> None:
        """Test a resource cannot start below its floor."""
        with pytest.raises(ValidationError):
            Resource(current=-1, maximum=20)

    def test_unbounded_floor(self) -> None:
        """Test a floor of None allows negative values."""
        resource = Resource(current=-3, maximum=10, floor=None)

        assert resource.clamp(-100) == -100
        assert resource.clamp(100) == 10

    def test_clamp(self) -> None:
        """Test clamping into bounds."""
        resource = Resource(current=5, maximum=10)

        assert resource.clamp(-4) == 0
        assert resource.clamp(7) == 7
        assert resource.clamp(11) == 10


class TestSkill:
    """Tests for skills."""

    def test_checks_uppercased(self) -> None:
        """Test check names are normalised to upper case."""
        skill = Skill(value=5, checks=["mu", "ge", "kk"])

        assert skill.checks == ("MU", "GE", "KK")

    def test_checks_need_three_names(self) -> None:
        """Test a talent check needs exactly three base values."""
        with pytest.raises(ValidationError):
            Skill(value=5, checks=["MU", "GE"])

    def test_frozen(self) -> None:
        """Test skills cannot be modified."""
        skill = Skill(value=5)

        with pytest.raises(ValidationError):
            skill.value = 6  # type: ignore[misc]


class TestHeroLookups:
    """Tests for hero read accessors."""

    def test_attribute_and_gauge(self, sample_hero: Hero) -> None:
        """Test reading resource values."""
        assert sample_hero.attribute("life_points") == 8
        assert sample_hero.maximum("life_points") == 20
        assert sample_hero.gauge("life_points") == (8, 20)

    def test_names_normalised(self) -> None:
        """Test resource and skill names are case and space insensitive."""
        hero = Hero(
            name="Alrik",
            resources={"Life Points": Resource(current=3, maximum=5)},
            skills={"Balsam Salabunde": Skill(value=7)},
            base_values={"mu": 12},
        )

        assert "life_points" in hero.resources
        assert hero.attribute("LIFE POINTS") == 3
        assert hero.skill_value("balsam salabunde") == 7
        assert hero.base_value("Mu") == 12

    def test_unknown_attribute(self, sample_hero: Hero) -> None:
        """Test an unknown resource raises with the known names."""
        with pytest.raises(UnknownAttribute) as exc_info:
            sample_hero.attribute("mana")

        assert exc_info.value.details["known"] == ["astral_points", "fate_points", "life_points"]

    def test_unknown_base_value(self, sample_hero: Hero) -> None:
        """Test an unknown base value raises UnknownAttribute."""
        with pytest.raises(UnknownAttribute):
            sample_hero.base_value("XX")

    def test_unknown_skill(self, sample_hero: Hero) -> None:
        """Test an unknown skill raises UnknownSkill."""
        with pytest.raises(UnknownSkill):
            sample_hero.skill("fliegen")

    def test_snapshot(self, sample_hero: Hero) -> None:
        """Test the snapshot lists every resource's current value."""
        assert sample_hero.snapshot() == {
            "life_points": 8,
            "astral_points": 12,
            "fate_points": 3,
        }

    def test_invalid_resource_name(self) -> None:
        """Test resource names must be identifiers."""
        with pytest.raises(ValidationError):
            Hero(name="Alrik", resources={"1st": Resource(current=1)})

    def test_unknown_base_value_name_rejected(self) -> None:
        """Test base values are limited to the eight DSA attributes."""
        with pytest.raises(ValidationError, match="XY"):
            Hero(name="Alrik", base_values={"MU": 12, "xy": 3})

    def test_all_base_value_names_accepted(self) -> None:
        """Test every DSA attribute is a valid base value."""
        hero = Hero(name="Alrik", base_values={name: 10 for name in BASE_VALUE_NAMES})

        assert len(hero.base_values) == 8

    def test_empty_name(self) -> None:
        """Test a hero needs a name."""
        with pytest.raises(ValidationError):
            Hero(name="")


class TestApplyDelta:
    """Tests for clamped mutation."""

    def test_damage_clamped(self, sample_hero: Hero) -> None:
        """Test damage beyond the floor is cut off."""
        delta = sample_hero.apply_delta("life_points", -10)

        assert delta == AppliedDelta(
            attribute="life_points",
            requested=-10,
            applied=-8,
            before=8,
            after=0,
            maximum=20,
        )
        assert delta.clamped
        assert delta.overflow == -2
        assert sample_hero.attribute("life_points") == 0

    def test_healing_clamped(self, sample_hero: Hero) -> None:
        """Test healing beyond the maximum is cut off."""
        delta = sample_hero.apply_delta("life_points", 50)

        assert delta.applied == 12
        assert sample_hero.attribute("life_points") == 20

    def test_within_bounds(self, sample_hero: Hero) -> None:
        """Test an in-range change is applied in full."""
        delta = sample_hero.apply_delta("astral_points", -2)

        assert delta.applied == -2
        assert not delta.clamped
        assert delta.overflow == 0

    def test_unbounded_maximum(self) -> None:
        """Test a resource without maximum grows freely."""
        hero = Hero(name="Alrik", resources={"adventure_points": Resource(current=0)})

        delta = hero.apply_delta("adventure_points", 500)

        assert delta.after == 500
        assert delta.maximum is None

    def test_unknown_attribute_untouched(self, sample_hero: Hero) -> None:
        """Test the hero is unchanged when the attribute is unknown."""
        before = sample_hero.model_dump()

        with pytest.raises(UnknownAttribute):
            sample_hero.apply_delta("mana", -1)

        assert sample_hero.model_dump() == before


class TestSetMaximum:
    """Tests for changing a resource maximum."""

    def test_raise_keeps_current(self, sample_hero: Hero) -> None:
        """Test a higher maximum leaves the current value alone."""
        delta = sample_hero.set_maximum("life_points", 30)

        assert delta.applied == 0
        assert delta.maximum == 30
        assert sample_hero.gauge("life_points") == (8, 30)

    def test_lower_reclamps_current(self, sample_hero: Hero) -> None:
        """Test a maximum below the current value pulls it down."""
        delta = sample_hero.set_maximum("astral_points", 4)

        assert delta.requested == 0
        assert delta.applied == -8
        assert sample_hero.gauge("astral_points") == (4, 4)

    def test_below_floor_rejected(self) -> None:
        """Test a maximum under the floor is refused without changes."""
        hero = Hero(
            name="Alrik",
            resources={"stamina": Resource(current=5, maximum=10, floor=2)},
        )

        with pytest.raises(InvalidMaximum) as exc_info:
            hero.set_maximum("stamina", 1)

        assert exc_info.value.details["floor"] == 2
        assert hero.gauge("stamina") == (5, 10)

    def test_unknown_attribute(self, sample_hero: Hero) -> None:
        """Test an unknown resource raises UnknownAttribute."""
        with pytest.raises(UnknownAttribute):
            sample_hero.set_maximum("mana", 10)


class TestNormalizeName:
    """Tests for name normalisation."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("life_points", "life_points"),
            ("Life Points", "life_points"),
            ("  Astral   Points ", "astral_points"),
        ],
    )
    def test_normalize(self, name: str, expected: str) -> None:
        """Test names are lowercased with underscores."""
        assert normalize_name(name) == expected
