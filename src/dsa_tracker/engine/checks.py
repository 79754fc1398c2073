"""Game rules for classifying checks.

The dice evaluator only reports which dice landed on extreme faces. This
module turns a RollOutcome into a success, failure or critical according
to a configurable CheckPolicy, and implements the DSA talent check where
three d20 are rolled against three base values and the talent value
buffers the dice that came up too high.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import StrEnum

from dsa_tracker.core.config import RuleSettings
from dsa_tracker.engine.dice import RollFlag, RollOutcome


class CheckMode(StrEnum):
    """How a check total is compared with its target."""

    ROLL_UNDER = "roll_under"
    """Success when the total is at most the target."""

    ROLL_OVER = "roll_over"
    """Success when the total is at least the target."""


class CheckOutcome(StrEnum):
    """Classification of a check."""

    SUCCESS = "success"
    FAILURE = "failure"
    CRITICAL_SUCCESS = "critical_success"
    CRITICAL_FAILURE = "critical_failure"

    @property
    def is_success(self) -> bool:
        return self in (CheckOutcome.SUCCESS, CheckOutcome.CRITICAL_SUCCESS)

    @property
    def is_critical(self) -> bool:
        return self in (CheckOutcome.CRITICAL_SUCCESS, CheckOutcome.CRITICAL_FAILURE)


def _crit_from_setting(value: str) -> CheckOutcome | None:
    return None if value == "none" else CheckOutcome(value)


@dataclass(frozen=True)
class CheckPolicy:
    """Rules for turning a roll into a check outcome.

    Attributes:
        mode: Roll-under or roll-over comparison.
        crit_on_low: Outcome of an all-ones roll, ``None`` for no critical.
        crit_on_high: Outcome of an all-maximum roll, ``None`` for no critical.
        single_die_only: Only expressions of a single die can be critical.
    """

    mode: CheckMode = CheckMode.ROLL_UNDER
    crit_on_low: CheckOutcome | None = CheckOutcome.CRITICAL_FAILURE
    crit_on_high: CheckOutcome | None = CheckOutcome.CRITICAL_SUCCESS
    single_die_only: bool = True

    @classmethod
    def from_settings(cls, rules: RuleSettings) -> CheckPolicy:
        return cls(
            mode=CheckMode(rules.check_mode),
            crit_on_low=_crit_from_setting(rules.crit_on_low),
            crit_on_high=_crit_from_setting(rules.crit_on_high),
            single_die_only=rules.crit_single_die_only,
        )

    def margin(self, total: int, target: int) -> int:
        """Signed quality points; non-negative means the check succeeded."""
        if self.mode is CheckMode.ROLL_UNDER:
            return target - total
        return total - target

    def critical(self, outcome: RollOutcome) -> CheckOutcome | None:
        """The critical classification of a roll, if any."""
        if self.single_die_only:
            if not outcome.single_die:
                return None
            flags = outcome.flags
        else:
            flags = frozenset().union(*(roll.flags for roll in outcome.rolls))

        if RollFlag.EXTREME_LOW in flags and self.crit_on_low is not None:
            return self.crit_on_low
        if RollFlag.EXTREME_HIGH in flags and self.crit_on_high is not None:
            return self.crit_on_high
        return None

    def classify(self, outcome: RollOutcome, target: int) -> tuple[CheckOutcome, int]:
        """Classify a roll against a target.

        Criticals take precedence over the comparison with the target.

        Returns:
            The outcome and the margin.
        """
        margin = self.margin(outcome.total, target)
        critical = self.critical(outcome)
        if critical is not None:
            return critical, margin
        return (CheckOutcome.SUCCESS if margin >= 0 else CheckOutcome.FAILURE), margin


@dataclass(frozen=True)
class SkillCheckResult:
    """Result of a single-roll skill check.

    Attributes:
        skill: Name of the skill checked.
        target: Skill value after the modifier.
        modifier: Difficulty; positive values make the check harder.
        outcome: The roll.
        result: The classification.
        margin: Points left over (or missing, when negative).
    """

    skill: str
    target: int
    modifier: int
    outcome: RollOutcome
    result: CheckOutcome
    margin: int

    @property
    def success(self) -> bool:
        return self.result.is_success

    @property
    def critical(self) -> bool:
        return self.result.is_critical


# =============================================================================
# Talent checks (3d20)
# =============================================================================


TALENT_NOTATION = "3d20"


@dataclass(frozen=True)
class TalentCheckResult:
    """Result of a DSA talent check.

    Attributes:
        skill: Name of the talent.
        value: Talent value before the modifier.
        modifier: Sum of modifiers; positive values make the check harder.
        checks: The three base value names rolled against.
        stats: The base values after any reduction by an excessive modifier.
        dice: The three d20 results.
        remainder: Talent points left after compensating high dice.
        success: Whether the check passed.
        critical: Whether two or more dice showed 1 or 20.
        outcome: The underlying roll.
    """

    skill: str
    value: int
    modifier: int
    checks: tuple[str, str, str]
    stats: tuple[int, int, int]
    dice: tuple[int, int, int]
    remainder: int
    success: bool
    critical: bool
    outcome: RollOutcome

    @property
    def result(self) -> CheckOutcome:
        if self.critical:
            return CheckOutcome.CRITICAL_SUCCESS if self.success else CheckOutcome.CRITICAL_FAILURE
        return CheckOutcome.SUCCESS if self.success else CheckOutcome.FAILURE

    @property
    def effective_value(self) -> int:
        return max(0, self.value - self.modifier)


def resolve_talent_check(
    skill: str,
    value: int,
    modifier: int,
    checks: tuple[str, str, str],
    base_values: tuple[int, int, int],
    outcome: RollOutcome,
) -> TalentCheckResult:
    """Apply the talent check rules to a 3d20 roll.

    A modifier larger than the talent value lowers every base value by the
    excess. Each die above its base value uses up talent points. Two or
    more 20s fail critically; two or more 1s succeed critically.

    Args:
        skill: Talent name.
        value: Talent value.
        modifier: Difficulty, positive is harder.
        checks: Names of the three base values.
        base_values: The three base values, in the order of ``checks``.
        outcome: A roll of ``3d20``.

    Returns:
        The TalentCheckResult.
    """
    dice = tuple(outcome.dice)
    if len(dice) != 3:
        raise ValueError(f"Talent check needs exactly three dice, got {len(dice)}")

    points = value - modifier
    reduction = min(0, points)
    stats = tuple(base + reduction for base in base_values)
    consumed = sum(max(0, die - stat) for die, stat in zip(dice, stats))
    remainder = max(0, points) - consumed

    faces = Counter(dice)
    fumbles = faces[20]
    luck = faces[1]
    critical = fumbles > 1 or luck > 1
    success = fumbles < 2 and (remainder >= 0 or luck > 1)

    return TalentCheckResult(
        skill=skill,
        value=value,
        modifier=modifier,
        checks=checks,
        stats=stats,  # type: ignore[arg-type]
        dice=dice,  # type: ignore[arg-type]
        remainder=remainder,
        success=success,
        critical=critical,
        outcome=outcome,
    )


__all__ = [
    "CheckMode",
    "CheckOutcome",
    "CheckPolicy",
    "SkillCheckResult",
    "TALENT_NOTATION",
    "TalentCheckResult",
    "resolve_talent_check",
]
