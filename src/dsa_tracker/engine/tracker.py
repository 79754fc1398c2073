"""Tracker: maps play-table intents onto dice rolls and hero mutations.

The Tracker is where game policy lives. It composes the notation parser,
the evaluator and the hero model, and records every mutation in the hero's
TransactionLog before returning. It introduces no failure modes of its own:
ParseError and ModelError from its collaborators propagate unchanged, and
a failed call leaves both the hero and its log untouched.

A Tracker is meant to be owned by a single command loop. It keeps one log
per Hero object, so two heroes that share a name never share a history.

Example:
    >>> tracker = Tracker(rng=ScriptedRandomSource([4, 2, 5]))
    >>> tracker.roll("3d6+2").total
    13
"""

from __future__ import annotations

from dsa_tracker.core.config import RuleSettings
from dsa_tracker.core.exceptions import UnknownSkill
from dsa_tracker.core.logging import get_logger
from dsa_tracker.engine.checks import (
    TALENT_NOTATION,
    CheckPolicy,
    SkillCheckResult,
    TalentCheckResult,
    resolve_talent_check,
)
from dsa_tracker.engine.dice import DiceRoller, RollOutcome
from dsa_tracker.engine.notation import NotationParser
from dsa_tracker.engine.rng import RandomSource, SystemRandomSource
from dsa_tracker.engine.transactions import TransactionKind, TransactionLog
from dsa_tracker.models.hero import AppliedDelta, Hero


logger = get_logger(__name__)


class Tracker:
    """Command layer over the dice engine and the hero model."""

    def __init__(
        self,
        *,
        rng: RandomSource | None = None,
        policy: CheckPolicy | None = None,
        parser: NotationParser | None = None,
        check_notation: str = "1d20",
    ) -> None:
        """Initialize the tracker.

        Args:
            rng: Random source for every roll; an unseeded system source by default.
            policy: Check classification rules.
            parser: Notation parser, e.g. with custom limits.
            check_notation: Notation rolled by ``skill_check`` when none is given.
        """
        self.roller = DiceRoller(
            rng if rng is not None else SystemRandomSource(),
            parser=parser or NotationParser(),
        )
        self.policy = policy or CheckPolicy()
        self.check_notation = check_notation
        # Keyed by id(); the hero is kept alongside so its id cannot be reused.
        self._logs: dict[int, tuple[Hero, TransactionLog]] = {}

    @property
    def rng(self) -> RandomSource:
        return self.roller.rng

    @property
    def parser(self) -> NotationParser:
        return self.roller.parser

    @classmethod
    def from_settings(cls, rules: RuleSettings, *, rng: RandomSource | None = None) -> Tracker:
        """Build a tracker from rule settings."""
        return cls(
            rng=rng,
            policy=CheckPolicy.from_settings(rules),
            parser=NotationParser(
                max_dice_count=rules.max_dice_count,
                max_faces=rules.max_faces,
            ),
            check_notation=rules.check_notation,
        )

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def history(self, hero: Hero) -> TransactionLog:
        """The transaction log of ``hero``, started on first use."""
        entry = self._logs.get(id(hero))
        if entry is None:
            entry = (hero, TransactionLog(hero))
            self._logs[id(hero)] = entry
        return entry[1]

    def attach(self, hero: Hero, log: TransactionLog) -> None:
        """Continue tracking a hero with a previously saved log."""
        self._logs[id(hero)] = (hero, log)

    # -------------------------------------------------------------------------
    # Non-mutating operations
    # -------------------------------------------------------------------------

    def roll(self, notation: str) -> RollOutcome:
        """Parse and evaluate notation without touching any hero.

        Raises:
            ParseError: If the notation is invalid.
        """
        return self.roller.roll(notation)

    def skill_check(
        self,
        hero: Hero,
        skill_name: str,
        notation: str | None = None,
        *,
        modifier: int = 0,
    ) -> SkillCheckResult:
        """Roll against a skill value.

        The hero is not modified; callers decide on consequences.

        Args:
            hero: The hero making the check.
            skill_name: Skill to check against.
            notation: Roll notation; the configured check notation by default.
            modifier: Difficulty subtracted from the skill value.

        Raises:
            UnknownSkill: If the hero lacks the skill.
            ParseError: If the notation is invalid.
        """
        target = hero.skill_value(skill_name) - modifier
        outcome = self.roll(notation if notation is not None else self.check_notation)
        result, margin = self.policy.classify(outcome, target)
        logger.info(
            "Skill check",
            hero=hero.name,
            skill=skill_name,
            target=target,
            total=outcome.total,
            result=result,
        )
        return SkillCheckResult(
            skill=skill_name,
            target=target,
            modifier=modifier,
            outcome=outcome,
            result=result,
            margin=margin,
        )

    def talent_check(self, hero: Hero, skill_name: str, modifier: int = 0) -> TalentCheckResult:
        """Roll a DSA talent check (3d20 against three base values).

        Raises:
            UnknownSkill: If the hero lacks the skill or it has no check triple.
            UnknownAttribute: If a base value of the triple is missing.
        """
        skill = hero.skill(skill_name)
        if skill.checks is None:
            raise UnknownSkill(skill_name, details={"reason": "no talent check defined"})
        base_values = tuple(hero.base_value(name) for name in skill.checks)
        outcome = self.roll(TALENT_NOTATION)
        result = resolve_talent_check(
            skill_name,
            skill.value,
            modifier,
            skill.checks,
            base_values,  # type: ignore[arg-type]
            outcome,
        )
        logger.info(
            "Talent check",
            hero=hero.name,
            skill=skill_name,
            dice=list(result.dice),
            remainder=result.remainder,
            result=result.result,
        )
        return result

    # -------------------------------------------------------------------------
    # Mutating operations
    # -------------------------------------------------------------------------

    def _mutate(
        self,
        hero: Hero,
        kind: TransactionKind,
        attribute: str,
        delta: int,
        description: str,
        outcome: RollOutcome | None = None,
    ) -> AppliedDelta:
        log = self.history(hero)
        applied = hero.apply_delta(attribute, delta)
        return self._record(log, hero, kind, description, applied, outcome)

    def _record(
        self,
        log: TransactionLog,
        hero: Hero,
        kind: TransactionKind,
        description: str,
        applied: AppliedDelta,
        outcome: RollOutcome | None = None,
    ) -> AppliedDelta:
        log.append(hero, kind, description, applied, outcome)
        logger.info(
            "Hero mutated",
            hero=hero.name,
            kind=kind,
            attribute=applied.attribute,
            requested=applied.requested,
            applied=applied.applied,
            value=applied.after,
        )
        return applied

    def apply_damage(self, hero: Hero, attribute: str, amount: int) -> AppliedDelta:
        """Subtract ``amount`` from a resource.

        Raises:
            UnknownAttribute: If the hero has no such resource.
        """
        return self._mutate(
            hero,
            TransactionKind.DAMAGE,
            attribute,
            -amount,
            f"{amount} damage to {attribute}",
        )

    def recover(self, hero: Hero, attribute: str, notation: str) -> AppliedDelta:
        """Roll ``notation`` and add the total to a resource.

        The attribute is validated before rolling so that an unknown name
        does not consume random values. A negative total recovers nothing.

        Raises:
            UnknownAttribute: If the hero has no such resource.
            ParseError: If the notation is invalid.
        """
        hero.attribute(attribute)
        outcome = self.roll(notation)
        return self._mutate(
            hero,
            TransactionKind.RECOVER,
            attribute,
            max(0, outcome.total),
            f"recover {attribute} by {outcome.notation} ({outcome.total})",
            outcome,
        )

    def spend(self, hero: Hero, attribute: str, amount: int = 1) -> AppliedDelta:
        """Spend points of a resource, e.g. a fate point.

        Raises:
            UnknownAttribute: If the hero has no such resource.
        """
        return self._mutate(
            hero,
            TransactionKind.SPEND,
            attribute,
            -amount,
            f"spend {amount} {attribute}",
        )

    def adjust(self, hero: Hero, attribute: str, delta: int) -> AppliedDelta:
        """Add a signed amount to a resource.

        Raises:
            UnknownAttribute: If the hero has no such resource.
        """
        return self._mutate(
            hero,
            TransactionKind.ADJUST,
            attribute,
            delta,
            f"adjust {attribute} by {delta:+d}",
        )

    def set_value(self, hero: Hero, attribute: str, value: int) -> AppliedDelta:
        """Set the current value of a resource, clamped to its bounds.

        Raises:
            UnknownAttribute: If the hero has no such resource.
        """
        current = hero.attribute(attribute)
        return self._mutate(
            hero,
            TransactionKind.SET,
            attribute,
            value - current,
            f"set {attribute} to {value}",
        )

    def set_maximum(self, hero: Hero, attribute: str, maximum: int) -> AppliedDelta:
        """Set the maximum of a resource; the current value is re-clamped.

        Raises:
            UnknownAttribute: If the hero has no such resource.
            InvalidMaximum: If the maximum is negative or below the floor.
        """
        log = self.history(hero)
        applied = hero.set_maximum(attribute, maximum)
        return self._record(
            log,
            hero,
            TransactionKind.MAXIMUM,
            f"set maximum of {attribute} to {maximum}",
            applied,
        )


__all__ = ["Tracker"]
