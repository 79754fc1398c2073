"""Dice roll evaluation.

This module walks a parsed Expression, draws every die from an injected
RandomSource and produces an immutable RollOutcome. The evaluator is rule
agnostic: it only flags terms whose dice all landed on the lowest or the
highest face. Whether such a roll is a critical is decided by the check
policy in ``dsa_tracker.engine.checks``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import assert_never

from dsa_tracker.core.logging import get_logger
from dsa_tracker.engine.notation import (
    Constant,
    DiceTerm,
    Expression,
    NotationParser,
    SelectorKind,
    Sign,
)
from dsa_tracker.engine.rng import RandomSource, SystemRandomSource


logger = get_logger(__name__)


class RollFlag(StrEnum):
    """Special conditions detected while rolling."""

    EXTREME_LOW = "extreme_low"
    """Every die showed a 1."""

    EXTREME_HIGH = "extreme_high"
    """Every die showed its highest face."""


@dataclass(frozen=True)
class TermRoll:
    """The dice rolled for one DiceTerm.

    Attributes:
        term: The term that was rolled.
        sign: Sign the term contributes with.
        raw: Every die in the order it was drawn, before any selector.
        selected: The dice counted towards the total, in draw order.
        flags: Extreme conditions of the raw dice.
    """

    term: DiceTerm
    sign: Sign
    raw: tuple[int, ...]
    selected: tuple[int, ...]
    flags: frozenset[RollFlag] = frozenset()

    @property
    def subtotal(self) -> int:
        """Signed sum of the selected dice."""
        return int(self.sign) * sum(self.selected)


@dataclass(frozen=True)
class RollOutcome:
    """Immutable result of evaluating one expression.

    Attributes:
        notation: Canonical notation of the evaluated expression.
        rolls: One TermRoll per dice term, in declaration order.
        modifier: Signed sum of all constant terms.
        total: Final result.
        flags: Flags shared by every dice term of the expression.
        single_die: Whether the expression rolled exactly one die.
    """

    notation: str
    rolls: tuple[TermRoll, ...]
    modifier: int
    total: int
    flags: frozenset[RollFlag] = field(default_factory=frozenset)
    single_die: bool = False

    @property
    def raw(self) -> list[list[int]]:
        """Raw dice per term."""
        return [list(roll.raw) for roll in self.rolls]

    @property
    def selected(self) -> list[list[int]]:
        """Selected dice per term."""
        return [list(roll.selected) for roll in self.rolls]

    @property
    def dice(self) -> list[int]:
        """All raw dice of the expression in draw order."""
        return [die for roll in self.rolls for die in roll.raw]

    @property
    def is_extreme_low(self) -> bool:
        return RollFlag.EXTREME_LOW in self.flags

    @property
    def is_extreme_high(self) -> bool:
        return RollFlag.EXTREME_HIGH in self.flags


def select_dice(raw: tuple[int, ...], term: DiceTerm) -> tuple[int, ...]:
    """Apply a term's keep/drop selector.

    Selection works on a sorted copy of the indices; the returned dice keep
    the order in which they were drawn. Ties are broken by draw order.

    Args:
        raw: The dice in draw order.
        term: The term whose selector is applied.

    Returns:
        The dice that count towards the total.
    """
    selector = term.selector
    if selector is None:
        return raw

    ranked = sorted(range(len(raw)), key=lambda i: (raw[i], i))
    n = selector.count
    match selector.kind:
        case SelectorKind.KEEP_HIGHEST:
            chosen = ranked[len(ranked) - n :]
        case SelectorKind.KEEP_LOWEST:
            chosen = ranked[:n]
        case SelectorKind.DROP_HIGHEST:
            chosen = ranked[: len(ranked) - n]
        case SelectorKind.DROP_LOWEST:
            chosen = ranked[n:]
        case _:
            assert_never(selector.kind)

    keep = set(chosen)
    return tuple(die for i, die in enumerate(raw) if i in keep)


def _term_flags(raw: tuple[int, ...], faces: int) -> frozenset[RollFlag]:
    flags: set[RollFlag] = set()
    if all(die == 1 for die in raw):
        flags.add(RollFlag.EXTREME_LOW)
    if all(die == faces for die in raw):
        flags.add(RollFlag.EXTREME_HIGH)
    return frozenset(flags)


def evaluate(expr: Expression, rng: RandomSource) -> RollOutcome:
    """Evaluate an expression against a random source.

    Dice are drawn term by term in declaration order, so the same source
    sequence always yields the same outcome.

    Args:
        expr: A parsed expression.
        rng: Source of uniform integers.

    Returns:
        RollOutcome with raw and selected dice per term.
    """
    rolls: list[TermRoll] = []
    modifier = 0
    total = 0

    for signed in expr.terms:
        term = signed.term
        match term:
            case DiceTerm():
                raw = tuple(rng.next_uniform(1, term.faces) for _ in range(term.count))
                roll = TermRoll(
                    term=term,
                    sign=signed.sign,
                    raw=raw,
                    selected=select_dice(raw, term),
                    flags=_term_flags(raw, term.faces),
                )
                rolls.append(roll)
                total += roll.subtotal
            case Constant():
                value = int(signed.sign) * term.value
                modifier += value
                total += value
            case _:
                assert_never(term)

    flags: frozenset[RollFlag] = frozenset()
    if rolls:
        flags = frozenset.intersection(*(roll.flags for roll in rolls))

    outcome = RollOutcome(
        notation=expr.to_notation(),
        rolls=tuple(rolls),
        modifier=modifier,
        total=total,
        flags=flags,
        single_die=expr.is_single_die,
    )
    logger.debug(
        "Dice rolled",
        notation=outcome.notation,
        dice=outcome.dice,
        total=outcome.total,
        flags=sorted(outcome.flags),
    )
    return outcome


class DiceRoller:
    """Parses and evaluates notation with a bound random source.

    Example:
        >>> roller = DiceRoller(seed=42)
        >>> result = roller.roll("1d20+5")
        >>> 6 <= result.total <= 25
        True
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        *,
        seed: int | None = None,
        parser: NotationParser | None = None,
    ) -> None:
        """Initialize the dice roller.

        Args:
            rng: Random source to draw from; a seeded system source by default.
            seed: Seed for the default system source. Ignored if rng is given.
            parser: Parser with custom limits; the default parser otherwise.
        """
        self.rng: RandomSource = rng if rng is not None else SystemRandomSource(seed=seed)
        self.parser = parser or NotationParser()

    def parse(self, notation: str) -> Expression:
        return self.parser.parse(notation)

    def roll(self, notation: str) -> RollOutcome:
        """Parse and evaluate notation.

        Args:
            notation: Roll notation, e.g. ``2d6kh1+3``.

        Returns:
            The RollOutcome.

        Raises:
            ParseError: If the notation is invalid.
        """
        return evaluate(self.parse(notation), self.rng)


__all__ = [
    "RollFlag",
    "TermRoll",
    "RollOutcome",
    "select_dice",
    "evaluate",
    "DiceRoller",
]
