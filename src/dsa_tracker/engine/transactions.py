"""Append-only transaction log of hero mutations.

Every mutating tracker call appends exactly one Transaction. The log keeps
a copy of the hero as it was when tracking began, so replaying the applied
deltas on that copy reproduces the hero's current resource values.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from dsa_tracker.engine.dice import RollOutcome
from dsa_tracker.models.hero import AppliedDelta, Hero


class TransactionKind(StrEnum):
    """Mutating operations recorded in the log."""

    DAMAGE = "damage"
    RECOVER = "recover"
    SPEND = "spend"
    ADJUST = "adjust"
    SET = "set"
    MAXIMUM = "maximum"


class Transaction(BaseModel):
    """One recorded mutation. Never modified after it is written."""

    model_config = ConfigDict(frozen=True)

    sequence: int = Field(ge=1, description="Position in the log, starting at 1")
    timestamp: datetime = Field(default_factory=datetime.now)
    hero: str
    kind: TransactionKind
    description: str
    delta: AppliedDelta
    outcome: RollOutcome | None = Field(
        default=None,
        description="Roll that produced the delta, if any",
    )
    snapshot: dict[str, int] = Field(description="Resource values after the mutation")


class TransactionLog:
    """Ordered, append-only history of one hero.

    Example:
        >>> log = TransactionLog(hero)
        >>> delta = hero.apply_delta("life_points", -3)
        >>> _ = log.append(hero, TransactionKind.DAMAGE, "3 damage", delta)
        >>> log.replay() == hero.snapshot()
        True
    """

    def __init__(self, initial: Hero, entries: Iterable[Transaction] = ()) -> None:
        """Start a log.

        Args:
            initial: The hero before the first logged mutation. A deep copy
                is kept.
            entries: Previously recorded transactions, e.g. from a saved
                session.
        """
        self._initial = initial.model_copy(deep=True)
        self._entries: list[Transaction] = list(entries)

    @property
    def initial(self) -> Hero:
        """A copy of the hero as it was before the first transaction."""
        return self._initial.model_copy(deep=True)

    @property
    def entries(self) -> tuple[Transaction, ...]:
        return tuple(self._entries)

    @property
    def last(self) -> Transaction | None:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._entries))

    def append(
        self,
        hero: Hero,
        kind: TransactionKind,
        description: str,
        delta: AppliedDelta,
        outcome: RollOutcome | None = None,
    ) -> Transaction:
        """Record a mutation that has already been applied to ``hero``."""
        transaction = Transaction(
            sequence=len(self._entries) + 1,
            hero=hero.name,
            kind=kind,
            description=description,
            delta=delta,
            outcome=outcome,
            snapshot=hero.snapshot(),
        )
        self._entries.append(transaction)
        return transaction

    def replay_hero(self) -> Hero:
        """Rebuild the hero by applying every logged delta to the initial copy.

        Maximum changes are replayed by setting the recorded maximum, which
        re-clamps the current value the same way it did originally.
        """
        hero = self.initial
        for transaction in self._entries:
            delta = transaction.delta
            if transaction.kind is TransactionKind.MAXIMUM and delta.maximum is not None:
                hero.set_maximum(delta.attribute, delta.maximum)
            else:
                hero.apply_delta(delta.attribute, delta.applied)
        return hero

    def replay(self) -> dict[str, int]:
        """Resource values reconstructed from the initial snapshot and the log."""
        return self.replay_hero().snapshot()

    def matches(self, hero: Hero) -> bool:
        """Whether replaying the log reproduces ``hero``'s current values."""
        return self.replay() == hero.snapshot()


__all__ = [
    "TransactionKind",
    "Transaction",
    "TransactionLog",
]
