"""Random sources for the dice evaluator.

The evaluator never touches the global ``random`` module; it draws from a
RandomSource passed in by the caller. Production code uses
SystemRandomSource, tests and replays use ScriptedRandomSource.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from dsa_tracker.core.exceptions import RandomSourceExhausted


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can draw a uniform integer from an inclusive range."""

    def next_uniform(self, minimum: int, maximum: int) -> int:
        """Return an integer N with ``minimum <= N <= maximum``."""
        ...


class SystemRandomSource:
    """Random source backed by a private ``random.Random`` instance.

    Example:
        >>> source = SystemRandomSource(seed=42)
        >>> 1 <= source.next_uniform(1, 20) <= 20
        True
    """

    def __init__(self, *, seed: int | None = None) -> None:
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def next_uniform(self, minimum: int, maximum: int) -> int:
        return self._random.randint(minimum, maximum)


class ScriptedRandomSource:
    """Random source that replays a fixed sequence of values.

    Each draw consumes the next value. Values outside the requested range
    are rejected so that a script written for the wrong dice fails loudly.

    Example:
        >>> source = ScriptedRandomSource([4, 2, 5])
        >>> [source.next_uniform(1, 6) for _ in range(3)]
        [4, 2, 5]
    """

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self._position = 0

    @property
    def remaining(self) -> int:
        return len(self._values) - self._position

    def next_uniform(self, minimum: int, maximum: int) -> int:
        if self._position >= len(self._values):
            raise RandomSourceExhausted(
                "Scripted random source has no values left",
                details={"consumed": self._position},
            )
        value = self._values[self._position]
        if not minimum <= value <= maximum:
            raise ValueError(
                f"Scripted value {value} outside requested range [{minimum}, {maximum}]"
            )
        self._position += 1
        return value


__all__ = [
    "RandomSource",
    "SystemRandomSource",
    "ScriptedRandomSource",
]
