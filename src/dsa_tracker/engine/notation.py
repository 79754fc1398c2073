"""Dice notation parsing.

Turns roll notation such as ``3d6+2`` or ``2d20kh1-1d4`` into an immutable
expression tree. The grammar is::

    expr     := [sign] term (sign term)*
    sign     := '+' | '-'
    term     := [count] 'd' faces [selector] | integer
    selector := ('k' | 'd') ('h' | 'l') integer

Whitespace between tokens is ignored and letters are case-insensitive. The
parser is strict: a notation either parses completely or raises a
ParseError subclass describing the first problem found.

Example:
    >>> expr = parse("3d6+2")
    >>> expr.to_notation()
    '3d6+2'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Iterator, NamedTuple

from dsa_tracker.core.exceptions import (
    InvalidDiceCount,
    InvalidFaceCount,
    InvalidSelector,
    NotationSyntaxError,
)


DEFAULT_MAX_DICE_COUNT = 100
DEFAULT_MAX_FACES = 1000


# =============================================================================
# Expression Tree
# =============================================================================


class Sign(IntEnum):
    """Sign applied to a term when it is added to the total."""

    PLUS = 1
    MINUS = -1

    @property
    def symbol(self) -> str:
        return "+" if self is Sign.PLUS else "-"


class SelectorKind(StrEnum):
    """Keep/drop selectors that can follow a dice term."""

    KEEP_HIGHEST = "kh"
    KEEP_LOWEST = "kl"
    DROP_HIGHEST = "dh"
    DROP_LOWEST = "dl"


@dataclass(frozen=True)
class Selector:
    """A keep/drop selector such as ``kh1``.

    Attributes:
        kind: Which dice to keep or drop.
        count: How many dice the selector keeps or drops.
    """

    kind: SelectorKind
    count: int

    def to_notation(self) -> str:
        return f"{self.kind.value}{self.count}"


@dataclass(frozen=True)
class DiceTerm:
    """One group of same-sided dice.

    Attributes:
        count: Number of dice rolled, at least one.
        faces: Number of faces per die, at least two.
        selector: Optional keep/drop selector applied after rolling.
    """

    count: int
    faces: int
    selector: Selector | None = None

    def to_notation(self) -> str:
        text = f"{self.count}d{self.faces}"
        if self.selector is not None:
            text += self.selector.to_notation()
        return text


@dataclass(frozen=True)
class Constant:
    """A constant modifier. The sign lives on the enclosing SignedTerm."""

    value: int

    def to_notation(self) -> str:
        return str(self.value)


Term = DiceTerm | Constant


@dataclass(frozen=True)
class SignedTerm:
    """A term together with the sign it contributes with."""

    sign: Sign
    term: Term


@dataclass(frozen=True)
class Expression:
    """A parsed roll notation.

    Terms are kept in declaration order and combined left to right.

    Attributes:
        terms: The signed terms of the expression, never empty.
    """

    terms: tuple[SignedTerm, ...]

    def __post_init__(self) -> None:
        if not self.terms:
            raise NotationSyntaxError("Empty dice expression")

    @property
    def dice_terms(self) -> tuple[DiceTerm, ...]:
        """All dice terms in declaration order."""
        return tuple(st.term for st in self.terms if isinstance(st.term, DiceTerm))

    @property
    def is_single_die(self) -> bool:
        """Whether exactly one die is rolled in the whole expression."""
        dice = self.dice_terms
        return len(dice) == 1 and dice[0].count == 1

    def to_notation(self) -> str:
        """Render the expression in canonical notation.

        The canonical form spells out every dice count, omits a leading
        plus sign and uses no whitespace, so ``d20 + 3`` becomes ``1d20+3``.
        """
        parts: list[str] = []
        for index, signed in enumerate(self.terms):
            if index > 0 or signed.sign is Sign.MINUS:
                parts.append(signed.sign.symbol)
            parts.append(signed.term.to_notation())
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_notation()


# =============================================================================
# Tokenizer
# =============================================================================


class TokenType(StrEnum):
    """Lexical categories of the notation grammar."""

    INTEGER = "integer"
    DICE = "d"
    SELECTOR = "selector"
    PLUS = "+"
    MINUS = "-"


class Token(NamedTuple):
    type: TokenType
    text: str
    position: int


def _tokenize(notation: str) -> Iterator[Token]:
    """Split notation into tokens, skipping whitespace.

    A ``d`` directly followed by ``h`` or ``l`` is a drop selector, any other
    ``d`` separates count and faces.
    """
    text = notation.lower()
    length = len(text)
    index = 0
    while index < length:
        char = text[index]
        if char.isspace():
            index += 1
        elif char.isdigit():
            start = index
            while index < length and text[index].isdigit():
                index += 1
            yield Token(TokenType.INTEGER, text[start:index], start)
        elif char in "kd" and index + 1 < length and text[index + 1] in "hl":
            yield Token(TokenType.SELECTOR, text[index : index + 2], index)
            index += 2
        elif char == "d":
            yield Token(TokenType.DICE, char, index)
            index += 1
        elif char == "+":
            yield Token(TokenType.PLUS, char, index)
            index += 1
        elif char == "-":
            yield Token(TokenType.MINUS, char, index)
            index += 1
        else:
            raise NotationSyntaxError(
                f"Unexpected character {notation[index]!r}",
                notation=notation,
                position=index,
            )


# =============================================================================
# Parser
# =============================================================================


class NotationParser:
    """Recursive-descent parser for roll notation.

    The parser holds no state between calls; limits only bound the size of
    dice terms it accepts.

    Example:
        >>> parser = NotationParser(max_dice_count=10)
        >>> parser.parse("2d6kh1").dice_terms[0].selector.kind
        <SelectorKind.KEEP_HIGHEST: 'kh'>
    """

    def __init__(
        self,
        *,
        max_dice_count: int = DEFAULT_MAX_DICE_COUNT,
        max_faces: int = DEFAULT_MAX_FACES,
    ) -> None:
        """Initialize the parser.

        Args:
            max_dice_count: Largest dice count a single term may request.
            max_faces: Largest face count a single term may request.
        """
        self.max_dice_count = max_dice_count
        self.max_faces = max_faces

    def parse(self, notation: str) -> Expression:
        """Parse a notation string.

        Args:
            notation: Roll notation, e.g. ``3d6+2``.

        Returns:
            The parsed Expression.

        Raises:
            NotationSyntaxError: If the notation is malformed.
            InvalidDiceCount: If a term rolls zero dice or too many.
            InvalidFaceCount: If a die has fewer than two faces or too many.
            InvalidSelector: If a selector keeps or drops more dice than rolled.
        """
        return _ParseRun(self, notation).expression()


class _ParseRun:
    """Cursor over the tokens of one notation."""

    def __init__(self, parser: NotationParser, notation: str) -> None:
        self.parser = parser
        self.notation = notation
        self.tokens = list(_tokenize(notation))
        self.index = 0

    def _peek(self) -> Token | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _position(self) -> int:
        token = self._peek()
        return token.position if token is not None else len(self.notation)

    def _syntax_error(self, message: str) -> NotationSyntaxError:
        return NotationSyntaxError(message, notation=self.notation, position=self._position())

    def _expect_integer(self, what: str) -> Token:
        token = self._peek()
        if token is None or token.type is not TokenType.INTEGER:
            found = "end of notation" if token is None else repr(token.text)
            raise self._syntax_error(f"Expected {what}, found {found}")
        return self._advance()

    def expression(self) -> Expression:
        if not self.tokens:
            raise NotationSyntaxError("Empty dice expression", notation=self.notation)

        terms: list[SignedTerm] = []
        sign = Sign.PLUS
        token = self._peek()
        if token is not None and token.type in (TokenType.PLUS, TokenType.MINUS):
            sign = self._sign()
        terms.append(SignedTerm(sign, self._term()))

        while (token := self._peek()) is not None:
            if token.type not in (TokenType.PLUS, TokenType.MINUS):
                raise self._syntax_error(f"Expected '+' or '-', found {token.text!r}")
            sign = self._sign()
            terms.append(SignedTerm(sign, self._term()))

        return Expression(tuple(terms))

    def _sign(self) -> Sign:
        token = self._advance()
        return Sign.PLUS if token.type is TokenType.PLUS else Sign.MINUS

    def _term(self) -> Term:
        token = self._peek()
        if token is None:
            raise self._syntax_error("Expected a term after operator")

        count: int | None = None
        count_position = token.position
        if token.type is TokenType.INTEGER:
            self._advance()
            count = int(token.text)
            following = self._peek()
            if following is None or following.type is not TokenType.DICE:
                return Constant(count)
        elif token.type is not TokenType.DICE:
            raise self._syntax_error(f"Expected a dice term or number, found {token.text!r}")

        self._advance()  # 'd'
        return self._dice_term(1 if count is None else count, count_position)

    def _dice_term(self, count: int, count_position: int) -> DiceTerm:
        if count < 1:
            raise InvalidDiceCount(
                f"Dice count must be at least 1, got {count}",
                notation=self.notation,
                position=count_position,
            )
        if count > self.parser.max_dice_count:
            raise InvalidDiceCount(
                f"Dice count {count} exceeds the maximum of {self.parser.max_dice_count}",
                notation=self.notation,
                position=count_position,
            )

        token = self._peek()
        if (
            token is not None
            and token.type is TokenType.MINUS
            and self.index + 1 < len(self.tokens)
            and self.tokens[self.index + 1].type is TokenType.INTEGER
        ):
            raise InvalidFaceCount(
                "Face count must be positive",
                notation=self.notation,
                position=token.position,
            )

        faces_token = self._expect_integer("a face count after 'd'")
        faces = int(faces_token.text)
        if faces < 2:
            raise InvalidFaceCount(
                f"Dice need at least 2 faces, got {faces}",
                notation=self.notation,
                position=faces_token.position,
            )
        if faces > self.parser.max_faces:
            raise InvalidFaceCount(
                f"Face count {faces} exceeds the maximum of {self.parser.max_faces}",
                notation=self.notation,
                position=faces_token.position,
            )

        selector: Selector | None = None
        token = self._peek()
        if token is not None and token.type is TokenType.SELECTOR:
            self._advance()
            amount_token = self._expect_integer(f"a count after {token.text!r}")
            amount = int(amount_token.text)
            if not 1 <= amount <= count:
                raise InvalidSelector(
                    f"Selector {token.text}{amount} needs between 1 and {count} dice",
                    notation=self.notation,
                    position=token.position,
                )
            selector = Selector(SelectorKind(token.text), amount)

        return DiceTerm(count=count, faces=faces, selector=selector)


_default_parser = NotationParser()


def parse(notation: str) -> Expression:
    """Parse notation with the default limits.

    Args:
        notation: Roll notation, e.g. ``2d6kh1``.

    Returns:
        The parsed Expression.
    """
    return _default_parser.parse(notation)


__all__ = [
    "Sign",
    "SelectorKind",
    "Selector",
    "DiceTerm",
    "Constant",
    "Term",
    "SignedTerm",
    "Expression",
    "NotationParser",
    "parse",
]
