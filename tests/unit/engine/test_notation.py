"""Tests for dice notation parsing."""

from __future__ import annotations

import pytest

from dsa_tracker.core.exceptions import (
    InvalidDiceCount,
    InvalidFaceCount,
    InvalidSelector,
    NotationSyntaxError,
    ParseError,
)
from dsa_tracker.engine.notation import (
    Constant,
    DiceTerm,
    Expression,
    NotationParser,
    Selector,
    SelectorKind,
    Sign,
    SignedTerm,
    parse,
)


class TestParse:
    """Tests for well-formed notation."""

    def test_dice_with_modifier(self) -> None:
        """Test 3d6+2 parses into one dice term and one constant."""
        expr = parse("3d6+2")

        assert expr.terms == (
            SignedTerm(Sign.PLUS, DiceTerm(count=3, faces=6)),
            SignedTerm(Sign.PLUS, Constant(2)),
        )

    def test_implicit_count(self) -> None:
        """Test d20 rolls one die."""
        expr = parse("d20")

        assert expr.dice_terms == (DiceTerm(count=1, faces=20),)
        assert expr.is_single_die

    def test_keep_highest(self) -> None:
        """Test selector parsing."""
        term = parse("2d6kh1").dice_terms[0]

        assert term.selector == Selector(SelectorKind.KEEP_HIGHEST, 1)

    @pytest.mark.parametrize(
        ("notation", "kind"),
        [
            ("4d6kl3", SelectorKind.KEEP_LOWEST),
            ("4d6dh1", SelectorKind.DROP_HIGHEST),
            ("4d6dl1", SelectorKind.DROP_LOWEST),
        ],
    )
    def test_selector_kinds(self, notation: str, kind: SelectorKind) -> None:
        """Test every selector kind is recognised."""
        selector = parse(notation).dice_terms[0].selector

        assert selector is not None
        assert selector.kind is kind

    def test_subtraction_and_multiple_terms(self) -> None:
        """Test terms keep declaration order and signs."""
        expr = parse("2d20kh1-1d4+3")

        assert [signed.sign for signed in expr.terms] == [Sign.PLUS, Sign.MINUS, Sign.PLUS]
        assert expr.dice_terms[1] == DiceTerm(count=1, faces=4)

    def test_leading_minus(self) -> None:
        """Test a leading sign applies to the first term."""
        expr = parse("-1d4")

        assert expr.terms[0].sign is Sign.MINUS

    def test_whitespace_and_case(self) -> None:
        """Test whitespace is ignored and letters are case-insensitive."""
        assert parse(" 2D6 KH1 + 1 ") == parse("2d6kh1+1")

    def test_constant_only(self) -> None:
        """Test a bare number is a valid expression."""
        expr = parse("5")

        assert expr.terms == (SignedTerm(Sign.PLUS, Constant(5)),)
        assert not expr.is_single_die

    def test_multiple_dice_not_single(self) -> None:
        """Test is_single_die is false for several dice."""
        assert not parse("2d20").is_single_die
        assert not parse("1d20+1d6").is_single_die


class TestToNotation:
    """Tests for canonical rendering."""

    @pytest.mark.parametrize(
        ("notation", "canonical"),
        [
            ("3d6+2", "3d6+2"),
            ("d20 + 3", "1d20+3"),
            ("+1d6", "1d6"),
            ("-1d4+2", "-1d4+2"),
            ("2D6KH1-1", "2d6kh1-1"),
        ],
    )
    def test_canonical_form(self, notation: str, canonical: str) -> None:
        """Test the canonical notation of parsed expressions."""
        assert parse(notation).to_notation() == canonical

    def test_reparse_is_identical(self) -> None:
        """Test the canonical form parses back into an equal expression."""
        expr = parse("4d6dl1 - d4 + 2")

        assert parse(expr.to_notation()) == expr
        assert str(expr) == expr.to_notation()


class TestParseErrors:
    """Tests for malformed notation."""

    def test_missing_faces(self) -> None:
        """Test 2d fails with a syntax error."""
        with pytest.raises(NotationSyntaxError) as exc_info:
            parse("2d")

        assert exc_info.value.details["notation"] == "2d"
        assert exc_info.value.details["position"] == 2

    def test_zero_dice(self) -> None:
        """Test 0d6 fails with InvalidDiceCount."""
        with pytest.raises(InvalidDiceCount):
            parse("0d6")

    def test_selector_exceeds_count(self) -> None:
        """Test 1d6kh3 fails with InvalidSelector."""
        with pytest.raises(InvalidSelector):
            parse("1d6kh3")

    def test_selector_zero(self) -> None:
        """Test a selector must keep or drop at least one die."""
        with pytest.raises(InvalidSelector):
            parse("2d6kh0")

    @pytest.mark.parametrize("notation", ["1d1", "1d0", "1d-6"])
    def test_invalid_faces(self, notation: str) -> None:
        """Test dice with fewer than two faces are rejected."""
        with pytest.raises(InvalidFaceCount):
            parse(notation)

    @pytest.mark.parametrize(
        "notation",
        ["", "   ", "3d6+", "d", "2x6", "3d6 2", "1d6kh", "++1", "1d6k1"],
    )
    def test_syntax_errors(self, notation: str) -> None:
        """Test malformed notation raises NotationSyntaxError."""
        with pytest.raises(NotationSyntaxError):
            parse(notation)

    def test_all_errors_are_parse_errors(self) -> None:
        """Test every parse failure can be caught as ParseError."""
        for notation in ["2d", "0d6", "1d1", "1d6kh3"]:
            with pytest.raises(ParseError):
                parse(notation)

    def test_empty_expression_rejected(self) -> None:
        """Test an Expression cannot be built without terms."""
        with pytest.raises(NotationSyntaxError):
            Expression(())


class TestNotationParserLimits:
    """Tests for parser size limits."""

    def test_default_limits(self) -> None:
        """Test the default limits accept 100d1000 and reject more."""
        parse("100d1000")

        with pytest.raises(InvalidDiceCount):
            parse("101d6")
        with pytest.raises(InvalidFaceCount):
            parse("1d1001")

    def test_custom_limits(self) -> None:
        """Test a parser with tighter limits."""
        parser = NotationParser(max_dice_count=10, max_faces=20)

        assert parser.parse("10d20").dice_terms[0].count == 10
        with pytest.raises(InvalidDiceCount):
            parser.parse("11d6")
        with pytest.raises(InvalidFaceCount):
            parser.parse("1d100")
