"""Dice engine and tracker for the DSA hero tracker.

Submodules:
    notation: Roll notation parser and expression tree
    dice: Expression evaluator and RollOutcome
    rng: Injectable random sources
    checks: Skill and talent check rules
    transactions: Append-only log of hero mutations
    tracker: Command layer combining the above with the hero model

Example:
    >>> from dsa_tracker.engine import ScriptedRandomSource, evaluate, parse
    >>> outcome = evaluate(parse("2d6kh1"), ScriptedRandomSource([3, 5]))
    >>> outcome.selected
    [[5]]
"""

from __future__ import annotations

# =============================================================================
# Notation
# =============================================================================
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

# =============================================================================
# Evaluation
# =============================================================================
from dsa_tracker.engine.dice import (
    DiceRoller,
    RollFlag,
    RollOutcome,
    TermRoll,
    evaluate,
    select_dice,
)
from dsa_tracker.engine.rng import (
    RandomSource,
    ScriptedRandomSource,
    SystemRandomSource,
)

# =============================================================================
# Rules and tracking
# =============================================================================
from dsa_tracker.engine.checks import (
    CheckMode,
    CheckOutcome,
    CheckPolicy,
    SkillCheckResult,
    TalentCheckResult,
    resolve_talent_check,
)
from dsa_tracker.engine.transactions import (
    Transaction,
    TransactionKind,
    TransactionLog,
)
from dsa_tracker.engine.tracker import Tracker


__all__ = [
    # Notation
    "Sign",
    "SelectorKind",
    "Selector",
    "DiceTerm",
    "Constant",
    "SignedTerm",
    "Expression",
    "NotationParser",
    "parse",
    # Evaluation
    "RollFlag",
    "TermRoll",
    "RollOutcome",
    "select_dice",
    "evaluate",
    "DiceRoller",
    "RandomSource",
    "SystemRandomSource",
    "ScriptedRandomSource",
    # Rules
    "CheckMode",
    "CheckOutcome",
    "CheckPolicy",
    "SkillCheckResult",
    "TalentCheckResult",
    "resolve_talent_check",
    # Tracking
    "TransactionKind",
    "Transaction",
    "TransactionLog",
    "Tracker",
]
