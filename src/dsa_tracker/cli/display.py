"""Rich display helpers for CLI output.

Every result type has a ``*_payload`` function producing plain data for
the JSON output format and a ``display_*`` function rendering it for
humans. JSON output is one object per line.
"""

from __future__ import annotations

import json
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from dsa_tracker.core.exceptions import DsaTrackerError
from dsa_tracker.engine.checks import SkillCheckResult, TalentCheckResult
from dsa_tracker.engine.dice import RollOutcome, TermRoll
from dsa_tracker.engine.transactions import TransactionLog
from dsa_tracker.models.hero import AppliedDelta, Hero


# Shared console instance
console = Console(highlight=False)


def emit_json(payload: dict[str, Any]) -> None:
    """Write one JSON object on its own line."""
    console.print(json.dumps(payload, ensure_ascii=False), markup=False, soft_wrap=True)


# =============================================================================
# Payloads
# =============================================================================


def roll_payload(outcome: RollOutcome) -> dict[str, Any]:
    return {
        "notation": outcome.notation,
        "raw": outcome.raw,
        "selected": outcome.selected,
        "modifier": outcome.modifier,
        "total": outcome.total,
        "flags": sorted(str(flag) for flag in outcome.flags),
    }


def skill_check_payload(result: SkillCheckResult) -> dict[str, Any]:
    return {
        "skill": result.skill,
        "target": result.target,
        "modifier": result.modifier,
        "result": str(result.result),
        "success": result.success,
        "critical": result.critical,
        "margin": result.margin,
        "roll": roll_payload(result.outcome),
    }


def talent_check_payload(result: TalentCheckResult) -> dict[str, Any]:
    return {
        "skill": result.skill,
        "success": result.success,
        "critical": result.critical,
        "remainder": result.remainder,
        "checks": list(result.checks),
        "stat": list(result.stats),
        "dice": list(result.dice),
        "mod": result.modifier,
        "base": result.value,
    }


def gauge_payload(name: str, current: int, maximum: int | None) -> dict[str, Any]:
    return {"name": name, "current": current, "max": maximum}


def delta_payload(delta: AppliedDelta) -> dict[str, Any]:
    return {
        "attribute": delta.attribute,
        "requested": delta.requested,
        "applied": delta.applied,
        "before": delta.before,
        "after": delta.after,
        "max": delta.maximum,
    }


def hero_payload(hero: Hero) -> dict[str, Any]:
    return hero.model_dump(mode="json")


def history_payload(log: TransactionLog) -> dict[str, Any]:
    return {
        "initial": log.initial.snapshot(),
        "transactions": [entry.model_dump(mode="json") for entry in log],
    }


# =============================================================================
# Human-readable output
# =============================================================================


def display_error(error: DsaTrackerError | str) -> None:
    """Display error message."""
    message = error if isinstance(error, str) else str(error)
    console.print(Text.assemble(("Error: ", "bold red"), message))


def display_info(message: str) -> None:
    """Display info message."""
    console.print(f"[dim]{message}[/dim]")


def _term_text(roll: TermRoll) -> Text:
    """Raw dice of a term with dropped dice struck through."""
    text = Text("[")
    remaining = list(roll.selected)
    for index, die in enumerate(roll.raw):
        if index:
            text.append(", ")
        if die in remaining:
            remaining.remove(die)
            text.append(str(die), style="green")
        else:
            text.append(str(die), style="dim strike")
    text.append("]")
    return text


def display_roll(outcome: RollOutcome) -> None:
    """Display a roll: notation, dice per term, modifier and total."""
    line = Text(f"{outcome.notation}: ")
    for index, roll in enumerate(outcome.rolls):
        if index or roll.sign < 0:
            line.append(" - " if roll.sign < 0 else " + ")
        line.append_text(_term_text(roll))
    if outcome.modifier:
        line.append(f" {'+' if outcome.modifier > 0 else '-'} {abs(outcome.modifier)}")
    line.append(" = ")
    line.append(str(outcome.total), style="bold cyan")
    if outcome.is_extreme_low:
        line.append(" (all ones)", style="red")
    if outcome.is_extreme_high:
        line.append(" (all maximum)", style="green")
    console.print(line)


def _result_style(success: bool, critical: bool) -> str:
    style = "green" if success else "red"
    return f"bold {style}" if critical else style


def display_skill_check(result: SkillCheckResult) -> None:
    """Display a skill check against its target."""
    outcome = result.outcome
    line = Text(f"{result.skill}: {outcome.notation} → {outcome.total} vs {result.target}: ")
    label = str(result.result).replace("_", " ")
    line.append(label, style=_result_style(result.success, result.critical))
    line.append(f" ({result.margin:+d})")
    console.print(line)


def display_talent_check(result: TalentCheckResult) -> None:
    """Display a talent check die by die.

    Each row shows the die against the (possibly reduced) base value, the
    points it cost and the talent points remaining afterwards.
    """
    excess = max(0, result.modifier - result.value)
    console.print(
        f"base: {result.effective_value} (= {result.value}, {-result.modifier:+d} mod)"
    )
    if excess:
        console.print(f"modifier larger than base, reducing stats by {excess}")

    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column("Check")
    table.add_column("Die", justify="right")
    table.add_column("", justify="center")
    table.add_column("Stat", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Points", justify="right")

    points = result.effective_value
    for check, die, stat in zip(result.checks, result.dice, result.stats):
        symbol = "<" if die < stat else ("=" if die == stat else ">")
        cost = max(0, die - stat)
        table.add_row(check, str(die), symbol, str(stat), str(cost), f"{points} → {points - cost}")
        points -= cost
    console.print(table)

    label = ("critical " if result.critical else "") + ("success" if result.success else "failure")
    line = Text()
    line.append(label, style=_result_style(result.success, result.critical))
    line.append(f" ({result.remainder})")
    console.print(line)


def gauge_text(name: str, current: int, maximum: int | None) -> str:
    """Format a gauge as ``current <name>: <current>/<max> (<pct>%)``."""
    if maximum is None:
        return f"current {name}: {current}"
    if maximum == 0:
        return f"current {name}: {current}/{maximum}"
    return f"current {name}: {current}/{maximum} ({round(100 * current / maximum)}%)"


def display_gauge(name: str, current: int, maximum: int | None) -> None:
    console.print(gauge_text(name, current, maximum))


def display_delta(delta: AppliedDelta) -> None:
    """Display an applied change followed by the resulting gauge."""
    line = Text(f"{delta.attribute}: {delta.before} → {delta.after} ({delta.applied:+d}")
    if delta.clamped:
        line.append(f", requested {delta.requested:+d}", style="yellow")
    line.append(")")
    console.print(line)
    display_gauge(delta.attribute, delta.after, delta.maximum)


def display_hero(hero: Hero) -> None:
    """Display resources, base values and skills of a hero."""
    console.print(f"[bold]{hero.name}[/bold]")

    resources = Table(title="Resources", box=box.SIMPLE)
    resources.add_column("Name", style="cyan")
    resources.add_column("Current", justify="right")
    resources.add_column("Max", justify="right")
    for name, resource in sorted(hero.resources.items()):
        maximum = "-" if resource.maximum is None else str(resource.maximum)
        resources.add_row(name, str(resource.current), maximum)
    console.print(resources)

    if hero.base_values:
        base = Table(title="Base values", box=box.SIMPLE)
        for name in hero.base_values:
            base.add_column(name, justify="right")
        base.add_row(*(str(value) for value in hero.base_values.values()))
        console.print(base)

    if hero.skills:
        skills = Table(title="Skills", box=box.SIMPLE)
        skills.add_column("Skill", style="cyan")
        skills.add_column("Value", justify="right")
        skills.add_column("Check")
        for name, skill in sorted(hero.skills.items()):
            checks = "/".join(skill.checks) if skill.checks else ""
            skills.add_row(name, str(skill.value), checks)
        console.print(skills)


def display_history(log: TransactionLog) -> None:
    """Display the transaction log of a hero."""
    if not len(log):
        console.print("[dim]No transactions recorded.[/dim]")
        return

    table = Table(title="History", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Time")
    table.add_column("Kind", style="cyan")
    table.add_column("Description")
    table.add_column("Applied", justify="right")
    table.add_column("Value", justify="right")
    for entry in log:
        table.add_row(
            str(entry.sequence),
            entry.timestamp.strftime("%H:%M:%S"),
            str(entry.kind),
            entry.description,
            f"{entry.delta.applied:+d}",
            str(entry.delta.after),
        )
    console.print(table)


__all__ = [
    "console",
    "emit_json",
    "roll_payload",
    "skill_check_payload",
    "talent_check_payload",
    "gauge_payload",
    "delta_payload",
    "hero_payload",
    "history_payload",
    "display_error",
    "display_info",
    "display_roll",
    "display_skill_check",
    "display_talent_check",
    "gauge_text",
    "display_gauge",
    "display_delta",
    "display_hero",
    "display_history",
]
