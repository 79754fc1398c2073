"""Main CLI application for the DSA hero tracker.

One-shot usage runs a single command against a hero file::

    dsa-tracker --hero alrik.json damage life_points 5

``shell`` starts an interactive loop in which every line is dispatched to
the same commands while the hero stays loaded; ``exit`` leaves the loop.
"""

import shlex
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Iterator, List, Optional

import click
import typer
from pydantic import ValidationError

from dsa_tracker.cli import display
from dsa_tracker.core.config import Settings, get_settings
from dsa_tracker.core.exceptions import DsaTrackerError, ModelError
from dsa_tracker.core.logging import bind_context, configure_logging, get_logger
from dsa_tracker.engine.rng import SystemRandomSource
from dsa_tracker.engine.tracker import Tracker
from dsa_tracker.models.hero import AppliedDelta, Hero
from dsa_tracker.storage.session_store import HeroStore


logger = get_logger(__name__)

app = typer.Typer(
    name="dsa-tracker",
    help="Roll dice and track your DSA hero during a session.",
    no_args_is_help=True,
    add_completion=False,
)


class OutputFormat(StrEnum):
    HUMAN = "human"
    JSON = "json"


@dataclass
class Session:
    """State shared by all commands of one process."""

    settings: Settings
    tracker: Tracker
    store: HeroStore | None = None
    hero: Hero | None = None
    interactive: bool = False

    @property
    def json(self) -> bool:
        return self.settings.output_format == OutputFormat.JSON

    def require_hero(self) -> Hero:
        if self.hero is None:
            raise typer.BadParameter("no hero loaded, pass --hero FILE", param_hint="--hero")
        return self.hero

    def commit(self) -> None:
        """Persist the hero after a mutation.

        One-shot commands always save; the shell saves per command only with
        autosave and otherwise once on exit.
        """
        if self.store is None or self.hero is None:
            return
        if self.settings.autosave or not self.interactive:
            self.store.save(self.hero, self.tracker.history(self.hero))


def _session(ctx: typer.Context) -> Session:
    return ctx.obj


@contextmanager
def reported() -> Iterator[None]:
    """Render tracker errors and exit with status 1."""
    try:
        yield
    except DsaTrackerError as exc:
        logger.debug("Command failed", error=repr(exc))
        display.display_error(exc)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    hero_file: Optional[Path] = typer.Option(
        None, "--hero", "-f", help="Hero session (.json) or Helden-Software export (.xml)"
    ),
    output: Optional[OutputFormat] = typer.Option(
        None, "--output", "-o", case_sensitive=False, help="Output format"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible rolls"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
) -> None:
    """DSA hero tracker.

    Use 'dsa-tracker --hero FILE shell' for an interactive session.
    """
    if isinstance(ctx.obj, Session):
        # Re-dispatched from the shell: keep the loaded session.
        return

    with reported():
        settings = get_settings()
        overrides: dict[str, object] = {}
        if hero_file is not None:
            overrides["hero_file"] = hero_file
        if output is not None:
            overrides["output_format"] = output.value
        if seed is not None:
            overrides["seed"] = seed
        if log_level is not None:
            overrides["log_level"] = log_level.upper()
        if overrides:
            settings = settings.model_copy(update=overrides)

        configure_logging(
            level=settings.log_level,
            json_format=settings.json_logs,
            log_file=str(settings.log_file) if settings.log_file else None,
        )

        tracker = Tracker.from_settings(settings.rules, rng=SystemRandomSource(seed=settings.seed))
        session = Session(settings=settings, tracker=tracker)

        if settings.hero_file is not None:
            store = HeroStore(settings.hero_file)
            session.store = store
            if ctx.invoked_subcommand == "create":
                ctx.obj = session
                return
            hero, log = store.load()
            tracker.attach(hero, log)
            session.hero = hero
            bind_context(hero=hero.name)

        ctx.obj = session


# =============================================================================
# Rolls and checks
# =============================================================================


@app.command()
def roll(
    ctx: typer.Context,
    notation: List[str] = typer.Argument(..., help="Dice notation, e.g. 3d6+2 or 2d20kh1"),
) -> None:
    """Roll dice."""
    session = _session(ctx)
    with reported():
        outcome = session.tracker.roll("".join(notation))
    if session.json:
        display.emit_json(display.roll_payload(outcome))
    else:
        display.display_roll(outcome)


@app.command()
def check(
    ctx: typer.Context,
    skill: str = typer.Argument(..., help="The skill to test"),
    notation: Optional[str] = typer.Argument(None, help="Dice notation, the configured check roll by default"),
    modifier: List[int] = typer.Option(
        [], "--modifier", "-m", help="Modification, positive (bad) or negative (good)"
    ),
) -> None:
    """Roll against a skill value."""
    session = _session(ctx)
    hero = session.require_hero()
    with reported():
        result = session.tracker.skill_check(hero, skill, notation, modifier=sum(modifier))
    if session.json:
        display.emit_json(display.skill_check_payload(result))
    else:
        display.display_skill_check(result)


@app.command()
def talent(
    ctx: typer.Context,
    skill: str = typer.Argument(..., help="The talent to test"),
    modifier: List[int] = typer.Option(
        [], "--modifier", "-m", "--mod", help="Modification, positive (bad) or negative (good)"
    ),
) -> None:
    """Roll a 3d20 talent check."""
    session = _session(ctx)
    hero = session.require_hero()
    with reported():
        result = session.tracker.talent_check(hero, skill, sum(modifier))
    if session.json:
        display.emit_json(display.talent_check_payload(result))
    else:
        display.display_talent_check(result)


# =============================================================================
# Resources
# =============================================================================


def _report_delta(session: Session, delta: AppliedDelta) -> None:
    with reported():
        session.commit()
    if session.json:
        display.emit_json(display.delta_payload(delta))
    else:
        display.display_delta(delta)


@app.command()
def damage(
    ctx: typer.Context,
    attribute: str = typer.Argument(..., help="Resource to damage, e.g. life_points"),
    amount: int = typer.Argument(..., min=0, help="Points of damage"),
) -> None:
    """Subtract damage from a resource."""
    session = _session(ctx)
    hero = session.require_hero()
    with reported():
        delta = session.tracker.apply_damage(hero, attribute, amount)
    _report_delta(session, delta)


@app.command()
def recover(
    ctx: typer.Context,
    attribute: str = typer.Argument(..., help="Resource to restore, e.g. astral_points"),
    notation: List[str] = typer.Argument(..., help="Regeneration roll, e.g. 1d6+2"),
) -> None:
    """Roll regeneration and add it to a resource."""
    session = _session(ctx)
    hero = session.require_hero()
    with reported():
        delta = session.tracker.recover(hero, attribute, "".join(notation))
    _report_delta(session, delta)


@app.command()
def spend(
    ctx: typer.Context,
    attribute: str = typer.Argument(..., help="Resource to spend, e.g. fate_points"),
    amount: int = typer.Argument(1, min=0, help="Points to spend"),
) -> None:
    """Spend points of a resource."""
    session = _session(ctx)
    hero = session.require_hero()
    with reported():
        delta = session.tracker.spend(hero, attribute, amount)
    _report_delta(session, delta)


@app.command()
def gauge(
    ctx: typer.Context,
    attribute: str = typer.Argument(..., help="Resource to show or change"),
    add: Optional[int] = typer.Option(None, "--add", min=0, help="Add to the value"),
    sub: Optional[int] = typer.Option(None, "--sub", min=0, help="Subtract from the value"),
    set_: Optional[int] = typer.Option(None, "--set", min=0, help="Set the value"),
    of_max: bool = typer.Option(
        False, "--max", help="Change the maximum instead of the current value"
    ),
) -> None:
    """Show a resource, or change it with --add/--sub/--set."""
    session = _session(ctx)
    hero = session.require_hero()
    given = [name for name, value in (("--add", add), ("--sub", sub), ("--set", set_)) if value is not None]
    if len(given) > 1:
        raise typer.BadParameter("use only one of --add, --sub and --set", param_hint="/".join(given))

    if not given:
        with reported():
            current, maximum = hero.gauge(attribute)
        if session.json:
            display.emit_json(display.gauge_payload(attribute, current, maximum))
        else:
            display.display_gauge(attribute, current, maximum)
        return

    tracker = session.tracker
    with reported():
        if of_max:
            if set_ is not None:
                target = set_
            else:
                maximum = hero.maximum(attribute)
                if maximum is None:
                    raise ModelError(
                        f"'{attribute}' has no maximum to change", details={"attribute": attribute}
                    )
                target = maximum + add if add is not None else max(0, maximum - (sub or 0))
            delta = tracker.set_maximum(hero, attribute, target)
        elif set_ is not None:
            delta = tracker.set_value(hero, attribute, set_)
        else:
            delta = tracker.adjust(hero, attribute, add if add is not None else -(sub or 0))
    _report_delta(session, delta)


# =============================================================================
# Hero information
# =============================================================================


def _pairs(values: List[str], option: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for value in values:
        key, sep, rest = value.partition("=")
        if not sep or not key.strip() or not rest.strip():
            raise typer.BadParameter(f"expected NAME=VALUE, got {value!r}", param_hint=option)
        pairs[key.strip()] = rest.strip()
    return pairs


def _number(value: str, option: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise typer.BadParameter(f"{value!r} is not a number", param_hint=option) from None


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the hero"),
    resource: List[str] = typer.Option(
        [], "--resource", "-r", help="Resource and maximum, e.g. life_points=30"
    ),
    base: List[str] = typer.Option([], "--base", "-b", help="Base value, e.g. MU=12"),
    skill: List[str] = typer.Option(
        [], "--skill", "-s", help="Skill value and optional check, e.g. klettern=5:MU/GE/KK"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing hero file"),
) -> None:
    """Create a new hero session file."""
    session = _session(ctx)
    if session.store is None:
        raise typer.BadParameter("no hero file to create, pass --hero FILE", param_hint="--hero")
    if session.store.exists() and not force:
        raise typer.BadParameter(f"{session.store.path} already exists, use --force", param_hint="--hero")

    resources: dict[str, dict[str, int]] = {}
    for key, value in _pairs(resource, "--resource").items():
        maximum = _number(value, "--resource")
        resources[key] = {"current": maximum, "maximum": maximum}
    base_values = {key: _number(value, "--base") for key, value in _pairs(base, "--base").items()}
    skills: dict[str, dict[str, object]] = {}
    for key, value in _pairs(skill, "--skill").items():
        points, _, checks = value.partition(":")
        skills[key] = {
            "value": _number(points, "--skill"),
            "checks": checks.split("/") if checks else None,
        }

    try:
        hero = Hero(name=name, resources=resources, base_values=base_values, skills=skills)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="create") from exc

    with reported():
        path = session.store.save(hero)
    session.hero = hero
    bind_context(hero=hero.name)
    display.display_info(f"created {hero.name} in {path}")


@app.command()
def dump(ctx: typer.Context) -> None:
    """Dump hero information."""
    session = _session(ctx)
    hero = session.require_hero()
    if session.json:
        display.emit_json(display.hero_payload(hero))
    else:
        display.display_hero(hero)


@app.command()
def history(ctx: typer.Context) -> None:
    """Show the transactions recorded for the hero."""
    session = _session(ctx)
    log = session.tracker.history(session.require_hero())
    if session.json:
        display.emit_json(display.history_payload(log))
    else:
        display.display_history(log)


@app.command()
def replay(ctx: typer.Context) -> None:
    """Rebuild resource values from the transaction log and compare."""
    session = _session(ctx)
    hero = session.require_hero()
    log = session.tracker.history(hero)
    values = log.replay()
    consistent = values == hero.snapshot()
    if session.json:
        display.emit_json({"replayed": values, "consistent": consistent})
        return
    for name, value in sorted(values.items()):
        display.display_gauge(name, value, hero.maximum(name))
    if consistent:
        display.display_info(f"{len(log)} transactions reproduce the current values")
    else:
        display.display_error("transaction log does not reproduce the current values")
        raise typer.Exit(code=1)


@app.command()
def save(ctx: typer.Context) -> None:
    """Save the hero session now."""
    session = _session(ctx)
    hero = session.require_hero()
    if session.store is None:
        raise typer.BadParameter("no hero file to save to", param_hint="--hero")
    with reported():
        path = session.store.save(hero, session.tracker.history(hero))
    display.display_info(f"saved {hero.name} to {path}")


# =============================================================================
# Interactive shell
# =============================================================================


@app.command()
def shell(ctx: typer.Context) -> None:
    """Interactive command line client. Type 'exit' to leave."""
    session = _session(ctx)
    if session.interactive:
        display.display_error("already in the interactive shell")
        return

    session.interactive = True
    command = typer.main.get_command(app)
    try:
        while True:
            try:
                line = display.console.input("% ")
            except EOFError:
                break
            try:
                args = shlex.split(line)
            except ValueError as exc:
                display.display_error(str(exc))
                continue
            if not args:
                continue
            if args == ["exit"]:
                break
            try:
                command.main(args=args, prog_name="", standalone_mode=False, obj=session)
            except click.ClickException as exc:
                exc.show()
            except click.exceptions.Abort:
                break
    finally:
        session.interactive = False
        if session.store is not None and session.hero is not None:
            with reported():
                session.store.save(session.hero, session.tracker.history(session.hero))


if __name__ == "__main__":
    app()
