"""JSON persistence for hero sessions.

A session file holds the hero's current state, the hero as it was when
tracking began, and the transaction log in between:

    {"version": 1, "hero": {...}, "initial": {...}, "transactions": [...]}

Saves are all-or-nothing: the file is written next to its destination and
renamed into place only once it is complete.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from dsa_tracker.core.exceptions import LoadError, SaveError
from dsa_tracker.core.logging import get_logger
from dsa_tracker.engine.transactions import Transaction, TransactionLog
from dsa_tracker.models.hero import Hero
from dsa_tracker.storage.helden import load_helden_xml


logger = get_logger(__name__)


SESSION_FORMAT_VERSION = 1


class SessionFile(BaseModel):
    """On-disk layout of a hero session."""

    version: int = Field(default=SESSION_FORMAT_VERSION)
    hero: Hero
    initial: Hero | None = Field(
        default=None,
        description="The hero before the first transaction; defaults to hero",
    )
    transactions: list[Transaction] = Field(default_factory=list)


class HeroStore:
    """Loads and saves hero sessions at a fixed path.

    ``.xml`` paths are read as Helden-Software exports; saving always writes
    JSON, so an imported hero is saved next to the export with a ``.json``
    suffix.

    Example:
        >>> store = HeroStore("alrik.json")
        >>> hero, log = store.load()
        >>> store.save(hero, log)
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def save_path(self) -> Path:
        if self.path.suffix.lower() == ".xml":
            return self.path.with_suffix(".json")
        return self.path

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> tuple[Hero, TransactionLog]:
        """Load the hero and its transaction log.

        Returns:
            The hero and a log whose initial snapshot is the stored one.

        Raises:
            LoadError: If the file is missing, unreadable or malformed.
        """
        if self.path.suffix.lower() == ".xml":
            hero = load_helden_xml(self.path)
            return hero, TransactionLog(hero)

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Hero file unreadable", path=str(self.path), error=str(exc))
            raise LoadError(f"Cannot read hero file: {exc.strerror}", path=self.path) from exc

        try:
            session = SessionFile.model_validate_json(text)
        except ValidationError as exc:
            logger.error("Hero file invalid", path=str(self.path), errors=exc.error_count())
            raise LoadError(
                "Hero file is not a valid session",
                path=self.path,
                details={"errors": exc.error_count()},
            ) from exc

        if session.version != SESSION_FORMAT_VERSION:
            raise LoadError(
                f"Unsupported session format version {session.version}",
                path=self.path,
            )

        log = TransactionLog(session.initial or session.hero, session.transactions)
        if session.initial is not None and not log.matches(session.hero):
            raise LoadError(
                "Transaction log does not reproduce the stored hero",
                path=self.path,
            )

        logger.info(
            "Hero loaded",
            path=str(self.path),
            hero=session.hero.name,
            transactions=len(log),
        )
        return session.hero, log

    def load_hero(self) -> Hero:
        """Load only the hero."""
        hero, _ = self.load()
        return hero

    def save(self, hero: Hero, log: TransactionLog | None = None) -> Path:
        """Write the hero and optionally its log.

        Returns:
            The path written.

        Raises:
            SaveError: If the file cannot be written. The previous file, if
                any, is left as it was.
        """
        session = SessionFile(
            hero=hero,
            initial=log.initial if log is not None else None,
            transactions=list(log.entries) if log is not None else [],
        )
        target = self.save_path
        payload = session.model_dump_json(indent=2)

        tmp_name: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Hero save failed", path=str(target), error=str(exc))
            raise SaveError(f"Cannot write hero file: {exc.strerror}", path=target) from exc

        logger.info("Hero saved", path=str(target), hero=hero.name)
        return target


__all__ = [
    "SESSION_FORMAT_VERSION",
    "SessionFile",
    "HeroStore",
]
