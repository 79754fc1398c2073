"""Import of Helden-Software XML exports.

Reads the parts of an export the tracker needs::

    <helden>
      <held name="Alrik">
        <eigenschaften>
          <eigenschaft name="Mut" value="12" mod="0"/>
          <eigenschaft name="Lebensenergie" value="30" mod="2"/>
          ...
        </eigenschaften>
        <talentliste>
          <talent name="Klettern" probe=" (MU/GE/KK)" value="5"/>
        </talentliste>
        <zauberliste>
          <zauber name="Balsam Salabunde" probe=" (KL/IN/CH)" value="7"/>
        </zauberliste>
      </held>
    </helden>
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from pydantic import ValidationError

from dsa_tracker.core.exceptions import LoadError
from dsa_tracker.core.logging import get_logger
from dsa_tracker.models.hero import Hero, Resource, Skill


logger = get_logger(__name__)


BASE_VALUES = {
    "Mut": "MU",
    "Klugheit": "KL",
    "Intuition": "IN",
    "Charisma": "CH",
    "Fingerfertigkeit": "FF",
    "Gewandtheit": "GE",
    "Konstitution": "KO",
    "Körperkraft": "KK",
}

RESOURCES = {
    "Lebensenergie": "life_points",
    "Astralenergie": "astral_points",
    "Ausdauer": "stamina",
    "Karmaenergie": "karma_points",
    "Schicksalspunkte": "fate_points",
}

_PROBE = re.compile(r"(\w{2})\s*/\s*(\w{2})\s*/\s*(\w{2})")


def _int_attr(element: ET.Element, name: str, path: Path) -> int:
    raw = element.get(name)
    if raw is None or raw.strip() == "":
        return 0
    try:
        return int(raw)
    except ValueError as exc:
        raise LoadError(
            f"Attribute {name!r} of <{element.tag} name={element.get('name')!r}> is not a number",
            path=path,
        ) from exc


def _probe(element: ET.Element) -> tuple[str, str, str] | None:
    match = _PROBE.search(element.get("probe", ""))
    if match is None:
        return None
    return match.group(1).upper(), match.group(2).upper(), match.group(3).upper()


def parse_helden_xml(text: str | bytes, *, path: Path | str = "<string>") -> Hero:
    """Build a Hero from the text of a Helden-Software export.

    Every hero gets a life_points resource, empty if the export has none.

    Raises:
        LoadError: If the document is malformed or lacks a named hero.
    """
    path = Path(path)
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise LoadError(f"XML document could not be parsed: {exc}", path=path) from exc

    if root.tag != "helden":
        raise LoadError(f"Unknown root element <{root.tag}>", path=path)
    held = root.find("held")
    if held is None:
        raise LoadError("Root element does not contain a <held> element", path=path)
    name = held.get("name")
    if not name:
        raise LoadError("Hero does not have a name", path=path)

    base_values: dict[str, int] = {}
    resources: dict[str, Resource] = {}
    for element in held.iterfind("eigenschaften/eigenschaft"):
        label = element.get("name", "")
        value = _int_attr(element, "value", path) + _int_attr(element, "mod", path)
        if label in BASE_VALUES:
            base_values[BASE_VALUES[label]] = value
        elif label in RESOURCES and value > 0:
            resources[RESOURCES[label]] = Resource(current=value, maximum=value)
    resources.setdefault("life_points", Resource(current=0, maximum=0))

    skills: dict[str, Skill] = {}
    for element in [*held.iterfind("talentliste/talent"), *held.iterfind("zauberliste/zauber")]:
        skill_name = element.get("name")
        if not skill_name:
            continue
        skills[skill_name] = Skill(
            value=_int_attr(element, "value", path),
            checks=_probe(element),
        )

    try:
        hero = Hero(name=name, resources=resources, base_values=base_values, skills=skills)
    except ValidationError as exc:
        raise LoadError(
            "Hero export contains invalid values",
            path=path,
            details={"errors": exc.error_count()},
        ) from exc

    logger.info(
        "Helden export imported",
        path=str(path),
        hero=hero.name,
        skills=len(hero.skills),
        resources=sorted(hero.resources),
    )
    return hero


def load_helden_xml(path: Path | str) -> Hero:
    """Read a Helden-Software export from disk.

    Raises:
        LoadError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise LoadError(f"Cannot read hero file: {exc.strerror}", path=path) from exc
    return parse_helden_xml(data, path=path)


__all__ = [
    "BASE_VALUES",
    "RESOURCES",
    "parse_helden_xml",
    "load_helden_xml",
]
