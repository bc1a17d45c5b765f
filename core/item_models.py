"""
Item record data structures.

ItemRecord is the result of parsing one item's clipboard text. It owns a
set of facets (weapon, armour, sockets, requirements, misc) that start out
zero-valued and are filled in by the property parser, plus the matched
modifiers ("filters") and derived pseudo stats.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from core.constants import CATEGORY_GEM

Number = Union[int, float]


class ModifierMergeError(ValueError):
    """Raised when two value lists for the same modifier cannot be combined."""


# ----------------------------------------------------------------------
# Tagged arithmetic
# ----------------------------------------------------------------------
# Results keep the type of the left operand, so an int slot stays an int
# even when a float is added into it and vice versa.


def add_numbers(left: Number, right: Number) -> Number:
    if isinstance(left, float):
        return left + float(right)
    return left + int(right)


def scale_number(value: Number, factor: float) -> Number:
    if isinstance(value, float):
        return value * factor
    return int(value * factor)


def negate_number(value: Number) -> Number:
    return -value


@dataclass
class ValueRange:
    """Min/max pair used for damage ranges."""

    min: int = 0
    max: int = 0

    def __add__(self, other: "ValueRange") -> "ValueRange":
        return ValueRange(self.min + other.min, self.max + other.max)


@dataclass
class WeaponFacet:
    physical_damage: ValueRange = field(default_factory=ValueRange)
    critical_chance: float = 0.0
    attacks_per_second: float = 0.0
    elemental_damage: ValueRange = field(default_factory=ValueRange)


@dataclass
class ArmourFacet:
    armour: int = 0
    evasion: int = 0
    energy_shield: int = 0
    block: int = 0


@dataclass
class SocketColours:
    r: int = 0
    g: int = 0
    b: int = 0
    w: int = 0
    a: int = 0

    def total(self) -> int:
        return self.r + self.g + self.b + self.w + self.a


@dataclass
class SocketFacet:
    colours: SocketColours = field(default_factory=SocketColours)
    links: int = 0


@dataclass
class RequirementFacet:
    level: int = 0
    strength: int = 0
    dexterity: int = 0
    intelligence: int = 0


@dataclass
class MiscFacet:
    quality: int = 0
    gem_level: int = 0
    gem_level_progress: int = 0
    item_level: int = 0
    identified: bool = True
    corrupted: bool = False
    shaper_item: bool = False
    elder_item: bool = False


@dataclass
class MatchedModifier:
    """
    A modifier matched from item text (or derived from other modifiers).

    Attributes:
        id: Modifier id from the modifier dictionary (e.g. "explicit.stat_3299347043")
        kind: Modifier kind ("explicit", "implicit", "crafted", "pseudo", ...)
        text: Template text of the modifier ("# to maximum Life")
        values: Numbers recovered from the item line, in order
    """

    id: str
    kind: str
    text: str
    values: List[Number] = field(default_factory=list)

    def merge_values(self, other: List[Number]) -> None:
        """
        Add another value list into this one, element by element.

        Each slot keeps its own int/float type. Lists of different lengths
        mean the dictionary and the item text disagree about the modifier,
        which is reported instead of truncated.
        """
        if len(other) != len(self.values):
            raise ModifierMergeError(
                f"Cannot merge values for {self.id}: "
                f"{self.values!r} and {other!r} differ in length"
            )
        self.values = [add_numbers(a, b) for a, b in zip(self.values, other)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "text": self.text,
            "value": list(self.values),
        }


@dataclass
class ItemRecord:
    """Structured representation of a parsed PoE item."""

    raw_text: str

    # Identity
    name: str = ""
    type: str = ""
    rarity: str = ""
    category: str = ""

    is_weapon: bool = False
    is_armour: bool = False

    # Facets
    weapon: WeaponFacet = field(default_factory=WeaponFacet)
    armour: ArmourFacet = field(default_factory=ArmourFacet)
    sockets: SocketFacet = field(default_factory=SocketFacet)
    requirements: RequirementFacet = field(default_factory=RequirementFacet)
    misc: MiscFacet = field(default_factory=MiscFacet)

    # Matched modifiers keyed by id
    filters: Dict[str, MatchedModifier] = field(default_factory=dict)
    pseudos: Dict[str, MatchedModifier] = field(default_factory=dict)

    # Number of section separators seen while parsing
    sections: int = 0

    # Free-text search summary, filled in by callers
    options: str = ""

    # Data inconsistencies found while parsing
    errors: List[str] = field(default_factory=list)

    def add_filter(self, modifier: MatchedModifier) -> None:
        """Add a matched modifier, merging values if the id is already present."""
        existing = self.filters.get(modifier.id)
        if existing is None:
            self.filters[modifier.id] = modifier
            return
        existing.merge_values(modifier.values)

    def get_display_name(self) -> str:
        """
        Human-friendly name.

        'Name (Type)' when both are present and differ, otherwise whichever
        is set, falling back to 'Unknown Item'.
        """
        name = self.name.strip()
        item_type = self.type.strip()

        if name and item_type and name != item_type:
            return f"{name} ({item_type})"
        if name:
            return name
        if item_type:
            return item_type
        return "Unknown Item"

    def to_dict(self) -> Dict[str, Any]:
        """
        Flat key/value form of the item.

        Optional keys (category, type, gem_level, options) are left out
        entirely when they don't apply.
        """
        result: Dict[str, Any] = {
            "name": self.name,
            "rarity": self.rarity,
        }

        if self.category:
            result["category"] = self.category

        if self.name != self.type:
            result["type"] = self.type

        result["sockets"] = self.sockets.colours.total()
        result["links"] = self.sockets.links
        result["ilvl"] = self.misc.item_level
        result["quality"] = self.misc.quality

        if self.category == CATEGORY_GEM:
            result["gem_level"] = self.misc.gem_level

        result["elder_item"] = self.misc.elder_item
        result["shaper_item"] = self.misc.shaper_item
        result["identified"] = self.misc.identified
        result["corrupted"] = self.misc.corrupted

        if self.options:
            result["options"] = self.options

        return result
