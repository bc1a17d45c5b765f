"""
Property line parsing.

Handles "Key: Value" lines from the property and requirement sections
(e.g. "Physical Damage: 10-20 (augmented)", "Sockets: R-G-B B") by looking
the key up in PROPERTY_SCHEMA and writing the value into the matching facet
of the item record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from core.constants import PROPERTY_DELIMITER, PROPERTY_VALUE_DELIMITER
from core.item_models import ItemRecord
from core.numeric_tokens import (
    read_prop_experience,
    read_prop_float,
    read_prop_int,
    read_prop_range,
    read_sockets,
)

logger = logging.getLogger(__name__)

# Facet names
WEAPON = "weapon"
ARMOUR = "armour"
SOCKET = "socket"
REQUIREMENT = "requirements"
MISC = "misc"

# Keys with context-dependent handling
REQUIREMENTS_KEY = "Requirements"
LEVEL_KEY = "Level"

# Synthetic keys that "Level" is rewritten to
GEM_LEVEL_KEY = "gem_level"
REQ_LEVEL_KEY = "req_level"

Reader = Callable[[str], object]

# Property name -> (facet, field, reader)
PROPERTY_SCHEMA: Dict[str, Tuple[str, Optional[str], Reader]] = {
    # Weapons
    "Physical Damage": (WEAPON, "physical_damage", read_prop_range),
    "Critical Strike Chance": (WEAPON, "critical_chance", read_prop_float),
    "Attacks per Second": (WEAPON, "attacks_per_second", read_prop_float),
    "Elemental Damage": (WEAPON, "elemental_damage", read_prop_range),
    # Armour
    "Armour": (ARMOUR, "armour", read_prop_int),
    "Evasion Rating": (ARMOUR, "evasion", read_prop_int),
    "Energy Shield": (ARMOUR, "energy_shield", read_prop_int),
    "Chance to Block": (ARMOUR, "block", read_prop_int),
    # Sockets (whole facet)
    "Sockets": (SOCKET, None, read_sockets),
    # Requirements
    REQ_LEVEL_KEY: (REQUIREMENT, "level", read_prop_int),
    "Str": (REQUIREMENT, "strength", read_prop_int),
    "Dex": (REQUIREMENT, "dexterity", read_prop_int),
    "Int": (REQUIREMENT, "intelligence", read_prop_int),
    # Misc
    "Quality": (MISC, "quality", read_prop_int),
    GEM_LEVEL_KEY: (MISC, "gem_level", read_prop_int),
    "Item Level": (MISC, "item_level", read_prop_int),
    "Experience": (MISC, "gem_level_progress", read_prop_experience),
}


@dataclass
class ParseState:
    """
    Per-parse bookkeeping shared by the property parser and stat matcher.

    Created fresh for every parse call and thrown away afterwards.
    """

    # Set by "Requirements:" until the next section separator
    in_requirements: bool = False

    # Unmatched stat line kept in case the next line completes it
    held_line: Optional[str] = None

    def reset_section(self) -> None:
        self.in_requirements = False
        self.held_line = None


def split_property(line: str) -> Tuple[str, str]:
    """
    Split 'Key: Value' into its parts.

    The value is the text between the first and second ': ' delimiter, so
    'Requirements:' yields an empty value.
    """
    key = line.split(PROPERTY_DELIMITER, 1)[0]
    parts = line.split(PROPERTY_VALUE_DELIMITER)
    value = parts[1] if len(parts) > 1 else ""
    return key, value


class PropertyLineParser:
    """Writes property lines into the facets of an ItemRecord."""

    def parse(self, item: ItemRecord, line: str, state: ParseState) -> bool:
        """
        Parse one property line into the item.

        Returns True if the key was recognised.
        """
        key, value = split_property(line)

        if key == REQUIREMENTS_KEY:
            state.in_requirements = True
            return True

        if key == LEVEL_KEY:
            key = REQ_LEVEL_KEY if state.in_requirements else GEM_LEVEL_KEY

        schema = PROPERTY_SCHEMA.get(key)
        if schema is None:
            logger.debug(f"Unknown/unimplemented prop: {key!r}")
            return False

        facet_name, field_name, reader = schema
        parsed = reader(value)

        if facet_name == SOCKET:
            item.sockets = parsed
            return True

        setattr(getattr(item, facet_name), field_name, parsed)

        if facet_name == WEAPON:
            item.is_weapon = True
        elif facet_name == ARMOUR:
            item.is_armour = True

        return True
