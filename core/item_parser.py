"""
Item text parser for the PoE item text parser.

Parses clipboard text copied from Path of Exile into a structured
ItemRecord.

Supports:
- Rarity / name / base type (magic affixes and markup stripped)
- Weapon, armour, socket, requirement and misc properties
- Gem level vs required level ("Level:" inside "Requirements:")
- Explicit / implicit / crafted mods matched to modifier ids
- Multi-line mods
- Flags (Unidentified, Corrupted, Shaper Item, Elder Item)
- Category resolution (gem, card, map, prophecy, base categories)
- Pseudo stats derived from matched mods
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from core.constants import (
    CATEGORY_CARD,
    CATEGORY_GEM,
    CATEGORY_MAP,
    CATEGORY_PROPHECY,
    KIND_PROPHECY,
    MAP_SUFFIX,
    MIN_STAT_SECTIONS,
    NAME_MARKUP,
    PROPERTY_DELIMITER,
    PROPERTY_VALUE_DELIMITER,
    RARITY_DIVINATION_CARD,
    RARITY_GEM,
    RARITY_MAGIC,
    RARITY_MARKER,
    SECTION_MARKER,
    SUPERIOR_PREFIX,
)
from core.item_models import ItemRecord, ModifierMergeError
from core.property_parser import ParseState, PropertyLineParser
from core.pseudo_aggregator import PseudoAggregator
from core.reference_data import ReferenceData
from core.stat_matcher import StatLineMatcher

logger = logging.getLogger(__name__)

# "Seething Divine Life Flask of Staunching" -> "Divine Life Flask"
MAGIC_TYPE_RE = re.compile(r"^\S+ ([\w\s]+) of \w+$")


# ----------------------------------------------------------------------
# Parser Implementation
# ----------------------------------------------------------------------


class ItemParser:
    """
    Full item parser for PoE clipboard text.

    The parser only keeps references to read-only lookup tables, so one
    instance can be reused for any number of items. Everything that changes
    while reading a single item lives in a ParseState created per call.
    """

    def __init__(
        self,
        reference_data: Optional[ReferenceData] = None,
        strict_merge: bool = False,
    ) -> None:
        """
        Args:
            reference_data: Modifier, item, category and pseudo rule tables
                (empty tables if None)
            strict_merge: Re-raise ModifierMergeError instead of recording it
                on the item and moving on
        """
        self.data = reference_data or ReferenceData()
        self.strict_merge = strict_merge

        self.properties = PropertyLineParser()
        self.stats = StatLineMatcher(self.data.modifiers)
        self.pseudos = PseudoAggregator(self.data.modifiers, self.data.pseudo_rules)

    def parse(self, text: str) -> Optional[ItemRecord]:
        """
        Parse a single item from raw clipboard text.

        Returns an ItemRecord, or None if the text does not start with a
        rarity line.
        """
        lines = [line.rstrip() for line in text.splitlines()]

        if not lines or not lines[0].startswith(RARITY_MARKER):
            logger.warning("Parse called on non PoE item text")
            return None

        item = ItemRecord(raw_text=text)
        state = ParseState()

        body = self._parse_header(lines, item)
        self._resolve_early_category(item)
        self._parse_body(body, item, state)
        self._resolve_base_category(item)

        try:
            self.pseudos.apply(item)
        except ModifierMergeError as e:
            self._record_error(item, e)

        return item

    def parse_multiple(self, bulk_text: str) -> List[ItemRecord]:
        """
        Parse multiple items from a block of text.

        A new item starts at every "Rarity:" line.
        """
        blocks: List[str] = []
        current: List[str] = []

        for line in bulk_text.splitlines():
            if line.strip().startswith(RARITY_MARKER):
                if current:
                    blocks.append("\n".join(current))
                current = [line.strip()]
            elif current:
                current.append(line)

        if current:
            blocks.append("\n".join(current))

        items = []
        for blk in blocks:
            parsed = self.parse(blk)
            if parsed:
                items.append(parsed)

        return items

    # ------------------------------------------------------------------
    # Header Parsing
    # ------------------------------------------------------------------

    def _parse_header(self, lines: List[str], item: ItemRecord) -> List[str]:
        """
        Parse rarity, name and type.

        Named items (rare, unique) have a name line and a type line; other
        items only have the type, directly followed by the first separator:

            Rarity: Rare            Rarity: Normal
            Doom Visor              Hubris Circlet
            Hubris Circlet          --------
            --------

        Returns the remaining body lines.
        """
        item.rarity = _value_after(lines[0])

        name_type = lines[1] if len(lines) > 1 else ""
        type_line = lines[2] if len(lines) > 2 else ""

        if type_line.startswith(SECTION_MARKER):
            # No name: the first line is the type and the separator opens
            # the first section
            item.type = self._read_type(item, name_type)
            item.sections += 1
        else:
            item.name = self._read_name(name_type)
            item.type = self._read_type(item, type_line)

        return lines[3:]

    @staticmethod
    def _read_name(name: str) -> str:
        return name.replace(NAME_MARKUP, "")

    @staticmethod
    def _read_type(item: ItemRecord, item_type: str) -> str:
        item_type = item_type.replace(NAME_MARKUP, "").replace(SUPERIOR_PREFIX, "")

        if item.rarity == RARITY_MAGIC:
            match = MAGIC_TYPE_RE.match(item_type)
            if match:
                item_type = match.group(1)

        return item_type

    # ------------------------------------------------------------------
    # Body Parsing
    # ------------------------------------------------------------------

    def _parse_body(self, lines: List[str], item: ItemRecord, state: ParseState) -> None:
        """
        Route each body line to the property parser or the stat matcher.

        Stats are only looked at from the second section on; the first
        sections hold properties and flavour text.
        """
        for line in lines:
            if not line:
                continue

            if line.startswith(SECTION_MARKER):
                item.sections += 1
                state.reset_section()
                continue

            if PROPERTY_DELIMITER in line:
                self.properties.parse(item, line, state)
                continue

            if item.sections < MIN_STAT_SECTIONS:
                continue

            try:
                self.stats.match(item, line, state)
            except ModifierMergeError as e:
                self._record_error(item, e)

    def _record_error(self, item: ItemRecord, error: ModifierMergeError) -> None:
        if self.strict_merge:
            raise error
        logger.error(f"Data inconsistency while parsing {item.get_display_name()}: {error}")
        item.errors.append(str(error))

    # ------------------------------------------------------------------
    # Category Resolution
    # ------------------------------------------------------------------

    def _resolve_early_category(self, item: ItemRecord) -> None:
        """Categories implied by rarity, type name or the item list."""
        if item.rarity == RARITY_GEM:
            item.category = CATEGORY_GEM
        elif item.rarity == RARITY_DIVINATION_CARD:
            item.category = item.rarity = CATEGORY_CARD

        if item.type.endswith(MAP_SUFFIX):
            item.category = CATEGORY_MAP

        if not item.category:
            entry = self.data.items.first(item.type)
            if entry is not None and entry.kind == KIND_PROPHECY:
                item.name = item.type
                item.type = item.category = CATEGORY_PROPHECY

    def _resolve_base_category(self, item: ItemRecord) -> None:
        if item.category:
            return
        category = self.data.base_categories.get(item.type)
        if category:
            item.category = category


def _value_after(line: str) -> str:
    """Text after the first ': ' of a line ('Rarity: Rare' -> 'Rare')."""
    parts = line.split(PROPERTY_VALUE_DELIMITER)
    return parts[1] if len(parts) > 1 else ""


if __name__ == "__main__":  # pragma: no cover
    print("=== Item Parser Smoke Test ===")
    from core.reference_data import ModifierEntry

    data = ReferenceData.build(
        modifiers=[
            ModifierEntry("explicit.stat_3299347043", "explicit", "# to maximum Life"),
            ModifierEntry("implicit.stat_3299347043", "implicit", "# to maximum Life"),
        ]
    )
    parser = ItemParser(data)
    sample = """Rarity: Rare
Doom Visor
Hubris Circlet
--------
Energy Shield: 120 (augmented)
--------
Requirements:
Level: 69
Int: 154
--------
Sockets: B-B-B B
--------
Item Level: 84
--------
+50 to maximum Life
Corrupted
"""
    result = parser.parse(sample)
    print(result)
    if result:
        print(result.to_dict())
