from __future__ import annotations

import pytest

from core.item_models import ModifierMergeError
from core.item_parser import ItemParser
from core.reference_data import ModifierEntry, PseudoRule, ReferenceData

pytestmark = pytest.mark.unit


RARE_HELMET = """Rarity: Rare
<<set:MS>><<set:M>><<set:S>>Doom Visor
Hubris Circlet
--------
Quality: +20% (augmented)
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
+40 to Strength
+45% to Fire Resistance
12% reduced Attack Speed
--------
Corrupted
"""

SKILL_GEM = """Rarity: Gem
Vaal Grace
--------
Aura, Spell, AoE, Duration, Vaal
Level: 20 (Max)
Mana Reserved: 50%
--------
Requirements:
Level: 72
Int: 155
--------
Experience: 9,569,275/9,569,275
--------
Casts an aura that grants evasion and chance to dodge to you and nearby allies.
"""


# --------------------------------------
# Rejection
# --------------------------------------

class TestRejection:
    @pytest.mark.parametrize("text", ["", "Hello world", "Item Class: Rings\nRarity: Rare"])
    def test_non_item_text_returns_none(self, parser, text):
        assert parser.parse(text) is None

    def test_default_parser_has_empty_tables(self):
        item = ItemParser().parse("Rarity: Normal\nIron Ring\n--------\nItem Level: 1")
        assert item is not None
        assert item.filters == {}
        assert item.category == ""


# --------------------------------------
# Full items
# --------------------------------------

class TestRareItem:
    def test_header(self, parser):
        item = parser.parse(RARE_HELMET)

        assert item.rarity == "Rare"
        assert item.name == "Doom Visor"
        assert item.type == "Hubris Circlet"
        assert item.category == "armour.helmet"

    def test_properties(self, parser):
        item = parser.parse(RARE_HELMET)

        assert item.misc.quality == 20
        assert item.armour.energy_shield == 120
        assert item.is_armour is True
        assert item.requirements.level == 69
        assert item.requirements.intelligence == 154
        assert item.misc.gem_level == 0
        assert item.sockets.colours.b == 4
        assert item.sockets.links == 3
        assert item.misc.item_level == 84
        assert item.misc.corrupted is True

    def test_stats_and_pseudos(self, parser):
        item = parser.parse(RARE_HELMET)

        assert item.filters["explicit.stat_3299347043"].values == [50]
        assert item.filters["explicit.stat_4080418644"].values == [40]
        assert item.filters["explicit.stat_3372524247"].values == [45]
        assert item.filters["explicit.stat_681332047"].values == [-12]

        assert item.pseudos["pseudo.pseudo_total_life"].values == [70]
        assert item.pseudos["pseudo.pseudo_total_strength"].values == [40]
        assert item.pseudos["pseudo.pseudo_total_elemental_resistance"].values == [45]
        assert item.errors == []

    def test_to_dict(self, parser):
        result = parser.parse(RARE_HELMET).to_dict()

        assert result["name"] == "Doom Visor"
        assert result["type"] == "Hubris Circlet"
        assert result["category"] == "armour.helmet"
        assert result["sockets"] == 4
        assert result["links"] == 3
        assert result["ilvl"] == 84
        assert result["quality"] == 20
        assert result["corrupted"] is True
        assert "gem_level" not in result


class TestGem:
    def test_gem_level_vs_required_level(self, parser):
        item = parser.parse(SKILL_GEM)

        assert item.category == "gem"
        assert item.type == "Vaal Grace"
        assert item.name == ""
        assert item.misc.gem_level == 20
        assert item.requirements.level == 72
        assert item.misc.gem_level_progress == 100

    def test_gem_to_dict(self, parser):
        result = parser.parse(SKILL_GEM).to_dict()
        assert result["gem_level"] == 20
        assert result["category"] == "gem"


# --------------------------------------
# Categories
# --------------------------------------

class TestCategories:
    def test_divination_card(self, parser):
        item = parser.parse("Rarity: Divination Card\nThe Doctor\n--------\nStack Size: 1/8")

        assert item.category == "card"
        assert item.rarity == "card"

    def test_map_suffix(self, parser):
        item = parser.parse("Rarity: Normal\nSuperior Shore Map\n--------\nMap Tier: 5")

        assert item.type == "Shore Map"
        assert item.category == "map"

    def test_prophecy(self, parser):
        item = parser.parse("Rarity: Normal\nThe Snuffed Flame\n--------\nRight-click to add.")

        assert item.name == "The Snuffed Flame"
        assert item.type == "prophecy"
        assert item.category == "prophecy"

    def test_magic_affixes_stripped_from_type(self, parser):
        item = parser.parse(
            "Rarity: Magic\nSeething Divine Life Flask of Staunching\n--------\nQuality: +5%"
        )

        assert item.type == "Divine Life Flask"
        assert item.category == "flask"

    def test_unknown_base_has_no_category(self, parser):
        item = parser.parse("Rarity: Normal\nMystery Box\n--------\nItem Level: 1")
        assert item.category == ""


# --------------------------------------
# Section counting
# --------------------------------------

class TestSections:
    def test_two_sections_no_filters(self, parser):
        item = parser.parse("Rarity: Rare\nName\n--------\n+50 to maximum Life")

        assert item.sections == 1
        assert item.filters == {}

    def test_third_section_zero_variance_match(self, parser):
        item = parser.parse(
            "Rarity: Rare\nName\n--------\nsomething\n--------\nCannot be Frozen"
        )

        assert list(item.filters) == ["explicit.stat_1996053383"]
        assert item.filters["explicit.stat_1996053383"].values == []

    def test_multiline_held_line_does_not_cross_sections(self, parser):
        text = (
            "Rarity: Rare\nName\nBase\n--------\nItem Level: 1\n--------\n"
            "Your Hits can't be Evaded\n--------\nby Enemies with Elusive"
        )
        item = parser.parse(text)
        assert item.filters == {}

    def test_multiline_within_section(self, parser):
        text = (
            "Rarity: Rare\nName\nBase\n--------\nItem Level: 1\n--------\n"
            "Your Hits can't be Evaded\nby Enemies with Elusive"
        )
        item = parser.parse(text)
        assert "explicit.stat_3556824919" in item.filters

    def test_windows_line_endings(self, parser):
        item = parser.parse(RARE_HELMET.replace("\n", "\r\n"))

        assert item.type == "Hubris Circlet"
        assert item.filters["explicit.stat_3299347043"].values == [50]


# --------------------------------------
# Data inconsistencies
# --------------------------------------

INCONSISTENT = ReferenceData.build(
    modifiers=[
        ModifierEntry("explicit.x", "explicit", "# to maximum Life"),
        ModifierEntry("explicit.x", "explicit", "Adds # to # Cold Damage"),
    ],
    pseudo_rules={"explicit.x": [PseudoRule("pseudo.total")]},
)

INCONSISTENT_ITEM = """Rarity: Rare
Name
Base
--------
Item Level: 1
--------
+10 to maximum Life
Adds 1 to 2 Cold Damage
"""


class TestMergeErrors:
    def test_error_recorded_and_parsing_continues(self):
        item = ItemParser(INCONSISTENT).parse(INCONSISTENT_ITEM + "Corrupted\n")

        assert item is not None
        assert len(item.errors) == 1
        assert item.filters["explicit.x"].values == [10]
        assert item.misc.corrupted is True

    def test_strict_merge_raises(self):
        with pytest.raises(ModifierMergeError):
            ItemParser(INCONSISTENT, strict_merge=True).parse(INCONSISTENT_ITEM)


# --------------------------------------
# parse_multiple
# --------------------------------------

def test_parse_multiple(parser):
    bulk = RARE_HELMET + "\n" + SKILL_GEM
    items = parser.parse_multiple(bulk)

    assert [i.get_display_name() for i in items] == ["Doom Visor (Hubris Circlet)", "Vaal Grace"]


def test_parser_is_reusable(parser):
    first = parser.parse(RARE_HELMET)
    second = parser.parse(RARE_HELMET)

    assert first is not second
    assert second.filters["explicit.stat_3299347043"].values == [50]
