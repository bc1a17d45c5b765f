import faulthandler
import json
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from core.config import Config
from core.item_parser import ItemParser
from core.reference_data import BaseItemEntry, ModifierEntry, PseudoRule, ReferenceData

# =============================================================================
# Global logging reset fixture for test isolation
# =============================================================================

@pytest.fixture(autouse=True)
def reset_root_logger():
    """
    Restore root logger handlers and level after each test.

    setup_logging() replaces the root handlers (and opens a log file), so a
    test calling it directly or through the CLI must not leak that into the
    tests that follow.
    """
    root_logger = logging.getLogger()
    saved_level = root_logger.level

    yield

    # Only the handler types setup_logging() installs; pytest's own capture
    # handlers are subclasses and are left alone
    for handler in list(root_logger.handlers):
        if type(handler) in (RotatingFileHandler, logging.StreamHandler):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(saved_level)


# =============================================================================
# Reference data
# =============================================================================

LIFE = "explicit.stat_3299347043"
IMPLICIT_LIFE = "implicit.stat_3299347043"
FIRE_RES = "explicit.stat_3372524247"
COLD_RES = "explicit.stat_4220027924"
STRENGTH = "explicit.stat_4080418644"
ATTACK_SPEED = "explicit.stat_681332047"
CRAFTED_LIFE = "crafted.stat_3299347043"

SAMPLE_MODIFIERS = [
    ModifierEntry(IMPLICIT_LIFE, "implicit", "# to maximum Life"),
    ModifierEntry(LIFE, "explicit", "# to maximum Life"),
    ModifierEntry(CRAFTED_LIFE, "crafted", "# to maximum Life"),
    ModifierEntry(FIRE_RES, "explicit", "#% to Fire Resistance"),
    ModifierEntry(COLD_RES, "explicit", "#% to Cold Resistance"),
    ModifierEntry(STRENGTH, "explicit", "# to Strength"),
    ModifierEntry(ATTACK_SPEED, "explicit", "#% increased Attack Speed"),
    ModifierEntry("explicit.stat_2763429652", "explicit", "#% chance to Maim on Hit"),
    ModifierEntry(
        "explicit.stat_3023957681",
        "explicit",
        "#% chance to gain Onslaught for 4 seconds on Kill",
    ),
    ModifierEntry(
        "explicit.stat_2166444903",
        "explicit",
        "Adds 1 to # Lightning Damage",
    ),
    ModifierEntry(
        "explicit.stat_1996053383",
        "explicit",
        "Cannot be Frozen",
    ),
    ModifierEntry(
        "explicit.stat_3556824919",
        "explicit",
        "Your Hits can't be Evaded\nby Enemies with Elusive",
    ),
    ModifierEntry("pseudo.pseudo_total_life", "pseudo", "+# total maximum Life"),
    ModifierEntry(
        "pseudo.pseudo_total_elemental_resistance",
        "pseudo",
        "+#% total Elemental Resistance",
    ),
    ModifierEntry("pseudo.pseudo_total_strength", "pseudo", "+# total to Strength"),
]

SAMPLE_ITEMS = [
    BaseItemEntry(type="Leather Belt", name="Headhunter", category_hint="Accessories", kind="accessory"),
    BaseItemEntry(type="Prophecy", name="The Snuffed Flame", category_hint="Prophecies", kind="prophecy"),
]

SAMPLE_BASE_CATEGORIES = {
    "Hubris Circlet": "armour.helmet",
    "Vaal Regalia": "armour.chest",
    "Leather Belt": "accessory.belt",
    "Divine Life Flask": "flask",
}

SAMPLE_PSEUDO_RULES = {
    LIFE: [PseudoRule("pseudo.pseudo_total_life")],
    FIRE_RES: [PseudoRule("pseudo.pseudo_total_elemental_resistance")],
    COLD_RES: [PseudoRule("pseudo.pseudo_total_elemental_resistance")],
    STRENGTH: [
        PseudoRule("pseudo.pseudo_total_strength"),
        PseudoRule("pseudo.pseudo_total_life", factor=0.5),
    ],
}


@pytest.fixture
def reference_data():
    return ReferenceData.build(
        modifiers=SAMPLE_MODIFIERS,
        items=SAMPLE_ITEMS,
        base_categories=SAMPLE_BASE_CATEGORIES,
        pseudo_rules=SAMPLE_PSEUDO_RULES,
    )


@pytest.fixture
def parser(reference_data):
    return ItemParser(reference_data)


@pytest.fixture
def temp_config(tmp_path):
    """
    Provide a fresh Config pointing at an empty data directory.

    This fixture GUARANTEES a clean config or fails loudly.
    """
    config_path = tmp_path / f"config_{id(tmp_path)}_{time.time_ns()}.json"
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    config_path.write_text(json.dumps({"data": {"dir": str(data_dir)}}), encoding="utf-8")

    config = Config(config_file=config_path)

    assert config.data_dir == data_dir, \
        f"FIXTURE CONTAMINATED! data_dir={config.data_dir}, file={config.config_file}"
    assert config.strict_merge is False, \
        f"FIXTURE CONTAMINATED! strict_merge={config.strict_merge}, file={config.config_file}"

    return config


def pytest_collection_modifyitems(config, items):
    """Assign tier markers based on test location."""
    for item in items:
        path = Path(str(item.fspath)).as_posix()

        if "/tests/integration/" in path:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


def pytest_sessionstart(session):  # pragma: no cover - test harness init
    """Enable faulthandler for the entire test run to aid diagnosing hangs."""
    try:
        faulthandler.enable(file=sys.stderr, all_threads=True)
    except Exception:
        pass
