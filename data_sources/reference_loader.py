"""
Reference Data Loader

Builds the parser's lookup tables from JSON payloads that were already
downloaded by the host application (trade site "stats" and "items" data,
RePoE base items) plus the tables bundled in core/data/ (item class categories,
pseudo rules).

Downloaded datasets are optional: a missing file only logs a warning and
leaves that table empty. Bundled files are required.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from core.config import Config
from core.reference_data import (
    BaseItemEntry,
    ItemDictionary,
    ModifierDictionary,
    ModifierEntry,
    PseudoRule,
    ReferenceData,
    freeze_pseudo_rules,
)
from data_sources.payload_models import (
    BaseCategoriesPayload,
    BaseItemsPayload,
    ItemsPayload,
    PseudoRulesPayload,
    StatsPayload,
)

logger = logging.getLogger(__name__)

# Datasets fetched from the network by the host application
DOWNLOADED_DATASETS = ("stats", "items", "base_items")


class ReferenceDataError(Exception):
    """Raised when a reference data file is missing or malformed."""


class ReferenceDataLoader:
    """
    Loads ReferenceData from payloads or from files in the data directory.

    Each load_* method accepts an already-decoded JSON document, so callers
    that fetch data themselves can skip the file layer entirely.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Args:
            config: Config naming the data directory and file names
                (defaults if None)
        """
        self.config = config or Config()

    # ------------------------------------------------------------------
    # Payload -> table
    # ------------------------------------------------------------------

    @staticmethod
    def load_stats(payload: Any) -> ModifierDictionary:
        """Build the modifier dictionary from a trade "stats" document."""
        stats = _validate(StatsPayload, payload, "stats")

        entries = [
            ModifierEntry(id=e.id, kind=e.type, text=e.text)
            for group in stats.result
            for e in group.entries
        ]
        modifiers = ModifierDictionary(entries)
        logger.info(f"Mod data loaded ({len(modifiers)} modifiers)")
        return modifiers

    @staticmethod
    def load_items(payload: Any) -> ItemDictionary:
        """
        Build the item dictionary from a trade "items" document.

        Entries are keyed by unique name, or by type for unnamed entries;
        name-only entries are kept under their name.
        The group id ("accessory", "prophecy", ...) becomes the entry kind.
        """
        items = _validate(ItemsPayload, payload, "items")

        entries: List[BaseItemEntry] = []
        for group in items.result:
            for e in group.entries:
                if not e.name and not e.type:
                    logger.debug(f"Item entry has neither name nor type: {e!r}")
                    continue
                entries.append(
                    BaseItemEntry(
                        type=e.type or "",
                        name=e.name,
                        category_hint=group.label,
                        discriminator=e.disc,
                        kind=group.id,
                    )
                )

        dictionary = ItemDictionary(entries)
        logger.info(f"Unique item data loaded ({len(dictionary)} keys)")
        return dictionary

    @staticmethod
    def load_base_categories(
        item_classes: Any,
        base_items: Any,
    ) -> Dict[str, str]:
        """
        Map base type names to trade categories.

        Args:
            item_classes: {"Body Armour": "armour.chest", ...}
            base_items: RePoE base_items document

        Base items whose class has no category are left out.
        """
        classes = _validate(BaseCategoriesPayload, item_classes, "base_categories").root
        bases = _validate(BaseItemsPayload, base_items, "base_items").root

        categories: Dict[str, str] = {}
        for base in bases.values():
            category = classes.get(base.item_class)
            if category:
                categories[base.name] = category

        logger.info(f"Item base data loaded ({len(categories)} bases)")
        return categories

    @staticmethod
    def load_pseudo_rules(payload: Any) -> Mapping[str, tuple]:
        rules = _validate(PseudoRulesPayload, payload, "pseudo_rules").root
        frozen = freeze_pseudo_rules(
            {
                source: [PseudoRule(target_id=r.id, factor=r.factor, op=r.op) for r in group]
                for source, group in rules.items()
            }
        )
        logger.info(f"Pseudo rules loaded ({len(frozen)} sources)")
        return frozen

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def load_all(self) -> ReferenceData:
        """Read every dataset from the data directory and build ReferenceData."""
        stats = self._read_json("stats")
        items = self._read_json("items")
        base_items = self._read_json("base_items")
        item_classes = self._read_json("base_categories")
        pseudo_rules = self._read_json("pseudo_rules")

        return ReferenceData(
            modifiers=self.load_stats(stats) if stats is not None else ModifierDictionary(),
            items=self.load_items(items) if items is not None else ItemDictionary(),
            base_categories=MappingProxyType(
                self.load_base_categories(item_classes, base_items or {})
            ),
            pseudo_rules=self.load_pseudo_rules(pseudo_rules),
        )

    def _read_json(self, name: str) -> Any:
        """
        Read one dataset file.

        Returns None for a missing downloaded dataset; raises
        ReferenceDataError for a missing bundled file or invalid JSON.
        """
        path: Path = self.config.dataset_path(name)

        if not path.exists():
            if name in DOWNLOADED_DATASETS:
                logger.warning(f"Reference data file not found: {path} ({name} table will be empty)")
                return None
            raise ReferenceDataError(f"Cannot open {path.name}")

        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ReferenceDataError(f"Failed to parse {path}: {e}") from e


def _validate(model: Any, payload: Any, name: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ReferenceDataError(f"Invalid {name} data: {e}") from e
