"""
Reference dictionaries consulted while parsing items.

These tables are built once (see data_sources.reference_loader) and are
read-only afterwards, so a single ReferenceData can be shared by every
parser in the process.

Several modifiers can share the same template text (an explicit and an
implicit "# to maximum Life", for example), so lookups by text return all
candidates in load order. Modifier ids are unique.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from core.constants import PSEUDO_OP_ADD

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModifierEntry:
    """A known modifier template."""

    id: str
    kind: str
    text: str


@dataclass(frozen=True)
class BaseItemEntry:
    """An entry from the unique / base item list."""

    type: str = ""
    name: Optional[str] = None
    category_hint: str = ""
    discriminator: Optional[str] = None
    kind: str = ""

    @property
    def key(self) -> str:
        """Lookup key: the unique name when there is one, else the base type."""
        return self.name or self.type


@dataclass(frozen=True)
class PseudoRule:
    """Contributes a scaled copy of a modifier's values to a pseudo stat."""

    target_id: str
    factor: float = 1.0
    op: str = PSEUDO_OP_ADD


class ModifierDictionary:
    """Modifier templates indexed by template text and by id."""

    def __init__(self, entries: Iterable[ModifierEntry] = ()) -> None:
        by_text: Dict[str, List[ModifierEntry]] = {}
        by_id: Dict[str, ModifierEntry] = {}

        for entry in entries:
            by_text.setdefault(entry.text, []).append(entry)
            if entry.id in by_id:
                logger.debug(f"Duplicate modifier id {entry.id}, keeping first")
                continue
            by_id[entry.id] = entry

        self._by_text: Mapping[str, Tuple[ModifierEntry, ...]] = MappingProxyType(
            {text: tuple(group) for text, group in by_text.items()}
        )
        self._by_id: Mapping[str, ModifierEntry] = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def contains_text(self, text: str) -> bool:
        return text in self._by_text

    def lookup_text(self, text: str) -> Tuple[ModifierEntry, ...]:
        """All entries sharing a template text, in load order."""
        return self._by_text.get(text, ())

    def get(self, modifier_id: str) -> Optional[ModifierEntry]:
        return self._by_id.get(modifier_id)


class ItemDictionary:
    """Unique and base items keyed by unique name, or by type when unnamed."""

    def __init__(self, entries: Iterable[BaseItemEntry] = ()) -> None:
        by_key: Dict[str, List[BaseItemEntry]] = {}
        for entry in entries:
            by_key.setdefault(entry.key, []).append(entry)

        self._by_key: Mapping[str, Tuple[BaseItemEntry, ...]] = MappingProxyType(
            {key: tuple(group) for key, group in by_key.items()}
        )

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._by_key)

    def lookup(self, key: str) -> Tuple[BaseItemEntry, ...]:
        return self._by_key.get(key, ())

    def first(self, key: str) -> Optional[BaseItemEntry]:
        entries = self.lookup(key)
        return entries[0] if entries else None


def freeze_pseudo_rules(
    rules: Mapping[str, Iterable[PseudoRule]],
) -> Mapping[str, Tuple[PseudoRule, ...]]:
    return MappingProxyType({source: tuple(group) for source, group in rules.items()})


@dataclass(frozen=True)
class ReferenceData:
    """
    Bundle of every lookup table the parser needs.

    Attributes:
        modifiers: Template text / id index of known modifiers
        items: Unique and base item entries
        base_categories: Base type name -> trade category ("armour.chest")
        pseudo_rules: Source modifier id -> rules it contributes to
    """

    modifiers: ModifierDictionary = field(default_factory=ModifierDictionary)
    items: ItemDictionary = field(default_factory=ItemDictionary)
    base_categories: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    pseudo_rules: Mapping[str, Tuple[PseudoRule, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def build(
        cls,
        modifiers: Iterable[ModifierEntry] = (),
        items: Iterable[BaseItemEntry] = (),
        base_categories: Optional[Mapping[str, str]] = None,
        pseudo_rules: Optional[Mapping[str, Iterable[PseudoRule]]] = None,
    ) -> "ReferenceData":
        """Build frozen tables from plain iterables and dicts."""
        return cls(
            modifiers=ModifierDictionary(modifiers),
            items=ItemDictionary(items),
            base_categories=MappingProxyType(dict(base_categories or {})),
            pseudo_rules=freeze_pseudo_rules(pseudo_rules or {}),
        )
