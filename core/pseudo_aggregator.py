"""
Pseudo stat aggregation.

After all lines of an item are matched, modifiers listed in the pseudo rule
table contribute scaled copies of their values to derived "pseudo" stats,
e.g. every fire/cold/lightning resistance adds into total elemental
resistance, and strength adds half its value into total maximum life.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Tuple

from core.constants import KIND_PSEUDO, PSEUDO_OP_ADD
from core.item_models import (
    ItemRecord,
    MatchedModifier,
    ModifierMergeError,
    Number,
    scale_number,
)
from core.reference_data import ModifierDictionary, PseudoRule

logger = logging.getLogger(__name__)


class PseudoAggregator:
    """Expands matched modifiers into pseudo stats using a rule table."""

    def __init__(
        self,
        modifiers: ModifierDictionary,
        rules: Mapping[str, Tuple[PseudoRule, ...]],
    ) -> None:
        self.modifiers = modifiers
        self.rules = rules

    def apply(self, item: ItemRecord) -> None:
        """Fill item.pseudos from item.filters."""
        if not item.filters:
            return

        for modifier_id, modifier in item.filters.items():
            for rule in self.rules.get(modifier_id, ()):
                self._apply_rule(item, modifier, rule)

    def _apply_rule(
        self,
        item: ItemRecord,
        modifier: MatchedModifier,
        rule: PseudoRule,
    ) -> None:
        if rule.op != PSEUDO_OP_ADD:
            logger.warning(
                f"Unsupported pseudo rule op {rule.op!r} for "
                f"{modifier.id} -> {rule.target_id}, skipping"
            )
            return

        scaled: List[Number] = [scale_number(v, rule.factor) for v in modifier.values]

        existing = item.pseudos.get(rule.target_id)
        if existing is None:
            item.pseudos[rule.target_id] = self._new_pseudo(rule.target_id, scaled)
            return

        if len(scaled) != len(existing.values):
            raise ModifierMergeError(
                f"Cannot add {modifier.id} into {rule.target_id}: "
                f"{existing.values!r} and {scaled!r} differ in length"
            )

        existing.values = [_accumulate(a, b) for a, b in zip(existing.values, scaled)]

    def _new_pseudo(self, target_id: str, values: List[Number]) -> MatchedModifier:
        entry = self.modifiers.get(target_id)
        if entry is None:
            logger.debug(f"Pseudo target {target_id} not in modifier dictionary")
            return MatchedModifier(id=target_id, kind=KIND_PSEUDO, text="", values=values)

        return MatchedModifier(id=entry.id, kind=entry.kind, text=entry.text, values=values)


def _accumulate(total: Number, contribution: Number) -> Number:
    """
    Add a contribution into a pseudo slot.

    The contribution decides the result type, so a float source added into
    a slot an int source opened is not truncated (10 + 0.5 -> 10.5), while
    an int source truncates a float slot back to int.
    """
    if isinstance(contribution, float):
        return float(total) + contribution
    return int(total) + contribution
