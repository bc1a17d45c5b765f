"""
Stat line matching.

Matches a free-text affix line ("+45 to maximum Life", "12% reduced
Attack Speed") against the modifier dictionary and records the matched
modifier, with its numbers, on the item.

Lookup order for a line, each step only tried if the previous ones failed:
1. Flag lines (Unidentified, Shaper Item, Elder Item, Corrupted)
2. Templated line ("# to maximum Life")
3. "reduced" rewritten to "increased" with the numbers negated
4. Reverse repair: put numbers back into the template from the end
5. Forward repair: put numbers back into the template from the front
6. The input line verbatim (modifier without any numbers)
7. Combination with the previous unmatched line (two-line modifiers)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from core.constants import (
    CORRUPTED_LINE,
    ELDER_LINE,
    INCREASED_WORD,
    KIND_CRAFTED,
    KIND_EXPLICIT,
    KIND_IMPLICIT,
    KIND_PSEUDO,
    PLACEHOLDER,
    REDUCED_WORD,
    SHAPER_LINE,
    UNIDENTIFIED_LINE,
)
from core.item_models import ItemRecord, MatchedModifier, negate_number
from core.numeric_tokens import NumericToken, extract_numbers, strip_crafted
from core.property_parser import ParseState
from core.reference_data import ModifierDictionary, ModifierEntry

logger = logging.getLogger(__name__)


def _replace_last(text: str, old: str, new: str) -> str:
    idx = text.rfind(old)
    return text[:idx] + new + text[idx + len(old):]


class StatLineMatcher:
    """
    Matches stat lines against a ModifierDictionary.

    The matcher itself holds no per-item state; the held line for
    multi-line modifiers lives on the ParseState passed in.
    """

    def __init__(self, modifiers: ModifierDictionary) -> None:
        self.modifiers = modifiers

    def match(
        self,
        item: ItemRecord,
        line: str,
        state: ParseState,
        combined: bool = False,
    ) -> bool:
        """
        Match one stat line and add the result to item.filters.

        Args:
            item: Item being built
            line: Stat line (or two lines joined by a newline when combined)
            state: Per-parse state holding the held multi-line candidate
            combined: True when this call is the retry of a held line plus
                the current line

        Returns:
            True if the line was consumed (flag line or matched modifier).
        """
        if self._apply_flag(item, line):
            return True

        stat, crafted = strip_crafted(line)
        tokens, template = extract_numbers(stat)

        key, tokens = self._find_template(line, template, tokens)

        if key is None:
            if not combined:
                return self._try_multiline(item, line, state)
            logger.debug(f"Ignored/unprocessed line {line!r}")
            return False

        # A good line ends any pending multi-line candidate
        state.held_line = None

        entry = self._select_entry(self.modifiers.lookup_text(key), crafted)
        if entry is None:
            logger.debug(f"Error parsing stat line {line!r}: no usable entry for {key!r}")
            return False

        item.add_filter(
            MatchedModifier(
                id=entry.id,
                kind=entry.kind,
                text=entry.text,
                values=[t.value for t in tokens],
            )
        )
        return True

    # ------------------------------------------------------------------
    # Lookup strategies
    # ------------------------------------------------------------------

    @staticmethod
    def _apply_flag(item: ItemRecord, line: str) -> bool:
        if line == UNIDENTIFIED_LINE:
            item.misc.identified = False
        elif line == SHAPER_LINE:
            item.misc.shaper_item = True
        elif line == ELDER_LINE:
            item.misc.elder_item = True
        elif line == CORRUPTED_LINE:
            item.misc.corrupted = True
        else:
            return False
        return True

    def _find_template(
        self,
        line: str,
        template: str,
        tokens: List[NumericToken],
    ) -> Tuple[Optional[str], List[NumericToken]]:
        """
        Run the lookup fallbacks for a line.

        Returns the dictionary key that matched (or None) and the tokens
        whose values belong to the matched modifier.
        """
        if self.modifiers.contains_text(template):
            return template, tokens

        if tokens and REDUCED_WORD in template:
            template = template.replace(REDUCED_WORD, INCREASED_WORD)
            tokens = [
                NumericToken(t.text, negate_number(t.value)) for t in tokens
            ]
            if self.modifiers.contains_text(template):
                return template, tokens

        key, remaining = self._repair_reverse(template, tokens)
        if key is not None:
            return key, remaining

        key, remaining = self._repair_forward(template, tokens)
        if key is not None:
            return key, remaining

        # No variance at all: the dictionary holds the literal line
        if self.modifiers.contains_text(line):
            return line, []

        return None, tokens

    def _repair_reverse(
        self,
        template: str,
        tokens: List[NumericToken],
    ) -> Tuple[Optional[str], List[NumericToken]]:
        """
        Put numbers back into the template from the end.

        Handles modifiers whose trailing numbers are fixed text in the
        dictionary ("#% chance to gain Onslaught for 4 seconds on Kill").
        Tokens go back as their literal text, so a number negated by the
        "reduced" flip is restored as written on the item.
        """
        candidate = template
        remaining = list(tokens)

        while PLACEHOLDER in candidate and remaining:
            token = remaining.pop()
            candidate = _replace_last(candidate, PLACEHOLDER, token.text)
            if self.modifiers.contains_text(candidate):
                return candidate, remaining

        return None, tokens

    def _repair_forward(
        self,
        template: str,
        tokens: List[NumericToken],
    ) -> Tuple[Optional[str], List[NumericToken]]:
        """Put numbers back into the template from the front."""
        candidate = template
        remaining = list(tokens)

        while PLACEHOLDER in candidate and remaining:
            token = remaining.pop(0)
            candidate = candidate.replace(PLACEHOLDER, token.text, 1)
            if self.modifiers.contains_text(candidate):
                return candidate, remaining

        return None, tokens

    def _try_multiline(self, item: ItemRecord, line: str, state: ParseState) -> bool:
        """
        Treat an unmatched line as half of a two-line modifier.

        Only the most recent unmatched line is kept: if joining it with
        this line fails, this line replaces it.
        """
        if state.held_line is None:
            state.held_line = line
            logger.debug(f"Holding unmatched line {line!r}")
            return False

        joined = f"{state.held_line}\n{line}"
        result = self.match(item, joined, state, combined=True)

        if result:
            state.held_line = None
        else:
            state.held_line = line

        return result

    # ------------------------------------------------------------------
    # Entry selection
    # ------------------------------------------------------------------

    @staticmethod
    def _select_entry(
        entries: Sequence[ModifierEntry],
        crafted: bool,
    ) -> Optional[ModifierEntry]:
        """
        Pick one entry among those sharing a template text.

        Crafted lines only accept crafted entries. Otherwise pseudo entries
        are never matched from item text, and an explicit entry replaces an
        implicit one picked earlier.
        """
        if crafted:
            for entry in entries:
                if entry.kind == KIND_CRAFTED:
                    return entry
            return None

        selected: Optional[ModifierEntry] = None
        for entry in entries:
            if entry.kind == KIND_PSEUDO:
                continue
            if selected is None:
                selected = entry
            elif selected.kind == KIND_IMPLICIT and entry.kind == KIND_EXPLICIT:
                selected = entry

        return selected
