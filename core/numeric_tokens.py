"""
Numeric token extraction for item text.

Pulls the numbers out of a property value or affix line and produces the
"template" form of a line (every number replaced by ``#``), which is the key
used by the modifier dictionary.

Also holds the small readers used for property values:
- single int / float values ("+20% (augmented)", "1.50")
- damage ranges and comma-separated lists of ranges ("10-20, 5-15")
- socket strings ("R-G-B B")
- gem experience ("1/285,815")
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Tuple

from core.constants import AUGMENTED_MARKER, CRAFTED_MARKER, PLACEHOLDER
from core.item_models import Number, SocketFacet, ValueRange

logger = logging.getLogger(__name__)

NUMBER_RE = re.compile(r"[+-]?\d+(?:\.\d+)?")
PROP_NUMBER_RE = re.compile(r"^([+-]?\d+(?:\.\d+)?)%?")
RANGE_RE = re.compile(r"^(\d+)-(\d+)")
EXPERIENCE_RE = re.compile(r"^([\d,]+)/([\d,]+)")

SOCKET_COLOURS = {"R": "r", "G": "g", "B": "b", "W": "w", "A": "a"}


@dataclass(frozen=True)
class NumericToken:
    """A number found in a line, with the literal text it came from."""

    text: str
    value: Number


def parse_number(text: str) -> Number:
    """Convert a numeric literal, keeping int vs float by the decimal point."""
    if "." in text:
        return float(text)
    return int(text)


def extract_numbers(line: str) -> Tuple[List[NumericToken], str]:
    """
    Extract every numeric literal from a line.

    Returns the tokens in order and the templated line, where each literal
    is replaced by a single placeholder.

    Example:
        >>> tokens, template = extract_numbers("Adds 5 to 10.5 Fire Damage")
        >>> [t.value for t in tokens], template
        ([5, 10.5], 'Adds # to # Fire Damage')
    """
    tokens = [
        NumericToken(text=m.group(0), value=parse_number(m.group(0)))
        for m in NUMBER_RE.finditer(line)
    ]
    template = NUMBER_RE.sub(PLACEHOLDER, line)
    return tokens, template


# ----------------------------------------------------------------------
# Marker helpers
# ----------------------------------------------------------------------


def strip_augmented(text: str) -> str:
    return text.replace(f" {AUGMENTED_MARKER}", "")


def strip_crafted(line: str) -> Tuple[str, bool]:
    """
    Remove the crafted marker from a stat line.

    Returns the cleaned line and whether the line was marked as crafted.
    """
    crafted = line.endswith(CRAFTED_MARKER)
    return line.replace(f" {CRAFTED_MARKER}", ""), crafted


# ----------------------------------------------------------------------
# Property value readers
# ----------------------------------------------------------------------


def read_prop_int(value: str) -> int:
    """Read the leading integer of a property value, e.g. '+20% (augmented)'."""
    match = PROP_NUMBER_RE.match(strip_augmented(value))
    if not match:
        return 0
    return int(float(match.group(1)))


def read_prop_float(value: str) -> float:
    """Read the leading float of a property value, e.g. '6.50%'."""
    match = PROP_NUMBER_RE.match(strip_augmented(value))
    if not match:
        return 0.0
    return float(match.group(1))


def read_prop_range(value: str) -> ValueRange:
    """
    Read a min-max damage range.

    Comma-separated lists (elemental damage with several damage types) are
    read entry by entry and summed:

        "10-20"        -> ValueRange(10, 20)
        "10-20, 5-15"  -> ValueRange(15, 35)
    """
    total = ValueRange()

    if ", " in value:
        for part in value.split(", "):
            if part:
                total += read_prop_range(part)
        return total

    match = RANGE_RE.match(strip_augmented(value))
    if match:
        total = ValueRange(int(match.group(1)), int(match.group(2)))
    return total


def read_sockets(value: str) -> SocketFacet:
    """
    Read a socket string such as 'R-G-B B-B W'.

    Groups are separated by spaces and linked sockets by dashes. Colour
    totals are counted over every group; links is the size of the largest
    linked group (a lone socket is not a link).
    """
    facet = SocketFacet()

    for group in value.split():
        sockets = [s for s in group.split("-") if s]

        if len(sockets) > 1 and len(sockets) > facet.links:
            facet.links = len(sockets)

        for socket in sockets:
            attr = SOCKET_COLOURS.get(socket)
            if attr is None:
                logger.debug(f"Unknown socket colour: {socket!r}")
                continue
            setattr(facet.colours, attr, getattr(facet.colours, attr) + 1)

    return facet


def read_prop_experience(value: str) -> int:
    """Read gem experience 'current/needed' as an integer percent."""
    match = EXPERIENCE_RE.match(strip_augmented(value).strip())
    if not match:
        return 0

    current = int(match.group(1).replace(",", ""))
    needed = int(match.group(2).replace(",", ""))
    if needed <= 0:
        return 0
    return min(100, current * 100 // needed)
