"""
Parser-wide constants for the PoE item text parser.

Centralizes the text markers and category names used while reading
clipboard item text.
"""

# =============================================================================
# Line Markers
# =============================================================================

# First line of every item copied from the game
RARITY_MARKER = "Rarity:"

# Section separator lines start with this ("--------")
SECTION_MARKER = "---"

# Property lines are "Key: Value"
PROPERTY_DELIMITER = ":"
PROPERTY_VALUE_DELIMITER = ": "

# Placeholder used in modifier templates ("# to maximum Life")
PLACEHOLDER = "#"

# Suffix markers on property values and stat lines
AUGMENTED_MARKER = "(augmented)"
CRAFTED_MARKER = "(crafted)"

# Markup the game sometimes leaves in names/types
NAME_MARKUP = "<<set:MS>><<set:M>><<set:S>>"
SUPERIOR_PREFIX = "Superior "


# =============================================================================
# Flag Lines
# =============================================================================

UNIDENTIFIED_LINE = "Unidentified"
SHAPER_LINE = "Shaper Item"
ELDER_LINE = "Elder Item"
CORRUPTED_LINE = "Corrupted"


# =============================================================================
# Rarities / Modifier Kinds / Categories
# =============================================================================

RARITY_MAGIC = "Magic"
RARITY_GEM = "Gem"
RARITY_DIVINATION_CARD = "Divination Card"

KIND_EXPLICIT = "explicit"
KIND_IMPLICIT = "implicit"
KIND_CRAFTED = "crafted"
KIND_PSEUDO = "pseudo"

# Item dictionary group id for prophecies
KIND_PROPHECY = "prophecy"

CATEGORY_GEM = "gem"
CATEGORY_CARD = "card"
CATEGORY_MAP = "map"
CATEGORY_PROPHECY = "prophecy"

MAP_SUFFIX = "Map"

# "reduced" lines share templates with their "increased" counterparts
REDUCED_WORD = "reduced"
INCREASED_WORD = "increased"

# Stats only start after the name and property sections
MIN_STAT_SECTIONS = 2


# =============================================================================
# Pseudo Rules
# =============================================================================

PSEUDO_OP_ADD = "add"
