"""
data_sources.payload_models - Pydantic models for reference data payloads.

These models validate the JSON documents the reference tables are built
from: the trade site "stats" and "items" data, the RePoE base item list and
the bundled category / pseudo rule files. Unknown keys are ignored, so
newer payloads with extra fields still load.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, RootModel


# ==============================================================================
# Trade Site Data
# ==============================================================================


class StatEntryPayload(BaseModel):
    """One modifier template from the trade "stats" data."""

    id: str = Field(..., examples=["explicit.stat_3299347043"])
    text: str = Field(..., examples=["# to maximum Life"])
    type: str = Field(..., examples=["explicit"])


class StatGroupPayload(BaseModel):
    label: str = ""
    entries: List[StatEntryPayload] = Field(default_factory=list)


class StatsPayload(BaseModel):
    """Trade "stats" document: {"result": [{"label", "entries"}]}."""

    result: List[StatGroupPayload] = Field(default_factory=list)


class ItemEntryPayload(BaseModel):
    """One unique or base item from the trade "items" data."""

    type: Optional[str] = Field(None, examples=["Leather Belt"])
    name: Optional[str] = Field(None, examples=["Headhunter"])
    disc: Optional[str] = Field(None, description="Discriminator (map series etc.)")
    flags: Dict[str, bool] = Field(default_factory=dict)


class ItemGroupPayload(BaseModel):
    id: str = Field("", examples=["accessory", "prophecy"])
    label: str = Field("", examples=["Accessories"])
    entries: List[ItemEntryPayload] = Field(default_factory=list)


class ItemsPayload(BaseModel):
    """Trade "items" document: {"result": [{"id", "label", "entries"}]}."""

    result: List[ItemGroupPayload] = Field(default_factory=list)


# ==============================================================================
# RePoE / Bundled Data
# ==============================================================================


class BaseItemPayload(BaseModel):
    name: str = Field(..., examples=["Vaal Regalia"])
    item_class: str = Field(..., examples=["Body Armour"])


class BaseItemsPayload(RootModel[Dict[str, BaseItemPayload]]):
    """RePoE base_items: metadata path -> {"name", "item_class", ...}."""


class BaseCategoriesPayload(RootModel[Dict[str, str]]):
    """Item class -> trade category, e.g. "Body Armour" -> "armour.chest"."""


class PseudoRulePayload(BaseModel):
    id: str = Field(..., examples=["pseudo.pseudo_total_life"])
    factor: float = 1.0
    op: str = "add"


class PseudoRulesPayload(RootModel[Dict[str, List[PseudoRulePayload]]]):
    """Source modifier id -> rules."""
