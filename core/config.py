"""
Configuration for the PoE item text parser.
Handles where reference data lives and how the parser reports problems.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

BUNDLED_DATA_DIR = Path(__file__).resolve().parent / "data"


def get_config_dir() -> Path:
    """
    Get the application config directory.

    Returns:
        Path to the config directory (~/.poe_item_parser/)
    """
    return Path.home() / ".poe_item_parser"


class Config:
    """
    Application configuration backed by a JSON file.

    Key ideas:
    - Values missing from the user file fall back to DEFAULT_CONFIG.
    - Nested sections are merged key by key, so a user file only needs the
      settings it changes.
    - The file is only read; writing settings belongs to the host application.
    """

    # NOTE: This structure is treated as immutable. Always use
    # _default_config_deepcopy() when you need a fresh copy of defaults.
    DEFAULT_CONFIG: Dict[str, Any] = {
        "data": {
            # Empty = core/data, installed as package data
            "dir": "",
            "files": {
                # Downloaded trade API / RePoE payloads
                "stats": "stats.json",
                "items": "items.json",
                "base_items": "base_items.min.json",
                # Bundled tables
                "base_categories": "base_categories.json",
                "pseudo_rules": "pseudo_rules.json",
            },
        },
        "parser": {
            # Raise on modifier value-length mismatches instead of recording
            # them on the item
            "strict_merge": False,
        },
        "logging": {
            "debug": False,
        },
    }

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Optional path to config JSON file. When omitted,
                         ~/.poe_item_parser/config.json is used.
        """
        self.config_file: Path = self._resolve_config_path(config_file)
        self.data: Dict[str, Any] = self._load()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_config_path(config_file: Optional[Path]) -> Path:
        if config_file is not None:
            return Path(config_file)
        return get_config_dir() / "config.json"

    def _load(self) -> Dict[str, Any]:
        """Load configuration from JSON file, merging with defaults."""
        if not self.config_file.exists():
            logger.info("No config file found, using defaults")
            return self._default_config_deepcopy()

        try:
            with self.config_file.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(f"Failed to load config: {exc}. Using defaults.")
            return self._default_config_deepcopy()

        if not isinstance(raw, dict):
            logger.error(f"Config file {self.config_file} is not a JSON object. Using defaults.")
            return self._default_config_deepcopy()

        logger.info(f"Config loaded from {self.config_file}")
        return self._merge_with_defaults(raw)

    @classmethod
    def _default_config_deepcopy(cls) -> Dict[str, Any]:
        return copy.deepcopy(cls.DEFAULT_CONFIG)

    def _merge_with_defaults(self, user_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge user config with defaults.

        Nested dictionaries are merged recursively so new default keys show
        up without discarding user-provided values.
        """
        merged = self._default_config_deepcopy()
        _deep_update(merged, user_config)
        return merged

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    @property
    def data_dir(self) -> Path:
        """Directory holding the reference data files."""
        configured = self.data["data"].get("dir") or ""
        if not configured:
            return BUNDLED_DATA_DIR
        return Path(configured).expanduser()

    @property
    def dataset_files(self) -> Dict[str, str]:
        """Dataset name -> file name inside data_dir."""
        return dict(self.data["data"].get("files", {}))

    def dataset_path(self, name: str) -> Path:
        try:
            return self.data_dir / self.dataset_files[name]
        except KeyError:
            raise KeyError(f"Unknown dataset: {name}") from None

    # ------------------------------------------------------------------
    # Parser / logging
    # ------------------------------------------------------------------

    @property
    def strict_merge(self) -> bool:
        return bool(self.data["parser"].get("strict_merge", False))

    @property
    def debug(self) -> bool:
        return bool(self.data["logging"].get("debug", False))


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
