"""
Settings for the catalog, loaded from a YAML file with defaults for anything missing.
"""

import copy
import logging
import os
from typing import Dict, Optional

import yaml

logger = logging.getLogger(__name__)
DEFAULT_SETTINGS_PATH = os.path.join(os.path.dirname(__file__), "settings.yaml")
DEFAULT_SETTINGS = {
    "store_path": "data/catalog.json",
    "upload_dir": "data/uploads",
    "batch_delay_seconds": 0.2,
    "request_timeout": 10,
    "default_source": None,
    "language_overrides": {},
}


def load_settings(settings_path: Optional[str] = None) -> Dict:
    """
    Load settings from a YAML file, falling back to defaults.

    Args:
        settings_path: Path to the settings YAML file. If None, uses default path.

    Returns:
        Dictionary containing every key of DEFAULT_SETTINGS.
    """
    if settings_path is None:
        settings_path = DEFAULT_SETTINGS_PATH

    settings = copy.deepcopy(DEFAULT_SETTINGS)
    if not os.path.exists(settings_path):
        logger.warning(
            "Settings file not found at %s. Using default settings.",
            settings_path,
        )
        return settings

    try:
        with open(settings_path, "r", encoding="utf-8") as file:
            loaded = yaml.safe_load(file)
    except (yaml.YAMLError, IOError) as e:
        logger.warning("Failed to load settings file: %s", e)
        return settings

    if not loaded:
        return settings
    if not isinstance(loaded, dict):
        logger.warning("Ignoring settings file %s: expected a mapping", settings_path)
        return settings

    unknown_keys = set(loaded) - set(DEFAULT_SETTINGS)
    if unknown_keys:
        logger.warning("Unknown settings ignored: %s", ", ".join(sorted(unknown_keys)))

    settings.update({k: v for k, v in loaded.items() if k in DEFAULT_SETTINGS})
    if not isinstance(settings["language_overrides"], dict):
        logger.warning("language_overrides must be a mapping, ignoring it")
        settings["language_overrides"] = {}

    logger.info("Loaded settings from %s", settings_path)
    return settings
