"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml once and caches it.
All modules access configuration through this, never hardcoded values.
"""

import os
import yaml
from typing import Any, Dict


_CONFIG_CACHE: Dict[str, Any] = {}


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        _CONFIG_CACHE = yaml.safe_load(f)

    return _CONFIG_CACHE


def get_section(name: str) -> Any:
    """
    Returns a top-level config section.

    Raises:
        KeyError: If the section is not in the config.
    """
    config = load_config()
    if name not in config:
        raise KeyError(
            f"No config section '{name}'. "
            f"Available: {list(config.keys())}"
        )
    return config[name]


def get_normalization_config() -> Dict[str, Any]:
    """Returns the normalization block."""
    return get_section("normalization")


def get_recurring_detection_config() -> Dict[str, Any]:
    """Returns the recurring_detection block."""
    return get_section("recurring_detection")


def get_cadence_bands() -> Dict[str, Dict[str, int]]:
    """Returns the cadence band table, keyed by recurrence label."""
    return get_recurring_detection_config()["cadence_bands"]


def get_amount_stability_config() -> Dict[str, float]:
    """Returns the amount_stability block."""
    return get_section("amount_stability")


def get_scoring_config() -> Dict[str, int]:
    """Returns the sub-score weights."""
    return get_section("scoring")


def get_keyword_rules() -> list[Dict[str, Any]]:
    """Returns the ordered keyword rule table."""
    return get_section("keyword_rules")


def get_confidence_tiers() -> Dict[str, int]:
    """Returns minimum score per confidence tier, highest tier first."""
    return get_section("confidence_tiers")


def get_deduplication_config() -> Dict[str, Any]:
    """Returns the deduplication block."""
    return get_section("deduplication")


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = {}
