"""Engine settings loading with defaults and override merging."""

from __future__ import annotations

import copy
from pathlib import Path

import yaml

DEFAULTS = {
    "suggestions": {
        "pool_file": None,
    },
    "variation": {
        "include_snacks": True,
        "title_suffix": " (Variation)",
    },
    "logging": {
        "level": "info",
        "file": None,
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | None = None) -> dict:
    """Load engine settings from a YAML file, falling back to defaults."""
    if config_path is not None and config_path.exists():
        with open(config_path) as f:
            user_config = yaml.safe_load(f) or {}
        return deep_merge(copy.deepcopy(DEFAULTS), user_config)

    return copy.deepcopy(DEFAULTS)


def apply_overrides(config: dict, **overrides: object) -> dict:
    """Apply flat overrides to config.

    Supports flat keys that map into nested config:
      pool_file -> suggestions.pool_file
      include_snacks -> variation.include_snacks
      log_level -> logging.level
      log_file -> logging.file
    """
    if overrides.get("pool_file") is not None:
        config["suggestions"]["pool_file"] = str(overrides["pool_file"])
    if overrides.get("include_snacks") is not None:
        config["variation"]["include_snacks"] = bool(overrides["include_snacks"])
    if overrides.get("log_level") is not None:
        config["logging"]["level"] = str(overrides["log_level"]).lower()
    if overrides.get("log_file") is not None:
        config["logging"]["file"] = str(overrides["log_file"])

    return config
