"""Action-level configuration.

``action_config.yml`` next to this file is the single source of truth for
constants that vary between deployments of the action: default package sets,
asset locations and the bun vendor install script URLs.
"""
from __future__ import annotations

from .load_action_config import (
    DEFAULT_CONFIG_PATH,
    ActionSettings,
    load_action_config,
    resolve_action_config_path,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ActionSettings",
    "load_action_config",
    "resolve_action_config_path",
]
