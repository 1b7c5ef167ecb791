"""Static configuration for evalshade.

All user-editable settings (colors, following modes, cleaning commands,
logging) live in a single JSON file for quick edits without touching Python.
The file can be reloaded at any time; the editor picks the new values up
through FeatureController.update_settings.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from typing import Any, Optional

from dotenv import load_dotenv
from rich.color import Color, ColorParseError

from core.config import DEFAULT_DIRTY_COLOR, Settings, build_settings

LOGGER = logging.getLogger(__name__)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Default location of the user config; EVALSHADE_CONFIG (env or .env) wins.
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def config_path() -> str:
    load_dotenv()
    return os.getenv("EVALSHADE_CONFIG") or CONFIG_PATH


def load_json_config(path: Optional[str] = None) -> dict[str, Any]:
    """Load config.json with a flat, user-friendly schema.

    A missing file is not an error: the feature runs on defaults.
    """

    path = path or config_path()
    if not os.path.exists(path):
        LOGGER.info("No config at %s, using defaults", path)
        return {}

    with open(path, "r", encoding="utf-8") as handle:
        loaded = json.load(handle)
    if not isinstance(loaded, dict):
        raise ValueError("config root must be an object")
    return loaded


def is_valid_color(value: str) -> bool:
    try:
        Color.parse(value)
    except ColorParseError:
        return False
    return True


def _validated(settings: Settings) -> Settings:
    # Bad colors degrade to defaults instead of surfacing an error.
    if not is_valid_color(settings.dirty_color):
        LOGGER.warning("Invalid dirty_color %r, using %s", settings.dirty_color, DEFAULT_DIRTY_COLOR)
        settings = replace(settings, dirty_color=DEFAULT_DIRTY_COLOR)
    if settings.clean_color is not None and not is_valid_color(settings.clean_color):
        LOGGER.warning("Invalid clean_color %r, removing the override instead", settings.clean_color)
        settings = replace(settings, clean_color=None)
    return settings


def load_settings(path: Optional[str] = None) -> Settings:
    """Read and validate the feature settings.

    Unreadable or malformed files fall back to defaults with a warning.
    """

    try:
        raw = load_json_config(path)
    except (OSError, ValueError) as exc:
        LOGGER.warning("Could not read config (%s), using defaults", exc)
        raw = {}
    return _validated(build_settings(raw))


def load_logging_config(path: Optional[str] = None) -> dict[str, Any]:
    """Return the optional logging section."""

    try:
        raw = load_json_config(path)
    except (OSError, ValueError):
        return {}
    logging_cfg = raw.get("logging", {})
    return logging_cfg if isinstance(logging_cfg, dict) else {}
