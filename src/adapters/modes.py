"""Mode identification from file names.

Mode ids are plain strings; the feature only compares them against the
configured following modes.
"""

from __future__ import annotations

import os
from typing import Optional

FUNDAMENTAL_MODE = "fundamental"

MODE_BY_SUFFIX: dict[str, str] = {
    ".py": "python",
    ".pyw": "python",
    ".pyi": "python-stub",
    ".json": "json",
    ".toml": "toml",
    ".md": "markdown",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".sh": "bash",
}

# TextArea syntax highlighting names for the modes that have one.
LANGUAGE_BY_MODE: dict[str, str] = {
    "python": "python",
    "python-stub": "python",
    "json": "json",
    "toml": "toml",
    "markdown": "markdown",
    "yaml": "yaml",
    "bash": "bash",
}


def mode_for_path(path: Optional[str]) -> str:
    """Return the mode id for a path; unnamed or unknown files are fundamental."""

    if not path:
        return FUNDAMENTAL_MODE
    _, suffix = os.path.splitext(path)
    return MODE_BY_SUFFIX.get(suffix.lower(), FUNDAMENTAL_MODE)


def language_for_mode(mode: str) -> Optional[str]:
    return LANGUAGE_BY_MODE.get(mode)
