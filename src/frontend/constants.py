"""Shared constants for the Textual UI."""

from __future__ import annotations

ACCENT = "#c678dd"
SCRATCH_LABEL = "*scratch*"
TAB_PREFIX = "tab-"
