"""Core configuration dataclasses.

We keep config parsing from disk outside the core, but these dataclasses
define the shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Optional

DEFAULT_DIRTY_COLOR = "#332f2f"
DEFAULT_MODES = frozenset({"python", "python-stub"})
DEFAULT_CLEANING_COMMANDS = frozenset({"eval-buffer", "load-buffer", "load-file"})


@dataclass(frozen=True)
class Settings:
    """Colors, applicable modes, and cleaning commands shared by every buffer."""

    dirty_color: str = DEFAULT_DIRTY_COLOR
    clean_color: Optional[str] = None
    applicable_modes: frozenset[str] = field(default=DEFAULT_MODES)
    cleaning_commands: frozenset[str] = field(default=DEFAULT_CLEANING_COMMANDS)

    def color_for(self, dirty: bool) -> Optional[str]:
        """Return the background color for a dirty flag (None clears the override)."""

        return self.dirty_color if dirty else self.clean_color


# Components read settings through a provider so a hot reload is picked up
# without re-wiring anything.
SettingsProvider = Callable[[], Settings]


def _as_frozenset(values: Any, default: frozenset[str]) -> frozenset[str]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple, set, frozenset)):
        return default
    return frozenset(str(value).strip() for value in values if str(value).strip())


def build_settings(raw: dict[str, Any]) -> Settings:
    """Normalize the user-facing config keys into a Settings instance.

    Keys mirror config.json: dirty_color, clean_color, following_modes,
    clean_commands. Missing keys fall back to defaults; an empty or null
    clean_color means "no override".
    """

    dirty_color = raw.get("dirty_color")
    if not isinstance(dirty_color, str) or not dirty_color:
        dirty_color = DEFAULT_DIRTY_COLOR
    clean_color = raw.get("clean_color")
    if not isinstance(clean_color, str):
        clean_color = None
    return Settings(
        dirty_color=dirty_color,
        clean_color=clean_color or None,
        applicable_modes=_as_frozenset(raw.get("following_modes"), DEFAULT_MODES),
        cleaning_commands=_as_frozenset(raw.get("clean_commands"), DEFAULT_CLEANING_COMMANDS),
    )


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Inverse of build_settings, with sorted lists for stable output."""

    return {
        "dirty_color": settings.dirty_color,
        "clean_color": settings.clean_color,
        "following_modes": sorted(settings.applicable_modes),
        "clean_commands": sorted(settings.cleaning_commands),
    }


def merge_modes(settings: Settings, extra_modes: Iterable[str]) -> Settings:
    """Return settings with additional applicable modes (used by the CLI)."""

    extra = frozenset(mode for mode in extra_modes if mode)
    if not extra:
        return settings
    return replace(settings, applicable_modes=settings.applicable_modes | extra)
