"""Per-buffer dirty/clean state machine."""

from __future__ import annotations

import logging

from core.config import SettingsProvider
from core.models import BufferState
from core.style import StyleApplier

LOGGER = logging.getLogger(__name__)


class BufferTracker:
    """Two-state tracker (dirty, clean) for one buffer.

    Both transitions are idempotent and always re-apply the color for the
    resulting state, which keeps the override fresh if something else touched
    the buffer's style in between.
    """

    def __init__(
        self,
        state: BufferState,
        applier: StyleApplier,
        settings_provider: SettingsProvider,
    ) -> None:
        self.state = state
        self._applier = applier
        self._settings = settings_provider

    @property
    def dirty(self) -> bool:
        return self.state.dirty

    def mark_dirty(self) -> None:
        if not self.state.dirty:
            LOGGER.debug("Buffer %s is now dirty", self.state.buffer_id)
        self.state.dirty = True
        self.refresh()

    def mark_clean(self) -> None:
        if self.state.dirty:
            LOGGER.debug("Buffer %s is now clean", self.state.buffer_id)
        self.state.dirty = False
        self.refresh()

    def refresh(self) -> None:
        """Re-apply the color selected by the current flag."""

        self._applier.apply(self.state, self._settings().color_for(self.state.dirty))
