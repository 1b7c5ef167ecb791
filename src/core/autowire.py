"""Automatic activation for buffers whose mode is in the applicable set."""

from __future__ import annotations

import logging

from core.config import SettingsProvider
from core.controller import FeatureController
from core.ports import ModePort

LOGGER = logging.getLogger(__name__)


class Autowire:
    """Enables dirty tracking when a buffer with a following mode is activated."""

    def __init__(
        self,
        controller: FeatureController,
        modes: ModePort,
        settings_provider: SettingsProvider,
    ) -> None:
        self._controller = controller
        self._modes = modes
        self._settings = settings_provider

    def buffer_activated(self, buffer_id: str) -> bool:
        """Return True when this activation turned the feature on."""

        mode = self._modes.mode_of(buffer_id)
        if mode is None or mode not in self._settings().applicable_modes:
            return False
        enabled = self._controller.enable(buffer_id)
        if enabled:
            LOGGER.debug("Autowired %s (mode %s)", buffer_id, mode)
        return enabled
