"""Feature controller: per-buffer enable/disable of dirty tracking.

This module is host-agnostic. It only relies on ports for styling, change
notifications and command hooks, and owns the mapping from buffer id to
tracked state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Hashable, Optional

from core.config import Settings
from core.listener import ChangeListener
from core.models import BufferState
from core.ports import ChangeSourcePort, CommandHookPort, StylePort
from core.style import StyleApplier
from core.tracker import BufferTracker
from core.watcher import CommandCompletionWatcher, WatcherRegistry, get_registry

LOGGER = logging.getLogger(__name__)


@dataclass
class _Activation:
    tracker: BufferTracker
    token: Hashable


class FeatureController:
    """Orchestrates trackers, the change listener, and the completion watcher."""

    def __init__(
        self,
        style: StylePort,
        changes: ChangeSourcePort,
        hooks: CommandHookPort,
        settings: Settings,
        registry: Optional[WatcherRegistry] = None,
    ) -> None:
        self._applier = StyleApplier(style)
        self._changes = changes
        self._hooks = hooks
        self._settings = settings
        self._registry = registry if registry is not None else get_registry()
        self._active: dict[str, _Activation] = {}
        self._listener = ChangeListener(self)
        self._watcher = CommandCompletionWatcher(self, self.get_settings)

    def get_settings(self) -> Settings:
        return self._settings

    @property
    def registry(self) -> WatcherRegistry:
        return self._registry

    def enable(self, buffer_id: str) -> bool:
        """Start tracking a buffer; returns False if it was already tracked."""

        if buffer_id in self._active:
            return False

        # Every activation starts dirty: a buffer is untrusted until evaluated.
        tracker = BufferTracker(BufferState(buffer_id=buffer_id), self._applier, self.get_settings)
        tracker.mark_dirty()
        token = self._changes.subscribe(buffer_id, self._listener)
        self._active[buffer_id] = _Activation(tracker=tracker, token=token)
        self._registry.install(self._hooks, self._settings.cleaning_commands, self._watcher)
        LOGGER.info("Dirty tracking enabled for %s", buffer_id)
        return True

    def disable(self, buffer_id: str) -> bool:
        """Stop tracking a buffer and drop its override; False if not tracked."""

        activation = self._active.pop(buffer_id, None)
        if activation is None:
            return False

        self._changes.unsubscribe(activation.token)
        self._applier.apply(activation.tracker.state, None)
        LOGGER.info("Dirty tracking disabled for %s", buffer_id)
        return True

    def toggle(self, buffer_id: str) -> bool:
        """Flip tracking for a buffer and return the new enabled flag."""

        if buffer_id in self._active:
            self.disable(buffer_id)
            return False
        self.enable(buffer_id)
        return True

    def buffer_closed(self, buffer_id: str) -> None:
        self.disable(buffer_id)

    def is_enabled(self, buffer_id: str) -> bool:
        return buffer_id in self._active

    def state_for(self, buffer_id: str) -> Optional[BufferState]:
        activation = self._active.get(buffer_id)
        return activation.tracker.state if activation else None

    def is_dirty(self, buffer_id: str) -> Optional[bool]:
        """Dirty flag for a tracked buffer, None when the feature is off there."""

        state = self.state_for(buffer_id)
        return state.dirty if state else None

    def active_buffers(self) -> list[str]:
        return list(self._active)

    def mark_dirty(self, buffer_id: str) -> bool:
        activation = self._active.get(buffer_id)
        if activation is None:
            return False
        activation.tracker.mark_dirty()
        return True

    def mark_clean(self, buffer_id: str) -> bool:
        # Safe on untracked buffers so the global watcher can fire unconditionally.
        activation = self._active.get(buffer_id)
        if activation is None:
            return False
        activation.tracker.mark_clean()
        return True

    def update_settings(self, settings: Settings) -> None:
        """Swap settings, repaint tracked buffers, and hook new cleaning commands."""

        self._settings = settings
        for activation in self._active.values():
            activation.tracker.refresh()
        if self._active:
            self._registry.install(self._hooks, settings.cleaning_commands, self._watcher)
        LOGGER.info("Settings updated for %s tracked buffer(s)", len(self._active))
