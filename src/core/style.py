"""Background override management for tracked buffers."""

from __future__ import annotations

import logging
from typing import Any, Optional

from core.models import BufferState
from core.ports import StylePort

LOGGER = logging.getLogger(__name__)


class StyleApplier:
    """Applies or removes the background override owned by a BufferState."""

    def __init__(self, style: StylePort) -> None:
        self._style = style

    def apply(self, state: BufferState, color: Optional[str]) -> Optional[Any]:
        """Replace the buffer's override with `color`, or drop it when None.

        The previous handle is always released first, even when the color is
        unchanged, so overrides never stack on one buffer.
        """

        if state.override_handle is not None:
            self._style.release(state.override_handle)
            state.override_handle = None

        if color is None:
            LOGGER.debug("Override cleared for %s", state.buffer_id)
            return None

        state.override_handle = self._style.apply_background(state.buffer_id, color)
        LOGGER.debug("Override %s applied to %s", color, state.buffer_id)
        return state.override_handle
