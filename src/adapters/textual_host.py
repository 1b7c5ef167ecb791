"""Textual host adapter.

Implements the core StylePort, ChangeSourcePort and ModePort on top of
Textual TextArea widgets, one widget per buffer.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional

from textual.color import Color, ColorParseError
from textual.widgets import TextArea

from adapters.modes import mode_for_path
from core.models import ChangeEvent
from core.ports import ChangeCallback

LOGGER = logging.getLogger(__name__)


class UnknownBufferError(KeyError):
    """Raised when addressing a buffer the host never registered."""


@dataclass
class BackgroundOverride:
    """Handle for one background override installed on a TextArea."""

    buffer_id: str
    widget: TextArea
    color: Color
    released: bool = False


@dataclass
class _Buffer:
    widget: TextArea
    path: Optional[str]
    mode: str


class TextualHost:
    """Buffer registry that satisfies the style, change and mode ports."""

    def __init__(self) -> None:
        self._buffers: dict[str, _Buffer] = {}
        self._subscribers: dict[int, tuple[str, ChangeCallback]] = {}
        self._tokens = itertools.count(1)

    def register(
        self,
        buffer_id: str,
        widget: TextArea,
        path: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> None:
        self._buffers[buffer_id] = _Buffer(widget=widget, path=path, mode=mode or mode_for_path(path))

    def unregister(self, buffer_id: str) -> None:
        self._buffers.pop(buffer_id, None)
        for token, (owner, _) in list(self._subscribers.items()):
            if owner == buffer_id:
                del self._subscribers[token]

    def _buffer(self, buffer_id: str) -> _Buffer:
        try:
            return self._buffers[buffer_id]
        except KeyError:
            raise UnknownBufferError(buffer_id) from None

    def widget(self, buffer_id: str) -> TextArea:
        return self._buffer(buffer_id).widget

    def text_of(self, buffer_id: str) -> str:
        return self._buffer(buffer_id).widget.text

    def path_of(self, buffer_id: str) -> Optional[str]:
        return self._buffer(buffer_id).path

    # ModePort

    def mode_of(self, buffer_id: str) -> Optional[str]:
        buffer = self._buffers.get(buffer_id)
        return buffer.mode if buffer else None

    # StylePort

    def apply_background(self, buffer_id: str, color: str) -> Optional[BackgroundOverride]:
        buffer = self._buffers.get(buffer_id)
        if buffer is None:
            return None
        try:
            parsed = Color.parse(color)
        except ColorParseError:
            LOGGER.warning("Cannot render color %r, leaving %s unstyled", color, buffer_id)
            return None
        buffer.widget.styles.background = parsed
        return BackgroundOverride(buffer_id=buffer_id, widget=buffer.widget, color=parsed)

    def release(self, handle: Any) -> None:
        if not isinstance(handle, BackgroundOverride) or handle.released:
            return
        handle.released = True
        # Only clear the background if it is still the one this handle set.
        if handle.widget.styles.background == handle.color:
            handle.widget.styles.background = None

    # ChangeSourcePort

    def subscribe(self, buffer_id: str, callback: ChangeCallback) -> int:
        token = next(self._tokens)
        self._subscribers[token] = (buffer_id, callback)
        return token

    def unsubscribe(self, token: Any) -> None:
        self._subscribers.pop(token, None)

    def notify_changed(self, buffer_id: str, start: Optional[int] = None, end: Optional[int] = None) -> None:
        """Fan a TextArea.Changed out to the buffer's subscribers."""

        event = ChangeEvent(buffer_id=buffer_id, start=start, end=end)
        for owner, callback in list(self._subscribers.values()):
            if owner == buffer_id:
                callback(event)
