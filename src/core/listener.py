"""Change listener attached to each active buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.models import ChangeEvent

if TYPE_CHECKING:
    from core.controller import FeatureController


class ChangeListener:
    """Marks a buffer dirty on every content mutation.

    Region metadata is ignored on purpose: whitespace edits, undo and redo all
    count, since any textual change may alter what was evaluated.
    """

    def __init__(self, controller: "FeatureController") -> None:
        self._controller = controller

    def __call__(self, event: ChangeEvent) -> None:
        self._controller.mark_dirty(event.buffer_id)
