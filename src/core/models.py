"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any host-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class BufferState:
    """Tracked state for one buffer where the feature is active.

    `override_handle` is owned by this state alone; the style applier releases
    it before installing a new one, so a buffer never holds two overrides.
    """

    buffer_id: str
    dirty: bool = True
    override_handle: Optional[Any] = None


@dataclass(frozen=True)
class ChangeEvent:
    """A content mutation reported by the host.

    Region metadata is carried for completeness; the listener ignores it.
    """

    buffer_id: str
    start: Optional[int] = None
    end: Optional[int] = None
    removed_length: int = 0


@dataclass(frozen=True)
class CommandCompletion:
    """A named command that finished running against a buffer.

    ok is True on success, False when the command raised, and None when the
    host cannot tell the two apart.
    """

    command: str
    buffer_id: Optional[str]
    ok: Optional[bool] = True
