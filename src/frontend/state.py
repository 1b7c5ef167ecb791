"""State container for open buffers and the active one."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class EditorState:
    buffers: list[str] = field(default_factory=list)
    active: str | None = None
    error: str | None = None
