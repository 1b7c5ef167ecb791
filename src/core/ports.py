"""Ports (interfaces) used by the core.

Ports define the minimal contracts the host editor must provide so that the
core can be reused with different editors and evaluators.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Optional, Protocol

from core.models import ChangeEvent, CommandCompletion

ChangeCallback = Callable[[ChangeEvent], None]
CompletionCallback = Callable[[CommandCompletion], None]


class StylePort(Protocol):
    """Background overrides on a buffer's default text style."""

    def apply_background(self, buffer_id: str, color: str) -> Any:
        """Install an override and return a releasable handle."""
        ...

    def release(self, handle: Any) -> None:
        ...


class ChangeSourcePort(Protocol):
    """Per-buffer content mutation notifications."""

    def subscribe(self, buffer_id: str, callback: ChangeCallback) -> Hashable:
        ...

    def unsubscribe(self, token: Hashable) -> None:
        ...


class CommandHookPort(Protocol):
    """After-completion hooks keyed by command identifier."""

    def add_completion_hook(self, command: str, callback: CompletionCallback) -> bool:
        """Hook a command; return False when no provider defines it yet."""
        ...

    def on_provider_loaded(self, callback: Callable[[], None]) -> None:
        ...


class ModePort(Protocol):
    """Language mode identification."""

    def mode_of(self, buffer_id: str) -> Optional[str]:
        ...
