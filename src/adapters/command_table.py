"""Named-command table with after-completion hooks.

Implements the core CommandHookPort. Commands come from providers (the
evaluator is one) that may be loaded after the feature is initialized, so the
table also announces each newly loaded provider.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from core.models import CommandCompletion
from core.ports import CompletionCallback

LOGGER = logging.getLogger(__name__)

Command = Callable[..., Any]


class UnknownCommandError(KeyError):
    """Raised when running a command no provider defines."""


class CommandTable:
    """Registry of named commands, their providers, and completion hooks."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}
        self._providers: dict[str, frozenset[str]] = {}
        self._hooks: dict[str, list[CompletionCallback]] = {}
        self._provider_listeners: list[Callable[[], None]] = []

    def load_provider(self, name: str, commands: Mapping[str, Command]) -> None:
        """Register a provider's commands and announce it to listeners."""

        if name in self._providers:
            LOGGER.debug("Provider %s already loaded", name)
            return
        self._commands.update(commands)
        self._providers[name] = frozenset(commands)
        LOGGER.info("Provider %s loaded with %s command(s)", name, len(commands))
        for listener in list(self._provider_listeners):
            listener()

    def has_command(self, command: str) -> bool:
        return command in self._commands

    @property
    def providers(self) -> list[str]:
        return list(self._providers)

    def add_completion_hook(self, command: str, callback: CompletionCallback) -> bool:
        if command not in self._commands:
            return False
        self._hooks.setdefault(command, []).append(callback)
        return True

    def hook_count(self, command: str) -> int:
        return len(self._hooks.get(command, []))

    def on_provider_loaded(self, callback: Callable[[], None]) -> None:
        self._provider_listeners.append(callback)

    def run(self, command: str, buffer_id: Optional[str], *args: Any, **kwargs: Any) -> Any:
        """Run a command against a buffer and notify completion hooks.

        Hooks see ok=False when the command raises (SystemExit included);
        the exception is then re-raised to the caller.
        """

        try:
            func = self._commands[command]
        except KeyError:
            raise UnknownCommandError(command) from None

        try:
            result = func(buffer_id, *args, **kwargs)
        except (Exception, SystemExit):
            LOGGER.info("Command %s failed on %s", command, buffer_id)
            self._notify(CommandCompletion(command=command, buffer_id=buffer_id, ok=False))
            raise

        self._notify(CommandCompletion(command=command, buffer_id=buffer_id, ok=True))
        return result

    def _notify(self, completion: CommandCompletion) -> None:
        for hook in list(self._hooks.get(completion.command, [])):
            try:
                hook(completion)
            except Exception:
                LOGGER.exception("Completion hook failed for %s", completion.command)
