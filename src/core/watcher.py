"""Command completion watcher and its install-once registry.

The registry is the only process-wide piece of state. Hooks are installed
once per command and hook port and are never removed; commands whose provider
has not been loaded yet stay pending until the host announces a new provider.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from core.config import SettingsProvider
from core.models import CommandCompletion
from core.ports import CommandHookPort, CompletionCallback

if TYPE_CHECKING:
    from core.controller import FeatureController

LOGGER = logging.getLogger(__name__)


class _HostRegistration:
    """Installed and pending hooks for one CommandHookPort."""

    def __init__(self, hooks: CommandHookPort) -> None:
        self.hooks = hooks
        self.installed: set[str] = set()
        self.pending: dict[str, CompletionCallback] = {}
        self.retrying = False


class WatcherRegistry:
    """Idempotent registration of completion hooks (init once, never torn down).

    Registrations are kept per hook port, so each host in the process gets
    its own hooks while one host never gets the same command hooked twice.
    """

    def __init__(self) -> None:
        self._hosts: list[_HostRegistration] = []

    def _registration(self, hooks: CommandHookPort) -> _HostRegistration:
        for registration in self._hosts:
            if registration.hooks is hooks:
                return registration
        registration = _HostRegistration(hooks)
        self._hosts.append(registration)
        return registration

    @property
    def installed_commands(self) -> frozenset[str]:
        return frozenset(command for host in self._hosts for command in host.installed)

    @property
    def pending_commands(self) -> frozenset[str]:
        return frozenset(command for host in self._hosts for command in host.pending)

    def is_installed(self, command: str, hooks: Optional[CommandHookPort] = None) -> bool:
        """Whether a command is hooked, on a given port or on any port."""

        return any(
            command in host.installed
            for host in self._hosts
            if hooks is None or host.hooks is hooks
        )

    def install(
        self,
        hooks: CommandHookPort,
        commands: Iterable[str],
        dispatch: CompletionCallback,
    ) -> None:
        """Hook every command not hooked yet; defer the ones with no provider."""

        registration = self._registration(hooks)
        for command in sorted(commands):
            if command in registration.installed:
                continue
            if hooks.add_completion_hook(command, dispatch):
                registration.installed.add(command)
                registration.pending.pop(command, None)
                LOGGER.info("Completion hook installed for %s", command)
            else:
                registration.pending.setdefault(command, dispatch)
                LOGGER.info("No provider for %s yet, deferring hook", command)

        if registration.pending and not registration.retrying:
            registration.retrying = True
            hooks.on_provider_loaded(lambda: self._retry(registration))

    def _retry(self, registration: _HostRegistration) -> None:
        for command, dispatch in list(registration.pending.items()):
            if command in registration.installed:
                del registration.pending[command]
                continue
            if registration.hooks.add_completion_hook(command, dispatch):
                registration.installed.add(command)
                del registration.pending[command]
                LOGGER.info("Deferred completion hook installed for %s", command)

    def reset(self) -> None:
        """Forget every registration. Hooks already handed to a host stay there."""

        self._hosts.clear()


_REGISTRY = WatcherRegistry()


def get_registry() -> WatcherRegistry:
    """Return the process-wide registry."""

    return _REGISTRY


class CommandCompletionWatcher:
    """Dispatches successful cleaning-command completions to the controller."""

    def __init__(self, controller: "FeatureController", settings_provider: SettingsProvider) -> None:
        self._controller = controller
        self._settings = settings_provider

    def __call__(self, completion: CommandCompletion) -> None:
        # Hot reload may have dropped a command that is still hooked.
        if completion.command not in self._settings().cleaning_commands:
            return
        if completion.ok is False:
            LOGGER.debug("%s failed on %s, buffer stays dirty", completion.command, completion.buffer_id)
            return
        if completion.buffer_id is None:
            return
        self._controller.mark_clean(completion.buffer_id)
