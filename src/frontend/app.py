"""Main Textual app: a small Python editor with unevaluated-edit shading."""

from __future__ import annotations

import itertools
import logging
import os
from typing import Any, Callable, Optional, Sequence

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import ContentSwitcher, Footer, Static, Tab, Tabs, TextArea

from adapters.command_table import CommandTable, UnknownCommandError
from adapters.modes import language_for_mode, mode_for_path
from adapters.python_evaluator import LOAD_FILE, PROVIDER_NAME, EvaluationResult, PythonEvaluator
from adapters.textual_host import TextualHost
from core.autowire import Autowire
from core.config import Settings
from core.controller import FeatureController
from settings import load_settings

from .constants import ACCENT, SCRATCH_LABEL, TAB_PREFIX
from .state import EditorState

LOGGER = logging.getLogger(__name__)


class EditorApp(App):
    """Tabbed editor where buffers with unevaluated edits are shaded."""

    BINDINGS = [
        Binding("f5", "run_command('eval-buffer')", "Eval", priority=True),
        Binding("f6", "run_command('load-buffer')", "Load buffer", priority=True),
        Binding("f7", "run_command('load-file')", "Load file", priority=True),
        Binding("f8", "toggle_tracking", "Toggle shading", priority=True),
        Binding("f4", "close_buffer", "Close", priority=True),
        Binding("ctrl+s", "save_buffer", "Save", priority=True),
        Binding("ctrl+r", "reload_settings", "Reload settings", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    CSS = """
    #header {
        height: 3;
        padding: 0 2;
        border-bottom: solid #2a3a46;
    }

    #header-row {
        height: 2;
    }

    #title {
        width: 1fr;
        text-style: bold;
    }

    #header-status {
        width: 1fr;
        text-align: right;
    }

    .status-dirty {
        color: #e5c07b;
    }

    .status-clean {
        color: #98c379;
    }

    .status-off {
        color: #7f848e;
    }

    #content TextArea {
        height: 1fr;
    }
    """

    def __init__(
        self,
        paths: Sequence[str] = (),
        settings_loader: Callable[[], Settings] = load_settings,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._initial_paths = list(paths)
        self._load_settings = settings_loader
        self._buffer_numbers = itertools.count(1)
        self.editor_state = EditorState()
        self.host = TextualHost()
        self.command_table = CommandTable()
        self.controller = FeatureController(
            style=self.host,
            changes=self.host,
            hooks=self.command_table,
            settings=settings_loader(),
        )
        self.autowire = Autowire(self.controller, self.host, self.controller.get_settings)
        self.evaluator = PythonEvaluator(self.host.text_of, self.host.path_of)

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical():
                    yield Static(self._title_text(), id="title")
                yield Static("", id="header-status")
        yield Tabs(id="tabs")
        yield ContentSwitcher(id="content")
        yield Footer()

    async def on_mount(self) -> None:
        for path in self._initial_paths or [None]:
            await self.open_buffer(path)
        # The evaluator loads after buffers are autowired; completion hooks
        # are installed once it announces itself.
        self.command_table.load_provider(PROVIDER_NAME, self.evaluator.commands())

    async def open_buffer(self, path: Optional[str]) -> str:
        """Open a file (or a scratch buffer) in a new tab and activate it."""

        buffer_id = f"buf-{next(self._buffer_numbers)}"
        text = ""
        if path and os.path.exists(path):
            with open(path, "r", encoding="utf-8") as handle:
                text = handle.read()
        mode = mode_for_path(path)
        area = TextArea(text, language=language_for_mode(mode), id=buffer_id)
        self.host.register(buffer_id, area, path=path, mode=mode)
        self.editor_state.buffers.append(buffer_id)

        await self.query_one("#content", ContentSwitcher).mount(area)
        label = os.path.basename(path) if path else SCRATCH_LABEL
        await self.query_one("#tabs", Tabs).add_tab(Tab(label, id=f"{TAB_PREFIX}{buffer_id}"))
        self.query_one("#tabs", Tabs).active = f"{TAB_PREFIX}{buffer_id}"
        self._activate(buffer_id)
        # Opening a file is the activation autowire reacts to; tab switches
        # only change focus.
        self.autowire.buffer_activated(buffer_id)
        self._refresh_header()
        return buffer_id

    async def action_close_buffer(self) -> None:
        """Close the active buffer and discard its tracked state."""

        buffer_id = self.editor_state.active
        if buffer_id is None:
            return
        self.controller.buffer_closed(buffer_id)
        widget = self.host.widget(buffer_id)
        self.host.unregister(buffer_id)
        self.editor_state.buffers.remove(buffer_id)
        self.editor_state.active = None

        tabs = self.query_one("#tabs", Tabs)
        if self.editor_state.buffers:
            remaining = self.editor_state.buffers[-1]
            tabs.active = f"{TAB_PREFIX}{remaining}"
            self._activate(remaining)
        else:
            self.query_one("#content", ContentSwitcher).current = None
        await tabs.remove_tab(f"{TAB_PREFIX}{buffer_id}")
        await widget.remove()
        self._refresh_header()

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        tab_id = event.tab.id or ""
        if tab_id.startswith(TAB_PREFIX):
            self._activate(tab_id[len(TAB_PREFIX):])

    def _activate(self, buffer_id: str) -> None:
        if buffer_id not in self.editor_state.buffers:
            return
        self.editor_state.active = buffer_id
        self.query_one("#content", ContentSwitcher).current = buffer_id
        self._refresh_header()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        buffer_id = event.text_area.id
        if not buffer_id:
            return
        self.host.notify_changed(buffer_id)
        if buffer_id == self.editor_state.active:
            self._refresh_header()

    def action_run_command(self, command: str) -> None:
        buffer_id = self.editor_state.active
        if buffer_id is None:
            return
        if command == LOAD_FILE and not self._save(buffer_id):
            return
        try:
            result = self.command_table.run(command, buffer_id)
        except UnknownCommandError:
            self.notify(f"{command} is not available yet", severity="warning")
        except (Exception, SystemExit) as exc:
            LOGGER.exception("%s failed on %s", command, buffer_id)
            self.notify(f"{command} failed: {exc}", severity="error")
        else:
            self._report(result)
        self._refresh_header()

    def action_toggle_tracking(self) -> None:
        buffer_id = self.editor_state.active
        if buffer_id is None:
            return
        enabled = self.controller.toggle(buffer_id)
        self.notify("Shading on" if enabled else "Shading off")
        self._refresh_header()

    def action_save_buffer(self) -> None:
        if self.editor_state.active is not None:
            self._save(self.editor_state.active)

    def action_reload_settings(self) -> None:
        self.controller.update_settings(self._load_settings())
        self.notify("Settings reloaded")
        self._refresh_header()

    def _save(self, buffer_id: str) -> bool:
        path = self.host.path_of(buffer_id)
        if not path:
            self.notify("Scratch buffer has no file to save", severity="warning")
            return False
        try:
            with open(path, "w", encoding="utf-8") as handle:
                handle.write(self.host.text_of(buffer_id))
        except OSError as exc:
            self.editor_state.error = f"save failed: {exc.strerror or exc}"
            self.notify(self.editor_state.error, severity="error")
            return False
        self.editor_state.error = None
        return True

    def _report(self, result: Any) -> None:
        if not isinstance(result, EvaluationResult):
            return
        output = result.output.strip()
        message = f"{result.command}: {result.names} name(s) defined"
        if output:
            message = f"{message}\n{output[-400:]}"
        self.notify(message)

    def _refresh_header(self) -> None:
        status = self.query_one("#header-status", Static)
        status.remove_class("status-dirty", "status-clean", "status-off")
        buffer_id = self.editor_state.active
        if buffer_id is None:
            status.update("")
            return

        mode = self.host.mode_of(buffer_id) or "?"
        dirty = self.controller.is_dirty(buffer_id)
        if dirty is None:
            status.update(f"{mode} | shading off")
            status.add_class("status-off")
        elif dirty:
            status.update(f"{mode} | not evaluated")
            status.add_class("status-dirty")
        else:
            status.update(f"{mode} | evaluated")
            status.add_class("status-clean")

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("EVAL", ACCENT),
            ("SHADE > Editor", "bold"),
        )
