from __future__ import annotations

from typing import Any, Callable, Hashable

from core.config import Settings
from core.controller import FeatureController
from core.models import ChangeEvent, CommandCompletion
from core.watcher import WatcherRegistry

DIRTY = "#332f2f"


class FakeStyle:
    def __init__(self) -> None:
        self.live: dict[int, tuple[str, str]] = {}
        self._next = 0

    def apply_background(self, buffer_id: str, color: str) -> Any:
        self._next += 1
        self.live[self._next] = (buffer_id, color)
        return self._next

    def release(self, handle: Any) -> None:
        self.live.pop(handle, None)

    def color_of(self, buffer_id: str) -> str | None:
        colors = [color for owner, color in self.live.values() if owner == buffer_id]
        assert len(colors) <= 1
        return colors[0] if colors else None


class FakeChanges:
    def __init__(self) -> None:
        self.subscribers: dict[int, tuple[str, Callable[[ChangeEvent], None]]] = {}
        self._next = 0

    def subscribe(self, buffer_id: str, callback: Callable[[ChangeEvent], None]) -> Hashable:
        self._next += 1
        self.subscribers[self._next] = (buffer_id, callback)
        return self._next

    def unsubscribe(self, token: Hashable) -> None:
        self.subscribers.pop(token, None)

    def edit(self, buffer_id: str, start: int = 0, end: int = 1, removed: int = 0) -> None:
        for owner, callback in list(self.subscribers.values()):
            if owner == buffer_id:
                callback(ChangeEvent(buffer_id=buffer_id, start=start, end=end, removed_length=removed))


class FakeHooks:
    def __init__(self) -> None:
        self.hooks: dict[str, list[Callable[[CommandCompletion], None]]] = {}

    def add_completion_hook(self, command: str, callback: Callable[[CommandCompletion], None]) -> bool:
        self.hooks.setdefault(command, []).append(callback)
        return True

    def on_provider_loaded(self, callback: Callable[[], None]) -> None:
        raise AssertionError("every command is available")

    def complete(self, command: str, buffer_id: str, ok: bool | None = True) -> None:
        for hook in self.hooks.get(command, []):
            hook(CommandCompletion(command=command, buffer_id=buffer_id, ok=ok))


def _make_controller(
    settings: Settings | None = None,
) -> tuple[FeatureController, FakeStyle, FakeChanges, FakeHooks]:
    style = FakeStyle()
    changes = FakeChanges()
    hooks = FakeHooks()
    controller = FeatureController(
        style=style,
        changes=changes,
        hooks=hooks,
        settings=settings or Settings(dirty_color=DIRTY, clean_color=None),
        registry=WatcherRegistry(),
    )
    return controller, style, changes, hooks


def test_enable_starts_dirty_with_dirty_color() -> None:
    controller, style, changes, _ = _make_controller()

    assert controller.enable("a")

    assert controller.is_dirty("a") is True
    assert style.color_of("a") == DIRTY
    assert len(changes.subscribers) == 1


def test_enable_twice_is_a_noop() -> None:
    controller, style, changes, hooks = _make_controller()

    controller.enable("a")
    controller.mark_clean("a")
    assert not controller.enable("a")

    assert controller.is_dirty("a") is False
    assert len(changes.subscribers) == 1
    assert all(len(callbacks) == 1 for callbacks in hooks.hooks.values())


def test_many_edits_leave_buffer_dirty() -> None:
    controller, style, changes, _ = _make_controller()
    controller.enable("a")

    for offset in range(5):
        changes.edit("a", start=offset, end=offset + 1)

    assert controller.is_dirty("a") is True
    assert style.color_of("a") == DIRTY


def test_whitespace_sized_edit_marks_dirty() -> None:
    controller, _, changes, hooks = _make_controller()
    controller.enable("a")
    hooks.complete("eval-buffer", "a")

    changes.edit("a", start=3, end=3, removed=0)

    assert controller.is_dirty("a") is True


def test_round_trip_edit_clean_edit() -> None:
    controller, style, changes, hooks = _make_controller()
    controller.enable("a")

    changes.edit("a")
    assert (controller.is_dirty("a"), style.color_of("a")) == (True, DIRTY)

    hooks.complete("eval-buffer", "a")
    assert (controller.is_dirty("a"), style.color_of("a")) == (False, None)

    changes.edit("a")
    assert (controller.is_dirty("a"), style.color_of("a")) == (True, DIRTY)


def test_disable_drops_override_and_state() -> None:
    controller, style, changes, hooks = _make_controller()
    controller.enable("a")
    hooks.complete("load-file", "a")

    assert controller.disable("a")

    assert not controller.is_enabled("a")
    assert controller.is_dirty("a") is None
    assert style.color_of("a") is None
    assert changes.subscribers == {}

    # Edits after disable are ignored.
    changes.edit("a")
    assert controller.is_dirty("a") is None


def test_reenable_resets_to_dirty() -> None:
    controller, style, _, hooks = _make_controller(Settings(dirty_color=DIRTY, clean_color="#000000"))
    controller.enable("a")
    hooks.complete("eval-buffer", "a")
    assert style.color_of("a") == "#000000"

    controller.disable("a")
    controller.enable("a")

    assert controller.is_dirty("a") is True
    assert style.color_of("a") == DIRTY


def test_disable_unknown_buffer_is_noop() -> None:
    controller, _, _, _ = _make_controller()

    assert not controller.disable("missing")


def test_mark_on_inactive_buffer_is_noop() -> None:
    controller, style, _, hooks = _make_controller()

    assert not controller.mark_clean("ghost")
    assert not controller.mark_dirty("ghost")
    hooks.complete("eval-buffer", "ghost")

    assert style.live == {}


def test_toggle_flips_tracking() -> None:
    controller, style, _, _ = _make_controller()

    assert controller.toggle("a") is True
    assert style.color_of("a") == DIRTY
    assert controller.toggle("a") is False
    assert style.color_of("a") is None


def test_buffers_are_tracked_independently() -> None:
    controller, style, changes, hooks = _make_controller()
    controller.enable("a")
    controller.enable("b")

    hooks.complete("eval-buffer", "a")
    changes.edit("b")

    assert controller.is_dirty("a") is False
    assert controller.is_dirty("b") is True
    assert style.color_of("a") is None
    assert style.color_of("b") == DIRTY
    assert sorted(controller.active_buffers()) == ["a", "b"]


def test_buffer_closed_discards_state() -> None:
    controller, style, _, _ = _make_controller()
    controller.enable("a")

    controller.buffer_closed("a")

    assert controller.active_buffers() == []
    assert style.color_of("a") is None


def test_scenario_eval_buffer_only() -> None:
    settings = Settings(
        dirty_color="#332f2f",
        clean_color=None,
        cleaning_commands=frozenset({"eval-buffer"}),
    )
    controller, style, changes, hooks = _make_controller(settings)

    controller.enable("a")
    assert controller.is_dirty("a") is True
    assert style.color_of("a") == "#332f2f"

    hooks.complete("eval-buffer", "a")
    assert controller.is_dirty("a") is False
    assert style.color_of("a") is None

    changes.edit("a")
    assert controller.is_dirty("a") is True
    assert style.color_of("a") == "#332f2f"


def test_update_settings_repaints_tracked_buffers() -> None:
    controller, style, _, hooks = _make_controller()
    controller.enable("a")
    controller.enable("b")
    hooks.complete("eval-buffer", "b")

    controller.update_settings(Settings(dirty_color="#ff0000", clean_color="#00ff00"))

    assert style.color_of("a") == "#ff0000"
    assert style.color_of("b") == "#00ff00"
    assert controller.is_dirty("a") is True
    assert controller.is_dirty("b") is False


def test_update_settings_hooks_new_commands() -> None:
    controller, _, _, hooks = _make_controller()
    controller.enable("a")

    controller.update_settings(
        Settings(dirty_color=DIRTY, cleaning_commands=frozenset({"eval-buffer", "run-tests"}))
    )
    hooks.complete("run-tests", "a")

    assert controller.registry.is_installed("run-tests")
    assert controller.is_dirty("a") is False
