"""Python evaluator: the runtime integration behind the cleaning commands.

Each buffer gets its own namespace. Exceptions raised by user code propagate
so the command table can report the completion as failed.
"""

from __future__ import annotations

import contextlib
import io
import logging
import runpy
from dataclasses import dataclass
from typing import Any, Callable, Optional

LOGGER = logging.getLogger(__name__)

PROVIDER_NAME = "python-evaluator"

EVAL_BUFFER = "eval-buffer"
LOAD_BUFFER = "load-buffer"
LOAD_FILE = "load-file"


class EvaluationError(RuntimeError):
    """Raised when a command cannot run at all (e.g. no file behind the buffer)."""


def _exited(buffer_id: str, exc: SystemExit) -> EvaluationError:
    # sys.exit() in user code is a failed evaluation, not an editor exit.
    return EvaluationError(f"{buffer_id} called sys.exit({exc.code!r})")


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one successful evaluation."""

    buffer_id: str
    command: str
    output: str
    names: int


class PythonEvaluator:
    """Provides eval-buffer, load-buffer and load-file for Python buffers."""

    def __init__(
        self,
        text_of: Callable[[str], str],
        path_of: Callable[[str], Optional[str]],
    ) -> None:
        self._text_of = text_of
        self._path_of = path_of
        self._namespaces: dict[str, dict[str, Any]] = {}

    def commands(self) -> dict[str, Callable[..., EvaluationResult]]:
        return {
            EVAL_BUFFER: self.eval_buffer,
            LOAD_BUFFER: self.load_buffer,
            LOAD_FILE: self.load_file,
        }

    def namespace(self, buffer_id: str) -> dict[str, Any]:
        return self._namespaces.setdefault(buffer_id, {"__name__": "__main__"})

    def eval_buffer(self, buffer_id: str) -> EvaluationResult:
        """Execute the buffer text in the buffer's existing namespace."""

        namespace = self.namespace(buffer_id)
        output = self._exec(self._text_of(buffer_id), buffer_id, namespace)
        return self._result(buffer_id, EVAL_BUFFER, output, namespace)

    def load_buffer(self, buffer_id: str) -> EvaluationResult:
        """Execute the buffer text in a fresh namespace, replacing the old one."""

        namespace: dict[str, Any] = {"__name__": "__main__"}
        path = self._path_of(buffer_id)
        if path:
            namespace["__file__"] = path
        output = self._exec(self._text_of(buffer_id), buffer_id, namespace)
        self._namespaces[buffer_id] = namespace
        return self._result(buffer_id, LOAD_BUFFER, output, namespace)

    def load_file(self, buffer_id: str) -> EvaluationResult:
        """Run the file behind the buffer from disk (callers save it first)."""

        path = self._path_of(buffer_id)
        if not path:
            raise EvaluationError(f"{buffer_id} is not visiting a file")

        stdout = io.StringIO()
        try:
            with contextlib.redirect_stdout(stdout):
                namespace = runpy.run_path(path, run_name="__main__")
        except SystemExit as exc:
            raise _exited(buffer_id, exc) from exc
        self._namespaces[buffer_id] = namespace
        return self._result(buffer_id, LOAD_FILE, stdout.getvalue(), namespace)

    def _exec(self, source: str, buffer_id: str, namespace: dict[str, Any]) -> str:
        filename = self._path_of(buffer_id) or f"<{buffer_id}>"
        code = compile(source, filename, "exec")
        stdout = io.StringIO()
        try:
            with contextlib.redirect_stdout(stdout):
                exec(code, namespace)
        except SystemExit as exc:
            raise _exited(buffer_id, exc) from exc
        return stdout.getvalue()

    @staticmethod
    def _result(buffer_id: str, command: str, output: str, namespace: dict[str, Any]) -> EvaluationResult:
        names = sum(1 for name in namespace if not name.startswith("__"))
        LOGGER.info("%s finished on %s (%s names)", command, buffer_id, names)
        return EvaluationResult(buffer_id=buffer_id, command=command, output=output, names=names)
