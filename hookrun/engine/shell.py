from __future__ import annotations

import code
import sys
from pathlib import Path

from hookrun import __version__
from hookrun.core.errors import format_error
from hookrun.engine.engine import ScriptEngine

try:
    import readline
except ImportError:  # Windows without pyreadline
    readline = None


class InteractiveShell(code.InteractiveConsole):
    """Read-eval-print loop over the engine's namespace.

    After a script has run the shell sees the script's globals, like
    ``python -i``.
    """

    def __init__(
        self,
        engine: ScriptEngine,
        *,
        history: Path | None = None,
        verbose: bool = False,
        silent: bool = False,
    ) -> None:
        namespace = engine.main_namespace if engine.main_namespace is not None else engine.globals
        super().__init__(locals=namespace, filename="<shell>")
        self.engine = engine
        self.history = history
        self.verbose = verbose
        self.silent = silent

    def run(self) -> None:
        self._load_history()
        banner = "" if self.silent else f"hookrun {__version__} shell\nType Ctrl-D to exit."
        try:
            self.interact(banner=banner, exitmsg="")
        finally:
            self._save_history()

    def raw_input(self, prompt: str = "") -> str:
        return input("" if self.silent else prompt)

    def showtraceback(self) -> None:
        if self.verbose:
            super().showtraceback()
            return
        exc = sys.exc_info()[1]
        if exc is not None:
            self.write(format_error(exc) + "\n")

    def _load_history(self) -> None:
        if readline is None or self.history is None or not self.history.is_file():
            return
        readline.read_history_file(str(self.history))

    def _save_history(self) -> None:
        if readline is None or self.history is None:
            return
        self.history.parent.mkdir(parents=True, exist_ok=True)
        readline.write_history_file(str(self.history))
