from __future__ import annotations

import sys
from typing import Callable, Sequence, TextIO

from hookrun.core.config import RuntimeConfig, get_runtime_config
from hookrun.core.errors import UsageError, format_error
from hookrun.core.logging import get_logger, log_event
from hookrun.core.reporter import report_error, report_usage_error
from hookrun.engine.engine import ScriptEngine, create_engine
from hookrun.engine.shell import InteractiveShell
from hookrun.options.applier import Action, ParseOutcome, parse_args
from hookrun.options.table import format_usage, format_version

logger = get_logger("hookrun.runner")

ShellFactory = Callable[..., InteractiveShell]

EXIT_OK = 0
EXIT_FAILURE = -1


def print_action(outcome: ParseOutcome, output: TextIO) -> None:
    if outcome.action is Action.HELP:
        output.write(format_usage())
    elif outcome.action is Action.VERSION:
        output.write(format_version())


class Runner:
    """One-shot execution: expression, then script, then maybe the shell."""

    def __init__(
        self,
        settings: RuntimeConfig | None = None,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        shell_factory: ShellFactory = InteractiveShell,
    ) -> None:
        self.settings = settings or get_runtime_config()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.shell_factory = shell_factory
        self.engine: ScriptEngine | None = None

    def run(self, argv: Sequence[str]) -> int:
        try:
            outcome = parse_args(argv)
        except UsageError as exc:
            report_usage_error(exc, self.stderr)
            return EXIT_FAILURE
        if outcome.action is not Action.CONTINUE:
            print_action(outcome, self.stdout)
            return EXIT_OK

        config = outcome.config
        try:
            engine = self.engine = create_engine(config, self.settings)
            if config.expression is not None:
                engine.evaluate_expression(config.expression)
            if engine.main_script is not None:
                engine.run_script(engine.main_script, config.script_args)
            if config.wants_shell:
                # Piped stdin means nobody is there to read a prompt.
                silent = config.silent or not self.stdin.isatty()
                shell = self.shell_factory(
                    engine,
                    history=config.history or self.settings.default_history_path(),
                    verbose=config.verbose,
                    silent=silent,
                )
                shell.run()
        except Exception as exc:
            log_event(logger, "run.failed", error=format_error(exc))
            report_error(exc, self.stderr, config.verbose)
            return EXIT_FAILURE
        return EXIT_OK
