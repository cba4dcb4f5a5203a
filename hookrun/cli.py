from __future__ import annotations

import signal
import sys
import threading
from pathlib import Path
from typing import Callable, Sequence, TextIO

from hookrun.core.config import RuntimeConfig, get_runtime_config
from hookrun.core.errors import UsageError, format_error
from hookrun.core.logging import configure_logging, get_logger, log_event
from hookrun.core.reporter import report_error, report_usage_error
from hookrun.lifecycle.controller import LifecycleController
from hookrun.options.applier import Action
from hookrun.runner import EXIT_FAILURE, EXIT_OK, Runner, print_action

logger = get_logger("hookrun.cli")


def _configure_logging(settings: RuntimeConfig) -> None:
    configure_logging(
        level=settings.log_level,
        format_name=settings.log_format,
        log_dir=Path(settings.log_dir) if settings.log_dir else None,
    )


def wait_for_shutdown(signals: Sequence[int] = (signal.SIGINT, signal.SIGTERM)) -> None:
    """Block until one of ``signals`` arrives."""
    received = threading.Event()
    previous = {sig: signal.signal(sig, lambda *_: received.set()) for sig in signals}
    try:
        while not received.wait(0.5):
            pass
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def run_daemon(
    argv: Sequence[str],
    *,
    settings: RuntimeConfig | None = None,
    wait: Callable[[], None] = wait_for_shutdown,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Act as a minimal supervisor: init, start, wait, stop, destroy."""
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    controller = LifecycleController(settings)
    try:
        outcome = controller.configure(argv)
    except UsageError as exc:
        report_usage_error(exc, stderr)
        return EXIT_FAILURE
    if outcome.action is not Action.CONTINUE:
        print_action(outcome, stdout)
        return EXIT_OK

    try:
        controller.init()
        controller.start()
        wait()
        controller.stop()
        controller.destroy()
    except Exception as exc:
        log_event(logger, "daemon.failed", error=format_error(exc), state=controller.state.name)
        report_error(exc, stderr, outcome.config.verbose)
        return EXIT_FAILURE
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> None:
    settings = get_runtime_config()
    _configure_logging(settings)
    args = sys.argv[1:] if argv is None else argv
    sys.exit(Runner(settings).run(args))


def daemon_main(argv: Sequence[str] | None = None) -> None:
    settings = get_runtime_config()
    _configure_logging(settings)
    args = sys.argv[1:] if argv is None else argv
    sys.exit(run_daemon(args, settings=settings))


if __name__ == "__main__":
    main()
