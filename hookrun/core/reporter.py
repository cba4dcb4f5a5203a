from __future__ import annotations

import sys
import traceback
from typing import TextIO

from hookrun.core.errors import HELP_HINT, ScriptExecutionError, UsageError
from hookrun.engine.syntax import last_syntax_errors


def report_error(error: BaseException, output: TextIO | None = None, verbose: bool = False) -> None:
    """Write a diagnostic for ``error`` to ``output``.

    Order is fixed: message, recorded syntax errors, script trace, and
    with ``verbose`` the full Python traceback.
    """
    output = output if output is not None else sys.stderr
    # Construction failures wrap the bootstrap script error they came from.
    script_error = error if isinstance(error, ScriptExecutionError) else error.__cause__
    if isinstance(error, ScriptExecutionError):
        print(error.message, file=output)
    else:
        print(f"{type(error).__name__}: {error}", file=output)
    for syntax_error in last_syntax_errors():
        print(syntax_error, file=output)
    if isinstance(script_error, ScriptExecutionError) and script_error.script_trace:
        print(script_error.script_trace, file=output)
    if verbose:
        traceback.print_exception(error, file=output)


def report_usage_error(error: UsageError, output: TextIO | None = None) -> None:
    output = output if output is not None else sys.stderr
    print(error, file=output)
    print(HELP_HINT, file=output)
