from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hookrun.engine.syntax import SyntaxErrorInfo

HELP_HINT = "Use -h or --help for a list of supported options."


@dataclass(eq=False)
class HookrunError(Exception):
    code: str
    message: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


@dataclass(eq=False)
class UsageError(HookrunError):
    """Bad command line; always raised before the engine exists."""

    option: str | None = None


class OptionSyntaxError(UsageError):
    """Unknown option or an option whose value is missing."""


class RangeError(UsageError):
    """Option value outside its accepted range."""


class EngineConstructionError(HookrunError):
    pass


@dataclass(eq=False)
class ScriptExecutionError(HookrunError):
    """Failure raised by user code: expression, script, bootstrap or hook."""

    syntax_errors: tuple[SyntaxErrorInfo, ...] = ()
    script_trace: str = ""


class LifecycleError(HookrunError):
    pass


def format_error(error: BaseException) -> str:
    if isinstance(error, HookrunError):
        return f"[{error.code}] {error}"
    return f"{type(error).__name__}: {error}"
