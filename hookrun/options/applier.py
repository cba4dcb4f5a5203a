from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence

from hookrun.core.errors import RangeError
from hookrun.options.configuration import OPT_LEVEL_MAX, OPT_LEVEL_MIN, RunConfiguration
from hookrun.options.parser import OptionParser, ResolvedOption

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class Action(Enum):
    CONTINUE = "continue"
    HELP = "help"
    VERSION = "version"


@dataclass(frozen=True)
class ParseOutcome:
    config: RunConfiguration
    action: Action = Action.CONTINUE


def _parse_opt_level(name: str, value: str | None) -> int:
    error = RangeError(
        code="option.range",
        message=f"{name} value must be a number between {OPT_LEVEL_MIN} and {OPT_LEVEL_MAX}.",
        option=name,
    )
    if value is None or not _INTEGER_RE.fullmatch(value):
        raise error
    level = int(value)
    if level < OPT_LEVEL_MIN or level > OPT_LEVEL_MAX:
        raise error
    return level


def apply_option(config: RunConfiguration, option: ResolvedOption) -> Action:
    """Apply one resolved option to ``config``.

    Help and version are reported back as actions; the caller stops
    parsing and prints.
    """
    name, value = option.name, option.value
    if name == "help":
        return Action.HELP
    if name == "version":
        return Action.VERSION
    if name == "interactive":
        config.run_shell = True
    elif name == "debug":
        config.debug = True
    elif name == "optlevel":
        config.opt_level = _parse_opt_level(name, value)
    elif name == "history":
        config.history = Path(value)
    elif name == "policy":
        config.policy_url = value
    elif name == "bootscript":
        config.bootstrap_scripts.append(value)
    elif name == "expression":
        config.expression = value
    elif name == "silent":
        # Silent only makes sense for the shell, so it turns the shell on.
        config.silent = True
        config.run_shell = True
    elif name == "verbose":
        config.verbose = True
    return Action.CONTINUE


def parse_args(argv: Sequence[str]) -> ParseOutcome:
    """Parse ``argv`` into a RunConfiguration.

    Raises UsageError subclasses for malformed input. Everything from the
    first positional argument on is the script name and its arguments.
    """
    config = RunConfiguration()
    parser = OptionParser(argv)
    for option in parser:
        action = apply_option(config, option)
        if action is not Action.CONTINUE:
            return ParseOutcome(config, action)
    rest = parser.args[parser.index :]
    if rest:
        config.script_name = rest[0]
        config.script_args = rest[1:]
    return ParseOutcome(config)
