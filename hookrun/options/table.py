from __future__ import annotations

from dataclasses import dataclass

from hookrun import __version__


@dataclass(frozen=True)
class OptionSpec:
    short: str
    long: str
    description: str
    placeholder: str = ""

    @property
    def takes_value(self) -> bool:
        return bool(self.placeholder)


# Order is the help-listing order and the short-letter match precedence.
OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec("b", "bootscript", "Run additional bootstrap script", "FILE"),
    OptionSpec("d", "debug", "Run scripts under the pdb debugger"),
    OptionSpec("e", "expression", "Run the given expression as script", "EXPR"),
    OptionSpec("h", "help", "Display this help message"),
    OptionSpec("H", "history", "Use custom history file", "FILE"),
    OptionSpec("i", "interactive", "Start shell after script file has run"),
    OptionSpec("o", "optlevel", "Set optimization level (-1 to 9)", "OPT"),
    OptionSpec("p", "policy", "Load sandbox policy file and enable the sandbox", "URL"),
    OptionSpec("s", "silent", "Disable shell prompt and echo for piped stdin/stdout"),
    OptionSpec("V", "verbose", "Verbose mode: print Python tracebacks"),
    OptionSpec("v", "version", "Print version number and exit"),
)


def format_usage(options: tuple[OptionSpec, ...] = OPTIONS) -> str:
    lines = [
        "Usage:",
        "  hookrun [option] ... [script] [arg] ...",
        "Options:",
    ]
    for spec in options:
        flags = f"-{spec.short} --{spec.long} {spec.placeholder}"
        lines.append(f"  {flags:<22} {spec.description}")
    return "\n".join(lines) + "\n"


def format_version() -> str:
    return f"hookrun version {__version__}\n"
