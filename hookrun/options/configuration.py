from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

OPT_LEVEL_MIN = -1
OPT_LEVEL_MAX = 9


@dataclass
class RunConfiguration:
    """Settings resolved from the command line.

    Filled in by the option applier, then only read by the engine,
    the runner and the lifecycle controller.
    """

    run_shell: bool = False
    debug: bool = False
    silent: bool = False
    verbose: bool = False
    opt_level: int = 0
    expression: str | None = None
    history: Path | None = None
    bootstrap_scripts: list[str] = field(default_factory=list)
    script_name: str | None = None
    script_args: list[str] = field(default_factory=list)
    policy_url: str | None = None

    @property
    def wants_shell(self) -> bool:
        return (self.script_name is None and self.expression is None) or self.run_shell
