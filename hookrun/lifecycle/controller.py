from __future__ import annotations

import types
from dataclasses import dataclass
from typing import Sequence

from hookrun.core.config import RuntimeConfig
from hookrun.core.errors import LifecycleError
from hookrun.core.logging import get_logger, log_event
from hookrun.engine.engine import HookOutcome, ScriptEngine, create_engine
from hookrun.lifecycle.state import LifecycleState
from hookrun.options.applier import Action, ParseOutcome, parse_args
from hookrun.options.configuration import RunConfiguration

logger = get_logger("hookrun.lifecycle")


@dataclass(frozen=True)
class LifecycleHandle:
    engine: ScriptEngine
    module: types.ModuleType


class LifecycleController:
    """Drive a script module through init, start, stop and destroy.

    Every hook is optional on the module. Once init has loaded the module,
    start and stop may be called in any order until destroy; only a
    failure inside a hook is an error. Calls made without a handle, or
    after destroy, do nothing. Failures propagate as HookrunError
    subclasses; choosing the exit code is the caller's job.
    """

    def __init__(self, settings: RuntimeConfig | None = None) -> None:
        self.settings = settings
        self.state = LifecycleState.UNCONFIGURED
        self.config: RunConfiguration | None = None
        self.engine: ScriptEngine | None = None
        self.handle: LifecycleHandle | None = None

    @property
    def has_handle(self) -> bool:
        return self.handle is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def configure(self, argv: Sequence[str]) -> ParseOutcome:
        if self.state is not LifecycleState.UNCONFIGURED:
            raise self._state_error("configure")
        outcome = parse_args(argv)
        self.config = outcome.config
        if outcome.action is Action.CONTINUE:
            self._transition(LifecycleState.PARSED)
        return outcome

    def init(self) -> HookOutcome:
        """Build the engine, load the main script and call its ``init(*args)``."""
        config = self.config
        if self.state is not LifecycleState.PARSED or config is None:
            raise self._state_error("init")
        engine = self.engine = create_engine(config, self.settings)
        self._transition(LifecycleState.ENGINE_READY)

        if engine.main_script is None:
            raise LifecycleError(
                code="lifecycle.no_script",
                message="daemon interface requires a script argument",
            )
        module = engine.load_module(engine.main_script)
        self.handle = LifecycleHandle(engine=engine, module=module)
        self._transition(LifecycleState.MODULE_LOADED)

        outcome = engine.invoke(module, "init", *config.script_args)
        self._transition(LifecycleState.RUNNING)
        return outcome

    def start(self) -> HookOutcome | None:
        handle = self.handle
        if handle is None:
            return None
        outcome = handle.engine.invoke(handle.module, "start")
        if self.state is LifecycleState.STOPPED:
            self._transition(LifecycleState.RUNNING)
        return outcome

    def stop(self) -> HookOutcome | None:
        handle = self.handle
        if handle is None:
            return None
        outcome = handle.engine.invoke(handle.module, "stop")
        if self.state is not LifecycleState.STOPPED:
            self._transition(LifecycleState.STOPPED)
        return outcome

    def destroy(self) -> HookOutcome | None:
        handle = self.handle
        if handle is None:
            return None
        outcome = handle.engine.invoke(handle.module, "destroy")
        self.handle = None
        self.engine = None
        self._transition(LifecycleState.DESTROYED)
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _state_error(self, operation: str) -> LifecycleError:
        return LifecycleError(
            code="lifecycle.state",
            message=f"'{operation}' not allowed in state {self.state.name}",
        )

    def _transition(self, new_state: LifecycleState) -> None:
        log_event(
            logger,
            "lifecycle.transition",
            **{"from": self.state.name, "to": new_state.name},
        )
        self.state = new_state
