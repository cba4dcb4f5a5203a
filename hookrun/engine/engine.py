from __future__ import annotations

import builtins
import pdb
import sys
import traceback
import types
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence

from hookrun.core.config import RuntimeConfig, get_runtime_config
from hookrun.core.errors import EngineConstructionError, HookrunError, ScriptExecutionError
from hookrun.core.logging import get_logger, log_event
from hookrun.engine.sandbox import install_sandbox, load_policy
from hookrun.engine.syntax import clear_syntax_errors, last_syntax_errors, record_syntax_error
from hookrun.options.configuration import RunConfiguration

logger = get_logger("hookrun.engine")

EXPRESSION_FILENAME = "<expression>"


class HookOutcome(Enum):
    INVOKED = "invoked"
    MISSING = "missing"


def compile_optimize(opt_level: int) -> int:
    """Map an optimization level (-1..9) onto ``compile(optimize=...)``."""
    if opt_level < 0:
        return -1
    return min(opt_level, 2)


class ScriptEngine:
    """Embedded Python runtime for scripts, expressions and daemon modules.

    Construction resolves the main script and runs the bootstrap scripts
    into ``globals``, which expressions, the shell and every script and
    module start from.
    """

    def __init__(
        self,
        config: RunConfiguration,
        settings: RuntimeConfig | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or get_runtime_config()
        self.optimize = compile_optimize(config.opt_level)
        self.search_path = self.settings.module_paths()
        self.globals: dict[str, Any] = {"__name__": "__hookrun__", "__builtins__": builtins}
        self.main_namespace: dict[str, Any] | None = None
        self.main_script: Path | None = None
        self._script_files: set[str] = set()
        clear_syntax_errors()

        try:
            if config.script_name is not None:
                self.main_script = self.resolve_script(config.script_name)
            for bootstrap in config.bootstrap_scripts:
                self.run_bootstrap(bootstrap)
        except ScriptExecutionError as exc:
            raise EngineConstructionError(
                code="engine.construct",
                message="Bootstrap script failed",
                detail=exc.message,
            ) from exc
        except HookrunError:
            raise
        except Exception as exc:
            raise EngineConstructionError(
                code="engine.construct",
                message=f"{type(exc).__name__}: {exc}",
            ) from exc

        log_event(
            logger,
            "engine.created",
            main_script=self.main_script,
            optimize=self.optimize,
            search_path=[str(path) for path in self.search_path],
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_script(self, name: str) -> Path:
        """Find ``name`` relative to the cwd, then in each search directory."""
        bases = [Path(name)] + [directory / name for directory in self.search_path]
        for base in bases:
            candidates = [base] if base.suffix else [base, base.with_suffix(".py")]
            for candidate in candidates:
                if candidate.is_file():
                    return candidate.resolve()
        raise FileNotFoundError(f"Script not found: {name}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def run_bootstrap(self, name: str) -> None:
        path = self.resolve_script(name)
        with self._running():
            code = self._compile_file(path)
            self._execute(code, self.globals)
        log_event(logger, "engine.bootstrap", path=path)

    def evaluate_expression(self, expression: str) -> Any:
        with self._running():
            try:
                code = compile(
                    expression,
                    EXPRESSION_FILENAME,
                    "eval",
                    optimize=self.optimize,
                    dont_inherit=True,
                )
                mode = "eval"
            except SyntaxError:
                # Statements are fine too; only this second compile reports errors.
                code = self._compile(expression, EXPRESSION_FILENAME, "exec")
                mode = "exec"
            result = self._execute(code, self.globals, mode=mode)
        log_event(logger, "engine.expression", mode=mode)
        return result

    def run_script(self, path: Path, args: Sequence[str] = ()) -> dict[str, Any]:
        """Run ``path`` as ``__main__`` with ``sys.argv`` set to the script and its args."""
        namespace = dict(self.globals, __name__="__main__", __file__=str(path))
        with self._running(), _argv([str(path), *args]):
            code = self._compile_file(path)
            self._execute(code, namespace)
        self.main_namespace = namespace
        log_event(logger, "engine.script", path=path, args=list(args))
        return namespace

    def load_module(self, path: Path) -> types.ModuleType:
        """Load ``path`` into a fresh module object without running it as ``__main__``."""
        module = types.ModuleType(path.stem)
        module.__file__ = str(path)
        module.__dict__.update(
            {key: value for key, value in self.globals.items() if not key.startswith("__")}
        )
        with self._running():
            code = self._compile_file(path)
            self._execute(code, module.__dict__)
        log_event(logger, "engine.module_loaded", module=module.__name__, path=path)
        return module

    def invoke(self, module: types.ModuleType, name: str, *args: Any) -> HookOutcome:
        """Call ``module.<name>(*args)`` if the module defines it."""
        hook = getattr(module, name, None)
        if not callable(hook):
            log_event(logger, "engine.hook", hook=name, outcome=HookOutcome.MISSING.value)
            return HookOutcome.MISSING
        with self._running():
            self._call(hook, *args)
        log_event(logger, "engine.hook", hook=name, outcome=HookOutcome.INVOKED.value)
        return HookOutcome.INVOKED

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _running(self) -> Iterator[None]:
        clear_syntax_errors()
        added = [str(path) for path in self.search_path if str(path) not in sys.path]
        sys.path[:0] = added
        try:
            yield
        except HookrunError:
            raise
        except Exception as exc:
            raise self._script_error(exc) from exc
        finally:
            for entry in added:
                if entry in sys.path:
                    sys.path.remove(entry)

    def _compile_file(self, path: Path) -> types.CodeType:
        filename = str(path)
        self._script_files.add(filename)
        return self._compile(path.read_bytes(), filename, "exec")

    def _compile(self, source: str | bytes, filename: str, mode: str) -> types.CodeType:
        try:
            return compile(source, filename, mode, optimize=self.optimize, dont_inherit=True)
        except SyntaxError as exc:
            record_syntax_error(exc)
            raise self._script_error(exc, code="script.syntax") from exc

    def _execute(self, code: types.CodeType, namespace: dict[str, Any], *, mode: str = "exec") -> Any:
        if self.config.debug:
            debugger = pdb.Pdb()
            if mode == "eval":
                return debugger.runeval(code, namespace, namespace)
            debugger.run(code, namespace, namespace)
            return None
        if mode == "eval":
            return eval(code, namespace)
        exec(code, namespace)
        return None

    def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        if self.config.debug:
            return pdb.Pdb().runcall(fn, *args)
        return fn(*args)

    def _is_script_frame(self, filename: str) -> bool:
        if filename in self._script_files or filename == EXPRESSION_FILENAME:
            return True
        roots = {str(directory) for directory in self.search_path}
        roots.update(str(directory.resolve()) for directory in self.search_path)
        return any(filename.startswith(root) for root in roots)

    def _script_error(self, exc: BaseException, *, code: str = "script.failed") -> ScriptExecutionError:
        frames = [
            frame
            for frame in traceback.extract_tb(exc.__traceback__)
            if self._is_script_frame(frame.filename)
        ]
        if isinstance(exc, SyntaxError):
            text = exc.msg
            location = f"{exc.filename}#{exc.lineno}"
        else:
            text = str(exc)
            location = f"{frames[-1].filename}#{frames[-1].lineno}" if frames else None
        message = f"{type(exc).__name__}: {text}"
        if location:
            message += f" ({location})"
        return ScriptExecutionError(
            code=code,
            message=message,
            syntax_errors=tuple(last_syntax_errors()),
            script_trace="".join(traceback.format_list(frames)).rstrip("\n"),
        )


@contextmanager
def _argv(argv: list[str]) -> Iterator[None]:
    saved = sys.argv
    sys.argv = argv
    try:
        yield
    finally:
        sys.argv = saved


def create_engine(config: RunConfiguration, settings: RuntimeConfig | None = None) -> ScriptEngine:
    """Install the sandbox when a policy was given, then build the engine."""
    if config.policy_url is not None:
        try:
            policy = load_policy(config.policy_url)
        except (OSError, ValueError) as exc:
            raise EngineConstructionError(
                code="engine.construct",
                message=f"Cannot load sandbox policy {config.policy_url}",
                detail=str(exc),
            ) from exc
        install_sandbox(policy)
    return ScriptEngine(config, settings)
