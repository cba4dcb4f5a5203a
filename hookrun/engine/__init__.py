from .engine import HookOutcome, ScriptEngine, create_engine
from .sandbox import SandboxPolicy, install_sandbox, load_policy
from .syntax import SyntaxErrorInfo, clear_syntax_errors, last_syntax_errors

__all__ = [
    "HookOutcome",
    "SandboxPolicy",
    "ScriptEngine",
    "SyntaxErrorInfo",
    "clear_syntax_errors",
    "create_engine",
    "install_sandbox",
    "last_syntax_errors",
    "load_policy",
]
