from __future__ import annotations

import threading
from dataclasses import dataclass

_state = threading.local()


@dataclass(frozen=True)
class SyntaxErrorInfo:
    message: str
    filename: str
    lineno: int | None = None
    offset: int | None = None
    text: str | None = None

    @classmethod
    def from_exception(cls, exc: SyntaxError) -> "SyntaxErrorInfo":
        text = exc.text.rstrip("\n") if exc.text else None
        return cls(
            message=exc.msg,
            filename=exc.filename or "<unknown>",
            lineno=exc.lineno,
            offset=exc.offset,
            text=text,
        )

    def __str__(self) -> str:
        location = self.filename if self.lineno is None else f"{self.filename}#{self.lineno}"
        rendered = f"SyntaxError: {self.message} ({location})"
        if self.text:
            rendered += f"\n    {self.text.strip()}"
        return rendered


def last_syntax_errors() -> list[SyntaxErrorInfo]:
    """Syntax errors recorded by the most recent engine operation on this thread."""
    errors = getattr(_state, "errors", None)
    if errors is None:
        errors = _state.errors = []
    return errors


def clear_syntax_errors() -> None:
    last_syntax_errors().clear()


def record_syntax_error(exc: SyntaxError) -> SyntaxErrorInfo:
    info = SyntaxErrorInfo.from_exception(exc)
    last_syntax_errors().append(info)
    return info
