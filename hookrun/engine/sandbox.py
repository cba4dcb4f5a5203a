from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

from pydantic import BaseModel, ConfigDict, Field

from hookrun.core.logging import get_logger, log_event

logger = get_logger("hookrun.sandbox")

_WRITE_FLAGS = os.O_WRONLY | os.O_RDWR | os.O_APPEND | os.O_CREAT | os.O_TRUNC


class SandboxPolicy(BaseModel):
    """Restrictions enforced through a ``sys.addaudithook`` hook.

    ``deny_events`` entries match an audit event name exactly or as a
    dotted prefix (``"socket"`` denies ``socket.connect``).
    """

    model_config = ConfigDict(extra="forbid")

    deny_events: list[str] = Field(default_factory=list)
    read_only: bool = False
    allow_paths: list[str] = Field(default_factory=list)

    def check(self, event: str, args: tuple[Any, ...]) -> str | None:
        """Return why ``event`` is denied, or None when it is allowed."""
        for denied in self.deny_events:
            if event == denied or event.startswith(denied + "."):
                return f"{event} denied by sandbox policy"
        if self.read_only and event == "open" and len(args) >= 3:
            path, mode, flags = args[0], args[1], args[2]
            if _is_write(mode, flags) and not self.allows_path(path):
                return f"write access to {path!r} denied by sandbox policy"
        return None

    def allows_path(self, path: Any) -> bool:
        if not isinstance(path, (str, bytes, os.PathLike)):
            return False
        target = os.path.abspath(os.fsdecode(path))
        for allowed in self.allow_paths:
            root = os.path.abspath(os.path.expanduser(allowed))
            if target == root or target.startswith(root.rstrip(os.sep) + os.sep):
                return True
        return False


def _is_write(mode: Any, flags: Any) -> bool:
    if isinstance(flags, int) and flags & _WRITE_FLAGS:
        return True
    return isinstance(mode, str) and any(ch in mode for ch in "wax+")


def policy_path(url: str) -> Path:
    """Turn a policy location (plain path or ``file:`` URL) into a path."""
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    # One-letter schemes are Windows drive letters.
    if parsed.scheme == "" or len(parsed.scheme) == 1:
        return Path(url).expanduser()
    raise ValueError(f"Unsupported policy URL: {url}")


def load_policy(url: str) -> SandboxPolicy:
    return SandboxPolicy.model_validate_json(policy_path(url).read_text(encoding="utf-8"))


def install_sandbox(policy: SandboxPolicy) -> None:
    """Install ``policy`` for the rest of the process; audit hooks cannot be removed."""

    def audit(event: str, args: tuple[Any, ...]) -> None:
        reason = policy.check(event, args)
        if reason is not None:
            raise PermissionError(reason)

    sys.addaudithook(audit)
    log_event(
        logger,
        "sandbox.installed",
        deny_events=policy.deny_events,
        read_only=policy.read_only,
    )
