from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from platformdirs import user_data_path
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "hookrun"


class RuntimeConfig(BaseSettings):
    """Process-level settings read from ``HOOKRUN_*`` environment variables.

    Keyword arguments passed to the constructor win over the environment,
    which is how embedding code supplies property-style overrides.
    """

    model_config = SettingsConfigDict(env_prefix="HOOKRUN_", case_sensitive=False)

    home: str = "."
    module_path: str = ""
    history_file: str | None = None
    log_level: str = "info"
    log_format: str = "json"
    log_dir: str | None = None

    @property
    def home_dir(self) -> Path:
        return Path(self.home).expanduser()

    def module_paths(self) -> list[Path]:
        """Search directories: ``<home>/modules`` first, then ``module_path``."""
        paths = [self.home_dir / "modules"]
        for entry in self.module_path.split(os.pathsep):
            if entry.strip():
                paths.append(Path(entry.strip()).expanduser())
        return paths

    def default_history_path(self) -> Path:
        if self.history_file:
            return Path(self.history_file).expanduser()
        return user_data_path(APP_NAME) / "history"


@lru_cache
def get_runtime_config() -> RuntimeConfig:
    return RuntimeConfig()
