from __future__ import annotations

from enum import Enum, auto


class LifecycleState(Enum):
    UNCONFIGURED = auto()   # nothing parsed yet
    PARSED = auto()         # RunConfiguration final
    ENGINE_READY = auto()   # engine constructed, bootstrap scripts run
    MODULE_LOADED = auto()  # main script loaded as a module
    RUNNING = auto()        # init done; start may be called repeatedly
    STOPPED = auto()        # stop done
    DESTROYED = auto()      # handle released
